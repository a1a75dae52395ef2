from __future__ import annotations

import csv
import logging
from pathlib import Path

from pdf_errors import ConfigurationDegraded
from pdf_findings import TextFindingCategory
from pdf_markup import CATEGORY_STYLES, Color, MarkupKind, MarkupStyle

logger = logging.getLogger(__name__)


def _read_rows(path: str | Path) -> list[list[str]]:
    try:
        with open(path, newline="", encoding="utf-8") as fh:
            return [row for row in csv.reader(fh)]
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise ConfigurationDegraded(f"could not read {path}: {exc}") from exc


def read_hint_list(path: str | Path) -> list[str]:
    """Every non-empty cell of a CSV file, trimmed and lower-cased."""
    return [cell.strip().lower() for row in _read_rows(path) for cell in row if cell.strip()]


def load_hint_list(path: str | Path) -> list[str]:
    try:
        return read_hint_list(path)
    except ConfigurationDegraded as exc:
        logger.warning(f"{exc}; continuing with an empty hint list")
        return []


def _enum_key(name: str) -> str:
    return name.strip().upper().replace("-", "_").replace(" ", "_")


def read_category_styles(path: str | Path) -> dict[TextFindingCategory, MarkupStyle]:
    """Read ``category,color,kind`` rows on top of the built-in style table.

    Names are matched case-insensitively, with dashes and spaces treated as
    underscores (``deep-pink``, ``strike-out``). Blank rows and rows starting
    with ``#`` are ignored.
    """
    styles = dict(CATEGORY_STYLES)
    for lineno, row in enumerate(_read_rows(path), 1):
        if not row or not row[0].strip() or row[0].lstrip().startswith("#"):
            continue
        if len(row) < 3:
            raise ConfigurationDegraded(f"{path}:{lineno}: expected category,color,kind")
        category, color, kind = row[:3]
        try:
            styles[TextFindingCategory[_enum_key(category)]] = MarkupStyle(
                Color[_enum_key(color)],
                MarkupKind[_enum_key(kind).replace("_", "")],
            )
        except KeyError as exc:
            raise ConfigurationDegraded(f"{path}:{lineno}: unknown name {exc}") from exc
    return styles


def load_category_styles(path: str | Path | None = None) -> dict[TextFindingCategory, MarkupStyle]:
    if path is None:
        return dict(CATEGORY_STYLES)
    try:
        return read_category_styles(path)
    except ConfigurationDegraded as exc:
        logger.warning(f"{exc}; using the default style table")
        return dict(CATEGORY_STYLES)
