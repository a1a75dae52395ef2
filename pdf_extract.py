from __future__ import annotations

import logging
import statistics
import warnings
from collections import defaultdict
from typing import Iterator

import pdfplumber
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from pdf_errors import GlyphSourceError
from pdf_models import (
    ARTICLE_BREAK,
    END_OF_DOCUMENT,
    LINE_BREAK,
    PAGE_END,
    PAGE_START,
    PARAGRAPH_BREAK,
    WORD_SEPARATOR,
    GlyphEvent,
    GlyphRun,
    TextRow,
    Token,
)

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

logger = logging.getLogger(__name__)

_GAP_FACTOR = 1.5
_MIN_GAP = 4.0
_DEFAULT_CHAR_WIDTH = 5.0
_PARAGRAPH_GAP_FACTOR = 1.0


def _make_token(chars: list[dict]) -> Token:
    return Token(
        text="".join(c["text"] for c in chars),
        x0=chars[0]["x0"],
        x1=chars[-1]["x1"],
        top=min(c["top"] for c in chars),
        bottom=max(c["bottom"] for c in chars),
    )


def chars_to_rows(chars: list[dict]) -> list[TextRow]:
    """Group page.chars by y-coordinate into rows of tokens, top to bottom.

    Tokens are split on explicit whitespace and on x-gaps wider than 1.5
    average character widths, since many PDFs place words by coordinate
    instead of emitting space characters.
    """
    by_y: dict[int, list[dict]] = defaultdict(list)
    for c in chars:
        by_y[round(c["top"])].append(c)

    rows: list[TextRow] = []
    for y_key in sorted(by_y.keys()):
        row = sorted(by_y[y_key], key=lambda c: c["x0"])
        tokens: list[Token] = []
        current: list[dict] = []

        for c in row:
            ch = c["text"]
            if current:
                gap = c["x0"] - current[-1]["x1"]
                avg_char_width = (current[-1]["x1"] - current[0]["x0"]) / len(current)
            else:
                gap = 0.0
                avg_char_width = _DEFAULT_CHAR_WIDTH
            is_gap = gap > max(avg_char_width * _GAP_FACTOR, _MIN_GAP)

            if ch.isspace() or is_gap:
                if current:
                    tokens.append(_make_token(current))
                    current = []
                if ch.isspace():
                    continue

            current.append(c)

        if current:
            tokens.append(_make_token(current))

        if tokens:
            rows.append(
                TextRow(
                    top=min(t.top for t in tokens),
                    bottom=max(t.bottom for t in tokens),
                    tokens=tokens,
                )
            )

    return rows


def split_paragraphs(rows: list[TextRow]) -> list[list[TextRow]]:
    """Start a new paragraph wherever the blank space above a row exceeds the median row height."""
    if not rows:
        return []
    median_height = statistics.median(r.bottom - r.top for r in rows)
    threshold = median_height * _PARAGRAPH_GAP_FACTOR

    paragraphs: list[list[TextRow]] = [[rows[0]]]
    for prev, row in zip(rows, rows[1:]):
        if row.top - prev.bottom > threshold:
            paragraphs.append([row])
        else:
            paragraphs[-1].append(row)
    return paragraphs


def iter_page_events(page: pdfplumber.page.Page) -> Iterator[GlyphEvent]:
    """Walk one page as a single left-to-right article."""
    page_height = float(page.height)
    rows = chars_to_rows(page.chars)

    yield PAGE_START
    for paragraph in split_paragraphs(rows):
        for row in paragraph:
            for i, token in enumerate(row.tokens):
                if i:
                    yield WORD_SEPARATOR
                yield GlyphRun(
                    text=token.text,
                    x=token.x0,
                    y=token.bottom,
                    width=token.x1 - token.x0,
                    height=token.bottom - token.top,
                    page_height=page_height,
                )
            yield LINE_BREAK
        yield PARAGRAPH_BREAK
    if rows:
        yield ARTICLE_BREAK
    yield PAGE_END

    logger.debug(f"walked page {page.page_number}: {len(rows)} rows")


def iter_document_events(pdf: pdfplumber.PDF, start_page: int = 1) -> Iterator[GlyphEvent]:
    """Yield the glyph event stream for every page from *start_page* on."""
    if start_page < 1:
        raise ValueError(f"start_page must be >= 1, got {start_page}")
    try:
        for page in pdf.pages[start_page - 1 :]:
            yield from iter_page_events(page)
    except (PSException, PdfminerException) as exc:
        raise GlyphSourceError(f"could not parse page content: {exc}") from exc
    yield END_OF_DOCUMENT
