from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping

import fitz  # PyMuPDF

from pdf_document import Document
from pdf_errors import AnnotationTargetInvalid
from pdf_findings import Finding, TextFindingCategory
from pdf_span import Span

logger = logging.getLogger(__name__)


class Color(Enum):
    """Markup colors as RGB, 0.0-1.0."""

    RED = (1.0, 0.0, 0.0)
    MAGENTA = (1.0, 0.0, 1.0)
    ORANGE = (1.0, 0.647, 0.0)
    VIOLET = (0.933, 0.51, 0.933)
    GREY = (0.502, 0.502, 0.502)
    DEEP_PINK = (1.0, 0.078, 0.576)
    YELLOW = (1.0, 1.0, 0.0)

    @property
    def rgb(self) -> tuple[float, float, float]:
        return self.value


class MarkupKind(Enum):
    HIGHLIGHT = "Highlight"
    UNDERLINE = "Underline"
    STRIKEOUT = "StrikeOut"


@dataclass(frozen=True)
class MarkupStyle:
    color: Color
    kind: MarkupKind


DEFAULT_STYLE = MarkupStyle(Color.YELLOW, MarkupKind.HIGHLIGHT)

CATEGORY_STYLES: Mapping[TextFindingCategory, MarkupStyle] = {
    TextFindingCategory.POOR_WORDING: MarkupStyle(Color.RED, MarkupKind.STRIKEOUT),
    TextFindingCategory.SENTENCE_COMPLEXITY: MarkupStyle(Color.MAGENTA, MarkupKind.UNDERLINE),
    TextFindingCategory.REPETITIVE_WORDING: MarkupStyle(Color.ORANGE, MarkupKind.HIGHLIGHT),
    TextFindingCategory.PAGINATION: MarkupStyle(Color.VIOLET, MarkupKind.HIGHLIGHT),
    TextFindingCategory.TABLE_OF_CONTENT: MarkupStyle(Color.ORANGE, MarkupKind.HIGHLIGHT),
    TextFindingCategory.LIST_OF_ABBREVIATIONS: MarkupStyle(Color.GREY, MarkupKind.UNDERLINE),
    TextFindingCategory.TABLE_OF_FIGURES: MarkupStyle(Color.DEEP_PINK, MarkupKind.UNDERLINE),
}


def style_for(
    category: TextFindingCategory | None,
    styles: Mapping[TextFindingCategory, MarkupStyle] = CATEGORY_STYLES,
) -> MarkupStyle:
    if category is None:
        return DEFAULT_STYLE
    return styles.get(category, DEFAULT_STYLE)


@dataclass(frozen=True)
class Rectangle:
    """PDF user-space rectangle: lower-left corner plus size."""

    x: float
    y: float
    width: float
    height: float

    @classmethod
    def from_span(cls, span: Span) -> Rectangle:
        return cls(*span.bbox())

    def to_top_left(self, page_height: float) -> tuple[float, float, float, float]:
        """Return ``(x0, y0, x1, y1)`` with the origin at the top-left of the page."""
        return (
            self.x,
            page_height - (self.y + self.height),
            self.x + self.width,
            page_height - self.y,
        )


@dataclass(frozen=True)
class Annotation:
    rect: Rectangle
    color: Color
    kind: MarkupKind
    category: TextFindingCategory | None = None
    opacity: float = 1.0


@dataclass
class MappingReport:
    """Outcome of one ``map_all`` pass."""

    applied: list[Annotation] = field(default_factory=list)
    skipped: list[Finding] = field(default_factory=list)
    invalid: list[tuple[Finding, AnnotationTargetInvalid]] = field(default_factory=list)


class AnnotationMapper:
    """Turns located findings into markup entries on the owning pages.

    Findings for one document are applied strictly in order; the mapper is the
    only writer of ``Page.annotations``.
    """

    def __init__(self, styles: Mapping[TextFindingCategory, MarkupStyle] | None = None):
        self.styles = dict(CATEGORY_STYLES if styles is None else styles)

    def map_all(self, document: Document, findings: Iterable[Finding]) -> MappingReport:
        report = MappingReport()
        for finding in findings:
            if not finding.is_located:
                report.skipped.append(finding)
                continue

            page_index = finding.location.page_index
            page = document.page(page_index)
            if page is None:
                error = AnnotationTargetInvalid(page_index, len(document.pages))
                logger.warning(f"Skipping finding {finding.category}: {error}")
                report.invalid.append((finding, error))
                continue

            style = style_for(finding.category, self.styles)
            annotation = Annotation(
                rect=Rectangle.from_span(finding.location.span),
                color=style.color,
                kind=style.kind,
                category=finding.category,
            )
            page.annotations.append(annotation)
            report.applied.append(annotation)

        logger.debug(
            f"Mapped {len(report.applied)} annotations "
            f"({len(report.skipped)} not located, {len(report.invalid)} invalid)"
        )
        return report

    def clear_all(self, document: Document) -> int:
        removed = 0
        for page in document.pages:
            removed += len(page.annotations)
            page.annotations.clear()
        if removed:
            logger.debug(f"Cleared {removed} annotations")
        return removed


_MARKUP_TYPES = (fitz.PDF_ANNOT_HIGHLIGHT, fitz.PDF_ANNOT_UNDERLINE, fitz.PDF_ANNOT_STRIKE_OUT)


def remove_text_markups(page: fitz.Page) -> int:
    """Delete highlight, underline and strike-out annotations from a PyMuPDF page."""
    doomed = [annot for annot in page.annots() if annot.type[0] in _MARKUP_TYPES]
    for annot in doomed:
        page.delete_annot(annot)
    return len(doomed)


def _add_markup(page: fitz.Page, annotation: Annotation) -> fitz.Annot:
    rect = fitz.Rect(*annotation.rect.to_top_left(page.rect.height))
    if annotation.kind is MarkupKind.STRIKEOUT:
        annot = page.add_strikeout_annot(rect)
    elif annotation.kind is MarkupKind.UNDERLINE:
        annot = page.add_underline_annot(rect)
    else:
        annot = page.add_highlight_annot(rect)
    annot.set_colors(stroke=annotation.color.rgb)
    annot.set_opacity(annotation.opacity)
    if annotation.category is not None:
        annot.set_info(subject=annotation.category.name)
    annot.update()
    return annot


def write_annotations(document: Document, source_path: str | Path, output_path: str | Path) -> int:
    """Copy *source_path* to *output_path* with the document's page annotations drawn in.

    Existing text markups on the touched pages are replaced. Returns the
    number of annotations written.
    """
    written = 0
    with fitz.open(source_path) as pdf:
        for page in document.pages:
            if page.number > pdf.page_count:
                logger.warning(f"Page {page.number} not in {source_path}, skipping its annotations")
                continue
            pdf_page = pdf[page.number - 1]
            remove_text_markups(pdf_page)
            for annotation in page.annotations:
                _add_markup(pdf_page, annotation)
                written += 1
        pdf.save(str(output_path))
    logger.info(f"Wrote {written} annotations to {output_path}")
    return written
