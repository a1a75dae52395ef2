from __future__ import annotations

import argparse
import csv
import logging
import sys
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Mapping

import pdfplumber
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from pdf_config import load_category_styles
from pdf_document import Document, Page
from pdf_errors import DocumentUnreadable, PDFMarkupError
from pdf_extract import iter_document_events
from pdf_findings import AnalyzerRegistry, Finding, FindingKind, Location, TextFindingCategory
from pdf_markup import AnnotationMapper, MappingReport, MarkupStyle, write_annotations
from pdf_span import Span
from pdf_structure import StructureBuilder

logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", module="pdfminer")

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    findings: list[Finding]
    report: MappingReport


class DocumentSession:
    """Holds the one open PDF, its Document, and the analyzers run against it."""

    def __init__(
        self,
        registry: AnalyzerRegistry | None = None,
        start_page: int = 1,
        styles: Mapping[TextFindingCategory, MarkupStyle] | None = None,
        content_page_policy: Callable[[Page], bool] | None = None,
    ) -> None:
        self.registry = registry if registry is not None else AnalyzerRegistry()
        self.builder = StructureBuilder(start_page, content_page_policy)
        self.mapper = AnnotationMapper(styles)
        self.document: Document | None = None
        self.path: Path | None = None
        self.pdf: pdfplumber.PDF | None = None

    def __enter__(self) -> DocumentSession:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self, path: str | Path) -> Document:
        """Close the previous handle, then build the Document for *path*.

        If the build fails the previous Document stays on the session.
        """
        self.close()
        path = Path(path)
        try:
            pdf = pdfplumber.open(path)
        except (OSError, PSException, PdfminerException) as exc:
            raise DocumentUnreadable(f"could not open {path}: {exc}") from exc

        try:
            document = self.builder.build(iter_document_events(pdf, self.builder.start_page))
        except Exception:
            pdf.close()
            raise

        self.pdf, self.path, self.document = pdf, path, document
        logger.info(f"Opened {path}: {len(document.pages)} pages, {len(document.buffer)} glyph runs")
        return document

    def close(self) -> None:
        if self.pdf is not None:
            self.pdf.close()
            self.pdf = None

    def _require_document(self) -> Document:
        if self.document is None:
            raise RuntimeError("no document is open")
        return self.document

    def annotate(self, findings: Iterable[Finding]) -> MappingReport:
        """Replace the document's annotations with the markup for *findings*."""
        document = self._require_document()
        self.mapper.clear_all(document)
        return self.mapper.map_all(document, findings)

    def analyze(self, names: Iterable[str] | None = None) -> AnalysisResult:
        document = self._require_document()
        findings = self.registry.run(document, names)
        text_findings = [f for f in findings if f.kind is FindingKind.TEXT]
        return AnalysisResult(findings=findings, report=self.annotate(text_findings))

    def save(self, output_path: str | Path) -> int:
        document = self._require_document()
        return write_annotations(document, self.path, output_path)


def read_findings(path: str | Path, document: Document) -> list[Finding]:
    """Read ``category,page,start,end`` rows; start/end index the glyph buffer.

    Rows without a page or indices become "not found" findings. Malformed rows
    are logged and skipped.
    """
    findings: list[Finding] = []
    with open(path, newline="", encoding="utf-8") as fh:
        for lineno, row in enumerate(csv.reader(fh), 1):
            if not row or row[0].lstrip().startswith("#"):
                continue
            cells = [c.strip() for c in row] + [""] * (4 - len(row))
            name, page, start, end = cells[:4]

            category = None
            if name:
                try:
                    category = TextFindingCategory[name.upper().replace("-", "_")]
                except KeyError:
                    logger.warning(f"{path}:{lineno}: unknown category {name!r}, using default style")

            try:
                page_index = int(page) if page else 0
                if not (start and end):
                    findings.append(Finding(FindingKind.TEXT, category, Location(page_index)))
                    continue
                span = Span(document.buffer, int(start), int(end), page_index)
            except ValueError as exc:
                logger.warning(f"{path}:{lineno}: skipping row: {exc}")
                continue
            findings.append(Finding.text(category, span))
    return findings


def print_outline(document: Document, verbose: bool = False) -> None:
    print("=" * 64)
    print("DOCUMENT")
    print("=" * 64)

    if not document.pages:
        print("No pages found in the document.")
        return

    for page in document.pages:
        paragraphs = list(page.paragraphs())
        lines = list(page.lines())
        words = sum(len(line.words) for line in lines)
        content = "" if page.is_content_page else "  (not content)"
        print(
            f"\nPage {page.number}: {len(page.articles)} articles, {len(paragraphs)} paragraphs, "
            f"{len(lines)} lines, {words} words{content}"
        )
        if verbose:
            for line in lines:
                span = line.span()
                where = f"[{span.start:>6}-{span.end:<6}]" if span is not None else " " * 15
                print(f"  {where} {line.materialize()}")
    print()


def _print_report(report: MappingReport) -> None:
    print(f"Annotations applied: {len(report.applied)}")
    if report.skipped:
        print(f"Findings not located: {len(report.skipped)}")
    for finding, error in report.invalid:
        print(f"  invalid: {finding.category.name if finding.category else '-'}: {error}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconstruct the text structure of a PDF and mark findings on it.",
    )
    parser.add_argument("pdf", help="Path to the PDF file")
    parser.add_argument(
        "--start-page",
        type=int, default=1, metavar="N",
        help="First page to read, 1-based (default: 1)",
    )
    parser.add_argument(
        "--findings",
        metavar="CSV",
        help="Findings to mark, as category,page,start,end rows",
    )
    parser.add_argument(
        "--styles",
        metavar="CSV",
        help="Override markup styles with category,color,kind rows",
    )
    parser.add_argument(
        "-o", "--output",
        metavar="PDF",
        help="Write the annotated PDF here",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print every line with its glyph index range",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.pdf)
    if not path.exists():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1
    if args.findings and not Path(args.findings).exists():
        print(f"Error: file not found: {args.findings}", file=sys.stderr)
        return 1
    if args.start_page < 1:
        print("Error: --start-page must be >= 1", file=sys.stderr)
        return 1

    styles = load_category_styles(args.styles)
    with DocumentSession(start_page=args.start_page, styles=styles) as session:
        try:
            document = session.open(path)
        except PDFMarkupError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

        print_outline(document, args.verbose)

        if args.findings:
            report = session.annotate(read_findings(args.findings, document))
            _print_report(report)
            if args.output:
                session.save(args.output)
                print(f"Annotated PDF written to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
