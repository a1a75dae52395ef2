from __future__ import annotations


class PDFMarkupError(Exception):
    """Base class for errors raised while building or annotating a document."""


class DocumentUnreadable(PDFMarkupError):
    """The glyph event source failed before the document was complete."""


class LayoutUnsupported(PDFMarkupError):
    """The event stream describes a layout the builder cannot represent."""


class AnnotationTargetInvalid(PDFMarkupError):
    """A finding points at a page the document does not have."""

    def __init__(self, page_index: int, page_count: int) -> None:
        super().__init__(f"page {page_index} is outside the document ({page_count} pages)")
        self.page_index = page_index
        self.page_count = page_count


class ConfigurationDegraded(PDFMarkupError):
    """An external hint or style table could not be loaded."""


class GlyphSourceError(OSError):
    """Raised by event sources when the underlying file cannot be walked."""
