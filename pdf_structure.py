from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable

from pdf_document import Article, Document, Line, Page, Paragraph
from pdf_errors import DocumentUnreadable, LayoutUnsupported
from pdf_models import Boundary, BoundaryEvent, GlyphBuffer, GlyphEvent, GlyphRun
from pdf_span import Span

logger = logging.getLogger(__name__)


class StructureBuilder:
    """Single-pass builder turning a glyph event stream into a Document.

    Events must arrive from one producer in document order: a word separator
    marks whatever word was appended last, so batching or re-ordering events
    changes the result. Every level in progress is a plain list owned by the
    builder; closing a level freezes it into an immutable node and hands that
    node to its parent.
    """

    def __init__(
        self,
        start_page: int = 1,
        content_page_policy: Callable[[Page], bool] | None = None,
    ) -> None:
        if start_page < 1:
            raise ValueError(f"start_page must be >= 1, got {start_page}")
        self.start_page = start_page
        self.content_page_policy = content_page_policy
        self._building = False
        self._handlers: dict[Boundary, Callable[[], None]] = {
            Boundary.WORD_SEPARATOR: self.on_word_separator,
            Boundary.LINE_BREAK: self.on_line_break,
            Boundary.PARAGRAPH_BREAK: self.on_paragraph_break,
            Boundary.PAGE_START: self.on_page_start,
            Boundary.PAGE_END: self.on_page_end,
        }
        self._reset()

    def _reset(self) -> None:
        self._buffer = GlyphBuffer()
        self._pages: list[Page] = []
        self._current_page_number = self.start_page - 1
        self._page_open = False
        self._articles: list[Article] = []
        self._paragraphs: list[Paragraph] = []
        self._lines: list[Line] = []
        self._words: list[Span] = []

    @property
    def current_page_number(self) -> int:
        return self._current_page_number

    def build(self, events: Iterable[GlyphEvent]) -> Document:
        """Drain *events* and return the finished Document.

        Counters restart from ``start_page`` on every call. Any failure leaves
        the builder empty; no partial Document is returned.
        """
        if self._building:
            raise RuntimeError("StructureBuilder.build is not re-entrant")
        self._building = True
        self._reset()
        try:
            for event in events:
                if isinstance(event, GlyphRun):
                    self.on_glyph_run(event)
                elif event.kind is Boundary.END_OF_DOCUMENT:
                    break
                else:
                    self._dispatch(event)
            return self.finish()
        except OSError as exc:
            raise DocumentUnreadable(
                f"glyph source failed after {len(self._buffer)} runs: {exc}"
            ) from exc
        finally:
            self._building = False
            self._reset()

    def _dispatch(self, event: BoundaryEvent) -> None:
        if event.kind is Boundary.ARTICLE_BREAK:
            self.on_article_break(event.is_left_to_right)
        else:
            self._handlers[event.kind]()

    def on_glyph_run(self, run: GlyphRun) -> None:
        if not self._page_open:
            logger.debug("glyph run before page start, opening page implicitly")
            self.on_page_start()
        index = self._buffer.append(replace(run, page_number=self._current_page_number))
        self._words.append(Span.single(self._buffer, index, self._current_page_number))

    def on_word_separator(self) -> None:
        if self._words:
            self._words[-1] = self._words[-1].with_separator()

    def on_line_break(self) -> None:
        if not self._page_open:
            logger.debug("line break outside a page, ignored")
            return
        # one Line per break, even when no words are pending
        self._lines.append(self._take_line())

    def on_paragraph_break(self) -> None:
        self._close_paragraph()

    def on_article_break(self, is_left_to_right: bool = True) -> None:
        if not is_left_to_right:
            raise LayoutUnsupported(
                f"right-to-left article on page {self._current_page_number}"
            )
        self._close_article()

    def on_page_start(self) -> None:
        if self._page_open:
            logger.debug(f"page {self._current_page_number} started again before it ended")
            self._close_page()
        self._current_page_number += 1
        self._page_open = True

    def on_page_end(self) -> None:
        if self._page_open:
            self._close_page()

    def finish(self) -> Document:
        """Force-close whatever is still open and return the Document."""
        if self._page_open:
            self._close_page()
        self._buffer.seal()
        document = Document(pages=tuple(self._pages), buffer=self._buffer)
        logger.debug(f"built document: {len(document.pages)} pages, {len(self._buffer)} glyph runs")
        self._reset()
        return document

    def _take_line(self) -> Line:
        line = Line(tuple(self._words))
        self._words = []
        return line

    def _close_paragraph(self) -> None:
        if self._words:
            self._lines.append(self._take_line())
        if self._lines:
            self._paragraphs.append(Paragraph(tuple(self._lines)))
            self._lines = []

    def _close_article(self) -> None:
        self._close_paragraph()
        if self._paragraphs:
            self._articles.append(Article(tuple(self._paragraphs)))
            self._paragraphs = []

    def _close_page(self) -> None:
        self._close_article()
        page = Page(number=self._current_page_number, articles=tuple(self._articles))
        if self.content_page_policy is not None:
            page = replace(page, is_content_page=bool(self.content_page_policy(page)))
        self._pages.append(page)
        self._articles = []
        self._page_open = False
        logger.debug(f"closed page {page.number}: {len(page.articles)} articles")
