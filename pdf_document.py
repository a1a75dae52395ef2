from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from pdf_models import GlyphBuffer
from pdf_span import Span

if TYPE_CHECKING:
    from pdf_markup import Annotation


@dataclass(frozen=True)
class Line:
    """Words of one rendered line, in the order they were emitted."""

    words: tuple[Span, ...] = ()

    @property
    def first_word(self) -> Span | None:
        return self.words[0] if self.words else None

    @property
    def last_word(self) -> Span | None:
        return self.words[-1] if self.words else None

    def span(self) -> Span | None:
        """Span from the first run of the first word to the last run of the last word."""
        if not self.words:
            return None
        first, last = self.words[0], self.words[-1]
        return Span(first.buffer, first.start, last.end, first.page_index)

    def materialize(self) -> str:
        return " ".join(word.materialize() for word in self.words)

    def __str__(self) -> str:
        return self.materialize()


@dataclass(frozen=True)
class Paragraph:
    lines: tuple[Line, ...] = ()

    @property
    def first_line(self) -> Line | None:
        return self.lines[0] if self.lines else None

    def words(self) -> Iterator[Span]:
        for line in self.lines:
            yield from line.words


@dataclass(frozen=True)
class Article:
    paragraphs: tuple[Paragraph, ...] = ()

    def lines(self) -> Iterator[Line]:
        for paragraph in self.paragraphs:
            yield from paragraph.lines

    def words(self) -> Iterator[Span]:
        for paragraph in self.paragraphs:
            yield from paragraph.words()


@dataclass(frozen=True)
class Page:
    """A finished page.

    The article tree is fixed; ``annotations`` is the one mutable part and is
    only written by the annotation mapper.
    """

    number: int
    articles: tuple[Article, ...] = ()
    is_content_page: bool = True
    annotations: list[Annotation] = field(default_factory=list, compare=False, hash=False, repr=False)

    def paragraphs(self) -> Iterator[Paragraph]:
        for article in self.articles:
            yield from article.paragraphs

    def lines(self) -> Iterator[Line]:
        for article in self.articles:
            yield from article.lines()

    def words(self) -> Iterator[Span]:
        for article in self.articles:
            yield from article.words()


@dataclass(frozen=True)
class Document:
    pages: tuple[Page, ...]
    buffer: GlyphBuffer = field(repr=False)

    def page(self, number: int) -> Page | None:
        """Return the page with the given 1-based page number, if present."""
        for page in self.pages:
            if page.number == number:
                return page
        return None

    def content_pages(self) -> list[Page]:
        return [page for page in self.pages if page.is_content_page]

    def lines(self) -> Iterator[Line]:
        for page in self.pages:
            yield from page.lines()

    def words(self) -> Iterator[Span]:
        for page in self.pages:
            yield from page.words()

    def annotations(self) -> list[Annotation]:
        return [annotation for page in self.pages for annotation in page.annotations]
