from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, Union


@dataclass(frozen=True)
class GlyphRun:
    """One rendered text fragment as reported by the page walker.

    ``y`` is measured from the top of the page; ``page_height`` is the height
    of the page the run was rendered on, so the bottom-left based position is
    ``page_height - y``.
    """

    text: str
    x: float
    y: float
    width: float
    height: float
    page_height: float
    page_number: int = 0


class GlyphBuffer:
    """Append-only store of glyph runs in reading order, shared by every Span."""

    def __init__(self, runs: Iterable[GlyphRun] = ()) -> None:
        self._runs: list[GlyphRun] = list(runs)
        self._sealed = False

    def append(self, run: GlyphRun) -> int:
        if self._sealed:
            raise RuntimeError("glyph buffer is sealed")
        self._runs.append(run)
        return len(self._runs) - 1

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __len__(self) -> int:
        return len(self._runs)

    def __getitem__(self, index: int) -> GlyphRun:
        return self._runs[index]

    def __iter__(self) -> Iterator[GlyphRun]:
        return iter(self._runs)

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"GlyphBuffer({len(self._runs)} runs, {state})"


class Boundary(Enum):
    WORD_SEPARATOR = "word_separator"
    LINE_BREAK = "line_break"
    PARAGRAPH_BREAK = "paragraph_break"
    ARTICLE_BREAK = "article_break"
    PAGE_START = "page_start"
    PAGE_END = "page_end"
    END_OF_DOCUMENT = "end_of_document"


@dataclass(frozen=True)
class BoundaryEvent:
    """A structural signal from the page walker."""

    kind: Boundary
    is_left_to_right: bool = True


WORD_SEPARATOR = BoundaryEvent(Boundary.WORD_SEPARATOR)
LINE_BREAK = BoundaryEvent(Boundary.LINE_BREAK)
PARAGRAPH_BREAK = BoundaryEvent(Boundary.PARAGRAPH_BREAK)
ARTICLE_BREAK = BoundaryEvent(Boundary.ARTICLE_BREAK)
PAGE_START = BoundaryEvent(Boundary.PAGE_START)
PAGE_END = BoundaryEvent(Boundary.PAGE_END)
END_OF_DOCUMENT = BoundaryEvent(Boundary.END_OF_DOCUMENT)

GlyphEvent = Union[GlyphRun, BoundaryEvent]


@dataclass
class Token:
    """A contiguous run of non-space characters on a rendered row."""

    text: str
    x0: float
    x1: float
    top: float
    bottom: float


@dataclass
class TextRow:
    """One horizontal row of characters, reconstructed from page.chars."""

    top: float
    bottom: float
    tokens: list[Token]

    @property
    def full_text(self) -> str:
        return " ".join(t.text for t in self.tokens)
