from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterator

from pdf_models import GlyphBuffer, GlyphRun

# Visual padding applied to the glyph height of the last run, not a layout metric.
HEIGHT_PADDING = 1.1

PUNCTUATION_MARKS = frozenset(".,;:!?…-–—()[]{}\"'«»„“”‘’‚‹›/\\")
BULLET_POINTS = frozenset("•◦▪▫‣⁃∙●○■□➢►▶✓✔-–*")


@dataclass(frozen=True)
class Span:
    """Index view over ``buffer[start..end]`` (both ends inclusive).

    A Span never copies glyph data. ``length()`` is ``end - start``, one less
    than the number of runs covered; ``glyph_count()`` is the run count.
    Geometry assumes the runs are laid out left to right on one line; a span
    that wraps or runs right to left gets a meaningless width and height.
    """

    buffer: GlyphBuffer = field(repr=False)
    start: int
    end: int
    page_index: int
    has_trailing_separator: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.start <= self.end < len(self.buffer):
            raise ValueError(
                f"span [{self.start}, {self.end}] outside buffer of {len(self.buffer)} runs"
            )
        if self.buffer[self.start].page_number != self.buffer[self.end].page_number:
            raise ValueError(f"span [{self.start}, {self.end}] crosses a page boundary")
        stamped = self.buffer[self.start].page_number
        if stamped and stamped != self.page_index:
            raise ValueError(
                f"span [{self.start}, {self.end}] holds runs of page {stamped}, not page {self.page_index}"
            )

    @classmethod
    def single(cls, buffer: GlyphBuffer, index: int, page_index: int) -> Span:
        return cls(buffer, index, index, page_index)

    def length(self) -> int:
        return self.end - self.start

    def glyph_count(self) -> int:
        return self.end - self.start + 1

    def run_at(self, index: int) -> GlyphRun:
        return self.buffer[self.start + index]

    def runs(self) -> Iterator[GlyphRun]:
        for i in range(self.start, self.end + 1):
            yield self.buffer[i]

    def materialize(self) -> str:
        return "".join(run.text for run in self.runs())

    def __str__(self) -> str:
        return self.materialize()

    def contains(self, text: str) -> bool:
        return text in self.materialize()

    def sub_span(self, a: int, b: int) -> Span:
        """Return the view over offsets ``a..b`` of this span, sharing the buffer."""
        if not 0 <= a <= b <= self.length():
            raise ValueError(f"sub-span ({a}, {b}) outside span of length {self.length()}")
        return Span(self.buffer, self.start + a, self.start + b, self.page_index)

    def with_separator(self) -> Span:
        return replace(self, has_trailing_separator=True)

    @property
    def x(self) -> float:
        return self.buffer[self.start].x

    @property
    def y(self) -> float:
        first = self.buffer[self.start]
        return first.page_height - first.y

    @property
    def width(self) -> float:
        first = self.buffer[self.start]
        last = self.buffer[self.end]
        return last.x + last.width - first.x

    @property
    def height(self) -> float:
        first = self.buffer[self.start]
        last = self.buffer[self.end]
        return last.height * HEIGHT_PADDING + (first.y - last.y)

    def bbox(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    def is_punctuation_mark(self) -> bool:
        text = self.materialize()
        return bool(text) and all(ch in PUNCTUATION_MARKS for ch in text)

    def is_bullet_point(self) -> bool:
        return self.materialize().strip() in BULLET_POINTS
