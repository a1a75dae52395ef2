from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Protocol, Union

from pdf_document import Document
from pdf_span import Span

logger = logging.getLogger(__name__)


class TextFindingCategory(Enum):
    POOR_WORDING = "poor_wording"
    SENTENCE_COMPLEXITY = "sentence_complexity"
    REPETITIVE_WORDING = "repetitive_wording"
    PAGINATION = "pagination"
    TABLE_OF_CONTENT = "table_of_content"
    LIST_OF_ABBREVIATIONS = "list_of_abbreviations"
    TABLE_OF_FIGURES = "table_of_figures"


class FindingKind(Enum):
    TEXT = "text"
    STATISTIC = "statistic"
    COMMENTARY = "commentary"


@dataclass(frozen=True)
class Location:
    """Where a finding points. Page 0 or a missing span means "not found"."""

    page_index: int = 0
    span: Span | None = None

    @classmethod
    def of(cls, span: Span) -> Location:
        return cls(span.page_index, span)

    @property
    def is_located(self) -> bool:
        return self.page_index > 0 and self.span is not None


@dataclass(frozen=True)
class StatisticPayload:
    chart_name: str
    x_label: str
    y_label: str
    data: tuple[tuple[str, float], ...] = ()
    sort: bool = True


@dataclass(frozen=True)
class CommentaryPayload:
    message: str
    topic: str


Payload = Union[StatisticPayload, CommentaryPayload, None]

_PAYLOAD_TYPES: dict[FindingKind, type | None] = {
    FindingKind.TEXT: None,
    FindingKind.STATISTIC: StatisticPayload,
    FindingKind.COMMENTARY: CommentaryPayload,
}


@dataclass(frozen=True)
class Finding:
    """One analysis result, tagged by ``kind`` with a payload matching that kind.

    Only TEXT findings carry a category and a span to mark; statistic and
    commentary findings are never drawn on the page.
    """

    kind: FindingKind
    category: TextFindingCategory | None = None
    location: Location | None = None
    payload: Payload = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[self.kind]
        if expected is None:
            if self.payload is not None:
                raise ValueError(f"{self.kind.name} findings carry no payload")
        elif not isinstance(self.payload, expected):
            raise ValueError(f"{self.kind.name} findings need a {expected.__name__}")

    @classmethod
    def text(cls, category: TextFindingCategory | None, span: Span | None = None) -> Finding:
        location = Location.of(span) if span is not None else Location()
        return cls(FindingKind.TEXT, category=category, location=location)

    @classmethod
    def statistic(cls, payload: StatisticPayload) -> Finding:
        return cls(FindingKind.STATISTIC, payload=payload)

    @classmethod
    def commentary(cls, message: str, topic: str, page_index: int = 0) -> Finding:
        return cls(
            FindingKind.COMMENTARY,
            location=Location(page_index),
            payload=CommentaryPayload(message, topic),
        )

    @property
    def is_located(self) -> bool:
        return self.location is not None and self.location.is_located


class Analyzer(Protocol):
    ui_name: str

    def run(self, document: Document) -> list[Finding]: ...


class AnalyzerRegistry:
    """Analyzers available to a session, keyed by their UI name."""

    def __init__(self, analyzers: Iterable[Analyzer] = ()) -> None:
        self._analyzers: dict[str, Analyzer] = {}
        for analyzer in analyzers:
            self.register(analyzer)

    def register(self, analyzer: Analyzer) -> None:
        if analyzer.ui_name in self._analyzers:
            raise ValueError(f"analyzer already registered: {analyzer.ui_name!r}")
        self._analyzers[analyzer.ui_name] = analyzer

    def names(self) -> list[str]:
        return list(self._analyzers)

    def select(self, names: Iterable[str]) -> list[Analyzer]:
        wanted = set(names)
        unknown = wanted - self._analyzers.keys()
        if unknown:
            logger.warning(f"Ignoring unknown analyzers: {sorted(unknown)}")
        return [a for name, a in self._analyzers.items() if name in wanted]

    def run(self, document: Document, names: Iterable[str] | None = None) -> list[Finding]:
        analyzers = list(self._analyzers.values()) if names is None else self.select(names)
        findings: list[Finding] = []
        for analyzer in analyzers:
            try:
                findings.extend(analyzer.run(document))
            except Exception:
                logger.exception(f"Analyzer {analyzer.ui_name!r} failed, dropping its findings")
        return findings
