"""
Unit tests for findings and the analyzer registry.
"""

import logging

import pytest

from pdf_findings import (
    AnalyzerRegistry,
    CommentaryPayload,
    Finding,
    FindingKind,
    Location,
    StatisticPayload,
    TextFindingCategory,
)


class WordCountAnalyzer:
    ui_name = "Word count"

    def run(self, document):
        count = sum(1 for _ in document.words())
        return [Finding.statistic(StatisticPayload("Words", "kind", "count", (("words", count),)))]


class FirstWordAnalyzer:
    ui_name = "First word"

    def run(self, document):
        return [Finding.text(TextFindingCategory.PAGINATION, next(document.words()))]


class BrokenAnalyzer:
    ui_name = "Broken"

    def run(self, document):
        raise KeyError("missing table")


class TestFinding:
    """Tests for the tagged finding variant."""

    def test_text_finding_is_located(self, cat_document):
        word = next(cat_document.words())
        finding = Finding.text(TextFindingCategory.POOR_WORDING, word)
        assert finding.kind is FindingKind.TEXT
        assert finding.location == Location(1, word)
        assert finding.is_located

    def test_text_finding_without_span(self):
        finding = Finding.text(TextFindingCategory.POOR_WORDING)
        assert finding.location == Location()
        assert not finding.is_located

    def test_page_zero_is_not_located(self, cat_document):
        assert not Location(0, next(cat_document.words())).is_located

    def test_commentary(self):
        finding = Finding.commentary("Declaration of sincerity found", "DeclarationOfSincerity", page_index=4)
        assert finding.payload == CommentaryPayload("Declaration of sincerity found", "DeclarationOfSincerity")
        assert finding.location.page_index == 4
        assert not finding.is_located

    def test_statistic_has_no_location(self):
        finding = Finding.statistic(StatisticPayload("Histogram", "word", "count"))
        assert finding.location is None
        assert not finding.is_located

    @pytest.mark.parametrize("kind,payload", [
        (FindingKind.STATISTIC, None),
        (FindingKind.COMMENTARY, StatisticPayload("a", "b", "c")),
        (FindingKind.TEXT, CommentaryPayload("m", "t")),
    ])
    def test_payload_must_match_kind(self, kind, payload):
        with pytest.raises(ValueError):
            Finding(kind, payload=payload)


class TestAnalyzerRegistry:
    """Tests for registering and running analyzers."""

    def test_names_in_registration_order(self):
        registry = AnalyzerRegistry([WordCountAnalyzer(), FirstWordAnalyzer()])
        assert registry.names() == ["Word count", "First word"]

    def test_duplicate_rejected(self):
        registry = AnalyzerRegistry([WordCountAnalyzer()])
        with pytest.raises(ValueError):
            registry.register(WordCountAnalyzer())

    def test_select_ignores_unknown(self, caplog):
        registry = AnalyzerRegistry([WordCountAnalyzer(), FirstWordAnalyzer()])
        with caplog.at_level(logging.WARNING):
            selected = registry.select(["First word", "Spelling"])
        assert [a.ui_name for a in selected] == ["First word"]
        assert "Spelling" in caplog.text

    def test_run_all(self, cat_document):
        registry = AnalyzerRegistry([WordCountAnalyzer(), FirstWordAnalyzer()])
        findings = registry.run(cat_document)
        assert [f.kind for f in findings] == [FindingKind.STATISTIC, FindingKind.TEXT]
        assert findings[0].payload.data == (("words", 3),)

    def test_run_selected(self, cat_document):
        registry = AnalyzerRegistry([WordCountAnalyzer(), FirstWordAnalyzer()])
        findings = registry.run(cat_document, ["First word"])
        assert [f.kind for f in findings] == [FindingKind.TEXT]

    def test_failing_analyzer_is_dropped(self, cat_document, caplog):
        registry = AnalyzerRegistry([BrokenAnalyzer(), FirstWordAnalyzer()])
        with caplog.at_level(logging.ERROR):
            findings = registry.run(cat_document)
        assert len(findings) == 1
        assert "Broken" in caplog.text
