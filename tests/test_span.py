"""
Unit tests for Span text, sub-span and geometry behavior.
"""

from dataclasses import replace

import pytest

from conftest import make_run
from pdf_models import GlyphBuffer
from pdf_span import HEIGHT_PADDING, Span


@pytest.fixture
def letters():
    """One single-character run per letter of "The cat"."""
    buffer = GlyphBuffer(make_run(ch, x=10.0 + 6.0 * i, width=6.0) for i, ch in enumerate("The cat"))
    return Span(buffer, 0, len(buffer) - 1, 1)


@pytest.fixture
def three_runs():
    buffer = GlyphBuffer([
        make_run("ab", x=10.0, width=12.0),
        make_run("cd", x=25.0, width=12.0),
        make_run("ef", x=40.0, width=12.0),
    ])
    return Span(buffer, 0, 2, 1)


class TestSpanText:
    """Tests for length and materialization."""

    def test_length_is_index_distance(self, three_runs):
        assert three_runs.length() == 2
        assert three_runs.glyph_count() == 3

    def test_materialize_includes_end_run(self, three_runs):
        assert three_runs.materialize() == "abcdef"
        assert str(three_runs) == "abcdef"

    def test_materialize_is_repeatable(self, three_runs):
        assert three_runs.materialize() == three_runs.materialize()
        assert len(three_runs.buffer) == 3

    def test_contains(self, letters):
        assert letters.contains("cat")
        assert not letters.contains("dog")


class TestSubSpan:
    """Tests for zero-copy sub-spans."""

    def test_sub_span_shares_buffer(self, three_runs):
        sub = three_runs.sub_span(1, 2)
        assert sub.buffer is three_runs.buffer
        assert (sub.start, sub.end) == (1, 2)
        assert sub.materialize() == "cdef"

    def test_sub_span_length_and_text(self, letters):
        text = letters.materialize()
        for a in range(letters.length() + 1):
            for b in range(a, letters.length() + 1):
                sub = letters.sub_span(a, b)
                assert sub.length() == b - a
                assert sub.materialize() == text[a:b + 1]

    def test_sub_span_of_sub_span_is_relative(self, letters):
        assert letters.sub_span(4, 6).sub_span(1, 2).materialize() == "at"

    def test_sub_span_past_length_rejected(self, three_runs):
        with pytest.raises(ValueError):
            three_runs.sub_span(0, 3)

    def test_sub_span_drops_separator(self, three_runs):
        assert not three_runs.with_separator().sub_span(0, 1).has_trailing_separator


class TestSpanBounds:
    """Tests for span construction checks."""

    def test_end_beyond_buffer_rejected(self, three_runs):
        with pytest.raises(ValueError):
            Span(three_runs.buffer, 0, 3, 1)

    def test_reversed_range_rejected(self, three_runs):
        with pytest.raises(ValueError):
            Span(three_runs.buffer, 2, 1, 1)

    def test_cross_page_rejected(self):
        buffer = GlyphBuffer([
            replace(make_run("a"), page_number=1),
            replace(make_run("b"), page_number=2),
        ])
        with pytest.raises(ValueError):
            Span(buffer, 0, 1, 1)

    def test_page_must_match_stamped_runs(self):
        buffer = GlyphBuffer([replace(make_run("a"), page_number=1)])
        assert Span(buffer, 0, 0, 1).page_index == 1
        with pytest.raises(ValueError):
            Span(buffer, 0, 0, 2)

    def test_unstamped_runs_take_any_page(self):
        assert Span(GlyphBuffer([make_run("a")]), 0, 0, 5).page_index == 5

    def test_with_separator_keeps_range(self, three_runs):
        marked = three_runs.with_separator()
        assert marked.has_trailing_separator
        assert (marked.start, marked.end) == (three_runs.start, three_runs.end)


class TestSpanGeometry:
    """Tests for the PDF-space rectangle of a span."""

    def test_y_is_flipped_against_page_height(self):
        span = Span(GlyphBuffer([make_run("x", y=100.0, page_height=800.0)]), 0, 0, 1)
        assert span.y == 700.0

    def test_x_and_width_span_first_to_last_run(self, three_runs):
        assert three_runs.x == 10.0
        assert three_runs.width == pytest.approx(42.0)

    def test_height_pads_last_run(self, three_runs):
        assert three_runs.height == pytest.approx(10.0 * HEIGHT_PADDING)

    def test_height_adds_baseline_offset(self):
        buffer = GlyphBuffer([make_run("a", y=100.0), make_run("b", y=95.0, height=8.0)])
        assert Span(buffer, 0, 1, 1).height == pytest.approx(8.0 * HEIGHT_PADDING + 5.0)

    def test_bbox(self, three_runs):
        assert three_runs.bbox() == (three_runs.x, three_runs.y, three_runs.width, three_runs.height)


class TestClassification:
    """Tests for punctuation and bullet predicates."""

    @pytest.mark.parametrize("text", [".", ",", "?!", "…", "„", "—"])
    def test_punctuation(self, text):
        assert Span(GlyphBuffer([make_run(text)]), 0, 0, 1).is_punctuation_mark()

    @pytest.mark.parametrize("text", ["cat", "a.", "", "1"])
    def test_not_punctuation(self, text):
        assert not Span(GlyphBuffer([make_run(text)]), 0, 0, 1).is_punctuation_mark()

    @pytest.mark.parametrize("text", ["•", "◦", "▪", " ● "])
    def test_bullet(self, text):
        assert Span(GlyphBuffer([make_run(text)]), 0, 0, 1).is_bullet_point()

    @pytest.mark.parametrize("text", ["cat", "••", "", "1."])
    def test_not_bullet(self, text):
        assert not Span(GlyphBuffer([make_run(text)]), 0, 0, 1).is_bullet_point()
