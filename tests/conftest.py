"""
Shared fixtures: synthetic glyph runs, event streams and tiny PDFs.
"""

import fitz
import pytest

from pdf_models import (
    ARTICLE_BREAK,
    END_OF_DOCUMENT,
    LINE_BREAK,
    PAGE_END,
    PAGE_START,
    PARAGRAPH_BREAK,
    WORD_SEPARATOR,
    GlyphRun,
)
from pdf_structure import StructureBuilder


def make_run(text, x=10.0, y=100.0, width=20.0, height=10.0, page_height=800.0):
    return GlyphRun(text=text, x=x, y=y, width=width, height=height, page_height=page_height)


def line_events(*words, y=100.0):
    """Runs for *words* laid out left to right, separated, closed by a line break."""
    events = []
    x = 10.0
    for i, word in enumerate(words):
        if i:
            events.append(WORD_SEPARATOR)
        events.append(make_run(word, x=x, y=y, width=6.0 * len(word)))
        x += 6.0 * len(word) + 4.0
    events.append(LINE_BREAK)
    return events


def page_events(*lines):
    """One page, one article, one paragraph holding the given lines of words."""
    events = [PAGE_START]
    for i, words in enumerate(lines):
        events.extend(line_events(*words, y=100.0 + 14.0 * i))
    events.extend([PARAGRAPH_BREAK, ARTICLE_BREAK, PAGE_END])
    return events


@pytest.fixture
def cat_document():
    """Single page with the line "The cat sat"."""
    return StructureBuilder().build(page_events(["The", "cat", "sat"]) + [END_OF_DOCUMENT])


@pytest.fixture
def sample_pdf(tmp_path):
    """A two-page PDF: two paragraphs on page 1, one line on page 2."""
    path = tmp_path / "sample.pdf"
    pdf = fitz.open()
    first = pdf.new_page(width=612, height=792)
    first.insert_text((72, 100), "The cat sat", fontsize=12)
    first.insert_text((72, 116), "on the mat", fontsize=12)
    first.insert_text((72, 200), "A new paragraph", fontsize=12)
    second = pdf.new_page(width=612, height=792)
    second.insert_text((72, 100), "Second page", fontsize=12)
    pdf.save(str(path))
    pdf.close()
    return path
