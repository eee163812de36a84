from __future__ import annotations

import re

import pytest

from storypress.models import BookMetadata, Chapter
from storypress.segmenter import segment
from storypress.typesetter import (
    PageGeometry,
    TypesetOptions,
    Typesetter,
    build_pdf,
    split_chapter_label,
)

from conftest import prose

META = BookMetadata(title="The Quiet River", author="Ada Lane", publisher="Harbor Press")


def _pdf_pages(data: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page\b", data))


def test_short_book_layout(short_manuscript):
    chapters = segment(short_manuscript)
    result = build_pdf(chapters, META, year=2026)
    assert result.pdf_bytes.startswith(b"%PDF")
    # title, copyright, contents, then one page per short chapter
    assert result.page_count == 6
    assert _pdf_pages(result.pdf_bytes) == result.page_count
    assert result.chapter_pages == {"chapter1": 4, "chapter2": 5, "chapter3": 6}
    assert b"/MediaBox [ 0 0 432 648 ]" in result.pdf_bytes


def test_long_chapter_flows_across_pages(long_manuscript):
    chapters = segment(long_manuscript)
    result = build_pdf(chapters, META)
    assert result.page_count >= 24
    assert _pdf_pages(result.pdf_bytes) == result.page_count
    pages = [result.chapter_pages[c.id] for c in chapters]
    assert pages == sorted(pages)
    assert pages[1] - pages[0] > 1


def test_front_and_back_matter_add_pages(short_manuscript):
    chapters = segment(short_manuscript)
    base = build_pdf(chapters, META).page_count
    meta = BookMetadata(
        title=META.title,
        author=META.author,
        dedication="For the river.",
        about_author="Ada Lane lives by a river.\n\nShe writes.",
    )
    result = build_pdf(chapters, meta)
    assert result.page_count == base + 2
    assert result.chapter_pages["chapter1"] == 5


def test_recto_chapter_starts(short_manuscript):
    chapters = segment(short_manuscript)
    result = build_pdf(chapters, META, options=TypesetOptions(recto_chapter_starts=True))
    assert all(page % 2 == 1 for page in result.chapter_pages.values())
    assert _pdf_pages(result.pdf_bytes) == result.page_count


def test_oversize_word_stays_on_one_page():
    word = "x" * 200
    chapters = [Chapter("chapter1", "Chapter 1", (f"start {word} end",))]
    result = build_pdf(chapters, META)
    assert result.page_count == 4


def test_long_contents_spills_over():
    chapters = [Chapter(f"chapter{n}", f"Chapter {n}: Somewhere", (prose(5),)) for n in range(1, 61)]
    result = build_pdf(chapters, META)
    assert result.chapter_pages["chapter1"] > 4
    assert result.page_count == result.chapter_pages["chapter60"]


def test_geometry_and_labels():
    g = PageGeometry()
    assert (g.width, g.height) == (432, 648)
    assert g.usable_width == 306
    assert round(g.wrap_width, 2) == 281.52
    assert split_chapter_label("Chapter 3: The Ford") == ("Chapter 3", "The Ford")
    assert split_chapter_label("Prologue") == (None, "Prologue")


def test_drawing_outside_typeset_is_an_error():
    with pytest.raises(RuntimeError, match="no page is open"):
        Typesetter(META).c
