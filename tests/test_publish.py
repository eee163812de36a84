from __future__ import annotations

import datetime as dt
import io
import re
import zipfile

import pytest

from storypress.book_index import BOOKS_END, BOOKS_START, list_entries
from storypress.errors import ConfigError, CoverImageError, ManuscriptError, MetadataError, PageCountError
from storypress.publish import output_timestamp, publish_project, unpublish_project

NOW = dt.datetime(2026, 10, 19, 8, 30, 15, tzinfo=dt.timezone.utc)


def test_timestamp_format():
    assert output_timestamp(NOW) == "20261019T083015"
    assert len(output_timestamp()) == 15
    tz = dt.timezone(dt.timedelta(hours=2))
    assert output_timestamp(dt.datetime(2026, 10, 19, 10, 30, 15, tzinfo=tz)) == "20261019T083015"


def test_end_to_end_short_book(make_project, short_manuscript):
    project = make_project(short_manuscript)
    result = publish_project(project, make_cover=False, now=NOW)

    assert result.chapter_count == 3
    assert result.page_count >= 3
    assert result.cover_path is None and result.dimensions is None
    assert result.html_path.name == "manuscript_20261019T083015.html"

    html = result.html_path.read_text(encoding="utf-8")
    assert re.findall(r'class="chapter-container" id="(chapter\d+)"', html) == [
        "chapter1",
        "chapter2",
        "chapter3",
    ]
    assert "Chapter 2: The Ford" in html

    zf = zipfile.ZipFile(io.BytesIO(result.epub_path.read_bytes()))
    opf = next(n for n in zf.namelist() if n.endswith(".opf"))
    spine = re.findall(r'<itemref idref="([^"]+)"', zf.read(opf).decode("utf-8"))
    assert spine == ["chapter1", "chapter2", "chapter3"]

    assert result.pdf_path.read_bytes().startswith(b"%PDF")
    index = result.index_path.read_text(encoding="utf-8")
    assert result.index_path == (project.parent / "index.html").resolve()
    assert list_entries(index) == ["quiet_river"]
    assert "quiet-river/manuscript_20261019T083015.pdf" in index
    assert "quiet-river/cover.jpg" in index


def test_end_to_end_with_paperback_cover(make_project, long_manuscript):
    project = make_project(long_manuscript, **{"_back_cover_blurb.txt": "A river. A town."})
    result = publish_project(project, now=NOW)
    assert result.page_count >= 24
    assert result.dimensions is not None
    assert result.dimensions.page_count == result.page_count
    assert result.cover_path.name == "paperback_cover_20261019T083015.pdf"
    assert result.cover_path.read_bytes().startswith(b"%PDF")


def test_too_few_pages_for_a_cover(make_project, short_manuscript):
    project = make_project(short_manuscript)
    with pytest.raises(PageCountError):
        publish_project(project, now=NOW)
    # earlier stages already wrote their files
    assert (project / "manuscript_20261019T083015.pdf").is_file()
    assert not list(project.glob("paperback_cover_*.pdf"))


def test_stale_outputs_are_replaced(make_project, short_manuscript):
    project = make_project(short_manuscript)
    old = [
        project / "manuscript_20200101T000000.html",
        project / "manuscript_20200101T000000.epub",
        project / "manuscript_20200101T000000.pdf",
        project / "paperback_cover_20200101T000000.pdf",
    ]
    for p in old:
        p.write_text("old", encoding="utf-8")
    keep = project / "notes.txt"
    keep.write_text("mine", encoding="utf-8")

    publish_project(project, make_cover=False, now=NOW)
    assert not any(p.exists() for p in old)
    assert keep.read_text(encoding="utf-8") == "mine"
    assert len(list(project.glob("manuscript_*.html"))) == 1


def test_sample_chapters_from_config(make_project, short_manuscript):
    project = make_project(short_manuscript)
    (project / "book.yaml").write_text("sample_chapters: 1\nmake_cover: false\n", encoding="utf-8")
    result = publish_project(project, now=NOW)
    html = result.html_path.read_text(encoding="utf-8")
    assert html.count('class="chapter-container"') == 1


def test_unpublish_round_trip(make_project, short_manuscript):
    project = make_project(short_manuscript)
    index = project.parent / "index.html"
    before = f"<html>\r\n<body>\r\n{BOOKS_START}\n{BOOKS_END}\r\n</body>\r\n</html>\r\n"
    index.write_bytes(before.encode("utf-8"))

    result = publish_project(project, make_cover=False, now=NOW)
    assert index.read_bytes() != before.encode("utf-8")

    unpublish_project(project)
    assert index.read_bytes() == before.encode("utf-8")
    assert result.html_path.is_file()
    assert result.epub_path.is_file()
    assert result.pdf_path.is_file()


def test_republish_keeps_single_entry(make_project, short_manuscript):
    project = make_project(short_manuscript)
    publish_project(project, make_cover=False, now=NOW)
    result = publish_project(project, make_cover=False, now=NOW + dt.timedelta(minutes=1))
    index = result.index_path.read_text(encoding="utf-8")
    assert list_entries(index) == ["quiet_river"]
    assert "manuscript_20261019T083115.html" in index
    assert "manuscript_20261019T083015.html" not in index


def test_custom_collection_dir(make_project, short_manuscript, tmp_path):
    project = make_project(short_manuscript)
    site = tmp_path / "site"
    result = publish_project(project, collection_dir=site, make_cover=False, now=NOW)
    assert result.index_path == (site / "index.html").resolve()
    assert "../collection/quiet-river/" in result.index_path.read_text(encoding="utf-8")


def test_missing_inputs(make_project, short_manuscript, tmp_path):
    bare = tmp_path / "bare"
    bare.mkdir()
    with pytest.raises(MetadataError):
        publish_project(bare)

    project = make_project(short_manuscript)
    with pytest.raises(ManuscriptError):
        publish_project(project, manuscript_name="missing.txt")
    with pytest.raises(CoverImageError):
        publish_project(project, front_cover=tmp_path / "nope.jpg", make_cover=False)
    with pytest.raises(CoverImageError):
        publish_project(project, author_photo=tmp_path / "nope.jpg", make_cover=False)


def test_empty_manuscript(make_project):
    project = make_project("   \n\n")
    with pytest.raises(ManuscriptError, match="no text"):
        publish_project(project, make_cover=False)


def test_cover_is_generated_when_absent(make_project, short_manuscript):
    project = make_project(short_manuscript, cover=False)
    result = publish_project(project, make_cover=False, now=NOW)
    assert (project / "cover.jpg").is_file()
    assert "quiet-river/cover.jpg" in result.index_path.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"paper_type": "glossy"}, "paper_type"),
        ({"ink_type": "sepia"}, "ink_type"),
        ({"sample_chapters": 0}, "sample_chapters"),
    ],
)
def test_overrides_are_checked_before_any_output(make_project, short_manuscript, overrides, message):
    project = make_project(short_manuscript)
    with pytest.raises(ConfigError, match=message):
        publish_project(project, now=NOW, **overrides)
    assert not list(project.glob("manuscript_*"))
    assert not (project.parent / "index.html").exists()


def test_html_carries_configured_language(make_project, short_manuscript):
    project = make_project(short_manuscript)
    (project / "book.yaml").write_text("language: de\nmake_cover: false\n", encoding="utf-8")
    result = publish_project(project, now=NOW)
    assert '<html lang="de">' in result.html_path.read_text(encoding="utf-8")
