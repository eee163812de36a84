from __future__ import annotations

from storypress.book_index import (
    BOOKS_END,
    BOOKS_START,
    DEFAULT_INDEX_TEMPLATE,
    has_entry,
    list_entries,
    remove_entry,
    render_entry,
    sanitize_id,
    upsert_entry,
)

SITE = f"""<html><body>
<h1>My shelf</h1>
<div class="grid">
{BOOKS_START}
<!-- BOOK_START:older -->
  <div class="project">Older</div>
<!-- BOOK_END:older -->
{BOOKS_END}
</div>
<footer>hand-written footer</footer>
</body></html>
"""


def test_sanitize_id():
    assert sanitize_id("my-novel v2.0") == "my_novel_v2_0"
    assert sanitize_id("Plain_ID9") == "Plain_ID9"


def test_upsert_then_remove_is_identity():
    added = upsert_entry(SITE, "quiet-river", "<div>Quiet River</div>")
    assert added != SITE
    assert remove_entry(added, "quiet-river") == SITE


def test_upsert_is_idempotent_and_newest_first():
    once = upsert_entry(SITE, "quiet-river", "<div>v1</div>")
    twice = upsert_entry(once, "quiet-river", "<div>v2</div>")
    assert twice.count("<!-- BOOK_START:quiet_river -->") == 1
    assert "v1" not in twice and "v2" in twice
    assert list_entries(twice) == ["quiet_river", "older"]
    assert twice.index(BOOKS_START) < twice.index("quiet_river") < twice.index(BOOKS_END)


def test_replacing_an_entry_moves_it_to_the_top():
    doc = upsert_entry(SITE, "quiet-river", "<div>x</div>")
    doc = upsert_entry(doc, "older", "<div>refreshed</div>")
    assert list_entries(doc) == ["older", "quiet_river"]


def test_remove_missing_entry_is_noop():
    assert remove_entry(SITE, "nobody") == SITE


def test_remove_keeps_everything_else():
    doc = remove_entry(SITE, "older")
    assert not has_entry(doc, "older")
    assert "<footer>hand-written footer</footer>" in doc
    assert f"{BOOKS_START}\n{BOOKS_END}" in doc


def test_missing_markers_bootstrap_template():
    doc = upsert_entry("<html>broken</html>", "quiet-river", "<div>x</div>")
    assert doc.startswith("<!DOCTYPE html>")
    assert "broken" not in doc
    assert has_entry(doc, "quiet-river")
    assert remove_entry(doc, "quiet-river") == DEFAULT_INDEX_TEMPLATE


def test_render_entry_links_and_escaping():
    html = render_entry(
        "quiet-river",
        'Fish & "Chips"',
        author="Ada Lane",
        cover_src="cover.jpg",
        html_file="manuscript_20261019T083015.html",
        epub_file="manuscript_20261019T083015.epub",
        pdf_file=None,
        buy_url="https://example.com/buy?a=1&b=2",
    )
    assert 'src="quiet-river/cover.jpg"' in html
    assert 'href="quiet-river/manuscript_20261019T083015.epub"' in html
    assert "PDF</a>" not in html
    assert "Fish &amp; &quot;Chips&quot;" in html
    assert 'href="https://example.com/buy?a=1&amp;b=2"' in html
