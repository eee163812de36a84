"""Maintain per-project entries in a shared static `index.html`.

Entries are delimited by comment markers and patched as plain text, so
everything outside the marked region is left byte-for-byte alone.
"""

from __future__ import annotations

import html
import re

BOOKS_START = "<!-- BOOKS_START -->"
BOOKS_END = "<!-- BOOKS_END -->"

BOOK_START_RE = re.compile(r"<!-- BOOK_START:([^>]+?) -->")
UNSAFE_ID_RE = re.compile(r"[^A-Za-z0-9_]")

DEFAULT_INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Books</title>
  <style>
    body { font-family: Georgia, serif; background: #2c3035; color: #fff; margin: 0; padding: 24px; }
    h1 { text-align: center; }
    .book-grid { display: flex; flex-wrap: wrap; gap: 24px; justify-content: center; }
    .project { width: 220px; text-align: center; }
    .project img { width: 100%; border-radius: 4px; }
    .project .book-title { margin: 8px 0; font-weight: bold; }
    .button-container { display: flex; flex-wrap: wrap; gap: 6px; justify-content: center; }
    .book-button { padding: 4px 10px; border-radius: 4px; color: #fff; text-decoration: none; font-size: 13px; }
    .html-button { background: #4caf50; }
    .ebook-button { background: #2196f3; }
    .pdf-button { background: #795548; }
    .buy-button { background: #ff9800; }
  </style>
</head>
<body>
  <h1>Books</h1>
  <div class="book-grid">
<!-- BOOKS_START -->
<!-- BOOKS_END -->
  </div>
</body>
</html>
"""


def sanitize_id(project_id: str) -> str:
    return UNSAFE_ID_RE.sub("_", project_id)


def start_marker(project_id: str) -> str:
    return f"<!-- BOOK_START:{sanitize_id(project_id)} -->"


def end_marker(project_id: str) -> str:
    return f"<!-- BOOK_END:{sanitize_id(project_id)} -->"


def ensure_template(index_html: str) -> str:
    """Return the document, or the default template when its outer markers are gone."""
    if BOOKS_START not in index_html or BOOKS_END not in index_html:
        return DEFAULT_INDEX_TEMPLATE
    return index_html


def _block_span(index_html: str, project_id: str) -> tuple[int, int] | None:
    start = index_html.find(start_marker(project_id))
    if start < 0:
        return None
    end_tok = end_marker(project_id)
    end = index_html.find(end_tok, start)
    if end < 0:
        return None
    end += len(end_tok)
    if index_html.startswith("\n", end):
        end += 1
    return start, end


def remove_entry(index_html: str, project_id: str) -> str:
    """Drop the project's block and the newline that followed it."""
    index_html = ensure_template(index_html)
    span = _block_span(index_html, project_id)
    if span is None:
        return index_html
    start, end = span
    return index_html[:start] + index_html[end:]


def upsert_entry(index_html: str, project_id: str, entry_html: str) -> str:
    """Insert (or replace) the project's block as the first entry."""
    index_html = remove_entry(index_html, project_id)
    body = entry_html.strip("\n")
    block = f"{start_marker(project_id)}\n{body}\n{end_marker(project_id)}\n"
    pos = index_html.index(BOOKS_START) + len(BOOKS_START)
    if index_html.startswith("\n", pos):
        pos += 1
    return index_html[:pos] + block + index_html[pos:]


def has_entry(index_html: str, project_id: str) -> bool:
    return start_marker(project_id) in index_html


def list_entries(index_html: str) -> list[str]:
    return BOOK_START_RE.findall(index_html)


def render_entry(
    project_dir_name: str,
    title: str,
    *,
    author: str = "",
    cover_src: str | None = None,
    html_file: str | None = None,
    epub_file: str | None = None,
    pdf_file: str | None = None,
    buy_url: str = "",
) -> str:
    """Entry markup: cover thumbnail plus a button per available format."""
    esc = html.escape
    base = project_dir_name.strip("/")
    label = f"{title} by {author}" if author else title
    lines = ['  <div class="project">']
    if cover_src:
        lines.append(f'    <img src="{esc(base)}/{esc(cover_src)}" alt="{esc(title)} cover">')
    lines.append(f'    <div class="book-title">{esc(label)}</div>')
    lines.append('    <div class="button-container">')
    if html_file:
        lines.append(
            f'      <a href="{esc(base)}/{esc(html_file)}" class="book-button html-button" '
            f'title="Read \'{esc(title)}\' online">HTML</a>'
        )
    if epub_file:
        lines.append(
            f'      <a href="{esc(base)}/{esc(epub_file)}" class="book-button ebook-button" '
            f'title="Download \'{esc(title)}\' EPUB" download>EPUB</a>'
        )
    if pdf_file:
        lines.append(
            f'      <a href="{esc(base)}/{esc(pdf_file)}" class="book-button pdf-button" '
            f'title="Download \'{esc(title)}\' PDF" download>PDF</a>'
        )
    if buy_url:
        lines.append(
            f'      <a href="{esc(buy_url)}" class="book-button buy-button" '
            f'title="Purchase \'{esc(title)}\'">BUY</a>'
        )
    lines.append("    </div>")
    lines.append("  </div>")
    return "\n".join(lines)
