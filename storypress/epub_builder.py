"""Package chapters as an EPUB 3 book (with an NCX for older readers)."""

from __future__ import annotations

import datetime as dt
import html
import io
import logging
import uuid
from typing import Sequence

from ebooklib import epub

from .models import BookMetadata, Chapter

log = logging.getLogger(__name__)

EPUB_CSS = """
body { font-family: Georgia, "Times New Roman", serif; line-height: 1.5; margin: 0 5%; }
h1.chapter-title { text-align: center; font-size: 1.4em; margin: 2em 0 1.5em; }
p { margin: 0; text-indent: 1.5em; text-align: justify; }
p.first { text-indent: 0; }
"""

COVER_MEDIA_NAMES = {
    b"\x89PNG": "cover.png",
    b"\xff\xd8\xff": "cover.jpg",
}


def _cover_file_name(data: bytes) -> str:
    for magic, name in COVER_MEDIA_NAMES.items():
        if data.startswith(magic):
            return name
    return "cover.jpg"


def chapter_xhtml(chapter: Chapter) -> str:
    paras = []
    for i, p in enumerate(chapter.paragraphs):
        cls = ' class="first"' if i == 0 else ""
        paras.append(f"<p{cls}>{html.escape(p)}</p>")
    return (
        f'<h1 class="chapter-title">{html.escape(chapter.title)}</h1>\n'
        + "\n".join(paras)
    )


def build_epub(
    chapters: Sequence[Chapter],
    metadata: BookMetadata,
    *,
    cover_image: bytes | None = None,
    published: dt.date | None = None,
) -> bytes:
    """Return the EPUB archive bytes.

    Manifest ids and file stems come from `Chapter.id`; the spine holds the
    chapters only, in order. The navigation document and NCX are listed in the
    manifest.
    """
    if not chapters:
        raise ValueError("Cannot build an EPUB without chapters")

    book = epub.EpubBook()
    book.set_identifier(f"urn:uuid:{uuid.uuid4()}")
    book.set_title(metadata.title)
    book.set_language(metadata.language or "en")
    book.add_author(metadata.author)
    if metadata.publisher:
        book.add_metadata("DC", "publisher", metadata.publisher)
    if metadata.description:
        book.add_metadata("DC", "description", metadata.description)
    book.add_metadata("DC", "date", (published or dt.date.today()).isoformat())

    if cover_image:
        book.set_cover(_cover_file_name(cover_image), cover_image, create_page=False)

    css = epub.EpubItem(
        uid="style",
        file_name="css/style.css",
        media_type="text/css",
        content=EPUB_CSS,
    )
    book.add_item(css)

    items = []
    for chapter in chapters:
        item = epub.EpubHtml(
            uid=chapter.id,
            title=chapter.title,
            file_name=f"{chapter.id}.xhtml",
            lang=metadata.language or "en",
            content=chapter_xhtml(chapter),
        )
        item.add_item(css)
        book.add_item(item)
        items.append(item)

    book.toc = tuple(items)
    book.spine = items
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())

    buf = io.BytesIO()
    epub.write_epub(buf, book, {})
    data = buf.getvalue()
    log.info("built EPUB: %d chapters, %d bytes", len(items), len(data))
    return data
