"""Typeset a 6x9 paperback interior on a bare reportlab canvas.

Layout is a vertical cursor: each wrapped line moves it down by the leading,
and a page is finalized (folio, running head) when the next line would cross
the bottom margin.
"""

from __future__ import annotations

import datetime as dt
import io
import logging
import re
from dataclasses import dataclass
from typing import Sequence

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from .models import BookMetadata, Chapter, TypesetResult
from .segmenter import split_paragraphs
from .wrap import wrap_words

log = logging.getLogger(__name__)

POINTS_PER_INCH = 72

DEFAULT_COPYRIGHT_NOTICE = (
    "This is a work of fiction. Names, characters, places, and incidents either "
    "are the product of the author's imagination or are used fictitiously. Any "
    "resemblance to actual persons, living or dead, events, or locales is "
    "entirely coincidental."
)

CHAPTER_LABEL_RE = re.compile(r"^((?:chapter)\s+\S+?)\s*[:.]\s+(.+)$", re.I)


@dataclass(frozen=True)
class PageGeometry:
    width: float = 6 * POINTS_PER_INCH
    height: float = 9 * POINTS_PER_INCH
    margin_top: float = 72
    margin_bottom: float = 72
    margin_left: float = 63
    margin_right: float = 63
    wrap_ratio: float = 0.92

    @property
    def usable_width(self) -> float:
        return self.width - self.margin_left - self.margin_right

    @property
    def wrap_width(self) -> float:
        return self.usable_width * self.wrap_ratio

    @property
    def top(self) -> float:
        return self.height - self.margin_top


@dataclass(frozen=True)
class TypesetOptions:
    body_font: str = "Times-Roman"
    bold_font: str = "Times-Bold"
    italic_font: str = "Times-Italic"
    body_size: float = 11
    heading_size: float = 16
    chapter_number_size: float = 18
    title_size: float = 28
    line_height: float = 15
    indent: float = 15
    chapter_drop: float = 72
    justify: bool = True
    running_heads: bool = True
    recto_chapter_starts: bool = False
    body_font_path: str | None = None
    bold_font_path: str | None = None


def register_ttf(name: str, path: str) -> str:
    if name not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(name, path))
    return name


def split_chapter_label(title: str) -> tuple[str | None, str]:
    """'Chapter 3: The Ford' -> ('Chapter 3', 'The Ford')."""
    m = CHAPTER_LABEL_RE.match(title.strip())
    if not m:
        return None, title
    return m.group(1), m.group(2)


class Typesetter:
    """Lays out front matter, chapters and back matter page by page."""

    def __init__(
        self,
        metadata: BookMetadata,
        options: TypesetOptions | None = None,
        *,
        geometry: PageGeometry | None = None,
        year: int | None = None,
    ) -> None:
        self.metadata = metadata
        self.options = options or TypesetOptions()
        self.geometry = geometry or PageGeometry()
        self.year = year or dt.date.today().year

        opts = self.options
        self.body_font = opts.body_font
        self.bold_font = opts.bold_font
        self.italic_font = opts.italic_font
        if opts.body_font_path:
            self.body_font = register_ttf("StorypressBody", opts.body_font_path)
            self.italic_font = self.body_font
        if opts.bold_font_path:
            self.bold_font = register_ttf("StorypressBold", opts.bold_font_path)

        self._canvas: canvas.Canvas | None = None
        self._page_no = 1
        self._y = self.geometry.top
        self._page_kind = "front"
        self._folio_from: int | None = None
        self._dirty = False
        self._chapter_pages: dict[str, int] = {}

    # -- page state -------------------------------------------------------

    @property
    def c(self) -> canvas.Canvas:
        if self._canvas is None:
            raise RuntimeError("no page is open; call typeset() to draw")
        return self._canvas

    def _finish_page(self, next_kind: str = "body") -> None:
        g = self.geometry
        if self._folio_from is not None and self._page_no >= self._folio_from:
            self.c.setFont(self.body_font, 9)
            self.c.drawCentredString(g.width / 2, g.margin_bottom / 2, str(self._page_no))
        if self.options.running_heads and self._page_kind == "body":
            head = self.metadata.author if self._page_no % 2 == 0 else self.metadata.title
            self.c.setFont(self.italic_font, 9)
            self.c.drawCentredString(g.width / 2, g.height - g.margin_top / 2, head)
        self.c.showPage()
        self._page_no += 1
        self._y = g.top
        self._page_kind = next_kind
        self._dirty = False

    def _start_page(self, kind: str) -> None:
        """Begin a section on a fresh page; an untouched current page is reused."""
        if self._dirty:
            self._finish_page(kind)
        else:
            self._page_kind = kind
            self._y = self.geometry.top

    def _ensure_room(self) -> None:
        if self._y < self.geometry.margin_bottom:
            self._finish_page("front" if self._page_kind == "front" else "body")

    # -- drawing helpers --------------------------------------------------

    def measure(self, text: str, font: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, font, size)

    def _draw_line(
        self,
        words: list[str],
        x: float,
        font: str,
        size: float,
        *,
        target_width: float | None = None,
    ) -> None:
        self.c.setFont(font, size)
        line = " ".join(words)
        if target_width is None or len(words) < 2:
            self.c.drawString(x, self._y, line)
            return
        natural = self.measure(line, font, size)
        space = self.measure(" ", font, size)
        extra = max(target_width - natural, 0) / (len(words) - 1)
        for word in words:
            self.c.drawString(x, self._y, word)
            x += self.measure(word, font, size) + space + extra

    def _centered_block(self, text: str, font: str, size: float, leading: float) -> None:
        g = self.geometry
        lines = wrap_words(text, lambda s: self.measure(s, font, size), g.usable_width)
        for line in lines:
            self._ensure_room()
            self.c.setFont(font, size)
            self.c.drawCentredString(g.width / 2, self._y, line)
            self._y -= leading
        self._dirty = True

    def _flow_paragraph(
        self,
        text: str,
        *,
        font: str | None = None,
        size: float | None = None,
        leading: float | None = None,
        indent: float = 0,
    ) -> None:
        g = self.geometry
        font = font or self.body_font
        size = size or self.options.body_size
        leading = leading or self.options.line_height
        width = g.wrap_width
        lines = wrap_words(
            text,
            lambda s: self.measure(s, font, size),
            width,
            first_line_width=width - indent if indent else None,
        )
        for i, line in enumerate(lines):
            self._ensure_room()
            offset = indent if i == 0 else 0
            last = i == len(lines) - 1
            target = None if last or not self.options.justify else width - offset
            self._draw_line(line.split(" "), g.margin_left + offset, font, size, target_width=target)
            self._y -= leading
        self._dirty = True

    # -- sections ---------------------------------------------------------

    def title_page(self) -> None:
        g = self.geometry
        opts = self.options
        self._y = g.height - 190
        self._centered_block(self.metadata.title.upper(), self.bold_font, opts.title_size, opts.title_size * 1.25)
        self._y -= 30
        self._centered_block(self.metadata.author, self.body_font, 20, 26)
        if self.metadata.publisher:
            self.c.setFont(self.body_font, 12)
            self.c.drawCentredString(g.width / 2, g.margin_bottom + 24, self.metadata.publisher)

    def copyright_page(self) -> None:
        self._start_page("front")
        small = dict(size=9, leading=12)
        self._y = self.geometry.top - 200
        self._flow_paragraph(f"Copyright © {self.year} {self.metadata.author}", **small)
        self._flow_paragraph("All rights reserved.", **small)
        self._y -= 12
        self._flow_paragraph(DEFAULT_COPYRIGHT_NOTICE, **small)
        for para in split_paragraphs(self.metadata.copyright):
            self._y -= 12
            self._flow_paragraph(para, **small)
        if self.metadata.publisher:
            self._y -= 12
            self._flow_paragraph(f"Published by {self.metadata.publisher}", **small)

    def dedication_page(self) -> None:
        if not self.metadata.dedication.strip():
            return
        self._start_page("front")
        self._y = self.geometry.height - 200
        for para in split_paragraphs(self.metadata.dedication):
            self._centered_block(para, self.italic_font, 12, 18)
            self._y -= 8

    def contents_page(self, chapters: Sequence[Chapter]) -> None:
        self._start_page("front")
        self._folio_from = self._page_no
        self._centered_block("Contents", self.bold_font, self.options.heading_size, 24)
        self._y -= 18
        for chapter in chapters:
            self._flow_paragraph(chapter.title, leading=self.options.line_height + 3)

    def chapter(self, chapter: Chapter) -> None:
        opts = self.options
        self._start_page("opening")
        if opts.recto_chapter_starts and self._page_no % 2 == 0:
            # Left blank and unnumbered.
            self.c.showPage()
            self._page_no += 1
            self._y = self.geometry.top
            self._page_kind = "opening"

        self._chapter_pages[chapter.id] = self._page_no
        self.c.bookmarkPage(chapter.id)
        self.c.addOutlineEntry(chapter.title, chapter.id, level=0)

        self._y = self.geometry.top - opts.chapter_drop
        label, title = split_chapter_label(chapter.title)
        if label:
            self._centered_block(label, self.bold_font, opts.chapter_number_size, opts.chapter_number_size * 1.5)
        self._centered_block(title, self.bold_font, opts.heading_size, opts.heading_size * 1.3)
        self._y -= 30

        for i, para in enumerate(chapter.paragraphs):
            self._flow_paragraph(para, indent=opts.indent if i else 0)

    def about_author_page(self) -> None:
        if not self.metadata.about_author.strip():
            return
        self._start_page("opening")
        self._y = self.geometry.top - self.options.chapter_drop
        self._centered_block("About the Author", self.bold_font, self.options.heading_size, 24)
        self._y -= 18
        for i, para in enumerate(split_paragraphs(self.metadata.about_author)):
            self._flow_paragraph(para, indent=self.options.indent if i else 0)

    # -- driver -----------------------------------------------------------

    def typeset(self, chapters: Sequence[Chapter]) -> TypesetResult:
        buf = io.BytesIO()
        g = self.geometry
        self._canvas = canvas.Canvas(buf, pagesize=(g.width, g.height))
        self._page_no = 1
        self._y = g.top
        self._page_kind = "front"
        self._folio_from = None
        self._dirty = False
        self._chapter_pages = {}

        self.c.setTitle(self.metadata.title)
        self.c.setAuthor(self.metadata.author)
        self.c.setCreator("storypress")

        self.title_page()
        self.copyright_page()
        self.dedication_page()
        self.contents_page(chapters)
        for chapter in chapters:
            self.chapter(chapter)
        self.about_author_page()
        self._finish_page()
        self.c.save()

        page_count = self._page_no - 1
        self._canvas = None
        log.info("typeset %d chapters onto %d pages", len(chapters), page_count)
        return TypesetResult(
            pdf_bytes=buf.getvalue(),
            page_count=page_count,
            chapter_pages=dict(self._chapter_pages),
        )


def build_pdf(
    chapters: Sequence[Chapter],
    metadata: BookMetadata,
    *,
    options: TypesetOptions | None = None,
    year: int | None = None,
) -> TypesetResult:
    return Typesetter(metadata, options, year=year).typeset(chapters)
