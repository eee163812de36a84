"""Draw the wrap-around paperback cover and embed it in a one-page PDF."""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .cover import SPINE_TEXT_MIN_PAGES, to_px
from .errors import CoverImageError
from .models import CoverDimensions
from .segmenter import split_paragraphs
from .wrap import wrap_words

log = logging.getLogger(__name__)

ImageSource = Union[str, Path, Image.Image]

SAFE_MARGIN_IN = 0.25
GUIDE_INSET_IN = 0.125
BARCODE_RESERVE_IN = 1.5
AUTHOR_PHOTO_MAX_IN = (1.5, 2.0)
BLURB_FONT_PX_AT_300 = 48
BLURB_LINE_SPACING = 1.4
SPINE_FONT_MAX_PX = 72
GUIDE_COLOR = (255, 0, 0)
DEFAULT_FONT = "DejaVuSans.ttf"


@dataclass(frozen=True)
class CoverOptions:
    title: str = ""
    author: str = ""
    blurb: str = ""
    author_photo: ImageSource | None = None
    back_cover_color: str = "#000000"
    spine_color: str = "#000000"
    text_color: str = "#ffffff"
    font_path: str | None = None
    show_guides: bool = False


@dataclass(frozen=True)
class CoverResult:
    pdf_bytes: bytes
    page_size: tuple[float, float]
    notices: tuple[str, ...] = field(default_factory=tuple)


def load_font(path: str | None, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype(path or DEFAULT_FONT, size)
    except OSError:
        if path:
            log.warning("cover font %s not loadable; using Pillow's default font", path)
        return ImageFont.load_default(size=size)


def open_image(source: ImageSource, label: str) -> Image.Image:
    if isinstance(source, Image.Image):
        return source.convert("RGB")
    try:
        with Image.open(source) as img:
            return img.convert("RGB")
    except OSError as e:
        raise CoverImageError(f"Cannot read {label} image {source}: {e}") from e


def cover_page_size(dims: CoverDimensions) -> tuple[float, float]:
    """PDF page size in points for the full wrap-around cover."""
    return (dims.full_cover_width_in * 72, dims.full_cover_height_in * 72)


def _dashed_line(
    draw: ImageDraw.ImageDraw,
    start: tuple[int, int],
    end: tuple[int, int],
    *,
    dash: int,
    gap: int,
    width: int,
) -> None:
    (x0, y0), (x1, y1) = start, end
    length = math.hypot(x1 - x0, y1 - y0)
    if length == 0:
        return
    dx, dy = (x1 - x0) / length, (y1 - y0) / length
    pos = 0.0
    while pos < length:
        stop = min(pos + dash, length)
        draw.line(
            [(x0 + dx * pos, y0 + dy * pos), (x0 + dx * stop, y0 + dy * stop)],
            fill=GUIDE_COLOR,
            width=width,
        )
        pos = stop + gap


def draw_guides(img: Image.Image, dims: CoverDimensions) -> None:
    draw = ImageDraw.Draw(img)
    dpi = dims.dpi
    style = dict(dash=max(to_px(0.1, dpi), 2), gap=max(to_px(0.05, dpi), 1), width=max(dpi // 100, 1))
    w, h = img.size
    for x in (dims.layout.spine_start_px, dims.layout.spine_end_px):
        _dashed_line(draw, (x, 0), (x, h - 1), **style)
    inset = to_px(GUIDE_INSET_IN, dpi)
    left, top, right, bottom = inset, inset, w - 1 - inset, h - 1 - inset
    _dashed_line(draw, (left, top), (right, top), **style)
    _dashed_line(draw, (left, bottom), (right, bottom), **style)
    _dashed_line(draw, (left, top), (left, bottom), **style)
    _dashed_line(draw, (right, top), (right, bottom), **style)


def _draw_author_photo(img: Image.Image, dims: CoverDimensions, source: ImageSource) -> int:
    """Paste the photo at the back cover's top-left safe corner; return its bottom edge."""
    photo = open_image(source, "author photo")
    max_w = to_px(AUTHOR_PHOTO_MAX_IN[0], dims.dpi)
    max_h = to_px(AUTHOR_PHOTO_MAX_IN[1], dims.dpi)
    scale = min(max_w / photo.width, max_h / photo.height)
    size = (max(int(photo.width * scale), 1), max(int(photo.height * scale), 1))
    photo = photo.resize(size, Image.LANCZOS)
    safe = to_px(SAFE_MARGIN_IN, dims.dpi)
    img.paste(photo, (safe, safe))
    return safe + photo.height


def _draw_blurb(img: Image.Image, dims: CoverDimensions, options: CoverOptions, top: int) -> int:
    """Wrap the blurb inside the back cover above the barcode reserve; return lines drawn."""
    dpi = dims.dpi
    font = load_font(options.font_path, max(round(BLURB_FONT_PX_AT_300 * dpi / 300), 6))
    size = getattr(font, "size", 10)
    line_h = int(size * BLURB_LINE_SPACING)
    safe = to_px(SAFE_MARGIN_IN, dpi)
    left = safe
    right = dims.layout.back_cover_end_px - safe
    limit = dims.height_px - to_px(BARCODE_RESERVE_IN, dpi) - safe

    draw = ImageDraw.Draw(img)
    y = top
    drawn = 0
    for para in split_paragraphs(options.blurb):
        for line in wrap_words(para, font.getlength, right - left):
            if y + line_h > limit:
                log.info("blurb truncated to fit above the barcode area")
                return drawn
            draw.text((left, y), line, font=font, fill=options.text_color)
            y += line_h
            drawn += 1
        y += line_h // 2
    return drawn


def _rotated_text(text: str, font, color: str) -> Image.Image:
    l, t, r, b = font.getbbox(text)
    layer = Image.new("RGBA", (max(r - l, 1), max(b - t, 1)), (0, 0, 0, 0))
    ImageDraw.Draw(layer).text((-l, -t), text, font=font, fill=color)
    return layer.rotate(-90, expand=True)


def _draw_spine_text(img: Image.Image, dims: CoverDimensions, options: CoverOptions) -> None:
    lay = dims.layout
    spine_px = lay.spine_end_px - lay.spine_start_px
    size = min(math.floor(spine_px * 0.75), SPINE_FONT_MAX_PX)
    if size < 1:
        return
    safe = to_px(SAFE_MARGIN_IN, dims.dpi)
    half = (dims.height_px - 2 * safe) // 2
    center_x = (lay.spine_start_px + lay.spine_end_px) // 2

    def fitted(text: str) -> Image.Image:
        font = load_font(options.font_path, size)
        width = font.getlength(text)
        if width > half:
            font = load_font(options.font_path, max(int(size * half / width), 1))
        return _rotated_text(text, font, options.text_color)

    if options.title:
        label = fitted(options.title)
        img.paste(label, (center_x - label.width // 2, safe), label)
    if options.author:
        label = fitted(options.author)
        img.paste(label, (center_x - label.width // 2, dims.height_px - safe - label.height), label)


def compose_cover_image(
    dims: CoverDimensions,
    front_image: ImageSource,
    options: CoverOptions | None = None,
) -> tuple[Image.Image, list[str]]:
    """Compose the full cover raster; returns the image and any notices."""
    options = options or CoverOptions()
    notices: list[str] = []
    lay = dims.layout

    img = Image.new("RGB", (dims.width_px, dims.height_px), options.back_cover_color)
    draw = ImageDraw.Draw(img)
    draw.rectangle(
        [lay.spine_start_px, 0, max(lay.spine_end_px - 1, lay.spine_start_px), dims.height_px - 1],
        fill=options.spine_color,
    )

    blurb_top = to_px(SAFE_MARGIN_IN, dims.dpi)
    if options.author_photo is not None:
        blurb_top = _draw_author_photo(img, dims, options.author_photo) + to_px(SAFE_MARGIN_IN, dims.dpi)
    if options.blurb.strip():
        _draw_blurb(img, dims, options, blurb_top)

    front = open_image(front_image, "front cover")
    front_size = (lay.front_cover_end_px - lay.front_cover_start_px, dims.height_px)
    img.paste(front.resize(front_size, Image.LANCZOS), (lay.front_cover_start_px, 0))

    if dims.page_count >= SPINE_TEXT_MIN_PAGES:
        _draw_spine_text(img, dims, options)
    elif options.title or options.author:
        msg = (
            f"Spine left blank: {dims.page_count} pages is below the "
            f"{SPINE_TEXT_MIN_PAGES}-page minimum for spine text."
        )
        log.info(msg)
        notices.append(msg)

    if options.show_guides:
        draw_guides(img, dims)
    return img, notices


def render_cover(
    dims: CoverDimensions,
    front_image: ImageSource,
    options: CoverOptions | None = None,
) -> CoverResult:
    img, notices = compose_cover_image(dims, front_image, options)
    page_size = cover_page_size(dims)

    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=page_size)
    c.setTitle((options.title if options else "") or "Paperback cover")
    c.drawImage(ImageReader(img), 0, 0, width=page_size[0], height=page_size[1])
    c.showPage()
    c.save()
    log.info("rendered cover %dx%d px, %.2fx%.2f in", img.width, img.height,
             dims.full_cover_width_in, dims.full_cover_height_in)
    return CoverResult(pdf_bytes=buf.getvalue(), page_size=page_size, notices=tuple(notices))
