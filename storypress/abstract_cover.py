"""Placeholder front cover: pastel gradient, translucent shapes, title and author."""

from __future__ import annotations

import logging
import math
import random
import textwrap
from pathlib import Path

from PIL import Image, ImageDraw, ImageFilter

from .cover_renderer import load_font

log = logging.getLogger(__name__)

GRADIENT_TOP = (0x8D, 0xD4, 0xFC)
GRADIENT_BOTTOM = (0xEC, 0xB8, 0xFA)
SHAPE_COLORS = (
    "#ffffff", "#e8ffea", "#fbeaff", "#ffe3e3", "#e3eaff",
    "#dbf5fc", "#ffe4eb", "#ffefba", "#e5e4fa", "#e7b3fa",
)
TITLE_WRAP_CHARS = 22
JPEG_QUALITY = 91


def _hex_rgb(value: str) -> tuple[int, int, int]:
    v = value.lstrip("#")
    return int(v[0:2], 16), int(v[2:4], 16), int(v[4:6], 16)


def vertical_gradient(size: tuple[int, int], top: tuple[int, int, int], bottom: tuple[int, int, int]) -> Image.Image:
    width, height = size
    column = Image.new("RGB", (1, height))
    for y in range(height):
        t = y / max(height - 1, 1)
        column.putpixel((0, y), tuple(round(a + (b - a) * t) for a, b in zip(top, bottom)))
    return column.resize((width, height), Image.NEAREST)


def _draw_shapes(img: Image.Image, rng: random.Random) -> Image.Image:
    width, height = img.size
    sx, sy = width / 1600, height / 2560
    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    for _ in range(4 + rng.randrange(5)):
        alpha = round(255 * (0.13 + rng.random() * 0.13))
        fill = (*_hex_rgb(rng.choice(SHAPE_COLORS)), alpha)
        kind = rng.random()
        if kind < 0.3:
            cx, cy = (200 + rng.random() * 1200) * sx, (200 + rng.random() * 2100) * sy
            rx, ry = (180 + rng.random() * 260) * sx, (110 + rng.random() * 190) * sy
            draw.ellipse([cx - rx, cy - ry, cx + rx, cy + ry], fill=fill)
        elif kind < 0.7:
            sides = 3 + rng.randrange(3)
            r = (100 + rng.random() * 180) * sx
            cx, cy = (200 + rng.random() * 1200) * sx, (180 + rng.random() * 2000) * sy
            points = []
            for s in range(sides):
                ang = math.tau * s / sides + rng.random() * 0.8
                points.append((cx + math.cos(ang) * r, cy + math.sin(ang) * r))
            draw.polygon(points, fill=fill)
        else:
            w, h = (120 + rng.random() * 140) * sx, (36 + rng.random() * 38) * sy
            bar = Image.new("RGBA", (max(int(w), 1), max(int(h), 1)), fill)
            bar = bar.rotate(rng.random() * 360, expand=True)
            x = int(80 * sx + rng.random() * max(width - 160 * sx - bar.width, 1))
            y = int(80 * sy + rng.random() * max(height - 160 * sy - bar.height, 1))
            overlay.alpha_composite(bar, (x, y))

    return Image.alpha_composite(img.convert("RGBA"), overlay)


def _draw_text(img: Image.Image, title: str, author: str, font_path: str | None) -> Image.Image:
    width, height = img.size
    scale = width / 1600
    title_font = load_font(font_path, max(int(140 * scale), 8))
    author_font = load_font(font_path, max(int(90 * scale), 6))
    title_lines = textwrap.wrap((title or "Untitled").upper(), TITLE_WRAP_CHARS) or ["UNTITLED"]

    def layer(offset: int, fill) -> Image.Image:
        out = Image.new("RGBA", img.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(out)
        for i, line in enumerate(title_lines):
            y = int((260 + i * 170) * scale) + offset
            draw.text((width / 2 + offset, y), line, font=title_font, fill=fill, anchor="ma")
        if author:
            draw.text((width / 2 + offset, height - int(260 * scale) + offset), author.upper(),
                      font=author_font, fill=fill, anchor="ma")
        return out

    shadow = layer(max(int(4 * scale), 1), (0, 0, 0, 204)).filter(ImageFilter.GaussianBlur(max(6 * scale, 1)))
    img = Image.alpha_composite(img, shadow)
    return Image.alpha_composite(img, layer(0, (255, 255, 255, 238)))


def generate_abstract_cover(
    title: str,
    author: str,
    out_path: Path,
    *,
    seed: int | None = None,
    size: tuple[int, int] = (1600, 2560),
    font_path: str | None = None,
) -> Path:
    rng = random.Random(seed)
    img = vertical_gradient(size, GRADIENT_TOP, GRADIENT_BOTTOM)
    img = _draw_shapes(img, rng)
    img = _draw_text(img, title, author, font_path)
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    img.convert("RGB").save(out_path, "JPEG", quality=JPEG_QUALITY)
    log.info("generated abstract cover %s", out_path)
    return out_path
