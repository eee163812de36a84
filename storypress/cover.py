"""Paperback wrap-around cover geometry for a 6x9 trim.

The spine width depends on the realized interior page count, so this runs
after the typesetter.
"""

from __future__ import annotations

from .errors import PageCountError
from .models import CoverDimensions, CoverLayout

MIN_PAGES = 24
MAX_PAGES = 828

TRIM_WIDTH_IN = 6.0
TRIM_HEIGHT_IN = 9.0
BLEED_IN = 0.125
COVER_THICKNESS_IN = 0.0025
PRINT_DPI = 300
SPINE_TEXT_MIN_PAGES = 100

# Inches per interior page, by (paper, ink).
PAGE_THICKNESS_IN = {
    ("white", "bw"): 0.002237,
    ("cream", "bw"): 0.002237,
    ("white", "color"): 0.002237,
    ("cream", "color"): 0.002237,
}

PAPER_TYPES = ("white", "cream")
INK_TYPES = ("bw", "color")


def page_thickness(paper_type: str, ink_type: str) -> float:
    try:
        return PAGE_THICKNESS_IN[(paper_type, ink_type)]
    except KeyError:
        raise ValueError(
            f"Unknown paper/ink combination {paper_type!r}/{ink_type!r}; "
            f"paper is one of {PAPER_TYPES}, ink one of {INK_TYPES}"
        ) from None


def to_px(inches: float, dpi: int) -> int:
    return round(inches * dpi)


def compute_dimensions(
    page_count: int,
    paper_type: str = "white",
    ink_type: str = "bw",
    *,
    dpi: int = PRINT_DPI,
) -> CoverDimensions:
    if page_count < MIN_PAGES or page_count > MAX_PAGES:
        raise PageCountError(page_count, MIN_PAGES, MAX_PAGES)

    spine = page_count * page_thickness(paper_type, ink_type) + COVER_THICKNESS_IN
    full_width = 2 * TRIM_WIDTH_IN + spine + 2 * BLEED_IN
    full_height = TRIM_HEIGHT_IN + 2 * BLEED_IN

    back_end = TRIM_WIDTH_IN + BLEED_IN
    spine_end = back_end + spine
    layout = CoverLayout(
        back_cover_start=0.0,
        back_cover_end=back_end,
        spine_start=back_end,
        spine_end=spine_end,
        front_cover_start=spine_end,
        front_cover_end=full_width,
        back_cover_start_px=0,
        back_cover_end_px=to_px(back_end, dpi),
        spine_start_px=to_px(back_end, dpi),
        spine_end_px=to_px(spine_end, dpi),
        front_cover_start_px=to_px(spine_end, dpi),
        front_cover_end_px=to_px(full_width, dpi),
    )
    return CoverDimensions(
        page_count=page_count,
        paper_type=paper_type,
        ink_type=ink_type,
        dpi=dpi,
        trim_width_in=TRIM_WIDTH_IN,
        trim_height_in=TRIM_HEIGHT_IN,
        bleed_in=BLEED_IN,
        spine_width_in=spine,
        full_cover_width_in=full_width,
        full_cover_height_in=full_height,
        width_px=to_px(full_width, dpi),
        height_px=to_px(full_height, dpi),
        layout=layout,
    )


def format_report(dims: CoverDimensions) -> str:
    lay = dims.layout
    spine_note = (
        "spine text: yes"
        if dims.page_count >= SPINE_TEXT_MIN_PAGES
        else f"spine text: no (needs {SPINE_TEXT_MIN_PAGES}+ pages)"
    )
    return "\n".join(
        [
            f"Paperback cover, {dims.trim_width_in:g}x{dims.trim_height_in:g} trim",
            f"  pages:        {dims.page_count} ({dims.paper_type} paper, {dims.ink_type} ink)",
            f"  spine width:  {dims.spine_width_in:.4f} in",
            f"  full cover:   {dims.full_cover_width_in:.4f} x {dims.full_cover_height_in:.4f} in",
            f"  pixels:       {dims.width_px} x {dims.height_px} @ {dims.dpi} dpi",
            f"  back cover:   {lay.back_cover_start:.4f} - {lay.back_cover_end:.4f} in",
            f"  spine:        {lay.spine_start:.4f} - {lay.spine_end:.4f} in",
            f"  front cover:  {lay.front_cover_start:.4f} - {lay.front_cover_end:.4f} in",
            f"  {spine_note}",
        ]
    )
