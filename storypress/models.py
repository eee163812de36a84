"""Shared records passed between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Chapter:
    id: str
    title: str
    paragraphs: tuple[str, ...]

    @property
    def word_count(self) -> int:
        return sum(len(p.split()) for p in self.paragraphs)


@dataclass(frozen=True)
class BookMetadata:
    title: str
    author: str
    language: str = "en"
    publisher: str = ""
    description: str = ""
    buy_url: str = ""
    pov: str = ""
    copyright: str = ""
    dedication: str = ""
    about_author: str = ""
    blurb: str = ""


@dataclass(frozen=True)
class CoverLayout:
    """Horizontal regions of the wrap-around cover, left to right."""

    back_cover_start: float
    back_cover_end: float
    spine_start: float
    spine_end: float
    front_cover_start: float
    front_cover_end: float
    back_cover_start_px: int
    back_cover_end_px: int
    spine_start_px: int
    spine_end_px: int
    front_cover_start_px: int
    front_cover_end_px: int


@dataclass(frozen=True)
class CoverDimensions:
    page_count: int
    paper_type: str
    ink_type: str
    dpi: int
    trim_width_in: float
    trim_height_in: float
    bleed_in: float
    spine_width_in: float
    full_cover_width_in: float
    full_cover_height_in: float
    width_px: int
    height_px: int
    layout: CoverLayout

    @property
    def spine_width_px(self) -> int:
        return self.layout.spine_end_px - self.layout.spine_start_px


@dataclass(frozen=True)
class TypesetResult:
    pdf_bytes: bytes
    page_count: int
    chapter_pages: dict[str, int] = field(default_factory=dict)
