"""Manuscript to HTML / EPUB / print PDF / paperback cover publishing pipeline."""

from __future__ import annotations

from .models import BookMetadata, Chapter
from .segmenter import segment

__all__ = ["BookMetadata", "Chapter", "segment"]
__version__ = "0.1.0"
