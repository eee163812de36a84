"""Infer chapters from an unstructured plain-text manuscript.

Boundary detection is an ordered cascade of line recognizers. The first family
that matches more than one line wins; when none does, the text is split on
runs of blank lines, then on form feeds.
"""

from __future__ import annotations

import logging
import re

from .models import Chapter

log = logging.getLogger(__name__)

MIN_SEGMENT_CHARS = 50
MAX_TITLE_CHARS = 120

_ROMAN = r"[IVXLCDMivxlcdm]+\b"

# (name, pattern, keep_heading). Every pattern matches one whole line.
BOUNDARY_RECOGNIZERS: tuple[tuple[str, re.Pattern[str], bool], ...] = (
    ("chapter-number-title", re.compile(r"^[ \t]*(?i:chapter)[ \t]+\d+[ \t]*:[^\n]*$", re.M), True),
    ("chapter-number", re.compile(r"^[ \t]*(?i:chapter)[ \t]+\d+\b[^\n]*$", re.M), True),
    ("chapter-roman-title", re.compile(rf"^[ \t]*(?i:chapter)[ \t]+{_ROMAN}[ \t]*:[^\n]*$", re.M), True),
    ("chapter-roman", re.compile(rf"^[ \t]*(?i:chapter)[ \t]+{_ROMAN}[^\n]*$", re.M), True),
    ("numbered", re.compile(r"^[ \t]*\d+\.[ \t]*[^\n]*$", re.M), True),
    ("markdown", re.compile(r"^[ \t]*#{1,3}[ \t]+\S[^\n]*$", re.M), True),
    ("scene-break", re.compile(r"^[ \t]*\*[ \t]*\*[ \t]*\*[ \t]*$", re.M), False),
)

BLANK_RUN_RE = re.compile(r"\n(?:[ \t]*\n){3,}")
PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t]*\n")
MARKDOWN_HEADING_RE = re.compile(r"^#{1,3}\s+")

TITLE_PATTERNS = (
    re.compile(r"^(?i:chapter)\s+\d+\b.*$"),
    re.compile(rf"^(?i:chapter)\s+{_ROMAN}.*$"),
    re.compile(r"^\d+\.\s*\S.*$"),
    re.compile(r"^#{1,3}\s+\S.*$"),
    re.compile(r"^[A-Z][A-Z\s]{4,}$"),
)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_paragraphs(text: str) -> list[str]:
    """Split on blank lines; line breaks inside a paragraph become single spaces."""
    out: list[str] = []
    for block in PARAGRAPH_BREAK_RE.split(normalize_newlines(text)):
        para = " ".join(block.split())
        if para:
            out.append(para)
    return out


def is_title_line(line: str) -> bool:
    line = line.strip()
    if not line or len(line) > MAX_TITLE_CHARS:
        return False
    return any(p.match(line) for p in TITLE_PATTERNS)


def _split_on_headings(text: str, pattern: re.Pattern[str], keep_heading: bool) -> list[str] | None:
    matches = list(pattern.finditer(text))
    if len(matches) < 2:
        return None
    segments = [text[: matches[0].start()]]
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        start = m.start() if keep_heading else m.end()
        segments.append(text[start:end])
    return segments


def split_segments(text: str) -> list[str]:
    """Raw boundary split of normalized text, before filtering."""
    for name, pattern, keep_heading in BOUNDARY_RECOGNIZERS:
        segments = _split_on_headings(text, pattern, keep_heading)
        if segments is not None:
            log.debug("chapter boundaries: %s (%d segments)", name, len(segments))
            return segments

    segments = BLANK_RUN_RE.split(text)
    if len(segments) > 1:
        log.debug("chapter boundaries: blank-line runs (%d segments)", len(segments))
        return segments
    log.debug("chapter boundaries: form feeds")
    return text.split("\f")


def _title_and_body(segment: str) -> tuple[str | None, str]:
    first, _, rest = segment.partition("\n")
    if is_title_line(first):
        title = MARKDOWN_HEADING_RE.sub("", first.strip()).strip()
        return title, rest
    return None, segment


def segment(text: str) -> list[Chapter]:
    """Split a manuscript into chapters. Never raises.

    Returns an empty list only for empty or whitespace-only input.
    """
    text = normalize_newlines(text)
    if not text.strip():
        return []

    retained: list[tuple[str | None, list[str]]] = []
    for raw in split_segments(text):
        seg = raw.strip()
        if len(seg) < MIN_SEGMENT_CHARS:
            continue
        title, body = _title_and_body(seg)
        paragraphs = split_paragraphs(body)
        if not paragraphs:
            continue
        retained.append((title, paragraphs))

    if not retained:
        log.debug("no usable segments; treating the whole manuscript as one chapter")
        retained = [(None, split_paragraphs(text))]

    chapters = [
        Chapter(
            id=f"chapter{n}",
            title=title or f"Chapter {n}",
            paragraphs=tuple(paragraphs),
        )
        for n, (title, paragraphs) in enumerate(retained, start=1)
    ]
    log.info("segmented manuscript into %d chapter(s)", len(chapters))
    return chapters
