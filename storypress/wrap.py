"""Greedy word wrap shared by the interior typesetter and the cover blurb."""

from __future__ import annotations

from typing import Callable

Measure = Callable[[str], float]


def wrap_words(
    text: str,
    measure: Measure,
    max_width: float,
    *,
    first_line_width: float | None = None,
) -> list[str]:
    """Break `text` into lines whose measured width stays within `max_width`.

    A word wider than the limit on its own is placed alone on a line rather
    than dropped. `first_line_width` narrows the first line (paragraph indent).
    """
    words = text.split()
    lines: list[str] = []
    current: list[str] = []
    limit = first_line_width if first_line_width is not None else max_width

    for word in words:
        candidate = " ".join(current + [word])
        if not current or measure(candidate) <= limit:
            current.append(word)
            continue
        lines.append(" ".join(current))
        current = [word]
        limit = max_width

    if current:
        lines.append(" ".join(current))
    return lines
