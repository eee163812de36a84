"""Render chapters as one standalone, self-styled HTML reading page."""

from __future__ import annotations

import datetime as dt
import html
from typing import Sequence

from .models import Chapter

READER_CSS = """
    :root {
      --border-color: #ff9800;
      --background-light: #f5f5f5;
      --text-light: #333333;
      --background-dark: #2c3035;
      --text-dark: #ffffff;
    }
    body {
      font-family: Georgia, "Times New Roman", serif;
      background-color: var(--background-dark);
      color: var(--text-dark);
      transition: background-color 0.3s, color 0.3s;
      padding: 20px;
      margin: 0 auto;
      max-width: 46em;
      min-height: 100vh;
      line-height: 1.6;
    }
    body.light-mode {
      background-color: var(--background-light);
      color: var(--text-light);
    }
    a { color: inherit; }
    .book-header h1 { margin-bottom: 0.2em; }
    .book-header .author { opacity: 0.8; margin-top: 0; }
    .toc ol { padding-left: 1.4em; }
    .chapter-container {
      border: 2px solid var(--border-color);
      border-radius: 4px;
      padding: 10px 16px;
      margin-bottom: 15px;
      background: rgba(0, 0, 0, 0.3);
    }
    body.light-mode .chapter-container { background: #fff7e6; }
    .chapter-title {
      font-weight: bold;
      font-size: 1.25em;
      margin: 0.4em 0 0.8em;
    }
    .chapter-text p { margin: 0 0 1em; }
    .sample-note { font-style: italic; opacity: 0.8; }
    .footer {
      position: fixed;
      bottom: 0;
      left: 0;
      right: 0;
      background-color: #000;
      color: #9e9e9e;
      padding: 10px 20px;
      text-align: center;
      font-size: 15px;
    }
    body.light-mode .footer { background-color: #333; }
    #darkModeToggle {
      font-size: 16px;
      background: transparent;
      color: inherit;
      border: none;
      cursor: pointer;
      margin-left: 10px;
      padding: 0;
    }
    .footer-spacer { height: 60px; }
"""

THEME_SCRIPT = """
  document.getElementById('darkModeToggle').addEventListener('click', function () {
    document.body.classList.toggle('light-mode');
    var light = document.body.classList.contains('light-mode');
    this.textContent = light ? '\\u263E' : '\\u2600';
    localStorage.setItem('lightMode', light);
  });
  window.addEventListener('DOMContentLoaded', function () {
    if (localStorage.getItem('lightMode') === 'true') {
      document.body.classList.add('light-mode');
      document.getElementById('darkModeToggle').textContent = '\\u263E';
    }
  });
"""


def chapter_html(chapter: Chapter) -> str:
    paragraphs = "\n".join(f"    <p>{html.escape(p)}</p>" for p in chapter.paragraphs)
    return f"""<section class="chapter-container" id="{html.escape(chapter.id)}">
  <h2 class="chapter-title">{html.escape(chapter.title)}</h2>
  <div class="chapter-text">
{paragraphs}
  </div>
</section>"""


def toc_html(chapters: Sequence[Chapter]) -> str:
    items = "\n".join(
        f'    <li><a href="#{html.escape(ch.id)}">{html.escape(ch.title)}</a></li>'
        for ch in chapters
    )
    return f"""<nav class="toc" aria-label="Contents">
  <ol>
{items}
  </ol>
</nav>"""


def render_html(
    title: str,
    chapters: Sequence[Chapter],
    *,
    author: str = "",
    chapter_limit: int | None = None,
    language: str = "en",
    year: int | None = None,
) -> str:
    """Build the reading page. `chapter_limit` renders only the first N chapters."""
    shown = list(chapters)
    if chapter_limit is not None and chapter_limit < len(shown):
        shown = shown[: max(chapter_limit, 0)]
    year = year or dt.date.today().year

    byline = f"{title} by {author}" if author else title
    author_html = f'\n  <p class="author">by {html.escape(author)}</p>' if author else ""
    sample_html = ""
    if len(shown) < len(chapters):
        sample_html = (
            f'\n<p class="sample-note">Sample: {len(shown)} of {len(chapters)} chapters.</p>'
        )
    body = "\n\n".join(chapter_html(ch) for ch in shown)

    return f"""<!DOCTYPE html>
<html lang="{html.escape(language or "en", quote=True)}">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{html.escape(byline)}</title>
  <style>{READER_CSS}  </style>
</head>
<body>

<header class="book-header">
  <h1>{html.escape(title)}</h1>{author_html}
</header>
{toc_html(shown)}{sample_html}

{body}

<div class="footer-spacer"></div>
<div class="footer">
  <div>&copy; {year} {html.escape(byline)} <button id="darkModeToggle" title="Switch dark and light mode">&#9728;</button></div>
</div>

<script>{THEME_SCRIPT}</script>
</body>
</html>
"""
