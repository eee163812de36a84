"""Publish one project: manuscript -> HTML, EPUB, PDF, paperback cover, index entry.

Stages run in a fixed order because the cover's spine width comes from the
interior PDF's realized page count. Stale outputs are removed before new ones
are written; a failing stage leaves earlier artifacts in place.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from .abstract_cover import generate_abstract_cover
from .book_index import DEFAULT_INDEX_TEMPLATE, remove_entry, render_entry, sanitize_id, upsert_entry
from .config import PublishConfig, load_publish_config, validate_config
from .cover import compute_dimensions
from .cover_renderer import CoverOptions, render_cover
from .epub_builder import build_epub
from .errors import CoverImageError, ManuscriptError
from .html_renderer import render_html
from .metadata import read_project_metadata
from .models import BookMetadata, Chapter, CoverDimensions, TypesetResult
from .segmenter import segment
from .typesetter import TypesetOptions, build_pdf

log = logging.getLogger(__name__)

MAX_MANUSCRIPT_BYTES = 20 * 1024 * 1024
INDEX_FILE = "index.html"
DEFAULT_COVER_FILE = "cover.jpg"
STALE_OUTPUT_GLOBS = (
    "manuscript_*.html",
    "manuscript_*.epub",
    "manuscript_*.pdf",
    "paperback_cover_*.pdf",
)


@dataclass(frozen=True)
class PublishResult:
    project_id: str
    html_path: Path
    epub_path: Path
    pdf_path: Path
    cover_path: Path | None
    index_path: Path
    chapter_count: int
    word_count: int
    page_count: int
    dimensions: CoverDimensions | None
    notices: tuple[str, ...] = field(default_factory=tuple)


def output_timestamp(now: dt.datetime | None = None) -> str:
    """UTC ISO-8601 without punctuation, to the second: 20261019T083015."""
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    return now.astimezone(dt.timezone.utc).strftime("%Y%m%dT%H%M%S")


def read_manuscript(path: Path) -> str:
    if not path.is_file():
        raise ManuscriptError(
            f"Manuscript not found: {path}. Save the book text as {path.name} in the project folder."
        )
    size = path.stat().st_size
    if size > MAX_MANUSCRIPT_BYTES:
        raise ManuscriptError(
            f"Manuscript {path} is {size} bytes; the limit is {MAX_MANUSCRIPT_BYTES} bytes."
        )
    try:
        return path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ManuscriptError(f"Manuscript {path} is not UTF-8 text: {e}") from e


def read_index(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_index(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def remove_stale_outputs(project_dir: Path) -> list[Path]:
    removed = []
    for pattern in STALE_OUTPUT_GLOBS:
        for p in sorted(project_dir.glob(pattern)):
            if p.is_file():
                p.unlink()
                removed.append(p)
    if removed:
        log.info("removed %d previous output file(s)", len(removed))
    return removed


def _resolve(project_dir: Path, value: str | os.PathLike | None) -> Path | None:
    if value is None:
        return None
    p = Path(value).expanduser()
    return p if p.is_absolute() else project_dir / p


def resolve_front_cover(project_dir: Path, explicit: Path | None, metadata: BookMetadata) -> Path:
    """Explicit path (must exist), else the project's cover.jpg, else a generated one."""
    if explicit is not None:
        if not explicit.is_file():
            raise CoverImageError(f"Front cover image not found: {explicit}")
        return explicit
    default = project_dir / DEFAULT_COVER_FILE
    if default.is_file():
        return default
    log.info("no front cover supplied; generating %s", default)
    return generate_abstract_cover(metadata.title, metadata.author, default)


class Pipeline:
    """Typesetting and cover layout as two explicit, ordered stages."""

    def __init__(self, chapters: Sequence[Chapter], metadata: BookMetadata, config: PublishConfig, project_dir: Path) -> None:
        self.chapters = list(chapters)
        self.metadata = metadata
        self.config = config
        self.project_dir = project_dir
        self.typeset_result: TypesetResult | None = None

    def typeset(self) -> TypesetResult:
        cfg = self.config
        body = _resolve(self.project_dir, cfg.body_font)
        bold = _resolve(self.project_dir, cfg.bold_font)
        options = TypesetOptions(
            recto_chapter_starts=cfg.recto_chapter_starts,
            body_font_path=str(body) if body else None,
            bold_font_path=str(bold) if bold else None,
        )
        self.typeset_result = build_pdf(self.chapters, self.metadata, options=options)
        return self.typeset_result

    def layout_cover(self, page_count: int) -> CoverDimensions:
        return compute_dimensions(page_count, self.config.paper_type, self.config.ink_type)


def _entry_for(
    project_dir: Path,
    collection_dir: Path,
    metadata: BookMetadata,
    *,
    cover: Path,
    html_path: Path,
    epub_path: Path,
    pdf_path: Path,
) -> str:
    base = Path(os.path.relpath(project_dir, collection_dir)).as_posix()
    cover_src = None
    if cover.parent.resolve() == project_dir.resolve():
        cover_src = cover.name
    return render_entry(
        base,
        metadata.title,
        author=metadata.author,
        cover_src=cover_src,
        html_file=html_path.name,
        epub_file=epub_path.name,
        pdf_file=pdf_path.name,
        buy_url=metadata.buy_url,
    )


def publish_project(
    project_dir: Path,
    *,
    collection_dir: Path | None = None,
    manuscript_name: str | None = None,
    front_cover: Path | None = None,
    author_photo: Path | None = None,
    paper_type: str | None = None,
    ink_type: str | None = None,
    sample_chapters: int | None = None,
    make_cover: bool | None = None,
    now: dt.datetime | None = None,
) -> PublishResult:
    """Run every stage for one project directory. Arguments override `book.yaml`."""
    project_dir = Path(project_dir).resolve()
    collection_dir = Path(collection_dir).resolve() if collection_dir else project_dir.parent
    project_id = sanitize_id(project_dir.name)

    config = load_publish_config(project_dir)
    overrides = {
        "manuscript": manuscript_name,
        "paper_type": paper_type,
        "ink_type": ink_type,
        "sample_chapters": sample_chapters,
        "make_cover": make_cover,
    }
    config = dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})
    config = validate_config(config, "publish options")
    metadata = read_project_metadata(
        project_dir, language=config.language, description=config.description
    )

    text = read_manuscript(project_dir / config.manuscript)
    chapters = segment(text)
    if not chapters:
        raise ManuscriptError(f"Manuscript {project_dir / config.manuscript} contains no text.")
    word_count = sum(ch.word_count for ch in chapters)
    log.info("%s: %d chapters, %d words", project_id, len(chapters), word_count)

    cover_image = resolve_front_cover(
        project_dir, _resolve(project_dir, front_cover or config.front_cover), metadata
    )
    photo = _resolve(project_dir, author_photo or config.author_photo)
    if photo is not None and not photo.is_file():
        raise CoverImageError(f"Author photo not found: {photo}")

    remove_stale_outputs(project_dir)
    ts = output_timestamp(now)
    html_path = project_dir / f"manuscript_{ts}.html"
    epub_path = project_dir / f"manuscript_{ts}.epub"
    pdf_path = project_dir / f"manuscript_{ts}.pdf"
    notices: list[str] = []

    html_path.write_text(
        render_html(
            metadata.title,
            chapters,
            author=metadata.author,
            chapter_limit=config.sample_chapters,
            language=metadata.language,
        ),
        encoding="utf-8",
    )
    log.info("wrote %s", html_path)

    epub_path.write_bytes(build_epub(chapters, metadata, cover_image=cover_image.read_bytes()))
    log.info("wrote %s", epub_path)

    pipeline = Pipeline(chapters, metadata, config, project_dir)
    typeset = pipeline.typeset()
    pdf_path.write_bytes(typeset.pdf_bytes)
    log.info("wrote %s (%d pages)", pdf_path, typeset.page_count)

    dims = None
    cover_path = None
    if config.make_cover:
        dims = pipeline.layout_cover(typeset.page_count)
        cover = render_cover(
            dims,
            cover_image,
            CoverOptions(
                title=metadata.title,
                author=metadata.author,
                blurb=metadata.blurb,
                author_photo=photo,
                back_cover_color=config.back_cover_color,
                spine_color=config.spine_color,
                text_color=config.text_color,
                font_path=str(_resolve(project_dir, config.cover_font)) if config.cover_font else None,
            ),
        )
        cover_path = project_dir / f"paperback_cover_{ts}.pdf"
        cover_path.write_bytes(cover.pdf_bytes)
        notices.extend(cover.notices)
        log.info("wrote %s", cover_path)

    index_path = collection_dir / INDEX_FILE
    current = read_index(index_path) if index_path.is_file() else DEFAULT_INDEX_TEMPLATE
    entry = _entry_for(
        project_dir,
        collection_dir,
        metadata,
        cover=cover_image,
        html_path=html_path,
        epub_path=epub_path,
        pdf_path=pdf_path,
    )
    collection_dir.mkdir(parents=True, exist_ok=True)
    write_index(index_path, upsert_entry(current, project_id, entry))
    log.info("updated %s", index_path)

    return PublishResult(
        project_id=project_id,
        html_path=html_path,
        epub_path=epub_path,
        pdf_path=pdf_path,
        cover_path=cover_path,
        index_path=index_path,
        chapter_count=len(chapters),
        word_count=word_count,
        page_count=typeset.page_count,
        dimensions=dims,
        notices=tuple(notices),
    )


def unpublish_project(project_dir: Path, *, collection_dir: Path | None = None) -> Path:
    """Remove the project's index entry; generated files stay where they are."""
    project_dir = Path(project_dir).resolve()
    collection_dir = Path(collection_dir).resolve() if collection_dir else project_dir.parent
    index_path = collection_dir / INDEX_FILE
    if not index_path.is_file():
        log.info("no index at %s; nothing to unpublish", index_path)
        return index_path
    current = read_index(index_path)
    updated = remove_entry(current, sanitize_id(project_dir.name))
    if updated != current:
        write_index(index_path, updated)
        log.info("removed %s from %s", project_dir.name, index_path)
    return index_path
