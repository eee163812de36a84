"""Read book metadata from a project's `metadata/` directory of small text files."""

from __future__ import annotations

from pathlib import Path

from .errors import MetadataError
from .models import BookMetadata

METADATA_DIR = "metadata"

REQUIRED_FIELDS = {
    "title": "_title.txt",
    "author": "_author.txt",
}

OPTIONAL_FIELDS = {
    "publisher": "_publisher.txt",
    "buy_url": "_buy_url.txt",
    "copyright": "_copyright.txt",
    "dedication": "_dedication.txt",
    "about_author": "_about_author.txt",
    "blurb": "_back_cover_blurb.txt",
    "pov": "_pov.txt",
}


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8").strip()
    except UnicodeDecodeError as e:
        raise MetadataError(f"{path} is not valid UTF-8 text: {e}") from e


def read_project_metadata(
    project_dir: Path,
    *,
    language: str = "en",
    description: str = "",
) -> BookMetadata:
    """Load metadata fresh from disk; title and author are required."""
    meta_dir = Path(project_dir) / METADATA_DIR
    if not meta_dir.is_dir():
        raise MetadataError(
            f"Metadata folder not found: {meta_dir}. Create it with "
            f"{REQUIRED_FIELDS['title']} and {REQUIRED_FIELDS['author']} "
            "(one line each) before publishing."
        )

    values: dict[str, str] = {}
    for field_name, file_name in REQUIRED_FIELDS.items():
        path = meta_dir / file_name
        if not path.is_file():
            raise MetadataError(f"Missing {path}. Add the book's {field_name} to it.")
        value = _read(path)
        if not value:
            raise MetadataError(f"{path} is empty. Add the book's {field_name} to it.")
        values[field_name] = " ".join(value.split())

    for field_name, file_name in OPTIONAL_FIELDS.items():
        path = meta_dir / file_name
        if path.is_file():
            values[field_name] = _read(path)

    return BookMetadata(language=language, description=description, **values)
