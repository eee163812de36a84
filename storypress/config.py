"""Optional per-project publishing settings from `book.yaml`."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .cover import INK_TYPES, PAPER_TYPES
from .errors import ConfigError

log = logging.getLogger(__name__)

CONFIG_FILE = "book.yaml"


@dataclass(frozen=True)
class PublishConfig:
    paper_type: str = "white"
    ink_type: str = "bw"
    sample_chapters: int | None = None
    language: str = "en"
    description: str = ""
    manuscript: str = "manuscript.txt"
    front_cover: str | None = None
    author_photo: str | None = None
    back_cover_color: str = "#000000"
    spine_color: str = "#000000"
    text_color: str = "#ffffff"
    cover_font: str | None = None
    body_font: str | None = None
    bold_font: str | None = None
    recto_chapter_starts: bool = False
    make_cover: bool = True


FIELD_NAMES = {f.name for f in dataclasses.fields(PublishConfig)}


def validate_config(cfg: PublishConfig, source: Path | str) -> PublishConfig:
    """Raise ConfigError naming `source` when a setting is out of range."""
    if cfg.paper_type not in PAPER_TYPES:
        raise ConfigError(f"{source}: paper_type must be one of {PAPER_TYPES}, got {cfg.paper_type!r}")
    if cfg.ink_type not in INK_TYPES:
        raise ConfigError(f"{source}: ink_type must be one of {INK_TYPES}, got {cfg.ink_type!r}")
    if cfg.sample_chapters is not None and (
        not isinstance(cfg.sample_chapters, int) or cfg.sample_chapters < 1
    ):
        raise ConfigError(f"{source}: sample_chapters must be a positive integer or null")
    return cfg


def load_publish_config(project_dir: Path) -> PublishConfig:
    """Defaults, overlaid with whatever `book.yaml` sets (missing file -> defaults)."""
    path = Path(project_dir) / CONFIG_FILE
    if not path.is_file():
        return PublishConfig()
    try:
        raw: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"{path} is not valid YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must be a mapping of settings, got {type(raw).__name__}")

    known = {}
    for k, v in raw.items():
        if k not in FIELD_NAMES:
            log.debug("ignoring unknown setting %r in %s", k, path)
            continue
        if v is not None:
            known[k] = v
    return validate_config(PublishConfig(**known), path)
