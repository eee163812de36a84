from __future__ import annotations

import sys
from pathlib import Path

import pytest
from PIL import Image

# Make the package importable without installing it.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

WORDS = (
    "river lantern quiet harbor morning stone letter window orchard silver "
    "bridge shadow garden violin thunder meadow candle winter ribbon forest"
).split()


def prose(n_words: int, seed: int = 0) -> str:
    """Deterministic filler prose; sentences of ten words."""
    out = []
    for i in range(n_words):
        w = WORDS[(i * 7 + seed) % len(WORDS)]
        if i % 10 == 0:
            w = w.capitalize()
        out.append(w + ("." if i % 10 == 9 else ""))
    return " ".join(out)


def chapter_manuscript(titles: list[str], paragraphs: int = 3, words: int = 40) -> str:
    blocks = []
    for n, title in enumerate(titles, start=1):
        paras = "\n\n".join(prose(words, seed=n + p) for p in range(paragraphs))
        blocks.append(f"Chapter {n}: {title}\n\n{paras}")
    return "\n\n".join(blocks) + "\n"


@pytest.fixture
def short_manuscript() -> str:
    return chapter_manuscript(["Arrival", "The Ford", "Departure"])


@pytest.fixture
def long_manuscript() -> str:
    return chapter_manuscript(["Arrival", "The Ford", "Departure"], paragraphs=40, words=80)


def write_metadata(project: Path, **fields: str) -> None:
    meta = project / "metadata"
    meta.mkdir(parents=True, exist_ok=True)
    defaults = {"_title.txt": "The Quiet River", "_author.txt": "Ada Lane"}
    defaults.update(fields)
    for name, value in defaults.items():
        (meta / name).write_text(value, encoding="utf-8")


@pytest.fixture
def make_project(tmp_path: Path):
    """Factory: a project folder inside a collection folder, with a small cover.jpg."""

    def _make(manuscript: str, name: str = "quiet-river", *, cover: bool = True, **meta: str) -> Path:
        project = tmp_path / "collection" / name
        project.mkdir(parents=True)
        (project / "manuscript.txt").write_text(manuscript, encoding="utf-8")
        write_metadata(project, **meta)
        if cover:
            Image.new("RGB", (60, 90), (200, 30, 30)).save(project / "cover.jpg", "JPEG")
        return project

    return _make


@pytest.fixture
def solid_image():
    def _make(color=(255, 0, 0), size=(60, 90)) -> Image.Image:
        return Image.new("RGB", size, color)

    return _make
