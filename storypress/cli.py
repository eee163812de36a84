#!/usr/bin/env python3
"""
Command-line front end.

  storypress publish books/my-novel
  storypress unpublish books/my-novel
  storypress dimensions 240 --paper cream
  storypress sync books/
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .cover import INK_TYPES, PAPER_TYPES, compute_dimensions, format_report
from .errors import StorypressError
from .publish import PublishResult, publish_project, unpublish_project

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(verbose: int = 0) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def _discover_projects(collection: Path) -> list[Path]:
    if not collection.is_dir():
        return []
    projects: list[Path] = []
    for p in sorted(collection.iterdir()):
        if not p.is_dir() or p.name.startswith("."):
            continue
        if (p / "manuscript.txt").is_file() and (p / "metadata").is_dir():
            projects.append(p)
    return projects


def _print_result(result: PublishResult, root: Path) -> None:
    def rel(p: Path) -> str:
        return os.path.relpath(p, root)

    print(
        f"Published {result.project_id}: {result.chapter_count} chapters, "
        f"{result.word_count} words, {result.page_count} pages"
    )
    print(f"  ✓ HTML  → {rel(result.html_path)}")
    print(f"  ✓ EPUB  → {rel(result.epub_path)}")
    print(f"  ✓ PDF   → {rel(result.pdf_path)}")
    if result.cover_path is not None:
        print(f"  ✓ Cover → {rel(result.cover_path)}")
    print(f"  ✓ Index → {rel(result.index_path)}")
    if result.dimensions is not None:
        print(format_report(result.dimensions))
    for notice in result.notices:
        print(f"  note: {notice}")


def _optional_path(value: str | None) -> Path | None:
    return Path(value).resolve() if value else None


def positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return n


def cmd_publish(args: argparse.Namespace) -> int:
    project = Path(args.project).resolve()
    if not project.is_dir():
        print(f"Project folder not found: {project}", file=sys.stderr)
        return 2
    result = publish_project(
        project,
        collection_dir=_optional_path(args.collection),
        manuscript_name=args.manuscript,
        front_cover=_optional_path(args.front_cover),
        author_photo=_optional_path(args.author_photo),
        paper_type=args.paper,
        ink_type=args.ink,
        sample_chapters=args.sample,
        make_cover=False if args.no_cover else None,
    )
    _print_result(result, Path.cwd())
    return 0


def cmd_unpublish(args: argparse.Namespace) -> int:
    project = Path(args.project).resolve()
    index = unpublish_project(project, collection_dir=_optional_path(args.collection))
    print(f"Unpublished {project.name} from {os.path.relpath(index, Path.cwd())}")
    return 0


def cmd_dimensions(args: argparse.Namespace) -> int:
    dims = compute_dimensions(args.pages, args.paper or "white", args.ink or "bw")
    print(format_report(dims))
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    collection = Path(args.collection).resolve()
    projects = _discover_projects(collection)
    if not projects:
        print(f"No projects with manuscript.txt and metadata/ under {collection}", file=sys.stderr)
        return 2
    for project in projects:
        result = publish_project(project, collection_dir=collection, make_cover=False if args.no_cover else None)
        _print_result(result, Path.cwd())
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="storypress", description=__doc__.strip().splitlines()[0])
    ap.add_argument("-v", "--verbose", action="count", default=0, help="-v for progress, -vv for debug")
    sub = ap.add_subparsers(dest="command", required=True)

    def paper_ink(p: argparse.ArgumentParser) -> None:
        p.add_argument("--paper", choices=PAPER_TYPES, help="Interior paper (default: book.yaml or white)")
        p.add_argument("--ink", choices=INK_TYPES, help="Interior ink (default: book.yaml or bw)")

    p = sub.add_parser("publish", help="Build HTML, EPUB, PDF and cover for one project")
    p.add_argument("project", help="Project folder holding manuscript.txt and metadata/")
    p.add_argument("--collection", help="Folder whose index.html lists the books (default: project's parent)")
    p.add_argument("--manuscript", help="Manuscript file name inside the project (default: manuscript.txt)")
    p.add_argument("--front-cover", help="Front cover image (default: project cover.jpg, else generated)")
    p.add_argument("--author-photo", help="Author photo for the back cover")
    p.add_argument("--sample", type=positive_int, help="Only put the first N chapters in the HTML page")
    p.add_argument("--no-cover", action="store_true", help="Skip the paperback cover")
    paper_ink(p)
    p.set_defaults(func=cmd_publish)

    p = sub.add_parser("unpublish", help="Remove a project's entry from the collection index")
    p.add_argument("project")
    p.add_argument("--collection", help="Folder holding index.html (default: project's parent)")
    p.set_defaults(func=cmd_unpublish)

    p = sub.add_parser("dimensions", help="Print paperback cover dimensions for a page count")
    p.add_argument("pages", type=int)
    paper_ink(p)
    p.set_defaults(func=cmd_dimensions)

    p = sub.add_parser("sync", help="Publish every project folder in a collection")
    p.add_argument("collection")
    p.add_argument("--no-cover", action="store_true", help="Skip paperback covers")
    p.set_defaults(func=cmd_sync)
    return ap


def main(argv: list[str]) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except StorypressError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
