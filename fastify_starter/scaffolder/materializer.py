"""Template materialisation: copy the packaged template into a new project."""

from __future__ import annotations

import shutil
from pathlib import Path

from .patterns import PatternMatcher

EXPECTED_TEMPLATE_ENTRIES: tuple[str, ...] = ("package.json", "apps", "packages")
DATA_DIR = "data"
PLACEHOLDER_NAME = ".gitkeep"


def check_template_structure(source_root: Path) -> None:
    """Raise ``FileNotFoundError`` unless *source_root* looks like the monorepo template."""
    missing = [name for name in EXPECTED_TEMPLATE_ENTRIES if not (source_root / name).exists()]
    if missing:
        raise FileNotFoundError(
            f"Template source does not contain expected project structure at: {source_root} "
            f"(missing {', '.join(missing)})"
        )


def _copy_tree(
    source: Path,
    dest: Path,
    matcher: PatternMatcher,
    copied: list[Path],
    base: str = "",
) -> None:
    for entry in sorted(source.iterdir(), key=lambda p: p.name):
        relative_path = f"{base}/{entry.name}" if base else entry.name
        if matcher.is_excluded(entry.name, relative_path):
            continue

        target = dest / entry.name
        if entry.is_dir():
            target.mkdir(parents=True, exist_ok=True)
            _copy_tree(entry, target, matcher, copied, relative_path)
        else:
            shutil.copyfile(entry, target)
            copied.append(target)


def materialize(
    source_root: str | Path,
    dest_root: str | Path,
    matcher: PatternMatcher | None = None,
) -> list[Path]:
    """Copy *source_root* into *dest_root*, skipping excluded entries.

    Excluded directories are skipped as a whole; nothing inside them is
    inspected.  Files are copied byte for byte without permission bits.

    Returns:
        Destination paths of every copied file.

    Raises:
        FileNotFoundError: If the source is not a monorepo template.
        OSError: On any other filesystem failure; partial output may remain.
    """
    source = Path(source_root)
    dest = Path(dest_root)
    check_template_structure(source)

    dest.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    _copy_tree(source, dest, matcher or PatternMatcher(), copied)
    return copied


def ensure_data_placeholder(project_root: str | Path) -> Path:
    """Make sure ``data/.gitkeep`` exists so the SQLite directory is tracked."""
    data_dir = Path(project_root) / DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    placeholder = data_dir / PLACEHOLDER_NAME
    if not placeholder.exists():
        placeholder.write_bytes(b"")
    return placeholder
