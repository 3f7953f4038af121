"""Directory scanner — numbered project folders and their source files."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from agentlab.ingest.metadata import is_project_dir

DEFAULT_ALLOWED_EXTENSIONS = (".py", ".md", ".ipynb", ".txt", ".js", ".ts")
DEFAULT_EXCLUDED_DIRS = (
    "node_modules", ".git", "__pycache__", "venv", ".venv", "dist", "build",
)
NOTEBOOK_CELL_SEPARATOR = "\n\n# ---\n\n"


@dataclass
class SourceFile:
    """A file selected for ingestion.

    Attributes:
        path: Absolute (or root-joined) path on disk.
        relative_path: POSIX path relative to the scan root.
        extension: Lower-cased suffix including the dot.
    """

    path: Path
    relative_path: str
    extension: str

    @property
    def language(self) -> str:
        return self.extension.lstrip(".")


def find_project_dirs(root: Path) -> list[Path]:
    """Return the ``NN_*`` folders directly under *root*, sorted by name."""
    return sorted(
        entry for entry in root.iterdir() if entry.is_dir() and is_project_dir(entry.name)
    )


def scan_directory(
    directory: Path,
    root: Path,
    allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
    excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> list[SourceFile]:
    """Recursively collect allowed files under *directory* in sorted order.

    Directories named in *excluded_dirs* are not entered; unreadable
    directories are skipped.
    """
    allowed = {ext.lower() for ext in allowed_extensions}
    excluded = set(excluded_dirs)
    return _walk(directory, root, allowed, excluded)


def _walk(directory: Path, root: Path, allowed: set[str], excluded: set[str]) -> list[SourceFile]:
    files: list[SourceFile] = []
    try:
        entries = sorted(directory.iterdir())
    except PermissionError:
        return []
    for entry in entries:
        if entry.is_dir():
            if entry.name not in excluded:
                files.extend(_walk(entry, root, allowed, excluded))
        elif entry.is_file() and entry.suffix.lower() in allowed:
            files.append(
                SourceFile(
                    path=entry,
                    relative_path=entry.relative_to(root).as_posix(),
                    extension=entry.suffix.lower(),
                )
            )
    return files


def flatten_notebook(raw: str) -> str:
    """Join the code cells of a Jupyter notebook with a separator comment.

    Returns *raw* unchanged if it is not valid notebook JSON.
    """
    try:
        notebook = json.loads(raw)
        cells = notebook["cells"]
    except (ValueError, KeyError, TypeError):
        return raw
    segments = []
    for cell in cells:
        if not isinstance(cell, dict) or cell.get("cell_type") != "code":
            continue
        source = cell.get("source", "")
        segments.append("".join(source) if isinstance(source, list) else str(source))
    return NOTEBOOK_CELL_SEPARATOR.join(segments)


def read_source_text(path: Path) -> str:
    """Read a source file as text; notebooks are flattened to their code cells."""
    content = path.read_text(encoding="utf-8", errors="replace")
    if path.suffix.lower() == ".ipynb":
        return flatten_notebook(content)
    return content
