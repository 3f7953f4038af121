"""Project ingestion — scan folders, chunk files, persist documents.

For every ``NN_*`` project folder under the root:
  1. Upsert the project record (metadata from the folder name + README).
  2. Chunk every allowed file with the line chunker.
  3. Store one document row per chunk. Files whose stored chunks already
     match are left untouched; changed files are replaced (their old
     embeddings go with them).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from agentlab.db.models import Project
from agentlab.db.repository import Repository
from agentlab.ingest.chunker import LineChunker
from agentlab.ingest.metadata import extract_project_metadata, infer_tech_stack
from agentlab.ingest.scanner import (
    DEFAULT_ALLOWED_EXTENSIONS,
    DEFAULT_EXCLUDED_DIRS,
    SourceFile,
    find_project_dirs,
    read_source_text,
    scan_directory,
)


@dataclass
class IngestReport:
    """Counts for one ingestion run."""

    projects: int = 0
    files: int = 0
    chunks: int = 0
    unchanged_files: int = 0
    failed_files: list[tuple[str, str]] = field(default_factory=list)


class ProjectIngestor:
    """Write projects and their chunked files into the knowledge base.

    Args:
        repo: Open Repository instance.
        chunker: LineChunker used for every file.
        descriptions: ``{project_id: description}`` overrides.
        allowed_extensions: File suffixes to ingest.
        excluded_dirs: Directory names never entered.
    """

    def __init__(
        self,
        repo: Repository,
        chunker: LineChunker | None = None,
        descriptions: Mapping[str, str] | None = None,
        allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS,
        excluded_dirs: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
    ) -> None:
        self._repo = repo
        self._chunker = chunker or LineChunker()
        self._descriptions = dict(descriptions or {})
        self._allowed = tuple(allowed_extensions)
        self._excluded = tuple(excluded_dirs)

    def ingest(
        self,
        root: Path,
        on_project: Callable[[Project, int], None] | None = None,
    ) -> IngestReport:
        """Ingest every project folder under *root*.

        Args:
            root: Directory holding the ``NN_*`` project folders. Stored file
                paths are relative to it.
            on_project: Called with (project, file_count) after each project.
        """
        report = IngestReport()
        for project_dir in find_project_dirs(root):
            project, file_count = self.ingest_project(root, project_dir, report)
            if on_project is not None:
                on_project(project, file_count)
        return report

    def ingest_project(
        self, root: Path, project_dir: Path, report: IngestReport
    ) -> tuple[Project, int]:
        """Upsert one project and store its files. Returns (project, file count)."""
        project = extract_project_metadata(
            project_dir.name,
            descriptions=self._descriptions,
            tech_stack=_readme_tech_stack(project_dir),
        )
        self._repo.upsert_project(project)
        report.projects += 1

        files = scan_directory(project_dir, root, self._allowed, self._excluded)
        for source_file in files:
            self._store_file(project.id, source_file, report)
        report.files += len(files)
        return project, len(files)

    def _store_file(self, project_id: str, source_file: SourceFile, report: IngestReport) -> None:
        try:
            content = read_source_text(source_file.path)
        except OSError as exc:
            report.failed_files.append((source_file.relative_path, str(exc)))
            return

        documents = self._chunker.chunk(
            project_id, source_file.relative_path, content, language=source_file.language
        )
        stored = self._repo.list_file_documents(project_id, source_file.relative_path)
        if stored and [d.content for d in stored] == [d.content for d in documents]:
            report.unchanged_files += 1
            return
        if stored:
            self._repo.delete_file_documents(project_id, source_file.relative_path)

        for document in documents:
            self._repo.add_document(document)
        report.chunks += len(documents)


def _readme_tech_stack(project_dir: Path) -> list[str] | None:
    readme = project_dir / "README.md"
    if not readme.is_file():
        return None
    return infer_tech_stack(readme.read_text(encoding="utf-8", errors="replace"))
