"""Domain models for the AgentLab database layer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field


@dataclass
class Project:
    id: str
    title: str
    category: str
    description: str = ""
    tech_stack: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)


@dataclass
class Document:
    project_id: str
    file_path: str
    chunk_index: int
    content: str
    language: str = ""
    metadata: str = field(default_factory=lambda: "{}")
    id: int | None = None  # set after insert; None for unsaved documents

    @property
    def metadata_dict(self) -> dict:
        return json.loads(self.metadata)


@dataclass
class SearchResult:
    """A document returned by nearest-neighbour search.

    Attributes:
        id: Document row id.
        project_id: Owning project id.
        file_path: File path relative to the scan root.
        content: Raw chunk text.
        distance: Cosine distance to the query (0 = identical, 2 = opposite).
    """

    id: int
    project_id: str
    file_path: str
    content: str
    distance: float

    @property
    def label(self) -> str:
        return f"{self.project_id}/{self.file_path}"

    @property
    def match_percentage(self) -> int:
        """Displayed similarity, clamped to 0..100 for distances above 1."""
        return max(0, min(100, round((1 - self.distance) * 100)))
