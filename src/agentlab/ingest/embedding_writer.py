"""Embedding generation for stored documents.

``EmbeddingGenerator`` sanitizes chunk text and calls the embedding model.
``EmbeddingBatch`` walks every document that has no embedding yet, one
request at a time with a fixed delay between provider calls, and tallies
processed / skipped / errored documents. One failing document never aborts
the batch; re-running picks up whatever is still unembedded.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from agentlab.db.models import Document
from agentlab.db.repository import Repository
from agentlab.rag.llm_client import embed

_MIN_LENGTH = 20
_MIN_WORD_CHARS = 10
_WORD_CHAR_RE = re.compile(r"[a-zA-Z0-9가-힣]")
_MAX_REPORTED_ERRORS = 5


class ContentSkipped(ValueError):
    """Raised when chunk text is too short or has too little text to embed."""


def sanitize_content(content: object) -> str | None:
    """Return trimmed *content* if it is worth embedding, else None.

    Rejects non-strings, text under 20 characters after trimming, and text
    with fewer than 10 alphanumeric or Hangul characters.
    """
    if not content or not isinstance(content, str):
        return None
    trimmed = content.strip()
    if len(trimmed) < _MIN_LENGTH:
        return None
    if len(_WORD_CHAR_RE.findall(trimmed)) < _MIN_WORD_CHARS:
        return None
    return trimmed


@dataclass
class EmbeddingConfig:
    """Configuration for embedding generation."""

    model: str = "gemini/text-embedding-004"
    dimensions: int = 768
    delay_seconds: float = 4.1


@dataclass
class EmbeddingReport:
    """Outcome of one embedding batch."""

    total: int = 0
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    error_messages: list[tuple[int, str]] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Percentage of documents embedded (0.0 for an empty batch)."""
        if self.total == 0:
            return 0.0
        return self.processed / self.total * 100

    def summary(self) -> str:
        return (
            f"Processed: {self.processed}  Skipped: {self.skipped}  "
            f"Errors: {self.errors}  Success rate: {self.success_rate:.1f}%"
        )


class EmbeddingGenerator:
    """Turn document text into an embedding vector via LiteLLM.

    Args:
        config: Embedding configuration (model, expected dimensions).
    """

    def __init__(self, config: EmbeddingConfig | None = None) -> None:
        self.config = config or EmbeddingConfig()

    def embed_document(self, content: str) -> list[float]:
        """Sanitize and embed *content*.

        Raises:
            ContentSkipped: If the content fails sanitization. No request is sent.
            ValueError: If the model returns an unexpected dimensionality.
        """
        sanitized = sanitize_content(content)
        if sanitized is None:
            raise ContentSkipped("Invalid content after sanitization")
        vector = embed(self.config.model, sanitized)
        if self.config.dimensions and len(vector) != self.config.dimensions:
            raise ValueError(
                f"Model '{self.config.model}' returned {len(vector)} dimensions, "
                f"expected {self.config.dimensions}"
            )
        return vector


class EmbeddingBatch:
    """Embed every document that lacks an embedding, sequentially.

    Args:
        repo: Open Repository instance.
        generator: EmbeddingGenerator used for each document.
        delay_seconds: Pause after each provider call (rate limiting).
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        repo: Repository,
        generator: EmbeddingGenerator,
        delay_seconds: float | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._repo = repo
        self._generator = generator
        self._delay = generator.config.delay_seconds if delay_seconds is None else delay_seconds
        self._sleep = sleep

    def pending(self, limit: int | None = None) -> list[Document]:
        return self._repo.list_unembedded_documents(limit=limit)

    def run(
        self,
        limit: int | None = None,
        on_progress: Callable[[int, EmbeddingReport], None] | None = None,
    ) -> EmbeddingReport:
        """Embed pending documents and return the aggregate report."""
        documents = self.pending(limit)
        report = EmbeddingReport(total=len(documents))

        for idx, doc in enumerate(documents):
            called_provider = True
            try:
                vector = self._generator.embed_document(doc.content)
                self._repo.add_embedding(doc.id, vector)
                report.processed += 1
            except ContentSkipped:
                report.skipped += 1
                called_provider = False
            except Exception as exc:
                report.errors += 1
                if len(report.error_messages) < _MAX_REPORTED_ERRORS:
                    report.error_messages.append((doc.id, str(exc)[:80]))

            if on_progress is not None:
                on_progress(idx, report)

            is_last = idx == len(documents) - 1
            if called_provider and not is_last and self._delay > 0:
                self._sleep(self._delay)

        return report
