"""AgentLab ingest pipeline — scanner, chunker, metadata, embeddings, manifest."""

from agentlab.ingest.chunker import LineChunker
from agentlab.ingest.embedding_writer import (
    ContentSkipped,
    EmbeddingBatch,
    EmbeddingConfig,
    EmbeddingGenerator,
    EmbeddingReport,
    sanitize_content,
)
from agentlab.ingest.metadata import extract_project_metadata, infer_tech_stack
from agentlab.ingest.projects import IngestReport, ProjectIngestor

__all__ = [
    "ContentSkipped",
    "EmbeddingBatch",
    "EmbeddingConfig",
    "EmbeddingGenerator",
    "EmbeddingReport",
    "IngestReport",
    "LineChunker",
    "ProjectIngestor",
    "extract_project_metadata",
    "infer_tech_stack",
    "sanitize_content",
]
