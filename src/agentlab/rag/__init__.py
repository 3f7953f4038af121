"""AgentLab RAG — retriever, prompt assembly, answer generation."""

from agentlab.rag.answer import (
    AnswerConfig,
    AnswerError,
    RAGResponse,
    build_prompt,
    generate_answer,
    stream_answer,
)
from agentlab.rag.retriever import RetrieverConfig, retrieve

__all__ = [
    "AnswerConfig",
    "AnswerError",
    "RAGResponse",
    "RetrieverConfig",
    "build_prompt",
    "generate_answer",
    "retrieve",
    "stream_answer",
]
