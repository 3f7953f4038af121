"""Answer generation: grounded prompt + chat completion (batch or streaming).

Pipeline:
  1. Retrieve the top-K chunks for the query.
  2. Build one prompt: instructions, ``[File: project/path]`` context blocks
     joined by ``---``, the literal question, and the answer language.
  3. Call the chat model once (batch) or stream its fragments to a callback.

Any failure in retrieval or generation is raised as AnswerError. An empty
retrieval result is not a failure: the model receives an empty context and
is expected to say it cannot find the answer.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from agentlab.db.models import SearchResult
from agentlab.db.repository import Repository
from agentlab.rag.llm_client import complete, stream
from agentlab.rag.retriever import RetrieverConfig, retrieve

CONTEXT_SEPARATOR = "\n\n---\n\n"

_PROMPT_TEMPLATE = """\
You are an AI Assistant for the "AI Agent Lab" project.
Answer the user's question based ONLY on the following context.
If the answer cannot be found in the context, say so politely.

Context:
{context}

User Question: {query}

Answer (in {language}, formatted in Markdown):"""


class AnswerError(RuntimeError):
    """Raised when retrieval or answer generation fails."""


@dataclass
class AnswerConfig:
    generation_model: str = "gemini/gemini-1.5-flash"
    language: str = "Korean"
    retriever: RetrieverConfig = field(default_factory=RetrieverConfig)


@dataclass
class RAGResponse:
    answer: str
    sources: list[SearchResult]
    query: str


def format_context(sources: list[SearchResult]) -> str:
    return CONTEXT_SEPARATOR.join(f"[File: {s.label}]\n{s.content}" for s in sources)


def build_prompt(query: str, sources: list[SearchResult], language: str = "Korean") -> str:
    """Return the grounded generation prompt for *query*."""
    return _PROMPT_TEMPLATE.format(
        context=format_context(sources),
        query=query,
        language=language,
    )


def generate_answer(query: str, repo: Repository, config: AnswerConfig) -> RAGResponse:
    """Retrieve context and generate the full answer in one call.

    Raises:
        AnswerError: If retrieval or generation fails.
    """
    try:
        sources = retrieve(query, repo, config.retriever)
        prompt = build_prompt(query, sources, config.language)
        answer = complete(config.generation_model, [{"role": "user", "content": prompt}])
    except Exception as exc:
        raise AnswerError(f"Answer generation failed: {exc}") from exc
    return RAGResponse(answer=answer, sources=sources, query=query)


def stream_answer(
    query: str,
    repo: Repository,
    config: AnswerConfig,
    on_text: Callable[[str], None],
) -> list[SearchResult]:
    """Retrieve context and stream the answer, fragment by fragment.

    *on_text* is called immediately for every fragment received. Returns the
    retrieved sources once the stream has completed.

    Raises:
        AnswerError: If retrieval or generation fails (including mid-stream).
    """
    try:
        sources = retrieve(query, repo, config.retriever)
        prompt = build_prompt(query, sources, config.language)
        for fragment in stream(config.generation_model, [{"role": "user", "content": prompt}]):
            on_text(fragment)
    except Exception as exc:
        raise AnswerError(f"Answer generation failed: {exc}") from exc
    return sources
