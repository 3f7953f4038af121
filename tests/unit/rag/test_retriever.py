"""Tests for the dense retriever."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from agentlab.db.models import Document, Project
from agentlab.db.repository import Repository
from agentlab.rag.retriever import RetrieverConfig, retrieve


@pytest.fixture
def repo(tmp_db):
    r = Repository(tmp_db)
    r.upsert_project(Project(id="02", title="News Reader", category="AI"))
    vectors = {
        "crawler.py": [1.0, 0.0, 0.0],
        "summarizer.py": [0.8, 0.6, 0.0],
        "README.md": [0.0, 1.0, 0.0],
        "ui.py": [-0.6, 0.0, 0.8],
    }
    for i, (path, vector) in enumerate(vectors.items()):
        doc_id = r.add_document(
            Document(project_id="02", file_path=f"02_News/{path}", chunk_index=i, content=path)
        )
        r.add_embedding(doc_id, vector)
    return r


def test_retriever_config_defaults():
    cfg = RetrieverConfig()
    assert cfg.embedding_model == "gemini/text-embedding-004"
    assert cfg.top_k == 5
    assert cfg.citation_k == 3


def test_retrieve_orders_by_distance(repo):
    with patch("agentlab.rag.retriever.embed", return_value=[1.0, 0.0, 0.0]) as mock_embed:
        results = retrieve("how are articles collected?", repo, RetrieverConfig())

    mock_embed.assert_called_once_with("gemini/text-embedding-004", "how are articles collected?")
    assert [r.content for r in results] == ["crawler.py", "summarizer.py", "README.md", "ui.py"]
    assert results[0].match_percentage == 100
    assert results[1].match_percentage == 80


def test_retrieve_truncates_to_top_k(repo):
    with patch("agentlab.rag.retriever.embed", return_value=[0.0, 1.0, 0.0]):
        results = retrieve("readme", repo, RetrieverConfig(top_k=2))
    assert [r.content for r in results] == ["README.md", "summarizer.py"]


def test_retrieve_explicit_top_k_overrides_config(repo):
    with patch("agentlab.rag.retriever.embed", return_value=[0.0, 0.0, 1.0]):
        results = retrieve("ui", repo, RetrieverConfig(top_k=5), top_k=1)
    assert [r.file_path for r in results] == ["02_News/ui.py"]


def test_retrieve_zero_limit_skips_embedding(repo):
    with patch("agentlab.rag.retriever.embed") as mock_embed:
        assert retrieve("anything", repo, RetrieverConfig(), top_k=0) == []
    mock_embed.assert_not_called()


def test_retrieve_dimension_mismatch(repo):
    with patch("agentlab.rag.retriever.embed", return_value=[1.0, 0.0]):
        with pytest.raises(ValueError, match="dimensionality"):
            retrieve("q", repo, RetrieverConfig())


def test_retrieve_empty_store(tmp_db):
    with patch("agentlab.rag.retriever.embed", return_value=[1.0, 0.0, 0.0]):
        assert retrieve("q", Repository(tmp_db), RetrieverConfig()) == []
