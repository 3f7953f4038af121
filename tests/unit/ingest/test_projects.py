"""Tests for ProjectIngestor."""

from __future__ import annotations

from pathlib import Path

import pytest

from agentlab.db.repository import Repository
from agentlab.ingest.chunker import LineChunker
from agentlab.ingest.projects import ProjectIngestor


@pytest.fixture
def repo(tmp_db):
    return Repository(tmp_db)


def _thousand_words() -> str:
    return "\n".join(" ".join(f"word{i}{j}" for j in range(10)) for i in range(100))


def _make_root(root: Path) -> Path:
    team = root / "05_Deep-Research-Team"
    team.mkdir()
    (team / "README.md").write_text("An AutoGen team powered by Gemini.", encoding="utf-8")
    (team / "main.py").write_text(_thousand_words(), encoding="utf-8")
    (team / "__pycache__").mkdir()
    (team / "__pycache__" / "cache.py").write_text("cached = True", encoding="utf-8")
    news = root / "02_news_reader"
    news.mkdir()
    (news / "app.py").write_text("print('news')", encoding="utf-8")
    (root / "scratch").mkdir()
    return root


def test_ingest_stores_projects_and_chunks(tmp_path, repo):
    _make_root(tmp_path)
    report = ProjectIngestor(repo).ingest(tmp_path)

    assert report.projects == 2
    assert report.files == 3
    assert [p.id for p in repo.list_projects()] == ["02", "05"]

    docs = repo.list_file_documents("05", "05_Deep-Research-Team/main.py")
    assert len(docs) >= 2
    assert [d.chunk_index for d in docs] == list(range(len(docs)))
    assert "\n".join(d.content for d in docs) == _thousand_words()
    assert report.chunks == repo.count_documents()


def test_ingest_project_metadata_from_folder_and_readme(tmp_path, repo):
    _make_root(tmp_path)
    ProjectIngestor(repo, descriptions={"02": "News crew"}).ingest(tmp_path)

    team = repo.get_project("05")
    assert team.title == "Deep Research Team"
    assert team.tech_stack == ["Gemini", "AutoGen"]
    assert team.description == "AI Agent project: Deep Research Team"

    news = repo.get_project("02")
    assert news.title == "News Reader"
    assert news.description == "News crew"
    assert news.tech_stack == ["Python", "AI", "LangGraph"]


def test_ingest_skips_excluded_dirs(tmp_path, repo):
    _make_root(tmp_path)
    ProjectIngestor(repo).ingest(tmp_path)
    assert repo.list_file_documents("05", "05_Deep-Research-Team/__pycache__/cache.py") == []


def test_rerun_leaves_unchanged_files_and_embeddings(tmp_path, repo):
    _make_root(tmp_path)
    ProjectIngestor(repo).ingest(tmp_path)
    app = repo.list_file_documents("02", "02_news_reader/app.py")[0]
    repo.add_embedding(app.id, [0.1, 0.2, 0.3])
    before = repo.count_documents()

    report = ProjectIngestor(repo).ingest(tmp_path)

    assert report.unchanged_files == 3
    assert report.chunks == 0
    assert repo.count_documents() == before
    assert repo.count_embeddings() == 1


def test_changed_file_is_replaced(tmp_path, repo):
    _make_root(tmp_path)
    ProjectIngestor(repo).ingest(tmp_path)
    app = repo.list_file_documents("02", "02_news_reader/app.py")[0]
    repo.add_embedding(app.id, [0.1, 0.2, 0.3])

    (tmp_path / "02_news_reader" / "app.py").write_text("print('breaking news')", encoding="utf-8")
    report = ProjectIngestor(repo).ingest(tmp_path)

    docs = repo.list_file_documents("02", "02_news_reader/app.py")
    assert [d.content for d in docs] == ["print('breaking news')"]
    assert report.chunks == 1
    assert repo.count_embeddings() == 0


def test_on_project_callback(tmp_path, repo):
    _make_root(tmp_path)
    seen: list[tuple[str, int]] = []
    ProjectIngestor(repo, chunker=LineChunker(max_tokens=50)).ingest(
        tmp_path, on_project=lambda p, n: seen.append((p.id, n))
    )
    assert seen == [("02", 1), ("05", 2)]


def test_empty_root(tmp_path, repo):
    report = ProjectIngestor(repo).ingest(tmp_path)
    assert report.projects == 0
    assert repo.count_documents() == 0
