"""Tests for the project manifest builder."""

from __future__ import annotations

import json
from pathlib import Path

from agentlab.ingest.manifest import (
    DEFAULT_DESCRIPTIONS,
    NO_DESCRIPTION,
    build_manifest,
    build_project,
    write_manifest,
)


def _project(root: Path, name: str = "12_LangGraph-Tutorial") -> Path:
    project = root / name
    (project / "output").mkdir(parents=True)
    (project / "README.md").write_text("A LangGraph tutorial in Python.", encoding="utf-8")
    (project / "helpers.py").write_text("def helper(): ...", encoding="utf-8")
    (project / "main.ipynb").write_text(
        json.dumps({"cells": [{"cell_type": "code", "source": ["graph.invoke({})"]}]}),
        encoding="utf-8",
    )
    (project / "diagram.PNG").write_bytes(b"png")
    (project / "output" / "result.jpg").write_bytes(b"jpg")
    (project / "notes.txt").write_text("not code", encoding="utf-8")
    return project


def test_build_project_fields(tmp_path):
    record = build_project(_project(tmp_path))

    assert record.id == "12"
    assert record.title == "LangGraph Tutorial"
    assert record.description == DEFAULT_DESCRIPTIONS["12"]
    assert record.directory == "12_LangGraph-Tutorial"
    assert record.readme_path == "12_LangGraph-Tutorial/README.md"
    assert record.main_code_path == "12_LangGraph-Tutorial/main.ipynb"
    assert record.readme.startswith("A LangGraph tutorial")
    assert record.codes == {"helpers.py": "def helper(): ...", "main.ipynb": "graph.invoke({})"}
    assert record.assets == [
        "assets/12_LangGraph-Tutorial/diagram.PNG",
        "assets/12_LangGraph-Tutorial/result.jpg",
    ]
    assert record.tech_stack == ["LangGraph", "Python", "Tutorial"]


def test_build_project_without_readme_or_main(tmp_path):
    project = tmp_path / "31_Bare"
    project.mkdir()
    (project / "agent.py").write_text("pass", encoding="utf-8")

    record = build_project(project)
    assert record.description == NO_DESCRIPTION
    assert record.readme == ""
    assert record.main_code_path == "31_Bare/agent.py"
    assert record.tech_stack == ["Python"]


def test_build_project_defaults_main_path_when_no_code(tmp_path):
    project = tmp_path / "32_Empty"
    project.mkdir()
    assert build_project(project).main_code_path == "32_Empty/main.py"


def test_build_project_copies_assets(tmp_path):
    assets_dir = tmp_path / "public" / "assets"
    build_project(_project(tmp_path / "src_root"), assets_dir=assets_dir)
    assert (assets_dir / "12_LangGraph-Tutorial" / "diagram.PNG").read_bytes() == b"png"
    assert (assets_dir / "12_LangGraph-Tutorial" / "result.jpg").read_bytes() == b"jpg"


def test_build_manifest_and_write(tmp_path):
    root = tmp_path / "projects"
    _project(root, "12_LangGraph-Tutorial")
    _project(root, "03_Job-Hunter")
    (root / "misc").mkdir()

    projects = build_manifest(root, descriptions={"03": "Job helper"})
    assert [p.id for p in projects] == ["03", "12"]
    assert projects[0].description == "Job helper"
    assert projects[1].description == NO_DESCRIPTION

    output = write_manifest(projects, tmp_path / "out" / "generated-projects.json")
    data = json.loads(output.read_text(encoding="utf-8"))
    assert [d["id"] for d in data] == ["03", "12"]
    assert set(data[0]) == {
        "id", "title", "description", "directory", "readmePath",
        "mainCodePath", "readme", "codes", "assets", "techStack",
    }


def test_write_manifest_keeps_korean_text(tmp_path):
    projects = build_manifest(tmp_path)
    assert projects == []
    record = build_project(_project(tmp_path))
    output = write_manifest([record], tmp_path / "m.json")
    assert DEFAULT_DESCRIPTIONS["12"] in output.read_text(encoding="utf-8")
