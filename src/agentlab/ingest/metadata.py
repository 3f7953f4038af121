"""Project metadata from the ``NN_Project-Name`` folder convention."""

from __future__ import annotations

import re
from collections.abc import Mapping

from agentlab.db.models import Project

PROJECT_DIR_RE = re.compile(r"^(\d{2})_(.*)$")

DEFAULT_TECH_STACK = ["Python", "AI", "LangGraph"]

# (keywords, category), checked in order against the lower-cased title.
_CATEGORY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("blockchain", "web3"), "Blockchain"),
    (("3d", "three"), "3D"),
]
_DEFAULT_CATEGORY = "AI"

# (keyword, tag) pairs matched against the lower-cased README.
TECH_STACK_KEYWORDS: list[tuple[str, str]] = [
    ("crewai", "CrewAI"),
    ("langgraph", "LangGraph"),
    ("gemini", "Gemini"),
    ("autogen", "AutoGen"),
    ("google adk", "Google ADK"),
    ("google-genai", "Google ADK"),
    ("fastapi", "FastAPI"),
    ("streamlit", "Streamlit"),
    ("python", "Python"),
    ("openai", "OpenAI"),
    ("zod", "Zod"),
    ("tutorial", "Tutorial"),
]
FALLBACK_TECH_STACK = ["Python"]


def infer_tech_stack(readme: str) -> list[str]:
    """Return de-duplicated tags whose keyword occurs in *readme*.

    Falls back to ``["Python"]`` when nothing matches.
    """
    lowered = readme.lower()
    tags: list[str] = []
    for keyword, tag in TECH_STACK_KEYWORDS:
        if keyword in lowered and tag not in tags:
            tags.append(tag)
    return tags or list(FALLBACK_TECH_STACK)


def is_project_dir(name: str) -> bool:
    return PROJECT_DIR_RE.match(name) is not None


def title_from_dir(name: str) -> str:
    """``"05_Deep-Research_team"`` → ``"Deep Research Team"``."""
    match = PROJECT_DIR_RE.match(name)
    if match is None:
        raise ValueError(f"Not a project folder name (expected 'NN_name'): {name!r}")
    words = re.split(r"[\s_\-]+", match.group(2).strip(" _-"))
    return " ".join(w[:1].upper() + w[1:] for w in words if w)


def project_id_from_dir(name: str) -> str:
    match = PROJECT_DIR_RE.match(name)
    if match is None:
        raise ValueError(f"Not a project folder name (expected 'NN_name'): {name!r}")
    return match.group(1)


def categorize(title: str) -> str:
    lowered = title.lower()
    for keywords, category in _CATEGORY_RULES:
        if any(k in lowered for k in keywords):
            return category
    return _DEFAULT_CATEGORY


def extract_project_metadata(
    dir_name: str,
    descriptions: Mapping[str, str] | None = None,
    tech_stack: list[str] | None = None,
) -> Project:
    """Derive a Project record from a project folder name.

    Args:
        dir_name: Folder name such as ``"05_Deep-Research-Team"``.
        descriptions: Optional ``{id: description}`` table; projects missing
            from it get ``"AI Agent project: <title>"``.
        tech_stack: Tags inferred by the caller (e.g. from the README);
            defaults to ``DEFAULT_TECH_STACK``.

    Raises:
        ValueError: If *dir_name* does not follow the ``NN_`` convention.
    """
    project_id = project_id_from_dir(dir_name)
    title = title_from_dir(dir_name)
    table = descriptions or {}
    return Project(
        id=project_id,
        title=title,
        category=categorize(title),
        description=table.get(project_id, f"AI Agent project: {title}"),
        tech_stack=list(tech_stack) if tech_stack else list(DEFAULT_TECH_STACK),
        keywords=title.lower().split(),
    )
