"""Project manifest builder — the dashboard's ``generated-projects.json``.

Each record carries the project's README, its top-level source files
(notebooks flattened to code cells), discovered image assets and tech-stack
tags inferred from the README.
"""

from __future__ import annotations

import json
import re
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from agentlab.ingest.metadata import infer_tech_stack, project_id_from_dir, title_from_dir
from agentlab.ingest.scanner import find_project_dirs, read_source_text

NO_DESCRIPTION = "No description available."

DEFAULT_DESCRIPTIONS: dict[str, str] = {
    "01": "AI 에이전트 개발의 시작을 위한 스타터 프로젝트",
    "02": "CrewAI를 활용한 지능형 뉴스 수집 및 보고 시스템",
    "03": "채용 공고 분석 및 이력서 최적화 지원 에이전트",
    "04": "자동화된 콘텐츠 생성 및 배포 파이프라인",
    "05": "AutoGen 기반의 심층 웹 리서치 멀티 에이전트 팀",
    "06": "다기능 도구를 갖춘 Streamlit 기반 AI 비서",
    "07": "메모리와 가드레일이 포함된 고객 지원 워크플로우",
    "08": "주식 및 재무 데이터 분석 투자 조문 에이전트",
    "09": "자동 대본 작성부터 영상 편집까지 수행하는 에이전트",
    "10": "이메일 커뮤니케이션 최적화 에이전트",
    "11": "맞춤형 여행 일정 및 정보 제공 어드바이저",
    "12": "LangGraph 핵심 기능(State, Routing, Caching 등) 학습 튜토리얼",
    "13": "Human-in-the-loop 기능이 포함된 시 작성 봇",
    "14": "비디오 분석을 통한 자동 썸네일 생성기",
    "15": "고급 에이전트 워크플로우 아키텍처 패턴",
    "16": "워크플로우 테스트 및 품질 검증 에이전트",
    "17": "멀티 에이전트 협업 구조 구현 예제",
    "18": "개인화 학습 경험을 제공하는 AI 튜터",
    "19": "에이전트 간 직접 통신 아키텍처 데모",
    "20": "FastAPI 기반 에이전트 배포 서버",
}

_CODE_EXTS = (".py", ".ipynb")
_MAIN_CANDIDATES = ("main.py", "main.ipynb", "app.py")
_ASSET_DIRS = (".", "output", "assets", "images")
_IMAGE_RE = re.compile(r"\.(png|jpg|jpeg|gif|webp)$", re.IGNORECASE)


@dataclass
class ProjectManifest:
    id: str
    title: str
    description: str
    directory: str
    readme_path: str
    main_code_path: str
    readme: str = ""
    codes: dict[str, str] = field(default_factory=dict)
    assets: list[str] = field(default_factory=list)
    tech_stack: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "directory": self.directory,
            "readmePath": self.readme_path,
            "mainCodePath": self.main_code_path,
            "readme": self.readme,
            "codes": self.codes,
            "assets": self.assets,
            "techStack": self.tech_stack,
        }


def build_project(
    project_dir: Path,
    descriptions: Mapping[str, str] | None = None,
    assets_dir: Path | None = None,
) -> ProjectManifest:
    """Build the manifest record for one project folder.

    Args:
        project_dir: A ``NN_*`` folder.
        descriptions: ``{id: description}`` table; defaults to DEFAULT_DESCRIPTIONS.
        assets_dir: If given, discovered images are copied to
            ``assets_dir/<folder>/<file>``.
    """
    table = DEFAULT_DESCRIPTIONS if descriptions is None else descriptions
    folder = project_dir.name
    project_id = project_id_from_dir(folder)

    readme_file = project_dir / "README.md"
    readme = (
        readme_file.read_text(encoding="utf-8", errors="replace") if readme_file.is_file() else ""
    )

    codes: dict[str, str] = {}
    main_code_path = ""
    for entry in sorted(project_dir.iterdir()):
        if not entry.is_file() or entry.suffix.lower() not in _CODE_EXTS:
            continue
        codes[entry.name] = read_source_text(entry)
        if not main_code_path and entry.name in _MAIN_CANDIDATES:
            main_code_path = f"{folder}/{entry.name}"
    if not main_code_path and codes:
        main_code_path = f"{folder}/{next(iter(codes))}"

    return ProjectManifest(
        id=project_id,
        title=title_from_dir(folder),
        description=table.get(project_id, NO_DESCRIPTION),
        directory=folder,
        readme_path=f"{folder}/README.md",
        main_code_path=main_code_path or f"{folder}/main.py",
        readme=readme,
        codes=codes,
        assets=_collect_assets(project_dir, assets_dir),
        tech_stack=infer_tech_stack(readme),
    )


def build_manifest(
    root: Path,
    descriptions: Mapping[str, str] | None = None,
    assets_dir: Path | None = None,
) -> list[ProjectManifest]:
    """Build manifest records for every project folder under *root*."""
    return [build_project(d, descriptions, assets_dir) for d in find_project_dirs(root)]


def write_manifest(projects: list[ProjectManifest], output: Path) -> Path:
    """Write *projects* as pretty-printed JSON to *output*."""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(
        json.dumps([p.to_dict() for p in projects], indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return output


def _collect_assets(project_dir: Path, assets_dir: Path | None) -> list[str]:
    folder = project_dir.name
    assets: list[str] = []
    for sub in _ASSET_DIRS:
        directory = project_dir / sub
        if not directory.is_dir():
            continue
        for entry in sorted(directory.iterdir()):
            if not entry.is_file() or not _IMAGE_RE.search(entry.name):
                continue
            if assets_dir is not None:
                target = assets_dir / folder / entry.name
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(entry, target)
            label = f"assets/{folder}/{entry.name}"
            if label not in assets:
                assets.append(label)
    return assets
