"""AgentLab configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (AGENTLAB_GENERATION_MODEL, AGENTLAB_EMBEDDING_MODEL)
  3. Per-project agentlab.yaml  (in the working directory)
  4. Global ~/.agentlab/config.yaml  (model defaults only — no API keys)
  5. Hardcoded defaults

Credentials (database URL, database auth token, Gemini API key) are read from
environment variables only. Missing credentials are reported, never fatal at
load time: the first call that needs them fails instead.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".agentlab"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "agentlab.yaml"

ENV_DATABASE_URL = "AGENTLAB_DATABASE_URL"
ENV_DATABASE_AUTH_TOKEN = "AGENTLAB_DATABASE_AUTH_TOKEN"
ENV_API_KEY = "GEMINI_API_KEY"

# Fields that suggest an API key — forbidden in global config.
# Does NOT match legitimate config keys like max_tokens or tick_ms.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["embedding", "generation", "retrieval", "chunker", "chat", "scan", "descriptions"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when configuration is invalid, forbidden, or unusable."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (agentlab.yaml: embedding:)."""

    model: str = "gemini/text-embedding-004"
    dimensions: int = 768
    delay_seconds: float = 4.1  # free tier: 15 requests/minute


@dataclass
class GenerationCfg:
    """Answer generation configuration (agentlab.yaml: generation:)."""

    model: str = "gemini/gemini-1.5-flash"
    language: str = "Korean"


@dataclass
class RetrievalCfg:
    """Retrieval configuration (agentlab.yaml: retrieval:)."""

    top_k: int = 5
    citation_k: int = 3


@dataclass
class ChunkerCfg:
    """Line chunker configuration (agentlab.yaml: chunker:)."""

    max_tokens: int = 400


@dataclass
class ChatCfg:
    """Chat view configuration (agentlab.yaml: chat:)."""

    tick_ms: int = 30


@dataclass
class ScanCfg:
    """Project folder scanning (agentlab.yaml: scan:)."""

    root: str = "."
    allowed_extensions: list[str] = field(
        default_factory=lambda: [".py", ".md", ".ipynb", ".txt", ".js", ".ts"]
    )
    excluded_dirs: list[str] = field(
        default_factory=lambda: [
            "node_modules", ".git", "__pycache__", "venv", ".venv", "dist", "build",
        ]
    )


@dataclass
class AgentLabConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunker: ChunkerCfg = field(default_factory=ChunkerCfg)
    chat: ChatCfg = field(default_factory=ChatCfg)
    scan: ScanCfg = field(default_factory=ScanCfg)
    descriptions: dict[str, str] = field(default_factory=dict)


@dataclass
class Credentials:
    """Secrets taken from the environment. Empty string means missing."""

    database_url: str = ""
    database_auth_token: str = ""
    api_key: str = ""


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> AgentLabConfig:
    """Build an *AgentLabConfig* from a merged raw YAML dict."""
    cfg = AgentLabConfig()

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(
            model=str(e.get("model", cfg.embedding.model)),
            dimensions=int(e.get("dimensions", cfg.embedding.dimensions)),
            delay_seconds=float(e.get("delay_seconds", cfg.embedding.delay_seconds)),
        )

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(
            model=str(g.get("model", cfg.generation.model)),
            language=str(g.get("language", cfg.generation.language)),
        )

    if "retrieval" in data:
        r = data["retrieval"] or {}
        cfg.retrieval = RetrievalCfg(
            top_k=int(r.get("top_k", cfg.retrieval.top_k)),
            citation_k=int(r.get("citation_k", cfg.retrieval.citation_k)),
        )

    if "chunker" in data:
        c = data["chunker"] or {}
        cfg.chunker = ChunkerCfg(
            max_tokens=int(c.get("max_tokens", cfg.chunker.max_tokens)),
        )

    if "chat" in data:
        ch = data["chat"] or {}
        cfg.chat = ChatCfg(tick_ms=int(ch.get("tick_ms", cfg.chat.tick_ms)))

    if "scan" in data:
        s = data["scan"] or {}
        cfg.scan = ScanCfg(
            root=str(s.get("root", cfg.scan.root)),
            allowed_extensions=[
                str(x) for x in s.get("allowed_extensions", cfg.scan.allowed_extensions)
            ],
            excluded_dirs=[str(x) for x in s.get("excluded_dirs", cfg.scan.excluded_dirs)],
        )

    if "descriptions" in data:
        d = data["descriptions"] or {}
        # YAML reads unquoted 05 as the integer 5.
        cfg.descriptions = {
            (f"{k:02d}" if isinstance(k, int) else str(k)): str(v) for k, v in d.items()
        }

    if cfg.chunker.max_tokens < 1:
        raise ConfigError("chunker.max_tokens must be >= 1")
    if cfg.embedding.delay_seconds < 0:
        raise ConfigError("embedding.delay_seconds must be >= 0")

    return cfg


def _apply_env_overrides(cfg: AgentLabConfig) -> AgentLabConfig:
    """Apply AGENTLAB_* environment variable overrides."""
    if model := os.environ.get("AGENTLAB_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("AGENTLAB_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> AgentLabConfig:
    """Load and return a merged *AgentLabConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *agentlab.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If global config contains API-key-like fields or a value
            is out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)
    return _apply_env_overrides(cfg)


def load_credentials(environ: Mapping[str, str] | None = None) -> Credentials:
    """Read credentials from *environ* (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return Credentials(
        database_url=env.get(ENV_DATABASE_URL, "").strip(),
        database_auth_token=env.get(ENV_DATABASE_AUTH_TOKEN, "").strip(),
        api_key=env.get(ENV_API_KEY, "").strip(),
    )


def missing_credentials(creds: Credentials) -> list[str]:
    """Return the environment variable names of every missing credential."""
    missing: list[str] = []
    if not creds.database_url:
        missing.append(ENV_DATABASE_URL)
    if not creds.database_auth_token:
        missing.append(ENV_DATABASE_AUTH_TOKEN)
    if not creds.api_key:
        missing.append(ENV_API_KEY)
    return missing


def ensure_project_config(project_dir: Path) -> Path:
    """Write a commented ``agentlab.yaml`` with defaults if none exists.

    Returns:
        Path to the project config file.
    """
    target = project_dir / _PROJECT_CONFIG_NAME
    if target.exists():
        return target
    defaults = AgentLabConfig()
    content = (
        "# AgentLab project configuration.\n"
        "# NEVER store API keys here — use environment variables:\n"
        f"#   export {ENV_DATABASE_URL}=file:agentlab.db\n"
        f"#   export {ENV_DATABASE_AUTH_TOKEN}=...\n"
        f"#   export {ENV_API_KEY}=...\n"
        "\n"
        "embedding:\n"
        f"  model: {defaults.embedding.model}\n"
        f"  dimensions: {defaults.embedding.dimensions}\n"
        f"  delay_seconds: {defaults.embedding.delay_seconds}\n"
        "\n"
        "generation:\n"
        f"  model: {defaults.generation.model}\n"
        f"  language: {defaults.generation.language}\n"
        "\n"
        "retrieval:\n"
        f"  top_k: {defaults.retrieval.top_k}\n"
        f"  citation_k: {defaults.retrieval.citation_k}\n"
        "\n"
        "chunker:\n"
        f"  max_tokens: {defaults.chunker.max_tokens}\n"
        "\n"
        "scan:\n"
        "  root: .\n"
    )
    target.write_text(content, encoding="utf-8")
    return target
