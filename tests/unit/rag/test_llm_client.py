"""Tests for LiteLLM client wrapper."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from agentlab.rag.llm_client import complete, embed, provider_of, stream, validate_api_key


# ------------------------------------------------------------------
# validate_api_key
# ------------------------------------------------------------------


def test_validate_api_key_raises_if_missing(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(EnvironmentError, match="GEMINI_API_KEY"):
        validate_api_key("gemini/gemini-1.5-flash")


def test_validate_api_key_passes_if_set(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    validate_api_key("gemini/text-embedding-004")


def test_validate_api_key_ollama_no_key_required():
    validate_api_key("ollama/llama3")


def test_provider_of():
    assert provider_of("gemini/gemini-1.5-flash") == "gemini"
    assert provider_of("gpt-4o") == "openai"


# ------------------------------------------------------------------
# complete()
# ------------------------------------------------------------------


def test_complete_returns_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = "안녕하세요"

    with patch("agentlab.rag.llm_client.litellm.completion", return_value=mock_response) as mock_c:
        result = complete("gemini/gemini-1.5-flash", [{"role": "user", "content": "Hi"}])

    assert result == "안녕하세요"
    assert mock_c.call_args.kwargs["model"] == "gemini/gemini-1.5-flash"


def test_complete_returns_empty_string_on_none_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = None

    with patch("agentlab.rag.llm_client.litellm.completion", return_value=mock_response):
        assert complete("gemini/gemini-1.5-flash", [{"role": "user", "content": "Hi"}]) == ""


# ------------------------------------------------------------------
# stream()
# ------------------------------------------------------------------


def _chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


def test_stream_yields_non_empty_fragments():
    chunks = [_chunk("Hel"), _chunk(None), _chunk(""), SimpleNamespace(choices=[]), _chunk("lo")]

    with patch("agentlab.rag.llm_client.litellm.completion", return_value=iter(chunks)) as mock_c:
        fragments = list(stream("gemini/gemini-1.5-flash", [{"role": "user", "content": "Hi"}]))

    assert fragments == ["Hel", "lo"]
    assert mock_c.call_args.kwargs["stream"] is True


# ------------------------------------------------------------------
# embed()
# ------------------------------------------------------------------


def test_embed_returns_vector():
    mock_response = MagicMock()
    mock_response.data = [{"embedding": [0.1, 0.2, 0.3]}]

    with patch("agentlab.rag.llm_client.litellm.embedding", return_value=mock_response) as mock_e:
        result = embed("gemini/text-embedding-004", "hello")

    assert result == [0.1, 0.2, 0.3]
    assert mock_e.call_args.kwargs["input"] == ["hello"]
