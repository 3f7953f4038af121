"""Line chunker — token-budgeted groups of whole lines.

Token cost of a line is approximated as ``ceil(pieces * 1.3)`` where
*pieces* is the number of whitespace-separated pieces (a blank line is one
empty piece). Lines are never split; a single line over budget becomes its
own chunk. Blank lines at the very start or end ride along with their
neighbouring chunk, so no chunk is empty. Joining the chunks with ``"\\n"``
reproduces the input exactly.
"""

from __future__ import annotations

import json
import math
import re

from agentlab.db.models import Document

_WHITESPACE_RE = re.compile(r"\s+")
_TOKENS_PER_WORD = 1.3


class LineChunker:
    """Split file content into ordered, non-overlapping line groups.

    Args:
        max_tokens: Token budget per chunk (default 400).
    """

    def __init__(self, max_tokens: int = 400) -> None:
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        self.max_tokens = max_tokens

    @staticmethod
    def estimate_tokens(line: str) -> int:
        """Approximate token cost of one line."""
        return math.ceil(len(_WHITESPACE_RE.split(line)) * _TOKENS_PER_WORD)

    def split(self, content: str) -> list[str]:
        """Return the chunk texts for *content* (empty content → no chunks)."""
        if not content:
            return []

        chunks: list[str] = []
        current: list[str] = []
        current_tokens = 0

        for line in content.split("\n"):
            line_tokens = self.estimate_tokens(line)
            # A lone leading blank line would flush as "", so it rides along instead.
            has_text = bool(current) and current != [""]
            if has_text and current_tokens + line_tokens > self.max_tokens:
                chunks.append("\n".join(current))
                current = [line]
                current_tokens = line_tokens
            else:
                current.append(line)
                current_tokens += line_tokens

        # A lone trailing blank line (content ending in "\n") joins the last chunk.
        if current == [""] and chunks:
            chunks[-1] += "\n"
        elif current:
            chunks.append("\n".join(current))
        return chunks

    def chunk(
        self,
        project_id: str,
        file_path: str,
        content: str,
        language: str = "",
    ) -> list[Document]:
        """Split *content* into Document objects with sequential ``chunk_index``."""
        return [
            Document(
                project_id=project_id,
                file_path=file_path,
                chunk_index=i,
                content=text,
                language=language,
                metadata=json.dumps({"fileSize": len(text)}),
            )
            for i, text in enumerate(self.split(content))
        ]
