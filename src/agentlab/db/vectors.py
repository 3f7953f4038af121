"""Embedding BLOB layout: flat little-endian float32 buffer."""

from __future__ import annotations

import struct
from collections.abc import Sequence

FLOAT32_SIZE = 4


def serialize_vector(vector: Sequence[float]) -> bytes:
    """Pack *vector* into the byte layout stored in ``embeddings.embedding``.

    Examples:
        serialize_vector([1.0, 0.0]) -> b"\\x00\\x00\\x80?\\x00\\x00\\x00\\x00"
    """
    return struct.pack(f"<{len(vector)}f", *vector)


def deserialize_vector(blob: bytes) -> list[float]:
    """Unpack a stored embedding BLOB back into a list of floats."""
    if len(blob) % FLOAT32_SIZE:
        raise ValueError(
            f"Embedding blob length {len(blob)} is not a multiple of {FLOAT32_SIZE}"
        )
    return list(struct.unpack(f"<{len(blob) // FLOAT32_SIZE}f", blob))


def blob_dimensions(blob: bytes) -> int:
    """Return the number of float32 values held in *blob*."""
    return len(blob) // FLOAT32_SIZE
