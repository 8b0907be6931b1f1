"""Chunked GELF framing for payloads larger than one datagram.

Each chunk datagram is laid out as::

    0x1e 0x0f | message id (8 bytes) | sequence index | sequence count | payload
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from ..core.errors import ChunkOverflowError

__all__ = [
    "CHUNK_MAGIC",
    "DEFAULT_CHUNK_SIZE",
    "HEADER_SIZE",
    "MAX_CHUNKS",
    "MESSAGE_ID_SIZE",
    "ChunkFrame",
    "chunk",
    "maybe_chunk",
    "new_message_id",
]

CHUNK_MAGIC = b"\x1e\x0f"
MESSAGE_ID_SIZE = 8
HEADER_SIZE = len(CHUNK_MAGIC) + MESSAGE_ID_SIZE + 2
MAX_CHUNKS = 128
DEFAULT_CHUNK_SIZE = 8192


@dataclass(frozen=True, slots=True)
class ChunkFrame:
    message_id: bytes
    sequence_index: int
    sequence_count: int
    payload: bytes

    def to_bytes(self) -> bytes:
        header = CHUNK_MAGIC + self.message_id + bytes((self.sequence_index, self.sequence_count))
        return header + self.payload

    @classmethod
    def from_bytes(cls, datagram: bytes) -> "ChunkFrame":
        """Parse one chunk datagram, as a collector would."""

        if len(datagram) < HEADER_SIZE:
            raise ValueError(f"Chunk datagram shorter than its {HEADER_SIZE}-byte header")
        if datagram[:2] != CHUNK_MAGIC:
            raise ValueError("Datagram does not start with the chunked GELF magic bytes")
        id_end = 2 + MESSAGE_ID_SIZE
        return cls(
            message_id=datagram[2:id_end],
            sequence_index=datagram[id_end],
            sequence_count=datagram[id_end + 1],
            payload=datagram[HEADER_SIZE:],
        )


def new_message_id() -> bytes:
    """Return a random message id from the OS CSPRNG."""

    return os.urandom(MESSAGE_ID_SIZE)


def chunk(data: bytes, chunk_size: int, message_id: bytes | None = None) -> List[ChunkFrame]:
    """Split ``data`` into frames of ``chunk_size`` payload bytes."""

    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not data:
        return []
    count = -(-len(data) // chunk_size)
    if count > MAX_CHUNKS:
        raise ChunkOverflowError(len(data), chunk_size, count, MAX_CHUNKS)
    if message_id is None:
        message_id = new_message_id()
    elif len(message_id) != MESSAGE_ID_SIZE:
        raise ValueError(f"message_id must be {MESSAGE_ID_SIZE} bytes long")
    return [
        ChunkFrame(
            message_id=message_id,
            sequence_index=index,
            sequence_count=count,
            payload=data[index * chunk_size : (index + 1) * chunk_size],
        )
        for index in range(count)
    ]


def maybe_chunk(data: bytes, chunk_size: int, datagram_limit: int) -> List[bytes]:
    """Return the datagrams needed to send ``data``.

    Payloads that fit in ``datagram_limit`` go out unframed as one datagram.
    """

    if len(data) <= datagram_limit:
        return [data]
    return [frame.to_bytes() for frame in chunk(data, chunk_size)]
