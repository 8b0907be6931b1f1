"""Exceptions raised by the GELF publish pipeline."""

from __future__ import annotations

__all__ = [
    "PublishError",
    "SerializationError",
    "CompressionError",
    "ChunkOverflowError",
    "NetworkError",
]


class PublishError(Exception):
    """Base class for failures while publishing a GELF message."""


class SerializationError(PublishError):
    """Raised when a message cannot be encoded as GELF JSON."""


class CompressionError(PublishError):
    """Raised when the compression codec fails."""


class ChunkOverflowError(PublishError):
    """Raised when a payload would need more chunks than GELF allows."""

    def __init__(self, size: int, chunk_size: int, count: int, limit: int) -> None:
        super().__init__(
            f"Payload of {size} bytes needs {count} chunks of {chunk_size} bytes, limit is {limit}"
        )
        self.size = size
        self.chunk_size = chunk_size
        self.count = count
        self.limit = limit


class NetworkError(PublishError):
    """Raised when a datagram cannot be handed to the operating system."""
