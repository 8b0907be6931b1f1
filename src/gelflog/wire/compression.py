"""Payload compression for GELF datagrams."""

from __future__ import annotations

import gzip
import zlib
from enum import Enum

from ..core.errors import CompressionError

__all__ = ["Compression", "Compressor", "compress", "decompress"]

_GZIP_MAGIC = b"\x1f\x8b"
_ZLIB_METHOD = 0x78


class Compression(str, Enum):
    GZIP = "gzip"
    ZLIB = "zlib"
    NONE = "none"


class Compressor:
    """Compress serialized messages.

    ``min_size`` gates compression: payloads shorter than it are sent as
    they are. The default of ``0`` compresses everything.
    """

    def __init__(self, method: Compression | str = Compression.GZIP, min_size: int = 0) -> None:
        self.method = Compression(method)
        self.min_size = min_size

    def compress(self, data: bytes) -> bytes:
        if self.method is Compression.NONE or len(data) < self.min_size:
            return data
        try:
            if self.method is Compression.GZIP:
                return gzip.compress(data)
            return zlib.compress(data)
        except (zlib.error, OSError, TypeError) as exc:
            raise CompressionError(f"{self.method.value} compression failed: {exc}") from exc

    @staticmethod
    def decompress(data: bytes) -> bytes:
        """Undo :meth:`compress`, detecting the format from its header."""

        try:
            if data[:2] == _GZIP_MAGIC:
                return gzip.decompress(data)
            if len(data) >= 2 and data[0] == _ZLIB_METHOD and (data[0] << 8 | data[1]) % 31 == 0:
                return zlib.decompress(data)
        except (zlib.error, OSError, EOFError) as exc:
            raise CompressionError(f"Cannot decompress payload: {exc}") from exc
        return data


_GZIP = Compressor(Compression.GZIP)


def compress(data: bytes) -> bytes:
    """Gzip ``data``."""

    return _GZIP.compress(data)


def decompress(data: bytes) -> bytes:
    return Compressor.decompress(data)
