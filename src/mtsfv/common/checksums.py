"""CRC32 checksum primitive for file integrity verification.

The polynomial work is delegated to ``zlib.crc32`` (IEEE 802.3, the same
variant SFV files use); this module only carries the running state between
chunks and formats the result.
"""

import zlib
from typing import Iterable

# Constants for checksum calculation
CRC32_CHUNK_SIZE = 65536  # 64 KB chunks
CRC32_MASK = 0xFFFFFFFF


class Crc32:
    """Streaming CRC32 digest.

    Feed bytes with :meth:`update` in order; :meth:`finalize` returns the
    checksum of everything fed so far. The result depends only on the
    concatenated content, never on how it was split across updates.

    Example:
        >>> crc = Crc32()
        >>> crc.update(b"12345")
        >>> crc.update(b"6789")
        >>> f"{crc.finalize():08X}"
        'CBF43926'
    """

    __slots__ = ("_value", "_length")

    def __init__(self) -> None:
        self._value = 0
        self._length = 0

    def update(self, data: bytes) -> None:
        """Append ``data`` to the digest state."""
        self._value = zlib.crc32(data, self._value)
        self._length += len(data)

    def finalize(self) -> int:
        """Return the checksum as an unsigned 32-bit integer."""
        return self._value & CRC32_MASK

    @property
    def bytes_processed(self) -> int:
        return self._length

    def __repr__(self) -> str:
        return f"Crc32(value={format_crc32(self.finalize())}, bytes={self._length})"


def checksum_chunks(chunks: Iterable[bytes]) -> int:
    """Fold an ordered sequence of chunks into a single CRC32 value."""
    crc = Crc32()
    for chunk in chunks:
        crc.update(chunk)
    return crc.finalize()


def checksum_buffer(data: bytes) -> int:
    """
    Compute CRC32 checksum of an in-memory buffer.

    Args:
        data: Bytes-like object to checksum

    Returns:
        CRC32 checksum as unsigned 32-bit integer (0 for empty input)
    """
    crc = Crc32()
    crc.update(data)
    return crc.finalize()


def format_crc32(value: int) -> str:
    """
    Render a checksum the way SFV tools display it.

    Args:
        value: CRC32 checksum

    Returns:
        8-character uppercase hex string (e.g., "CBF43926")
    """
    return f"{value & CRC32_MASK:08X}"
