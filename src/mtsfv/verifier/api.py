"""Synchronous checksum helpers for callers that do not need concurrency."""

import os
from typing import BinaryIO, Union

from mtsfv.common import CRC32_CHUNK_SIZE, Crc32, checksum_buffer, checksum_chunks
from .errors import SourceReadError
from .source_reader import read_chunks

__all__ = ["checksum_buffer", "checksum_file", "checksum_stream"]


def checksum_file(path: Union[str, os.PathLike], chunk_size: int = CRC32_CHUNK_SIZE) -> int:
    """
    Compute CRC32 checksum of an entire file in the calling thread.

    Args:
        path: Path to the file
        chunk_size: Bytes read per chunk

    Returns:
        CRC32 checksum as unsigned 32-bit integer

    Raises:
        SourceReadError: If the file cannot be opened or read
    """
    return checksum_chunks(read_chunks(path, chunk_size))


def checksum_stream(stream: BinaryIO, chunk_size: int = CRC32_CHUNK_SIZE) -> int:
    """
    Compute CRC32 checksum of everything remaining in a binary stream.

    Used for ``--stdin``; the stream is not closed.

    Raises:
        SourceReadError: If reading the stream fails
    """
    crc = Crc32()
    name = getattr(stream, "name", "<stream>")
    while True:
        try:
            chunk = stream.read(chunk_size)
        except OSError as e:
            raise SourceReadError.from_os_error(name, e) from e
        if not chunk:
            break
        crc.update(chunk)
    return crc.finalize()
