"""Chunked reading of verification inputs.

Owns the only I/O in the engine. A source is either a filesystem path
(``str`` or ``os.PathLike``) or an in-memory buffer (``bytes``,
``bytearray``, ``memoryview``); both are consumed through the same chunk
loop so callers only ever see a finite iterator of byte chunks.
"""

import logging
import os
import threading
from typing import Iterator, Optional, Union

from mtsfv.common import CRC32_CHUNK_SIZE
from .errors import SourceReadError, VerificationCancelledError

logger = logging.getLogger(__name__)

BufferSource = Union[bytes, bytearray, memoryview]
Source = Union[str, os.PathLike, BufferSource]


def is_buffer_source(source: Source) -> bool:
    return isinstance(source, (bytes, bytearray, memoryview))


def read_chunks(
    source: Source,
    chunk_size: int = CRC32_CHUNK_SIZE,
    cancel_event: Optional[threading.Event] = None,
) -> Iterator[bytes]:
    """Yield the content of ``source`` as consecutive chunks.

    The returned generator is single-use: once exhausted, create a new one
    to read the source again. A file handle is opened on first iteration
    and is closed when the generator finishes, fails, or is discarded.

    Args:
        source: Filesystem path or in-memory buffer
        chunk_size: Maximum size of each yielded chunk
        cancel_event: Optional event checked before every chunk

    Yields:
        Non-empty byte chunks, in order

    Raises:
        SourceReadError: If the path cannot be opened or read
        VerificationCancelledError: If ``cancel_event`` is set mid-read
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    if is_buffer_source(source):
        yield from _read_buffer(source, chunk_size, cancel_event)
    else:
        yield from _read_file(source, chunk_size, cancel_event)


def _check_cancelled(source: Source, cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        label = "<buffer>" if is_buffer_source(source) else os.fspath(source)
        raise VerificationCancelledError(label)


def _read_buffer(
    buffer: BufferSource,
    chunk_size: int,
    cancel_event: Optional[threading.Event],
) -> Iterator[bytes]:
    view = memoryview(buffer).cast("B")
    for offset in range(0, len(view), chunk_size):
        _check_cancelled(buffer, cancel_event)
        yield bytes(view[offset:offset + chunk_size])


def _read_file(
    path: Union[str, os.PathLike],
    chunk_size: int,
    cancel_event: Optional[threading.Event],
) -> Iterator[bytes]:
    _check_cancelled(path, cancel_event)

    try:
        f = open(path, "rb")
    except OSError as e:
        raise SourceReadError.from_os_error(path, e) from e

    with f:
        logger.debug(f"Opened {path} for reading (chunk_size={chunk_size})")
        while True:
            _check_cancelled(path, cancel_event)
            try:
                chunk = f.read(chunk_size)
            except OSError as e:
                raise SourceReadError.from_os_error(path, e) from e
            if not chunk:
                break
            yield chunk
