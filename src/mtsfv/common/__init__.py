"""Common utilities for mtsfv packages."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import MTSFVError, ChecksumError
from .checksums import (
    CRC32_CHUNK_SIZE, Crc32, checksum_buffer, checksum_chunks, format_crc32
)

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'MTSFVError',
    'ChecksumError',
    'CRC32_CHUNK_SIZE',
    'Crc32',
    'checksum_buffer',
    'checksum_chunks',
    'format_crc32',
]
