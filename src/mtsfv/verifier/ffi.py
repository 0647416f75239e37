"""C-callable boundary over the checksum primitive.

Hosts that expect a C calling convention get raw-pointer entry points:

- ``crc32(ptr, length)``: checksum of ``length`` bytes at ``ptr``
- ``crc32_of_file(path_ptr)``: checksum of the file named by a
  NUL-terminated UTF-16 string
- ``version()``: library version string

Both checksum functions return 0 on any error, which is also the checksum
of empty input; callers that must tell the two apart should use the
``*_checked`` variants, which return ``(FfiStatus, value)``.

``export_functions()`` wraps these in ``ctypes.CFUNCTYPE`` objects whose
addresses can be handed to native code.
"""

import ctypes
import logging
import sys
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

from mtsfv import __version__
from mtsfv.common import checksum_buffer
from .api import checksum_file
from .errors import SourceReadError

logger = logging.getLogger(__name__)

# Windows extended-length path limit, in UTF-16 code units
MAX_WIDE_PATH_LEN = 32768

_WIDE_ENCODING = "utf-16-le" if sys.byteorder == "little" else "utf-16-be"
_VERSION_BUFFER = ctypes.create_string_buffer(__version__.encode("ascii"))

CRC32_FUNC = ctypes.CFUNCTYPE(ctypes.c_uint32, ctypes.c_void_p, ctypes.c_size_t)
CRC32_FILE_FUNC = ctypes.CFUNCTYPE(ctypes.c_uint32, ctypes.c_void_p)
VERSION_FUNC = ctypes.CFUNCTYPE(ctypes.c_void_p)


class FfiStatus(IntEnum):
    OK = 0
    INVALID_POINTER = 1
    PATH_TOO_LONG = 2
    IO_ERROR = 3


def _address(ptr: Any) -> Optional[int]:
    """Normalize an int address, c_void_p, ctypes pointer/array, or None."""
    if ptr is None:
        return None
    if isinstance(ptr, int):
        return ptr or None
    return ctypes.cast(ptr, ctypes.c_void_p).value


def crc32_checked(ptr: Any, length: int) -> Tuple[FfiStatus, int]:
    """Checksum a raw buffer, reporting failures separately from the value."""
    try:
        address = _address(ptr)
    except (TypeError, ctypes.ArgumentError):
        return FfiStatus.INVALID_POINTER, 0

    if address is None or length == 0:
        return FfiStatus.OK, 0
    if length < 0:
        return FfiStatus.INVALID_POINTER, 0

    data = ctypes.string_at(address, length)
    return FfiStatus.OK, checksum_buffer(data)


def crc32(ptr: Any, length: int) -> int:
    """Checksum a raw buffer; 0 for NULL, empty input, or error."""
    return crc32_checked(ptr, length)[1]


def read_wide_path(path_ptr: Any) -> Tuple[FfiStatus, Optional[str]]:
    """Decode a NUL-terminated UTF-16 path of at most MAX_WIDE_PATH_LEN units.

    Unpaired surrogates are replaced rather than rejected.
    """
    try:
        address = _address(path_ptr)
    except (TypeError, ctypes.ArgumentError):
        return FfiStatus.INVALID_POINTER, None
    if address is None:
        return FfiStatus.INVALID_POINTER, None

    units = ctypes.cast(address, ctypes.POINTER(ctypes.c_uint16))
    length = 0
    while length < MAX_WIDE_PATH_LEN and units[length] != 0:
        length += 1
    if length >= MAX_WIDE_PATH_LEN:
        return FfiStatus.PATH_TOO_LONG, None

    raw = ctypes.string_at(address, length * 2)
    return FfiStatus.OK, raw.decode(_WIDE_ENCODING, errors="replace")


def crc32_of_file_checked(path_ptr: Any) -> Tuple[FfiStatus, int]:
    """Checksum the file named by a wide path, with an explicit status."""
    status, path = read_wide_path(path_ptr)
    if status is not FfiStatus.OK:
        return status, 0

    try:
        return FfiStatus.OK, checksum_file(path)
    except SourceReadError as e:
        logger.debug(f"crc32_of_file failed: {e}")
        return FfiStatus.IO_ERROR, 0


def crc32_of_file(path_ptr: Any) -> int:
    """Checksum the file named by a wide path; 0 on any error."""
    return crc32_of_file_checked(path_ptr)[1]


def version() -> bytes:
    return _VERSION_BUFFER.value


def _version_address() -> int:
    return ctypes.addressof(_VERSION_BUFFER)


_EXPORTS: Dict[str, Any] = {}


def export_functions() -> Dict[str, Any]:
    """C function pointers for the boundary, keyed by exported symbol name.

    The returned objects are cached at module level so they stay alive as
    long as native code may call them.
    """
    if not _EXPORTS:
        _EXPORTS["mtsfv_crc32"] = CRC32_FUNC(crc32)
        _EXPORTS["mtsfv_crc32_file"] = CRC32_FILE_FUNC(crc32_of_file)
        _EXPORTS["mtsfv_version"] = VERSION_FUNC(_version_address)
    return dict(_EXPORTS)
