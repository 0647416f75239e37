"""Tests for the C-callable boundary."""

import ctypes

import pytest

from mtsfv import __version__
from mtsfv.verifier import ffi
from mtsfv.verifier.ffi import (
    MAX_WIDE_PATH_LEN,
    FfiStatus,
    crc32,
    crc32_checked,
    crc32_of_file,
    crc32_of_file_checked,
    export_functions,
    read_wide_path,
    version,
)


def wide(text_or_units):
    """NUL-terminated UTF-16 array in host byte order."""
    if isinstance(text_or_units, str):
        units = list(memoryview(text_or_units.encode(ffi._WIDE_ENCODING)).cast("H"))
    else:
        units = list(text_or_units)
    units.append(0)
    return (ctypes.c_uint16 * len(units))(*units)


@pytest.fixture
def check_buffer():
    return ctypes.create_string_buffer(b"123456789", 9)


class TestCrc32:
    """Tests for the raw buffer entry point."""

    def test_ctypes_buffer(self, check_buffer):
        assert crc32(check_buffer, 9) == 0xCBF43926

    def test_int_address(self, check_buffer):
        assert crc32(ctypes.addressof(check_buffer), 9) == 0xCBF43926

    def test_prefix(self, check_buffer):
        assert crc32(check_buffer, 5) == crc32(ctypes.create_string_buffer(b"12345", 5), 5)

    @pytest.mark.parametrize("ptr", [None, 0])
    def test_null_pointer_is_zero(self, ptr):
        assert crc32(ptr, 10) == 0
        assert crc32_checked(ptr, 10) == (FfiStatus.OK, 0)

    def test_zero_length(self, check_buffer):
        assert crc32_checked(check_buffer, 0) == (FfiStatus.OK, 0)

    def test_negative_length(self, check_buffer):
        assert crc32_checked(check_buffer, -1) == (FfiStatus.INVALID_POINTER, 0)
        assert crc32(check_buffer, -1) == 0

    def test_unconvertible_pointer(self):
        assert crc32_checked(object(), 4) == (FfiStatus.INVALID_POINTER, 0)


class TestReadWidePath:
    """Tests for read_wide_path."""

    def test_ascii(self):
        assert read_wide_path(wide("C:/data/test.txt")) == (FfiStatus.OK, "C:/data/test.txt")

    def test_non_ascii(self):
        assert read_wide_path(wide("данные/файл.bin")) == (FfiStatus.OK, "данные/файл.bin")

    def test_empty(self):
        assert read_wide_path(wide("")) == (FfiStatus.OK, "")

    def test_unpaired_surrogate_replaced(self):
        status, path = read_wide_path(wide([0xD800, ord("A")]))

        assert status is FfiStatus.OK
        assert path == "\ufffdA"

    def test_null(self):
        assert read_wide_path(None) == (FfiStatus.INVALID_POINTER, None)

    def test_too_long(self):
        units = [ord("a")] * MAX_WIDE_PATH_LEN
        assert read_wide_path(wide(units)) == (FfiStatus.PATH_TOO_LONG, None)

    def test_longest_allowed(self):
        units = [ord("a")] * (MAX_WIDE_PATH_LEN - 1)
        status, path = read_wide_path(wide(units))

        assert status is FfiStatus.OK
        assert len(path) == MAX_WIDE_PATH_LEN - 1


class TestCrc32OfFile:
    """Tests for the file entry point."""

    def test_file(self, tmp_path):
        path = tmp_path / "test.txt"
        path.write_bytes(b"123456789")

        assert crc32_of_file(wide(str(path))) == 0xCBF43926
        assert crc32_of_file_checked(wide(str(path))) == (FfiStatus.OK, 0xCBF43926)

    def test_missing_file(self, tmp_path):
        path = wide(str(tmp_path / "missing.txt"))

        assert crc32_of_file_checked(path) == (FfiStatus.IO_ERROR, 0)
        assert crc32_of_file(path) == 0

    def test_null_path(self):
        assert crc32_of_file_checked(None) == (FfiStatus.INVALID_POINTER, 0)
        assert crc32_of_file(None) == 0

    def test_path_too_long(self):
        path = wide([ord("a")] * MAX_WIDE_PATH_LEN)
        assert crc32_of_file_checked(path) == (FfiStatus.PATH_TOO_LONG, 0)


class TestExports:
    """Tests for the CFUNCTYPE exports."""

    def test_version(self):
        assert version() == __version__.encode("ascii")

    def test_exported_names(self):
        assert set(export_functions()) == {"mtsfv_crc32", "mtsfv_crc32_file", "mtsfv_version"}

    def test_exports_are_cached(self):
        first = export_functions()
        second = export_functions()

        assert all(first[name] is second[name] for name in first)

    def test_call_through_function_pointers(self, check_buffer, tmp_path):
        functions = export_functions()
        path = tmp_path / "test.txt"
        path.write_bytes(b"Hello, World!")
        path_buffer = wide(str(path))

        assert functions["mtsfv_crc32"](ctypes.addressof(check_buffer), 9) == 0xCBF43926
        assert functions["mtsfv_crc32"](None, 9) == 0
        assert functions["mtsfv_crc32_file"](ctypes.addressof(path_buffer)) == 0xEC4AC3D0

        version_address = functions["mtsfv_version"]()
        assert ctypes.string_at(version_address) == __version__.encode("ascii")
