"""Tests for the synchronous checksum API."""

import io

import pytest

from mtsfv.verifier.api import checksum_buffer, checksum_file, checksum_stream
from mtsfv.verifier.errors import SourceReadError


class FailingStream(io.RawIOBase):
    name = "<broken>"

    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError(5, "Input/output error")


class TestChecksumFile:
    """Tests for checksum_file."""

    def test_known_value(self, tmp_path):
        path = tmp_path / "test.txt"
        path.write_bytes(b"123456789")

        assert checksum_file(path) == 0xCBF43926

    def test_matches_buffer_for_any_chunk_size(self, tmp_path):
        data = bytes(range(256)) * 300
        path = tmp_path / "data.bin"
        path.write_bytes(data)

        expected = checksum_buffer(data)
        for chunk_size in (1, 7, 4096, 65536, 1 << 20):
            assert checksum_file(path, chunk_size) == expected

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty"
        path.write_bytes(b"")

        assert checksum_file(path) == 0

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceReadError) as exc_info:
            checksum_file(tmp_path / "missing")

        assert "missing" in str(exc_info.value)


class TestChecksumStream:
    """Tests for checksum_stream."""

    def test_stream(self):
        assert checksum_stream(io.BytesIO(b"123456789"), chunk_size=2) == 0xCBF43926

    def test_stream_remaining_only(self):
        stream = io.BytesIO(b"xx123456789")
        stream.read(2)
        assert checksum_stream(stream) == 0xCBF43926

    def test_stream_not_closed(self):
        stream = io.BytesIO(b"abc")
        checksum_stream(stream)
        assert not stream.closed

    def test_read_error(self):
        with pytest.raises(SourceReadError) as exc_info:
            checksum_stream(FailingStream())

        assert exc_info.value.path == "<broken>"
        assert exc_info.value.reason == "Input/output error"
