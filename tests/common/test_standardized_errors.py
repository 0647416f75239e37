"""Tests for standardized error handling."""

import errno

import pytest

from mtsfv.common import ChecksumError, MTSFVError
from mtsfv.verifier.errors import (
    DuplicateIdentityError,
    SourceReadError,
    VerificationCancelledError,
    VerifierError,
    WorkerFailureError,
    classify_error,
)


class TestStandardizedErrors:
    """Test standardized error types."""

    def test_base_error(self):
        """Test base MTSFVError functionality."""
        error = MTSFVError("Test error", file_path="/test/path")

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.context == {"file_path": "/test/path"}

    def test_source_read_error_message(self):
        """Test that the message names the path and the reason."""
        error = SourceReadError("/data/a.bin", "Permission denied")

        assert str(error) == "/data/a.bin: Permission denied"
        assert error.path == "/data/a.bin"
        assert error.reason == "Permission denied"
        assert error.context["path"] == "/data/a.bin"
        assert error.context["reason"] == "Permission denied"

    def test_source_read_error_inheritance(self):
        """Test SourceReadError is both a checksum and a verifier error."""
        error = SourceReadError("x", "boom")

        assert isinstance(error, ChecksumError)
        assert isinstance(error, VerifierError)
        assert isinstance(error, MTSFVError)

    def test_from_os_error(self):
        """Test wrapping of an OSError keeps errno and cause."""
        cause = FileNotFoundError(errno.ENOENT, "No such file or directory", "missing.txt")
        error = SourceReadError.from_os_error("missing.txt", cause)

        assert error.reason == "No such file or directory"
        assert error.context["errno"] == errno.ENOENT
        assert error.__cause__ is cause

    def test_from_os_error_without_strerror(self):
        """Test fallback when the OSError carries no strerror."""
        error = SourceReadError.from_os_error("p", OSError("device went away"))
        assert error.reason == "device went away"

    def test_worker_failure_message(self):
        error = WorkerFailureError("a.bin")
        assert str(error) == "a.bin: worker failed unexpectedly"
        assert error.identity == "a.bin"

    def test_cancelled_message(self):
        error = VerificationCancelledError("a.bin")
        assert str(error) == "a.bin: verification cancelled"

    def test_duplicate_identity_is_value_error(self):
        error = DuplicateIdentityError("dup", identity="a")
        assert isinstance(error, ValueError)
        assert isinstance(error, VerifierError)
        assert error.context == {"identity": "a"}


class TestClassifyError:
    """Tests for classify_error."""

    @pytest.mark.parametrize(
        "exception, category",
        [
            (PermissionError(errno.EACCES, "Permission denied"), "permission"),
            (FileNotFoundError(errno.ENOENT, "No such file"), "not_found"),
            (IsADirectoryError(errno.EISDIR, "Is a directory"), "io"),
            (OSError("disk fault"), "io"),
            (VerificationCancelledError("x"), "cancelled"),
            (WorkerFailureError("x"), "worker_failure"),
            (ValueError("bad"), "unknown"),
        ],
    )
    def test_categories(self, exception, category):
        assert classify_error(exception) == category

    def test_source_read_error_uses_cause(self):
        """Test that the wrapped OSError decides the category."""
        denied = SourceReadError.from_os_error("p", PermissionError(errno.EACCES, "Permission denied"))
        missing = SourceReadError.from_os_error("p", FileNotFoundError(errno.ENOENT, "No such file"))

        assert classify_error(denied) == "permission"
        assert classify_error(missing) == "not_found"

    def test_source_read_error_without_cause(self):
        assert classify_error(SourceReadError("p", "short read")) == "io"
