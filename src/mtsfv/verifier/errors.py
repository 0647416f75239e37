"""Error classes for the verification engine."""

from typing import Any

from mtsfv.common import ChecksumError, MTSFVError


class VerifierError(MTSFVError):
    """Base error for verification engine operations."""
    pass


class SourceReadError(ChecksumError, VerifierError):
    """Input file could not be opened or read.

    Carries the offending path and the underlying reason so the message
    stands on its own, e.g. ``"/data/a.bin: Permission denied"``.
    """

    def __init__(self, path: Any, reason: str, **context: Any) -> None:
        super().__init__(f"{path}: {reason}", path=str(path), reason=reason, **context)
        self.path = path
        self.reason = reason

    @classmethod
    def from_os_error(cls, path: Any, error: OSError) -> "SourceReadError":
        reason = error.strerror or str(error) or type(error).__name__
        err = cls(path, reason, errno=error.errno)
        err.__cause__ = error
        return err


class WorkerFailureError(VerifierError):
    """A dispatched worker terminated without producing an outcome."""

    def __init__(self, identity: Any, **context: Any) -> None:
        super().__init__(f"{identity}: worker failed unexpectedly", identity=str(identity), **context)
        self.identity = identity


class VerificationCancelledError(VerifierError):
    """Reading was stopped between chunks because cancellation was requested."""

    def __init__(self, identity: Any, **context: Any) -> None:
        super().__init__(f"{identity}: verification cancelled", identity=str(identity), **context)
        self.identity = identity


class DuplicateIdentityError(VerifierError, ValueError):
    """The same input identity was submitted twice while still pending."""
    pass


def classify_error(exception: BaseException) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'permission', 'not_found', 'io', 'cancelled',
        'worker_failure', or 'unknown'
    """
    if isinstance(exception, SourceReadError):
        cause = exception.__cause__
        if cause is not None and cause is not exception:
            category = classify_error(cause)
            if category != 'unknown':
                return category
        return 'io'
    elif isinstance(exception, VerificationCancelledError):
        return 'cancelled'
    elif isinstance(exception, WorkerFailureError):
        return 'worker_failure'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, FileNotFoundError):
        return 'not_found'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'
