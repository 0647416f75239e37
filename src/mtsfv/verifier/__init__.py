"""Concurrent CRC32 verification engine."""

from .api import checksum_buffer, checksum_file, checksum_stream
from .dispatcher import TaskDispatcher
from .errors import (
    DuplicateIdentityError,
    SourceReadError,
    VerificationCancelledError,
    VerifierError,
    WorkerFailureError,
)
from .frontend import TableRow, VerificationSession
from .source_reader import read_chunks
from .task import Delivery, Outcome, TaskState, VerificationTask, verify_one
from .verification_set import OverallStatus, VerificationSet

__all__ = [
    "checksum_buffer",
    "checksum_file",
    "checksum_stream",
    "read_chunks",
    "verify_one",
    "Outcome",
    "TaskState",
    "VerificationTask",
    "Delivery",
    "TaskDispatcher",
    "VerificationSet",
    "OverallStatus",
    "VerificationSession",
    "TableRow",
    "VerifierError",
    "SourceReadError",
    "WorkerFailureError",
    "VerificationCancelledError",
    "DuplicateIdentityError",
]
