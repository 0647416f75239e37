"""Verification task model and the checksum-one-input unit of work."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Hashable, NamedTuple, Optional

from mtsfv.common import Crc32, CRC32_CHUNK_SIZE, format_crc32
from .errors import (
    SourceReadError,
    VerificationCancelledError,
    WorkerFailureError,
    classify_error,
)
from .source_reader import Source, read_chunks

logger = logging.getLogger(__name__)

# Any hashable, printable value works; file paths are the usual choice.
InputIdentity = Hashable


@dataclass(frozen=True)
class Outcome:
    """Terminal result of verifying one input: a checksum or an error text."""

    checksum: Optional[int] = None
    error: Optional[str] = None
    category: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.checksum is None) == (self.error is None):
            raise ValueError("Outcome needs exactly one of checksum or error")

    @classmethod
    def success(cls, checksum: int) -> "Outcome":
        return cls(checksum=checksum)

    @classmethod
    def failure(cls, message: str, category: str = "unknown") -> "Outcome":
        return cls(error=message, category=category)

    @classmethod
    def from_exception(cls, exception: BaseException) -> "Outcome":
        return cls.failure(str(exception), classify_error(exception))

    @property
    def ok(self) -> bool:
        return self.checksum is not None

    @property
    def hex(self) -> Optional[str]:
        """Checksum as 8 uppercase hex digits, or None for a failure."""
        if self.checksum is None:
            return None
        return format_crc32(self.checksum)


class TaskState(str, Enum):
    """Lifecycle of a verification task. PENDING -> DONE, never back."""

    PENDING = "pending"
    DONE = "done"


@dataclass
class VerificationTask:
    """One input tracked by a VerificationSet.

    ``batch`` ties the task to the add_pending call that created it, so a
    result from a worker started before a clear() cannot land on a newer
    task that happens to share the identity.
    """

    identity: InputIdentity
    batch: int
    outcome: Optional[Outcome] = None

    @property
    def state(self) -> TaskState:
        return TaskState.PENDING if self.outcome is None else TaskState.DONE

    @property
    def is_pending(self) -> bool:
        return self.outcome is None


class Delivery(NamedTuple):
    """Message a worker sends back to the consumer."""

    identity: InputIdentity
    outcome: Outcome
    batch: int = 0


def verify_one(
    identity: InputIdentity,
    source: Source,
    chunk_size: int = CRC32_CHUNK_SIZE,
    cancel_event: Optional[threading.Event] = None,
) -> Outcome:
    """Checksum ``source`` and report the result for ``identity``.

    I/O failures and cancellation are captured into a failed Outcome whose
    message names the identity. Anything else is a bug in the caller's
    source and propagates; the dispatcher turns it into a worker failure.
    """
    crc = Crc32()
    try:
        for chunk in read_chunks(source, chunk_size, cancel_event):
            crc.update(chunk)
    except SourceReadError as e:
        logger.warning(f"Failed to read {identity}: {e.reason}")
        return Outcome.failure(f"{identity}: {e.reason}", classify_error(e))
    except VerificationCancelledError:
        logger.debug(f"Verification of {identity} cancelled")
        return Outcome.from_exception(VerificationCancelledError(identity))

    logger.debug(f"Verified {identity}: {format_crc32(crc.finalize())} ({crc.bytes_processed} bytes)")
    return Outcome.success(crc.finalize())


def worker_failure(identity: InputIdentity) -> Outcome:
    """Outcome synthesized for a worker that never reported back."""
    return Outcome.from_exception(WorkerFailureError(identity))
