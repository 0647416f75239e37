"""Session object for redraw-loop front ends.

A front end (GUI, TUI, or the CLI's --parallel mode) owns file selection
and drawing. Once per frame it calls refresh() and then reads status_text
and rows(); neither call blocks on workers.
"""

import logging
import time
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Union

from .config import VerifierConfig
from .dispatcher import TaskDispatcher
from .task import VerificationTask
from .verification_set import OverallStatus, VerificationSet

logger = logging.getLogger(__name__)

CLEARED_STATUS = "Cleared"
PENDING_CHECKSUM = "..."
FAILED_CHECKSUM = "--"
OK_STATUS = "OK"


class TableRow(NamedTuple):
    """One rendered line of the results table."""

    file: str
    crc32: str
    status: str


def render_row(task: VerificationTask) -> TableRow:
    if task.outcome is None:
        return TableRow(str(task.identity), PENDING_CHECKSUM, OverallStatus.CALCULATING.value)
    if task.outcome.ok:
        return TableRow(str(task.identity), task.outcome.hex, OK_STATUS)
    return TableRow(str(task.identity), FAILED_CHECKSUM, task.outcome.error)


class VerificationSession:
    """Owns a VerificationSet and its dispatcher on behalf of a front end."""

    def __init__(
        self,
        config: Optional[VerifierConfig] = None,
        dispatcher: Optional[TaskDispatcher] = None,
    ):
        self.config = config or VerifierConfig()
        if dispatcher is None:
            dispatcher = TaskDispatcher(
                chunk_size=self.config.chunk_size,
                max_workers=self.config.max_workers,
                work_queue_maxsize=self.config.work_queue_maxsize,
            )
        self.verification_set = VerificationSet(dispatcher)
        self._cleared = False

    @property
    def dispatcher(self) -> TaskDispatcher:
        return self.verification_set.dispatcher

    def add_files(self, paths: Iterable[Union[str, Path]]) -> int:
        """Queue picked files for verification. Returns the number added."""
        identities = [str(path) for path in paths]
        if not identities:
            return 0
        self.verification_set.add_pending(identities)
        self._cleared = False
        logger.info(f"Added files: {{'count': {len(identities)}}}")
        return len(identities)

    def clear(self) -> None:
        self.verification_set.clear()
        self._cleared = True

    def refresh(self) -> int:
        """Apply results that arrived since the last frame."""
        return self.verification_set.refresh()

    @property
    def status_text(self) -> str:
        if self._cleared:
            return CLEARED_STATUS
        return self.verification_set.overall_status().value

    def rows(self) -> List[TableRow]:
        return [render_row(task) for task in self.verification_set]

    def wait(self, timeout: Optional[float] = None, poll_interval: Optional[float] = None) -> bool:
        """Poll until every task is DONE.

        Args:
            timeout: Give up after this many seconds (None waits forever)
            poll_interval: Sleep between polls; defaults to the config value

        Returns:
            True if the set became Ready, False on timeout
        """
        interval = self.config.poll_interval if poll_interval is None else poll_interval
        deadline = None if timeout is None else time.monotonic() + timeout

        while True:
            self.refresh()
            if self.verification_set.overall_status() is OverallStatus.READY:
                return True
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(interval)

    def close(self, cancel: bool = False) -> None:
        self.dispatcher.shutdown(wait=True, cancel=cancel)

    def __enter__(self) -> "VerificationSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close(cancel=exc_type is not None)
