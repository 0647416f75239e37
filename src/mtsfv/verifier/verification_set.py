"""Consumer-side aggregate of verification tasks.

The set is owned by a single thread (the CLI loop or a UI's redraw loop).
Workers never touch it: their results arrive as Delivery tuples drained
from the dispatcher, and only apply_delivery() moves a task from PENDING to
DONE. The overall status is derived from the task states on every call.
"""

import logging
from enum import Enum
from typing import Iterable, Iterator, List, Optional

from .dispatcher import SourceFor, TaskDispatcher, identity_as_source
from .errors import DuplicateIdentityError
from .task import Delivery, InputIdentity, Outcome, TaskState, VerificationTask

logger = logging.getLogger(__name__)


class OverallStatus(str, Enum):
    READY = "Ready"
    CALCULATING = "Calculating…"


class VerificationSet:
    """Ordered collection of VerificationTasks plus derived overall status.

    Example:
        >>> vset = VerificationSet(TaskDispatcher())
        >>> vset.add_pending(["a.bin", "b.bin"])
        >>> while vset.overall_status() is OverallStatus.CALCULATING:
        ...     vset.refresh()
    """

    def __init__(self, dispatcher: Optional[TaskDispatcher] = None):
        """Initialize an empty set.

        Args:
            dispatcher: Starts workers for added inputs. Without one, tasks
                are only tracked and results must be fed to apply_delivery().
        """
        self.dispatcher = dispatcher
        self._tasks: List[VerificationTask] = []
        self._next_batch = 1
        self.dropped_deliveries = 0

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[VerificationTask]:
        return iter(self._tasks)

    @property
    def tasks(self) -> List[VerificationTask]:
        """Snapshot of the tasks in display order."""
        return list(self._tasks)

    def add_pending(
        self,
        identities: Iterable[InputIdentity],
        source_for: SourceFor = identity_as_source,
    ) -> int:
        """Append PENDING tasks in order and dispatch their workers.

        Args:
            identities: Inputs to add
            source_for: Maps an identity to its path or buffer

        Returns:
            Batch number shared by the new tasks

        Raises:
            DuplicateIdentityError: If an identity repeats within the call
                or is already pending in the set. Nothing is added then.
            RuntimeError: If the dispatcher has been shut down. The new
                tasks are removed again, as for any other submit failure.
        """
        identities = list(identities)

        pending = {task.identity for task in self._tasks if task.is_pending}
        seen = set()
        for identity in identities:
            if identity in seen or identity in pending:
                raise DuplicateIdentityError(
                    f"Input is already pending: {identity}", identity=str(identity)
                )
            seen.add(identity)

        batch = self._next_batch
        self._next_batch += 1

        added = [VerificationTask(identity=identity, batch=batch) for identity in identities]
        self._tasks.extend(added)

        if self.dispatcher is not None and identities:
            try:
                self.dispatcher.submit(identities, source_for, batch=batch)
            except Exception:
                # Nothing will ever deliver for this batch
                del self._tasks[-len(added):]
                raise

        logger.debug(f"Added pending tasks: {{'count': {len(identities)}, 'batch': {batch}}}")
        return batch

    def apply_delivery(
        self,
        identity: InputIdentity,
        outcome: Outcome,
        batch: Optional[int] = None,
    ) -> bool:
        """Resolve the pending task for ``identity`` with ``outcome``.

        Deliveries that match no pending task (unknown identity, task
        already DONE, or a batch discarded by clear()) are dropped and
        logged; a resolved task is never overwritten.

        Args:
            identity: Input the outcome belongs to
            outcome: Result to record
            batch: Batch the result was dispatched under; None matches any

        Returns:
            True if a task was resolved, False if the delivery was dropped
        """
        for task in self._tasks:
            if task.identity != identity or not task.is_pending:
                continue
            if batch is not None and task.batch != batch:
                continue
            task.outcome = outcome
            return True

        self.dropped_deliveries += 1
        logger.warning(
            f"Dropped delivery with no pending task: {{'identity': {str(identity)!r}, 'batch': {batch}}}"
        )
        return False

    def apply_deliveries(self, deliveries: Iterable[Delivery]) -> int:
        """Apply a sequence of deliveries. Returns how many resolved a task."""
        return sum(1 for d in deliveries if self.apply_delivery(d.identity, d.outcome, d.batch))

    def refresh(self) -> int:
        """Poll the dispatcher once and apply whatever has arrived. Never blocks."""
        if self.dispatcher is None:
            return 0
        return self.apply_deliveries(self.dispatcher.poll())

    def clear(self) -> None:
        """Discard every task.

        Running workers are not stopped; their late deliveries carry a
        batch number that no longer exists and are dropped.
        """
        logger.debug(f"Clearing verification set: {{'tasks': {len(self._tasks)}}}")
        self._tasks.clear()

    def overall_status(self) -> OverallStatus:
        if any(task.is_pending for task in self._tasks):
            return OverallStatus.CALCULATING
        return OverallStatus.READY

    def get(self, identity: InputIdentity) -> Optional[VerificationTask]:
        """Most recently added task for ``identity``, if any."""
        for task in reversed(self._tasks):
            if task.identity == identity:
                return task
        return None

    def counts(self) -> dict:
        """Task counts by state and outcome."""
        done = [task for task in self._tasks if task.state is TaskState.DONE]
        return {
            "total": len(self._tasks),
            "pending": len(self._tasks) - len(done),
            "ok": sum(1 for task in done if task.outcome.ok),
            "failed": sum(1 for task in done if not task.outcome.ok),
        }
