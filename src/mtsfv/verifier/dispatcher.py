"""Task dispatcher: fans inputs out to worker threads, collects deliveries.

Threading model:
- submit() starts workers and returns immediately.
- Workers put Delivery tuples on one shared delivery queue (many producers).
- poll() drains that queue without blocking (single consumer) and also
  notices workers that died without delivering, synthesizing a
  "worker failed unexpectedly" outcome for the job they held.

By default every input gets its own thread. With ``max_workers`` set, at
most that many persistent pool threads pull jobs from a bounded work queue;
jobs that do not fit are kept in a backlog and fed in on later polls, so
submit() still never blocks.
"""

import logging
import threading
from collections import deque
from queue import Empty, Full
from typing import Callable, Deque, Iterable, List, Optional

from mtsfv.common import CRC32_CHUNK_SIZE
from .errors import VerificationCancelledError, WorkerFailureError, classify_error
from .parallel import (
    Job,
    QueueManager,
    WorkerRecord,
    pool_worker_main,
    single_job_worker_main,
)
from .source_reader import Source
from .task import Delivery, InputIdentity, Outcome, worker_failure

logger = logging.getLogger(__name__)

SourceFor = Callable[[InputIdentity], Source]


def identity_as_source(identity: InputIdentity) -> Source:
    """Default source mapping: the identity is the file path."""
    return identity


class TaskDispatcher:
    """Starts one concurrent verification per input and exposes poll()."""

    def __init__(
        self,
        chunk_size: int = CRC32_CHUNK_SIZE,
        max_workers: Optional[int] = None,
        work_queue_maxsize: int = 1000,
    ):
        """Initialize dispatcher.

        Args:
            chunk_size: Read size for each worker's source reader
            max_workers: None for one thread per input, otherwise pool size
            work_queue_maxsize: Bound of the pool work queue
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if max_workers is not None and max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")

        self.chunk_size = chunk_size
        self.max_workers = max_workers

        self.queue_manager = QueueManager(work_queue_maxsize=work_queue_maxsize)
        self._work_queue, self._delivery_queue = self.queue_manager.create_queues()

        self._cancel_event = threading.Event()
        self._shutdown_event = threading.Event()
        self._workers: List[WorkerRecord] = []
        self._backlog: Deque[Job] = deque()
        self._next_thread_id = 0
        self._closed = False

        logger.debug(
            f"TaskDispatcher initialized: {{'chunk_size': {chunk_size}, "
            f"'max_workers': {max_workers}}}"
        )

    @property
    def pooled(self) -> bool:
        return self.max_workers is not None

    @property
    def active_workers(self) -> int:
        """Number of worker threads currently alive."""
        return sum(1 for w in self._workers if w.thread is not None and w.thread.is_alive())

    @property
    def backlog_size(self) -> int:
        return len(self._backlog)

    def queue_stats(self) -> dict:
        """Queue depths plus the dispatcher-side backlog."""
        stats = self.queue_manager.get_queue_stats()
        stats["backlog_size"] = len(self._backlog)
        return stats

    def submit(
        self,
        identities: Iterable[InputIdentity],
        source_for: SourceFor = identity_as_source,
        batch: int = 0,
    ) -> int:
        """Start verifying every identity. Never blocks.

        Args:
            identities: Inputs to verify; must be unique within the batch
            source_for: Maps an identity to its path or buffer. An
                identity it raises for is delivered as a failed outcome.
            batch: Tag copied onto every resulting Delivery

        Returns:
            Number of jobs submitted

        Raises:
            RuntimeError: If the dispatcher has been shut down
        """
        if self._closed:
            raise RuntimeError("Cannot submit to a dispatcher that has been shut down")

        jobs: List[Job] = []
        unresolved = 0
        for identity in identities:
            try:
                source = source_for(identity)
            except Exception as e:
                logger.warning(f"Could not resolve source for {identity}: {e}")
                outcome = Outcome.failure(f"{identity}: {e}", classify_error(e))
                self._delivery_queue.put(Delivery(identity, outcome, batch))
                unresolved += 1
                continue
            jobs.append(Job(identity=identity, source=source, batch=batch,
                            cancel_event=self._cancel_event))

        if self.pooled:
            self._backlog.extend(jobs)
            self._feed_work_queue()
            self._ensure_pool()
        else:
            for job in jobs:
                self._start_single_worker(job)

        logger.info(
            f"Submitted jobs: {{'count': {len(jobs)}, 'unresolved': {unresolved}, 'batch': {batch}}}"
        )
        return len(jobs) + unresolved

    def poll(self) -> List[Delivery]:
        """Drain deliveries accumulated since the last poll. Never blocks.

        Returns:
            Deliveries in arrival order (possibly empty)
        """
        # Snapshot dead workers before draining: anything they delivered
        # was queued before they died, so it is picked up below.
        dead = [w for w in self._workers if w.thread is not None and not w.thread.is_alive()]

        deliveries: List[Delivery] = []
        while True:
            try:
                deliveries.append(self._delivery_queue.get_nowait())
            except Empty:
                break

        for record in dead:
            self._workers.remove(record)
            lost = record.current
            if lost is not None:
                logger.error(f"Worker died without delivering: {{'identity': {str(lost.identity)!r}}}")
                deliveries.append(Delivery(lost.identity, worker_failure(lost.identity), lost.batch))

        if self.pooled and not self._closed:
            self._feed_work_queue()
            self._ensure_pool()

        return deliveries

    def cancel(self) -> None:
        """Ask every in-flight and queued job to stop between chunks.

        Jobs submitted afterwards are unaffected.
        """
        logger.info("Cancelling in-flight verifications")
        self._cancel_event.set()
        self._cancel_event = threading.Event()

    def shutdown(self, wait: bool = True, cancel: bool = False) -> None:
        """Stop accepting work and release worker threads.

        Without ``cancel``, queued and backlogged jobs still run and their
        deliveries stay available to poll(). With ``cancel``, in-flight jobs
        stop between chunks and jobs nobody has picked up yet are delivered
        as cancelled without being read.

        Args:
            wait: Join worker threads before returning
            cancel: Cancel in-flight and queued jobs first
        """
        if cancel:
            self.cancel()
        self._closed = True

        if self.pooled:
            if cancel:
                self._shutdown_event.set()
                self._cancel_queued_jobs()
            elif self._workers:
                while self._backlog:
                    self._work_queue.put(self._backlog.popleft())
                for _ in self._workers:
                    self._work_queue.put(None)

        if wait:
            for record in list(self._workers):
                if record.thread is not None:
                    record.thread.join()

        logger.debug(f"TaskDispatcher shut down: {self.queue_stats()}")
        # The dispatcher keeps its own queue references, so poll() still
        # drains deliveries queued before or during shutdown.
        self.queue_manager.shutdown()

    def __enter__(self) -> "TaskDispatcher":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown(wait=True, cancel=exc_type is not None)

    def _start_thread(self, record: WorkerRecord, target, args: tuple, name: str) -> bool:
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        record.thread = thread
        try:
            thread.start()
        except RuntimeError as e:
            # Typically "can't start new thread" under resource exhaustion
            record.thread = None
            logger.error(f"Failed to start worker thread {name}: {e}", exc_info=True)
            return False
        self._workers.append(record)
        return True

    def _start_single_worker(self, job: Job) -> None:
        record = WorkerRecord(current=job)
        name = f"Verify-{self._next_thread_id}"
        self._next_thread_id += 1

        if not self._start_thread(record, single_job_worker_main,
                                  (record, self._delivery_queue, self.chunk_size), name):
            self._deliver_start_failure(job)

    def _ensure_pool(self) -> None:
        outstanding = len(self._backlog) + self.queue_manager.get_work_queue_depth()
        wanted = min(self.max_workers, len(self._workers) + outstanding)

        while len(self._workers) < wanted:
            thread_id = self._next_thread_id
            self._next_thread_id += 1
            record = WorkerRecord()
            started = self._start_thread(
                record,
                pool_worker_main,
                (thread_id, record, self._work_queue, self._delivery_queue,
                 self.chunk_size, self._shutdown_event),
                f"VerifyPool-{thread_id}",
            )
            if not started:
                break

        if not self._workers and outstanding:
            # No thread could be started at all; fail the waiting jobs
            # rather than leaving them pending forever.
            for job in self._take_unclaimed_jobs():
                self._deliver_start_failure(job)

    def _feed_work_queue(self) -> None:
        while self._backlog:
            try:
                self._work_queue.put_nowait(self._backlog[0])
            except Full:
                break
            self._backlog.popleft()

    def _take_unclaimed_jobs(self) -> List[Job]:
        """Remove and return every job no worker has picked up yet."""
        jobs: List[Job] = []
        while True:
            try:
                job = self._work_queue.get_nowait()
            except Empty:
                break
            self._work_queue.task_done()
            if job is not None:
                jobs.append(job)
        jobs.extend(self._backlog)
        self._backlog.clear()
        return jobs

    def _cancel_queued_jobs(self) -> None:
        for job in self._take_unclaimed_jobs():
            outcome = Outcome.from_exception(VerificationCancelledError(job.identity))
            self._delivery_queue.put(Delivery(job.identity, outcome, job.batch))

    def _deliver_start_failure(self, job: Job) -> None:
        error = WorkerFailureError(job.identity, stage="start")
        self._delivery_queue.put(Delivery(job.identity, Outcome.from_exception(error), job.batch))
