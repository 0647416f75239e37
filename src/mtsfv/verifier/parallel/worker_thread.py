"""Worker threads for parallel verification.

Two flavours share the same job runner:
- Single-job workers: one thread per input, exits after delivering.
- Pool workers: N persistent threads pulling Jobs from the work queue
  until they receive a None sentinel or the shutdown event is set.

Workers never touch consumer state. Their only output is a Delivery put on
the delivery queue. Each worker also owns a WorkerRecord whose ``current``
field names the job it is holding; the dispatcher reads it only after the
thread has died, to tell which job was lost.
"""

import logging
import threading
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Optional

from ..source_reader import Source
from ..task import Delivery, InputIdentity, verify_one, worker_failure

logger = logging.getLogger(__name__)


@dataclass
class Job:
    """A unit of work: checksum ``source`` and report it as ``identity``."""

    identity: InputIdentity
    source: Source
    batch: int = 0
    cancel_event: threading.Event = field(default_factory=threading.Event)


@dataclass
class WorkerRecord:
    """Dispatcher-side handle for a worker thread."""

    thread: Optional[threading.Thread] = None
    current: Optional[Job] = None


def run_job(job: Job, delivery_queue: Queue, chunk_size: int) -> None:
    """Verify one job and deliver its outcome.

    Unexpected exceptions from the job are logged and reported as a worker
    failure for that identity, so the consumer always sees a terminal state.
    """
    try:
        outcome = verify_one(job.identity, job.source, chunk_size, job.cancel_event)
    except Exception as e:
        logger.error(f"Worker failed while verifying {job.identity}: {e}", exc_info=True)
        outcome = worker_failure(job.identity)

    delivery_queue.put(Delivery(job.identity, outcome, job.batch))


def single_job_worker_main(
    record: WorkerRecord,
    delivery_queue: Queue,
    chunk_size: int,
) -> None:
    """Main function for a one-shot worker thread.

    Args:
        record: Handle whose ``current`` job this thread processes
        delivery_queue: Queue for Delivery results
        chunk_size: Read size used by the source reader
    """
    job = record.current
    logger.debug(f"Worker started: {{'identity': {str(job.identity)!r}, 'batch': {job.batch}}}")

    run_job(job, delivery_queue, chunk_size)
    record.current = None

    logger.debug(f"Worker finished: {{'identity': {str(job.identity)!r}}}")


def pool_worker_main(
    thread_id: int,
    record: WorkerRecord,
    work_queue: Queue,
    delivery_queue: Queue,
    chunk_size: int,
    shutdown_event: Any,
) -> None:
    """Main function for a persistent pool worker thread.

    Args:
        thread_id: Unique identifier for this worker thread
        record: Handle updated with the job currently being processed
        work_queue: Queue of Job objects (None is the shutdown sentinel)
        delivery_queue: Queue for Delivery results
        chunk_size: Read size used by the source reader
        shutdown_event: Event to signal shutdown
    """
    logger.debug(f"Pool worker {thread_id} started")

    processed_count = 0

    while not shutdown_event.is_set():
        try:
            job = work_queue.get(timeout=0.1)
        except Empty:
            continue

        if job is None:
            logger.debug(f"Pool worker {thread_id} received shutdown sentinel")
            work_queue.task_done()
            break

        record.current = job
        try:
            run_job(job, delivery_queue, chunk_size)
            processed_count += 1
        finally:
            work_queue.task_done()
        record.current = None

    logger.debug(f"Pool worker {thread_id} shutting down (processed={processed_count})")
