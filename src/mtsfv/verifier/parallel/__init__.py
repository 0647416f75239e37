"""Parallel processing components for the verifier.

This package contains the parallel processing infrastructure:
- Worker threads: run verify_one and deliver outcomes
- Queue manager: work queue (bounded) and delivery queue (unbounded)
"""

from .queue_manager import QueueManager
from .worker_thread import Job, WorkerRecord, pool_worker_main, run_job, single_job_worker_main

__all__ = [
    "QueueManager",
    "Job",
    "WorkerRecord",
    "run_job",
    "single_job_worker_main",
    "pool_worker_main",
]
