"""Queue management for parallel verification.

Manages the bounded work queue feeding pool workers and the unbounded
delivery queue that carries results back to the single consumer.
"""

import logging
from queue import Queue
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


class QueueManager:
    """Creates and tracks the queues used by the dispatcher.

    - Work queue: Job objects (or None sentinels) for pool workers. Bounded,
      so a huge batch does not materialize as one giant queue.
    - Delivery queue: Delivery tuples from every worker to the consumer.
      Unbounded, so a worker never blocks on reporting its result.
    """

    def __init__(self, work_queue_maxsize: int = 1000):
        """Initialize queue manager.

        Args:
            work_queue_maxsize: Maximum size of work queue (backpressure limit)
        """
        if work_queue_maxsize <= 0:
            raise ValueError(f"work_queue_maxsize must be positive, got {work_queue_maxsize}")

        self.work_queue_maxsize = work_queue_maxsize

        self.work_queue: Optional[Queue] = None
        self.delivery_queue: Optional[Queue] = None

        logger.debug(f"QueueManager initialized: {{'work_maxsize': {work_queue_maxsize}}}")

    def create_queues(self) -> Tuple[Queue, Queue]:
        """Create work and delivery queues.

        Returns:
            Tuple of (work_queue, delivery_queue)
        """
        self.work_queue = Queue(maxsize=self.work_queue_maxsize)
        self.delivery_queue = Queue()

        logger.debug("Created work and delivery queues")

        return self.work_queue, self.delivery_queue

    def get_work_queue_depth(self) -> int:
        """Number of jobs waiting for a pool worker."""
        if self.work_queue is None:
            return 0
        return self.work_queue.qsize()

    def get_delivery_queue_depth(self) -> int:
        """Number of results not yet drained by the consumer."""
        if self.delivery_queue is None:
            return 0
        return self.delivery_queue.qsize()

    def get_queue_stats(self) -> dict:
        """Get statistics about queue depths.

        Returns:
            Dict with work_queue_depth, delivery_queue_depth and work_queue_maxsize
        """
        return {
            "work_queue_depth": self.get_work_queue_depth(),
            "delivery_queue_depth": self.get_delivery_queue_depth(),
            "work_queue_maxsize": self.work_queue_maxsize,
        }

    def shutdown(self) -> None:
        """Drop references to the queues."""
        logger.debug("QueueManager shutdown")
        self.work_queue = None
        self.delivery_queue = None
