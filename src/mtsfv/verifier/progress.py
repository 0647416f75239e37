"""Progress tracking for verification batches.

Tracks and reports verification progress with ETA calculation.
"""

import logging
import time

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Tracks verification progress and calculates ETA.

    Features:
    - Files verified count (successes and failures)
    - Verification rate (files/sec)
    - Estimated time remaining
    - Periodic logging (every N files)
    """

    def __init__(self, total_files: int, log_interval: int = 100):
        """Initialize progress tracker.

        Args:
            total_files: Total number of files to verify
            log_interval: Log progress every N files
        """
        self.total_files = total_files
        self.log_interval = log_interval

        self.files_done = 0
        self.files_failed = 0
        self.start_time = time.monotonic()
        self.last_log_time = self.start_time
        self.last_log_count = 0

        logger.debug(f"ProgressTracker initialized (total_files={total_files})")

    def increment(self, count: int = 1, failed: int = 0) -> None:
        """Record newly completed files.

        Args:
            count: Number of files that reached a terminal state
            failed: How many of those ended in an error
        """
        before = self.files_done
        self.files_done += count
        self.files_failed += failed

        # Log whenever an interval boundary is crossed
        if self.files_done // self.log_interval > before // self.log_interval:
            self._log_progress()

    def get_progress(self) -> dict:
        """Get current progress statistics.

        Returns:
            Dict with progress metrics
        """
        elapsed_time = time.monotonic() - self.start_time

        rate = self.files_done / elapsed_time if elapsed_time > 0 else 0.0
        percentage = (self.files_done / self.total_files) * 100 if self.total_files > 0 else 0.0

        remaining_files = max(self.total_files - self.files_done, 0)
        eta_seconds = remaining_files / rate if rate > 0 and remaining_files > 0 else 0.0

        return {
            "total_files": self.total_files,
            "files_done": self.files_done,
            "files_failed": self.files_failed,
            "remaining_files": remaining_files,
            "percentage": percentage,
            "elapsed_seconds": elapsed_time,
            "rate_files_per_sec": rate,
            "eta_seconds": eta_seconds,
        }

    def _log_progress(self) -> None:
        progress = self.get_progress()

        current_time = time.monotonic()
        time_delta = current_time - self.last_log_time
        count_delta = self.files_done - self.last_log_count
        instant_rate = count_delta / time_delta if time_delta > 0 else 0.0

        logger.info(
            f"Progress: {self.files_done}/{self.total_files} "
            f"({progress['percentage']:.1f}%) - "
            f"{progress['rate_files_per_sec']:.1f} files/sec (avg), "
            f"{instant_rate:.1f} files/sec (current) - "
            f"ETA: {format_duration(progress['eta_seconds'])}"
        )

        self.last_log_time = current_time
        self.last_log_count = self.files_done

    def log_final_summary(self) -> None:
        """Log final progress summary."""
        elapsed_time = time.monotonic() - self.start_time
        rate = self.files_done / elapsed_time if elapsed_time > 0 else 0.0

        logger.info(
            f"Verification complete: {self.files_done}/{self.total_files} files "
            f"({self.files_failed} failed) in {format_duration(elapsed_time)} "
            f"({rate:.1f} files/sec average)"
        )


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable time.

    Args:
        seconds: Time in seconds

    Returns:
        Formatted string (e.g., "2h 15m 30s")
    """
    if seconds <= 0:
        return "0s"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)
