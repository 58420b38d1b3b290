import threading
from collections.abc import Callable
from typing import Any

import redis

from app.config.settings import Settings
from app.logging.logger import Log
from app.processor.processor import Processor
from app.queue.exceptions import InvalidJobPayloadError, QueueError
from app.queue.models import JobRequest, QueuedJob
from app.queue.redis_queue import RedisJobQueue

JobListener = Callable[[QueuedJob, Any], None]

EVENTS = ("completed", "failed")


class LockHeartbeat:
    """Keeps a claimed job's lock fresh on a background thread while it runs."""

    def __init__(self, queue: RedisJobQueue, job_id: str, interval_seconds: float) -> None:
        self._queue = queue
        self._job_id = job_id
        self._interval_seconds = interval_seconds
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._beat, name=f"lock-heartbeat-{job_id}", daemon=True
        )

    def __enter__(self) -> "LockHeartbeat":
        self._thread.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._stopped.set()
        self._thread.join()

    def _beat(self) -> None:
        while not self._stopped.wait(self._interval_seconds):
            try:
                if not self._queue.extend_lock(self._job_id):
                    Log.warning(f"Job {self._job_id} is no longer active, lock not refreshed")
                    return
            except (redis.RedisError, QueueError) as exc:
                Log.warning(f"Could not refresh lock for job {self._job_id}: {exc}")


class JobRunner:
    """Run one job, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        processor: Processor,
        queue: RedisJobQueue,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._queue = queue
        self._settings = settings
        self._listeners: dict[str, list[JobListener]] = {event: [] for event in EVENTS}

    def add_listener(self, event: str, callback: JobListener) -> None:
        """Register *callback* for ``completed`` (job, result) or ``failed`` (job, exc)."""
        if event not in self._listeners:
            raise ValueError(f"Unknown job event '{event}'. Choose from: {list(EVENTS)}")
        self._listeners[event].append(callback)

    def run(self, job: QueuedJob) -> None:
        """Execute a single job with error handling.

        The job's lock is refreshed every third of the stall timeout while
        the processor runs.
        """
        Log.info(f"Running job {job.id} (attempt {job.attempts + 1})")
        Log.debug(f"Job {job.id} data: {job.data}")
        try:
            request = JobRequest.from_payload(job.data)
            with LockHeartbeat(self._queue, job.id, self.heartbeat_interval()):
                result = self._processor.process(request, job.id)
        except Exception as exc:
            self._handle_failure(job, exc)
            return

        self._queue.mark_completed(job.id, result.to_dict())
        Log.info(f"Job {job.id} completed successfully")
        self._emit("completed", job, result)

    def backoff_delay(self, attempts_made: int) -> float:
        """Delay before the next attempt: backoff * 2 ** (attempts_made - 1)."""
        return float(self._settings.job_backoff_seconds * 2 ** max(0, attempts_made - 1))

    def heartbeat_interval(self) -> float:
        return max(1.0, self._settings.job_stall_timeout_seconds / 3)

    def _handle_failure(self, job: QueuedJob, exc: Exception) -> None:
        """Count the attempt; fail permanently at max attempts, otherwise schedule a retry."""
        message = str(exc) or type(exc).__name__
        Log.error(f"Job {job.id} failed: {message}")
        attempts_made = job.attempts + 1
        if isinstance(exc, InvalidJobPayloadError):
            self._queue.mark_failed(job.id, message)
            Log.error(f"Job {job.id} permanently failed: payload is not a valid job request")
        elif attempts_made >= self._settings.max_job_attempts:
            self._queue.mark_failed(job.id, message)
            Log.error(f"Job {job.id} permanently failed after {attempts_made} attempts")
        else:
            delay = self.backoff_delay(attempts_made)
            self._queue.retry_later(job.id, message, delay)
            Log.warning(f"Job {job.id} will be retried in {delay:.0f}s (attempt {attempts_made})")
        self._emit("failed", job, exc)

    def _emit(self, event: str, job: QueuedJob, value: Any) -> None:
        for callback in self._listeners[event]:
            try:
                callback(job, value)
            except Exception as listener_exc:
                Log.error(f"Job {job.id} {event} listener raised: {listener_exc}", exc_info=True)
