import threading
import time

import redis

from app.config.settings import Settings
from app.logging.logger import Log
from app.queue.exceptions import QueueError
from app.queue.models import QueuedJob
from app.queue.redis_queue import RedisJobQueue
from app.worker.job_runner import JobRunner


class Worker:
    """Poll loop: promote delayed -> requeue stalled -> claim -> dispatch.

    Runs ``worker_concurrency`` loops, each in its own thread, over the
    same queue.
    """

    def __init__(
        self,
        queue: RedisJobQueue,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._queue = queue
        self._job_runner = job_runner
        self._settings = settings
        self._stop = threading.Event()
        self._lock = threading.Lock()
        self._jobs_done = 0

    @property
    def jobs_done(self) -> int:
        return self._jobs_done

    def stop(self) -> None:
        """Ask every loop to exit after its current job."""
        self._stop.set()

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after processing that many jobs (for testing).
        """
        concurrency = max(1, self._settings.worker_concurrency)
        Log.info(
            f"Worker started on queue {self._queue.name} with concurrency {concurrency}"
        )
        try:
            if concurrency == 1:
                self._loop(max_jobs)
            else:
                self._run_threads(concurrency, max_jobs)
        except KeyboardInterrupt:
            self.stop()
            Log.info("Worker shutting down gracefully")

    def _run_threads(self, concurrency: int, max_jobs: int | None) -> None:
        threads = [
            threading.Thread(
                target=self._loop, args=(max_jobs,), name=f"worker-{i}", daemon=True
            )
            for i in range(concurrency)
        ]
        for thread in threads:
            thread.start()
        try:
            while any(thread.is_alive() for thread in threads):
                for thread in threads:
                    thread.join(timeout=0.5)
        except KeyboardInterrupt:
            self.stop()
            for thread in threads:
                thread.join(timeout=self._settings.job_poll_interval_seconds + 1)
            raise

    def _loop(self, max_jobs: int | None) -> None:
        while not self._stop.is_set() and not self._limit_reached(max_jobs):
            job = self._try_claim_job()
            if job is None:
                Log.debug("No jobs available")
                continue
            try:
                self._job_runner.run(job)
            except (redis.RedisError, QueueError) as exc:
                # Job stays in active and is redelivered once its lock goes stale.
                Log.error(f"Queue bookkeeping failed for job {job.id}: {exc}")
            with self._lock:
                self._jobs_done += 1

    def _limit_reached(self, max_jobs: int | None) -> bool:
        with self._lock:
            return max_jobs is not None and self._jobs_done >= max_jobs

    def _try_claim_job(self) -> QueuedJob | None:
        """Attempt to claim the next waiting job. Gracefully handle queue errors."""
        try:
            promoted = self._queue.promote_delayed()
            if promoted:
                Log.info(f"Promoted {promoted} delayed job(s)")
            self._queue.requeue_stalled(self._settings.job_stall_timeout_seconds)
            return self._queue.claim_next_job(self._settings.job_poll_interval_seconds)
        except (redis.RedisError, QueueError) as exc:
            Log.warning(f"Queue error, will retry: {exc}")
            time.sleep(self._settings.job_poll_interval_seconds)
            return None
