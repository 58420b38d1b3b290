"""Durable at-least-once job queue on Redis lists.

Keys live under ``<prefix>:<queue name>:``:

- ``id``        INCR counter used for job ids
- ``job:<id>``  hash holding the job fields
- ``wait``      list of ready job ids (LPUSH on enqueue, claimed from the right)
- ``active``    list of claimed job ids
- ``delayed``   sorted set of job ids scored by the time they become ready

A job id only leaves ``active`` when the job completes, fails permanently,
or is rescheduled, so a worker that dies mid-job leaves it behind for
``requeue_stalled`` to hand out again. Running jobs keep their lock fresh
with ``extend_lock``.
"""

import json
import time
from datetime import datetime, timezone
from typing import Any

import redis

from app.logging.logger import Log
from app.queue.exceptions import JobNotFoundError
from app.queue.models import JobRequest, JobStatus, QueuedJob

JOB_NAME = "process-fine"


class RedisJobQueue:
    """Named FIFO work queue shared by the webhook server and the workers."""

    def __init__(
        self,
        client: redis.Redis,
        name: str,
        prefix: str = "fpq",
        job_name: str = JOB_NAME,
    ) -> None:
        self._client = client
        self._name = name
        self._prefix = prefix
        self._job_name = job_name

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def enqueue(self, payload: dict[str, Any]) -> QueuedJob:
        """Store *payload* as a new waiting job and return it with its id."""
        job_id = str(self._client.incr(self._key("id")))
        now = time.time()
        with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(
                self._job_key(job_id),
                mapping={
                    "name": self._job_name,
                    "data": json.dumps(payload),
                    "status": JobStatus.WAITING,
                    "attempts": 0,
                    "enqueued_at": now,
                },
            )
            pipe.lpush(self._key("wait"), job_id)
            pipe.execute()
        return QueuedJob(
            id=job_id,
            name=self._job_name,
            data=payload,
            status=JobStatus.WAITING,
            enqueued_at=_to_datetime(now),
        )

    def enqueue_request(self, request: JobRequest) -> QueuedJob:
        """Enqueue a parsed webhook request."""
        return self.enqueue(request.to_payload())

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def claim_next_job(self, timeout_seconds: float) -> QueuedJob | None:
        """Move the oldest waiting job to ``active`` and return it.

        Blocks up to *timeout_seconds* for a job to arrive.
        """
        job_id = self._client.blmove(
            self._key("wait"), self._key("active"), timeout_seconds, "RIGHT", "LEFT"
        )
        if job_id is None:
            return None

        job_key = self._job_key(job_id)
        if not self._client.exists(job_key):
            # Purged while waiting.
            self._client.lrem(self._key("active"), 0, job_id)
            return None

        self._client.hset(
            job_key, mapping={"status": JobStatus.ACTIVE, "locked_at": time.time()}
        )
        return self.find_by_id(job_id)

    def mark_completed(self, job_id: str, result: dict[str, Any] | None = None) -> None:
        """Mark a claimed job as completed."""
        self._require_job(job_id)
        with self._client.pipeline(transaction=True) as pipe:
            pipe.lrem(self._key("active"), 0, job_id)
            pipe.hset(
                self._job_key(job_id),
                mapping={
                    "status": JobStatus.COMPLETED,
                    "result": json.dumps(result or {}),
                    "finished_at": time.time(),
                },
            )
            pipe.execute()

    def retry_later(self, job_id: str, error: str, delay_seconds: float) -> int:
        """Record a failed attempt and schedule the job to run again.

        Returns the number of attempts made so far.
        """
        self._require_job(job_id)
        ready_at = time.time() + max(0.0, delay_seconds)
        with self._client.pipeline(transaction=True) as pipe:
            pipe.lrem(self._key("active"), 0, job_id)
            pipe.hincrby(self._job_key(job_id), "attempts", 1)
            pipe.hset(
                self._job_key(job_id),
                mapping={"status": JobStatus.DELAYED, "error_message": error},
            )
            pipe.hdel(self._job_key(job_id), "locked_at")
            pipe.zadd(self._key("delayed"), {job_id: ready_at})
            results = pipe.execute()
        return int(results[1])

    def mark_failed(self, job_id: str, error: str) -> None:
        """Record a final failed attempt; the job is not redelivered."""
        self._require_job(job_id)
        with self._client.pipeline(transaction=True) as pipe:
            pipe.lrem(self._key("active"), 0, job_id)
            pipe.hincrby(self._job_key(job_id), "attempts", 1)
            pipe.hset(
                self._job_key(job_id),
                mapping={
                    "status": JobStatus.FAILED,
                    "error_message": error,
                    "finished_at": time.time(),
                },
            )
            pipe.execute()

    def promote_delayed(self, now: float | None = None) -> int:
        """Move delayed jobs whose backoff has elapsed back to ``wait``.

        Each job leaves the zset and enters ``wait`` in one transaction.
        """
        now = time.time() if now is None else now
        due = self._client.zrangebyscore(self._key("delayed"), "-inf", now)
        promoted = 0
        for job_id in due:
            job_key = self._job_key(job_id)
            with self._client.pipeline() as pipe:
                try:
                    pipe.watch(job_key)
                    # Another worker promoted it since the range read.
                    if pipe.zscore(self._key("delayed"), job_id) is None:
                        continue
                    pipe.multi()
                    pipe.zrem(self._key("delayed"), job_id)
                    pipe.hset(job_key, mapping={"status": JobStatus.WAITING, "ready_at": now})
                    pipe.lpush(self._key("wait"), job_id)
                    pipe.execute()
                except redis.WatchError:
                    continue
            promoted += 1
        return promoted

    def requeue_stalled(self, stall_after_seconds: float, now: float | None = None) -> int:
        """Hand out again active jobs whose lock is older than *stall_after_seconds*.

        A job moved to ``active`` by a worker that died before locking it has
        no ``locked_at``; its age is then measured from when it became ready.
        """
        now = time.time() if now is None else now
        requeued = 0
        for job_id in self._client.lrange(self._key("active"), 0, -1):
            job_key = self._job_key(job_id)
            with self._client.pipeline() as pipe:
                try:
                    pipe.watch(job_key)
                    since = _first_timestamp(
                        pipe.hmget(job_key, ["locked_at", "ready_at", "enqueued_at"])
                    )
                    if since is None:
                        # Purged while active.
                        pipe.unwatch()
                        self._client.lrem(self._key("active"), 0, job_id)
                        continue
                    if now - since <= stall_after_seconds:
                        continue
                    pipe.multi()
                    pipe.lrem(self._key("active"), 1, job_id)
                    pipe.hset(job_key, mapping={"status": JobStatus.WAITING, "ready_at": now})
                    pipe.hdel(job_key, "locked_at")
                    # RPUSH so the stalled job is the next one claimed.
                    pipe.rpush(self._key("wait"), job_id)
                    pipe.execute()
                except redis.WatchError:
                    continue
            Log.warning(f"Job {job_id} stalled, returned to queue {self._name}")
            requeued += 1
        return requeued

    def extend_lock(self, job_id: str, now: float | None = None) -> bool:
        """Refresh the lock of a job that is still active.

        Returns False once the job is no longer active, e.g. after it was
        handed to another worker.
        """
        now = time.time() if now is None else now
        job_key = self._job_key(job_id)
        with self._client.pipeline() as pipe:
            try:
                pipe.watch(job_key)
                if pipe.hget(job_key, "status") != JobStatus.ACTIVE:
                    return False
                pipe.multi()
                pipe.hset(job_key, "locked_at", now)
                pipe.execute()
            except redis.WatchError:
                return False
        return True

    # ------------------------------------------------------------------
    # Operational helpers
    # ------------------------------------------------------------------

    def find_by_id(self, job_id: str) -> QueuedJob | None:
        """Find a job by ID. Useful for tests and observability."""
        raw = self._client.hgetall(self._job_key(job_id))
        if not raw:
            return None
        return QueuedJob(
            id=str(job_id),
            name=raw.get("name", self._job_name),
            data=json.loads(raw.get("data", "{}")),
            status=raw.get("status", JobStatus.WAITING),
            attempts=int(raw.get("attempts", 0)),
            error_message=raw.get("error_message"),
            result=json.loads(raw["result"]) if "result" in raw else None,
            enqueued_at=_to_datetime(raw.get("enqueued_at")),
            locked_at=_to_datetime(raw.get("locked_at")),
            finished_at=_to_datetime(raw.get("finished_at")),
        )

    def purge(self) -> int:
        """Delete every key belonging to this queue. Returns the number removed."""
        keys = list(self._client.scan_iter(match=f"{self._prefix}:{self._name}:*"))
        if not keys:
            return 0
        return int(self._client.delete(*keys))

    def _require_job(self, job_id: str) -> None:
        if not self._client.exists(self._job_key(job_id)):
            raise JobNotFoundError(f"Job {job_id} not found in queue {self._name}")

    def _key(self, suffix: str) -> str:
        return f"{self._prefix}:{self._name}:{suffix}"

    def _job_key(self, job_id: str) -> str:
        return self._key(f"job:{job_id}")


def _to_datetime(value: str | float | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def _first_timestamp(values: list[str | None]) -> float | None:
    for value in values:
        if value is not None:
            return float(value)
    return None
