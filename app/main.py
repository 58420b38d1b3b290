from typing import Any

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.logging.logger import Log
from app.processor.processor import build_processor
from app.queue.connection import create_redis_client
from app.queue.models import QueuedJob
from app.queue.redis_queue import RedisJobQueue
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def _log_completed(job: QueuedJob, result: Any) -> None:
    Log.info(f"Job completed: {job.id} {result.to_dict()}")


def _log_failed(job: QueuedJob, exc: Any) -> None:
    Log.error(f"Job failed: {job.id} {exc}")


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    redis_client = create_redis_client(settings)

    try:
        processor = build_processor(settings)
        queue = RedisJobQueue(redis_client, settings.queue_name, prefix=settings.queue_prefix)
        job_runner = JobRunner(processor, queue, settings)
        job_runner.add_listener("completed", _log_completed)
        job_runner.add_listener("failed", _log_failed)
        redis_client.ping()
        Log.info("Worker connected to Redis")
        worker = Worker(queue, job_runner, settings)
        worker.run()
    finally:
        redis_client.close()
        close_pool()


if __name__ == "__main__":
    main()
