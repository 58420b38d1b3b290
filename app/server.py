import uvicorn

from app.api.app import create_app
from app.config.settings import Settings
from app.logging.logger import Log
from app.queue.connection import create_redis_client
from app.queue.redis_queue import RedisJobQueue


def main() -> None:
    """Entry point: build the queue producer and serve the webhook app."""
    settings = Settings()
    Log.configure(settings.log_level)
    if not settings.webhook_secret:
        Log.warning("WEBHOOK_SECRET is not set; webhook requests will be rejected")

    queue = RedisJobQueue(
        create_redis_client(settings), settings.queue_name, prefix=settings.queue_prefix
    )
    app = create_app(queue.enqueue_request, settings)
    Log.info(f"Processing server listening on {settings.http_host}:{settings.http_port}")
    uvicorn.run(app, host=settings.http_host, port=settings.http_port, log_level="warning")


if __name__ == "__main__":
    main()
