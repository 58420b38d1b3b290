import redis

from app.config.settings import Settings


def create_redis_client(settings: Settings) -> redis.Redis:
    """Create the process-wide Redis client used by the queue.

    No socket timeout is set so blocking claims can wait for the full
    poll interval.
    """
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)
