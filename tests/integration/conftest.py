import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest
import redis

from app.config.settings import Settings
from app.database.connection import build_conninfo, close_pool, get_connection, init_pool
from app.queue.redis_queue import RedisJobQueue

TEST_TABLE = "records_integration"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "fines_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        psycopg.connect(build_conninfo(test_settings), connect_timeout=3).close()
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    init_pool(test_settings)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture(scope="session")
def records_table(integration_pool: None) -> Generator[str, None, None]:
    with get_connection() as conn:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {TEST_TABLE} (
                id uuid PRIMARY KEY,
                file_name text,
                file_url text,
                status text NOT NULL DEFAULT 'pending',
                processing_error text,
                processed_at timestamptz,
                webhook_audit jsonb,
                ai_analysis jsonb,
                fine_number text,
                fine_amount numeric,
                fine_date date,
                location text,
                violation_type text
            )
            """
        )
        conn.commit()
    try:
        yield TEST_TABLE
    finally:
        with get_connection() as conn:
            conn.execute(f"DROP TABLE IF EXISTS {TEST_TABLE}")
            conn.commit()


@pytest.fixture
def seed_record(records_table: str) -> Generator[dict[str, Any], None, None]:
    row = {
        "id": str(uuid.uuid4()),
        "file_name": f"{uuid.uuid4()}.pdf",
        "file_url": "user-1/fine.pdf",
    }
    with get_connection() as conn:
        conn.execute(
            f"INSERT INTO {records_table} (id, file_name, file_url) VALUES (%s, %s, %s)",
            (row["id"], row["file_name"], row["file_url"]),
        )
        conn.commit()
    try:
        yield row
    finally:
        with get_connection() as conn:
            conn.execute(f"DELETE FROM {records_table} WHERE id = %s", (row["id"],))
            conn.commit()


@pytest.fixture(scope="session")
def redis_client(test_settings: Settings) -> Generator[redis.Redis, None, None]:
    client = redis.Redis.from_url(test_settings.redis_url, decode_responses=True)
    try:
        client.ping()
    except redis.RedisError as e:
        pytest.skip(f"Redis not available: {e}. Set REDIS_URL to run.")
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def job_queue(redis_client: redis.Redis) -> Generator[RedisJobQueue, None, None]:
    queue = RedisJobQueue(redis_client, f"it-{uuid.uuid4().hex[:8]}", prefix="fpq-test")
    try:
        yield queue
    finally:
        queue.purge()
