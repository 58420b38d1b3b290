from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    http_host: str = "0.0.0.0"
    http_port: int = 3001
    webhook_secret: str = ""

    redis_url: str = "redis://localhost:6379/0"
    queue_name: str = "fine-processing"
    queue_prefix: str = "fpq"

    max_job_attempts: int = 3
    job_backoff_seconds: int = 5
    job_poll_interval_seconds: int = 5
    job_stall_timeout_seconds: int = 600
    worker_concurrency: int = 1

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "fines"
    db_username: str = "fines"
    db_password: str = "secret"
    records_table: str = "records"

    storage_provider: str = "supabase"
    storage_bucket: str = ""
    storage_local_root: str = "/app/files"
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    extraction_provider: str = "gemini"
    extraction_timeout_seconds: int = 120
    extraction_prompt_path: str = ""
    gemini_api_key: str = ""
    gemini_model: str = ""
    openai_api_key: str = ""
    openai_model_name: str = ""
