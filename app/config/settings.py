from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docinsight"
    db_username: str = "docinsight"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    storage_url: str = "http://localhost:54321"
    storage_service_key: str = ""
    storage_bucket: str = "docs"
    storage_timeout_seconds: int = 30
    upload_url_ttl_seconds: int = 300
    download_url_ttl_seconds: int = 3600

    upload_max_bytes: int = 30 * 1024 * 1024
    filename_max_length: int = 255
    document_ttl_days: int = 7
    allowed_mime_types: list[str] = [
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/gif",
        "image/webp",
    ]

    job_poll_interval_seconds: int = 10
    dispatcher_batch_size: int = 5
    dispatcher_concurrency: int = 1
    max_job_attempts: int = 3
    retry_backoff_base_seconds: int = 30
    retry_backoff_max_seconds: int = 900
    job_stale_after_seconds: int = 600
    dispatcher_secret: str = ""
    dispatcher_trigger_url: str = ""
    dispatcher_trigger_timeout_seconds: int = 2

    extraction_provider: str = "openai"
    openai_api_key: str = ""
    openai_model_name: str = "gpt-4o"
    openai_timeout_seconds: int = 60
    openai_compatible_base_url: str = ""
    openai_compatible_api_key: str = ""
    openai_compatible_model_name: str = ""
    extraction_temperature: float = 0.0
    extraction_seed: int = 12345
    detection_max_tokens: int = 50
    extraction_max_tokens: int = 4000

    pdf_engine: str = "pymupdf"
    pdf_render_dpi: int = 150

    qa_temperature: float = 0.7
    qa_max_tokens: int = 500
