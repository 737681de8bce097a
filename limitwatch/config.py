from pydantic_settings import BaseSettings

from limitwatch.intervals import DEFAULT_REFRESH_MS, REFRESH_INTERVALS_MS


class Settings(BaseSettings):
    upstream_url: str = "https://api.globalping.io/v1/limits"
    upstream_api_key: str = ""
    sample_max_chars: int = 300
    default_refresh_ms: int = DEFAULT_REFRESH_MS
    refresh_intervals_ms: list[int] = list(REFRESH_INTERVALS_MS)
    cors_origins: str = "*"
    log_format: str = "text"
    log_level: str = "INFO"
    # ``extra`` field names masked by the log formatters (case-insensitive).
    log_redacted_fields: list[str] = [
        "authorization",
        "api_key",
        "upstream_api_key",
        "token",
        "secret",
    ]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
