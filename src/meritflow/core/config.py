"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class IngestionConfig(BaseSettings):
    """Spreadsheet ingestion limits and header-detection tuning."""

    model_config = {"env_prefix": "MERITFLOW_INGEST_"}

    max_file_size_mb: int = 50
    allowed_extensions: list[str] = [".csv", ".txt", ".xlsx", ".xlsm"]
    header_scan_rows: int = 20
    min_header_cells: int = 3
    salary_validity_threshold: float = 0.1
    low_validity_warning_ratio: float = 0.5
    proposal_max_file_size_mb: int = 10


class JoinConfig(BaseSettings):
    """Record joiner matching strategy."""

    model_config = {"env_prefix": "MERITFLOW_JOIN_"}

    prefer_email_match: bool = True
    require_exact_name_match: bool = False
    name_similarity_threshold: float = 0.8


class CurrencyConfig(BaseSettings):
    """Exchange-rate service configuration."""

    model_config = {"env_prefix": "MERITFLOW_CURRENCY_"}

    api_url: str = "https://api.exchangerate-api.com/v4/latest"
    timeout_seconds: float = 5.0
    cache_ttl_seconds: int = 3600
    offline: bool = False  # skip the API and use the static table


class PolicyConfig(BaseSettings):
    """Default raise-policy thresholds."""

    model_config = {"env_prefix": "MERITFLOW_POLICY_"}

    comparatio_floor: float = 76
    max_raise_percent_us: float = 12
    max_raise_percent_india: float = 35
    max_promotion_raise_percent_us: float = 20
    max_promotion_raise_percent_india: float = 45
    no_raise_threshold_months: int = 18
    min_months_between_promotions: int = 12
    max_grade_jump: int = 2


class RedisConfig(BaseSettings):
    """Redis cache configuration."""

    model_config = {"env_prefix": "MERITFLOW_REDIS_"}

    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str | None = None
    socket_timeout: float = 5.0
    namespace: str = "meritflow:"


class S3Config(BaseSettings):
    """S3 file storage configuration."""

    model_config = {"env_prefix": "MERITFLOW_S3_"}

    bucket: str = "meritflow-hr-exports"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    key_prefix: str = ""


class StorageConfig(BaseSettings):
    """Session persistence configuration."""

    model_config = {"env_prefix": "MERITFLOW_STORAGE_"}

    backend: Literal["memory", "redis"] = "memory"
    session_ttl_seconds: int = 7 * 24 * 3600
    file_cache_ttl_seconds: int = 24 * 3600


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "MERITFLOW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    ingestion: IngestionConfig = IngestionConfig()
    join: JoinConfig = JoinConfig()
    currency: CurrencyConfig = CurrencyConfig()
    policy: PolicyConfig = PolicyConfig()
    redis: RedisConfig = RedisConfig()
    s3: S3Config = S3Config()
    storage: StorageConfig = StorageConfig()
