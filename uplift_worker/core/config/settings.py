"""
Application settings and configuration management
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from uplift_worker.shared.constants.app import (
    PROJECT_NAME,
    VERSION,
    SERVICE_NAME,
    DEFAULT_PORT,
    DEFAULT_DATABASE_URL,
)
from uplift_worker.shared.constants import learning as defaults
from uplift_worker.core.exceptions import ConfigurationError

ENV_CONFIG = SettingsConfigDict(
    env_file=(".env.local", ".env"),  # .env.local wins
    env_file_encoding="utf-8",
    case_sensitive=False,
    extra="ignore",
)

PRIVACY_LEVELS = ("basic", "standard", "advanced")
LOG_FORMATS = ("console", "json")


class DatabaseSettings(BaseSettings):
    """Database configuration settings"""

    model_config = ENV_CONFIG

    DATABASE_URL: str = Field(default=DEFAULT_DATABASE_URL)
    # Control SQLAlchemy logging of SQL and pool events
    SQLALCHEMY_ECHO: bool = Field(default=False)
    SQLALCHEMY_ECHO_POOL: bool = Field(default=False)
    DATABASE_QUERY_TIMEOUT: int = Field(default=30)

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            return DEFAULT_DATABASE_URL
        return v


class LearningSettings(BaseSettings):
    """Behavioral learning pipeline settings"""

    model_config = ENV_CONFIG

    # Rolling windows
    SIMILARITY_WINDOW_DAYS: int = Field(default=defaults.SIMILARITY_WINDOW_DAYS)
    PERFORMANCE_WINDOW_DAYS: int = Field(default=defaults.PERFORMANCE_WINDOW_DAYS)
    PROFILE_WINDOW_DAYS: int = Field(default=defaults.PROFILE_WINDOW_DAYS)
    ATTRIBUTION_WINDOW_DAYS: int = Field(default=defaults.ATTRIBUTION_WINDOW_DAYS)

    # Similarity engine
    SIMILARITY_JACCARD_WEIGHT: float = Field(default=defaults.SIMILARITY_JACCARD_WEIGHT)
    SIMILARITY_FREQUENCY_WEIGHT: float = Field(
        default=defaults.SIMILARITY_FREQUENCY_WEIGHT
    )
    SIMILARITY_MIN_SCORE: float = Field(default=defaults.SIMILARITY_MIN_SCORE)
    SIMILARITY_MIN_CO_PURCHASES: int = Field(
        default=defaults.SIMILARITY_MIN_CO_PURCHASES
    )
    SIMILARITY_INSERT_BATCH_SIZE: int = Field(
        default=defaults.SIMILARITY_INSERT_BATCH_SIZE, gt=0
    )

    # Performance scorer
    PERFORMANCE_MIN_IMPRESSIONS: int = Field(
        default=defaults.PERFORMANCE_MIN_IMPRESSIONS
    )
    PERFORMANCE_BLACKLIST_MIN_IMPRESSIONS: int = Field(
        default=defaults.PERFORMANCE_BLACKLIST_MIN_IMPRESSIONS
    )
    PERFORMANCE_LOW_CVR_THRESHOLD: float = Field(
        default=defaults.PERFORMANCE_LOW_CVR_THRESHOLD
    )
    PERFORMANCE_LOW_CTR_THRESHOLD: float = Field(
        default=defaults.PERFORMANCE_LOW_CTR_THRESHOLD
    )
    PERFORMANCE_BOOST_CVR_THRESHOLD: float = Field(
        default=defaults.PERFORMANCE_BOOST_CVR_THRESHOLD
    )

    # Attribution matcher
    ATTRIBUTION_CANDIDATE_LIMIT: int = Field(
        default=defaults.ATTRIBUTION_CANDIDATE_LIMIT, gt=0
    )
    MISSED_OPPORTUNITY_OVERALL_INCREMENT: float = Field(
        default=defaults.MISSED_OPPORTUNITY_OVERALL_INCREMENT
    )
    MISSED_OPPORTUNITY_CO_PURCHASE_INCREMENT: float = Field(
        default=defaults.MISSED_OPPORTUNITY_CO_PURCHASE_INCREMENT
    )

    # Profiles
    DEFAULT_PRIVACY_LEVEL: str = Field(default=defaults.DEFAULT_PRIVACY_LEVEL)
    DATA_RETENTION_DAYS: int = Field(default=defaults.DEFAULT_DATA_RETENTION_DAYS)

    @field_validator("DEFAULT_PRIVACY_LEVEL")
    @classmethod
    def validate_privacy_level(cls, v):
        value = (v or defaults.DEFAULT_PRIVACY_LEVEL).strip().lower()
        if value not in PRIVACY_LEVELS:
            raise ValueError(f"DEFAULT_PRIVACY_LEVEL must be one of {PRIVACY_LEVELS}")
        return value


class SecuritySettings(BaseSettings):
    """Secrets guarding the cron and webhook triggers"""

    model_config = ENV_CONFIG

    CRON_SECRET: str = Field(default="")
    SHOPIFY_API_SECRET: str = Field(default="")
    WEBHOOK_MAX_TIMESTAMP_AGE_SECONDS: int = Field(default=300)


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""

    model_config = ENV_CONFIG

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="console")
    LOG_FILE_ENABLED: bool = Field(default=False)
    LOG_DIR: str = Field(default="logs")
    LOG_MAX_FILE_SIZE: int = Field(default=10 * 1024 * 1024)
    LOG_BACKUP_COUNT: int = Field(default=5)

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        value = (v or "console").strip().lower()
        if value not in LOG_FORMATS:
            raise ValueError(f"LOG_FORMAT must be one of {LOG_FORMATS}")
        return value


class Settings(BaseSettings):
    """Main application settings"""

    model_config = ENV_CONFIG

    # App Configuration
    PROJECT_NAME: str = PROJECT_NAME
    VERSION: str = VERSION
    SERVICE_NAME: str = SERVICE_NAME
    DEBUG: bool = Field(default=False)
    PORT: int = Field(default=DEFAULT_PORT)

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    learning: LearningSettings = Field(default_factory=LearningSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Database Timeout Configuration
    DATABASE_CONNECT_TIMEOUT: int = Field(default=10)

    def validate_configuration(self) -> None:
        """Validate the complete configuration"""
        learning = self.learning
        weight_total = (
            learning.SIMILARITY_JACCARD_WEIGHT + learning.SIMILARITY_FREQUENCY_WEIGHT
        )
        if abs(weight_total - 1.0) > 1e-9:
            raise ConfigurationError(
                "Similarity weights must add up to 1.0",
                config_key="SIMILARITY_JACCARD_WEIGHT",
                details={"weight_total": weight_total},
            )
        for key in (
            "SIMILARITY_WINDOW_DAYS",
            "PERFORMANCE_WINDOW_DAYS",
            "PROFILE_WINDOW_DAYS",
            "ATTRIBUTION_WINDOW_DAYS",
        ):
            if getattr(learning, key) <= 0:
                raise ConfigurationError(
                    f"{key} must be a positive number of days", config_key=key
                )


# Create settings instance
settings = Settings()

# Validate configuration on import
try:
    settings.validate_configuration()
except ConfigurationError as e:
    print(f"Configuration Error: {e}")
    raise
