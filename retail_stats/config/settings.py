"""
Retail Statistics Settings

Environment-driven configuration, one prefixed section per concern:

- POSTGRES_* / DATABASE_URL: where the shop database lives
- API_*: how the HTTP server binds and whom it answers
- LOG_*: log level, format and optional file
- STATS_*: report defaults for callers that omit a parameter

Values may also come from a ``.env`` file in the working directory.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("development", "testing", "staging", "production")


class DatabaseSettings(BaseSettings):
    """Shop database connection"""

    model_config = SettingsConfigDict(env_prefix="POSTGRES_", env_file=".env", extra="ignore")

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    db: str = Field(default="retail_shop", description="Database name")
    user: str = Field(default="retail", description="Database user")
    password: SecretStr = Field(default=SecretStr(""), description="Database password")
    echo: bool = Field(default=False, description="Log every SQL statement")
    url: Optional[str] = Field(
        default=None,
        alias="DATABASE_URL",
        description="Complete async URL; wins over the individual fields",
    )

    @property
    def async_url(self) -> str:
        if self.url:
            return self.url
        password = self.password.get_secret_value()
        return f"postgresql+asyncpg://{self.user}:{password}@{self.host}:{self.port}/{self.db}"


class ApiSettings(BaseSettings):
    """HTTP server binding"""

    model_config = SettingsConfigDict(env_prefix="API_", env_file=".env", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Dashboard origins allowed to read the reports",
    )


class MonitoringSettings(BaseSettings):
    """Log output"""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = Field(default="INFO", description="DEBUG, INFO, WARNING or ERROR")
    format: str = Field(default="json", description="json or text")
    file: Optional[str] = Field(default=None, description="Also write JSON lines to this path")


class StatisticsSettings(BaseSettings):
    """
    Report defaults used by the HTTP layer when a caller omits a parameter.

    The statistics engine normalises invalid input on its own; these values
    only choose what "omitted" means for API callers.
    """

    model_config = SettingsConfigDict(env_prefix="STATS_", env_file=".env", extra="ignore")

    best_sellers_limit: int = Field(default=10, description="Best-selling variants returned")
    top_brands_limit: int = Field(default=3, description="Manufacturers returned")
    low_stock_threshold: int = Field(default=5, description="Stock at or below which a product is low")
    low_stock_limit: int = Field(default=10, description="Low-stock products returned")
    fallback_lookback_years: int = Field(
        default=1,
        description="Trailing window used when the all-time best-sellers query fails",
    )


class Settings(BaseSettings):
    """Top-level settings; every section reads its own environment prefix."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="retail-stats", alias="APP_NAME")
    app_env: str = Field(default="development", alias="APP_ENV")
    version: str = Field(default="1.0.0", alias="APP_VERSION")

    api: ApiSettings = Field(default_factory=ApiSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        v = v.lower()
        if v not in ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {', '.join(ENVIRONMENTS)}")
        return v

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """Settings are read from the environment once per process."""
    return Settings()
