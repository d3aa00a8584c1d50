"""
Configuration for the Greenhouse Hub.

Provides settings for the ThingsBoard platform client, command
confirmation timing, background monitors, and storage.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PlatformSettings(BaseSettings):
    """ThingsBoard platform client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PLATFORM_",
        env_file=".env",
        extra="ignore",
    )

    # Optional single tenant configured from the environment
    tenant: str = Field(default="default", description="Tenant key for env-configured credentials")
    base_url: Optional[str] = Field(default=None, description="ThingsBoard base URL")
    username: Optional[str] = Field(default=None, description="ThingsBoard login user")
    password: Optional[str] = Field(default=None, description="ThingsBoard login password")

    request_timeout: float = Field(default=10.0, description="Deadline for every platform request (seconds)")
    token_lifetime: float = Field(default=9000.0, description="Platform JWT lifetime (seconds)")
    token_expiry_buffer: float = Field(default=60.0, description="Refresh this long before expiry (seconds)")
    online_threshold_seconds: int = Field(default=180, description="Max age of last_seen for an online device")
    telemetry_fresh_seconds: int = Field(default=120, description="Max age of a status telemetry sample")


class CommandSettings(BaseSettings):
    """Command dispatch and confirmation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COMMAND_",
        env_file=".env",
        extra="ignore",
    )

    check_offsets: List[float] = Field(
        default=[1.2, 2.8],
        description="Confirmation check offsets after dispatch (seconds)",
    )
    simple_ttl: float = Field(default=8.0, description="Confirmation deadline for on/off actuators")
    compound_ttl: float = Field(default=12.0, description="Confirmation deadline for dual-flag motors")
    settle_delay: float = Field(default=1.0, description="Delay before reporting fire-and-forget success")
    check_online: bool = Field(default=False, description="Verify reachability before each dispatch")


class MonitorSettings(BaseSettings):
    """Background monitor configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONITOR_",
        env_file=".env",
        extra="ignore",
    )

    device_enabled: bool = Field(default=True, description="Run the device reachability monitor")
    sensor_enabled: bool = Field(default=True, description="Run the sensor threshold monitor")
    device_interval: int = Field(default=30, description="Reachability sweep interval (seconds)")
    sensor_interval: int = Field(default=60, description="Threshold sweep interval (seconds)")
    stale_after_seconds: int = Field(default=300, description="Reading age that counts as offline")
    offline_notify_every_seconds: int = Field(
        default=1800,
        description="Minimum gap between sensor offline summaries per device",
    )


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="greenhouse", description="Database name")
    user: str = Field(default="postgres", description="Database user")
    password: str = Field(default="postgres", description="Database password")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Max overflow connections")
    echo_sql: bool = Field(default=False, description="Echo SQL queries")

    @property
    def url(self) -> str:
        """Build database URL."""
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Greenhouse Hub")
    app_version: str = Field(default="1.0.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    api_prefix: str = Field(default="/api")
    api_version: str = Field(default="v1")

    # Sub-settings
    platform: PlatformSettings = Field(default_factory=PlatformSettings)
    commands: CommandSettings = Field(default_factory=CommandSettings)
    monitors: MonitorSettings = Field(default_factory=MonitorSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return Settings()
