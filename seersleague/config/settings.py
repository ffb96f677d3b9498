"""
Application settings using pydantic-settings.

Loads configuration from environment variables with validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

# SeersLeague contract on Base mainnet
DEFAULT_CONTRACT_ADDRESS = "0x6b0720D001f65967358a31e319F63D3833217632"


class ChainSettings(BaseSettings):
    """Ledger (Base RPC) connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    rpc_url: str = Field(default="https://mainnet.base.org", description="JSON-RPC endpoint")
    chain_id: int = Field(default=8453, ge=1, description="Expected chain id (Base mainnet)")
    contract_address: str = Field(
        default=DEFAULT_CONTRACT_ADDRESS,
        pattern=r"^0x[0-9a-fA-F]{40}$",
        description="SeersLeague contract address",
    )

    # Scan window
    deployment_block: int = Field(
        default=0,
        ge=0,
        description="Contract deployment block, 0 when unknown",
    )
    fallback_scan_blocks: int = Field(
        default=10_000,
        ge=1,
        description="Recent-window size used when no deployment block is known",
    )

    # Timeouts
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single upstream call",
    )


class MongoSettings(BaseSettings):
    """MongoDB connection settings for the leaderboard cache and action locks."""

    model_config = SettingsConfigDict(
        env_prefix="MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="MongoDB host")
    port: int = Field(default=27017, ge=1, le=65535, description="MongoDB port")
    root_user: str = Field(default="admin", description="MongoDB root username")
    root_password: SecretStr = Field(
        default=SecretStr("secret"), description="MongoDB root password"
    )
    db_name: str = Field(default="seersleague", description="Database name")
    auth_source: str = Field(default="admin", description="Authentication database")

    # Connection pool settings
    min_pool_size: int = Field(default=1, ge=0, description="Minimum connection pool size")
    max_pool_size: int = Field(default=20, ge=1, description="Maximum connection pool size")

    # Timeouts
    connect_timeout_ms: int = Field(default=5000, ge=1000, description="Connection timeout in ms")
    server_selection_timeout_ms: int = Field(
        default=5000, ge=1000, description="Server selection timeout in ms"
    )

    @computed_field  # type: ignore[misc]
    @property
    def uri(self) -> str:
        """Build MongoDB connection URI."""
        password = self.root_password.get_secret_value()
        return (
            f"mongodb://{self.root_user}:{password}@{self.host}:{self.port}"
            f"/{self.db_name}?authSource={self.auth_source}"
        )


class LeaderboardSettings(BaseSettings):
    """Leaderboard snapshot settings."""

    model_config = SettingsConfigDict(
        env_prefix="LEADERBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    stale_after_seconds: int = Field(
        default=3600, ge=1, description="Snapshot age that triggers a background refresh"
    )
    top_players: int = Field(default=65, ge=1, le=1000, description="Entries returned by default")
    max_concurrency: int = Field(
        default=8, ge=1, le=64, description="Concurrent stats reads during a refresh"
    )
    refresh_cooldown_seconds: int = Field(
        default=300, ge=0, description="Minimum interval between two refreshes"
    )
    lock_ttl_seconds: int = Field(
        default=900, ge=1, description="Age after which a held refresh lock is reclaimable"
    )


class AppSettings(BaseSettings):
    """Application-level settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    name: str = Field(default="SeersLeague Ledger Reader", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )
    debug: bool = Field(default=False, description="Debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


class Settings(BaseSettings):
    """Main settings container."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    chain: ChainSettings = Field(default_factory=ChainSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)
    leaderboard: LeaderboardSettings = Field(default_factory=LeaderboardSettings)
    app: AppSettings = Field(default_factory=AppSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()
