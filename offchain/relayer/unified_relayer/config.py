"""
Configuration management for the Unified Deposit Relayer.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .chains import ChainConfig, build_chains


class Settings(BaseSettings):
    """
    Environment-based settings.

    Every field maps to the upper-case environment variable of the same name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Unified contract and relayer credential
    unified_address: str = ""
    relayer_private_key: str = ""

    # RPC endpoints (a chain without one is not monitored)
    sepolia_rpc_url: str = ""
    arbitrum_sepolia_rpc_url: str = ""

    # HTTP server
    backend_host: str = "0.0.0.0"
    backend_port: int = 3000
    allowed_origins: list[str] = Field(default=["*"], description="CORS allowed origins")

    # Monitoring
    poll_interval_seconds: float = 4.0
    max_block_range: int = Field(default=2000, ge=1, description="Most blocks per eth_getLogs call")
    relay_queue_size: int = Field(default=100, ge=1)
    relay_workers: int = Field(default=1, ge=1)

    log_json: bool = False


@dataclass(frozen=True)
class MonitorConfig:
    """
    Immutable process configuration.

    Built once at startup and shared by reference with every chain monitor.
    """

    unified_address: str
    relayer_private_key: str = field(repr=False)
    chains: tuple[ChainConfig, ...]
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: tuple[str, ...] = ("*",)
    poll_interval_seconds: float = 4.0
    max_block_range: int = 2000
    relay_queue_size: int = 100
    relay_workers: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "MonitorConfig":
        return cls(
            unified_address=settings.unified_address,
            relayer_private_key=settings.relayer_private_key,
            chains=build_chains(settings.sepolia_rpc_url, settings.arbitrum_sepolia_rpc_url),
            host=settings.backend_host,
            port=settings.backend_port,
            allowed_origins=tuple(settings.allowed_origins),
            poll_interval_seconds=settings.poll_interval_seconds,
            max_block_range=settings.max_block_range,
            relay_queue_size=settings.relay_queue_size,
            relay_workers=settings.relay_workers,
        )

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "MonitorConfig":
        """Load configuration from environment."""
        settings = Settings(_env_file=env_path) if env_path else Settings()
        return cls.from_settings(settings)

    @property
    def has_credentials(self) -> bool:
        """Whether the relayer key and unified address are both set."""
        return bool(self.unified_address and self.relayer_private_key)

    @property
    def configured_chains(self) -> list[ChainConfig]:
        """Chains with an RPC URL, in declaration order."""
        return [chain for chain in self.chains if chain.is_configured]

    def monitorable_chains(self) -> list[ChainConfig]:
        """Chains that will actually get a monitor."""
        if not self.has_credentials:
            return []
        return self.configured_chains
