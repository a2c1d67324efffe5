"""
Configuration for the bootstrap command.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from web3 import Web3

from .errors import ConfigurationError

# Field names of the values the bootstrap cannot run without
REQUIRED_FIELDS = ("private_key", "sepolia_rpc_url", "contract_address", "recipient_address")


class BootstrapSettings(BaseSettings):
    """
    Bootstrap settings.

    All settings can be overridden via environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Owner EOA and network
    private_key: Optional[str] = Field(default=None, description="Contract owner private key")
    sepolia_rpc_url: Optional[str] = Field(default=None, description="Sepolia RPC URL")

    # Contracts
    contract_address: Optional[str] = Field(
        default=None,
        description="Unified contract whose code the EOA delegates to",
    )
    recipient_address: Optional[str] = Field(
        default=None,
        description="Recipient to configure on the contract",
    )

    # Sequencing
    step_delay_seconds: float = Field(
        default=15.0,
        ge=0,
        description="Fixed pause after setRecipient and setRelayer",
    )
    wait_for_receipt: bool = Field(
        default=True,
        description="Also poll each transaction until it is included",
    )
    confirmation_timeout_seconds: float = Field(default=120.0, gt=0)

    gas_limit: int = Field(default=500_000, gt=0)
    explorer_tx_url: str = Field(default="https://sepolia.etherscan.io/tx/")

    log_json: bool = False

    @classmethod
    def load(cls, env_path: Optional[Path] = None) -> "BootstrapSettings":
        return cls(_env_file=env_path) if env_path else cls()

    def missing(self) -> list[str]:
        """Environment variable names of required values that are unset."""
        return [name.upper() for name in REQUIRED_FIELDS if not getattr(self, name)]

    def require(self) -> None:
        """
        Fail unless every required value is present and well formed.

        Raises:
            ConfigurationError: naming every missing or malformed variable
        """
        missing = self.missing()
        if missing:
            raise ConfigurationError(f"Missing env vars: {', '.join(missing)}")

        for name in ("contract_address", "recipient_address"):
            if not Web3.is_address(getattr(self, name)):
                raise ConfigurationError(f"{name.upper()} is not a valid address")
