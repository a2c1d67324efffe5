"""
Supported chains and their USDC token contracts.
"""

from dataclasses import dataclass


SEPOLIA_CHAIN_ID = 11155111
ARBITRUM_SEPOLIA_CHAIN_ID = 421614

# USDC token contract per chain id
USDC_ADDRESSES: dict[int, str] = {
    SEPOLIA_CHAIN_ID: "0x1c7D4B196Cb0C7B01d743Fbc6116a902379C7238",
    ARBITRUM_SEPOLIA_CHAIN_ID: "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d",
}


@dataclass(frozen=True)
class ChainConfig:
    """A chain the relayer can monitor."""

    name: str
    rpc_url: str  # Empty when the chain is not configured
    chain_id: int
    usdc: str

    @property
    def is_configured(self) -> bool:
        return bool(self.rpc_url)


def build_chains(sepolia_rpc_url: str = "", arbitrum_rpc_url: str = "") -> tuple[ChainConfig, ...]:
    """Build the fixed chain table, filling in RPC URLs from configuration."""
    return (
        ChainConfig(
            name="sepolia",
            rpc_url=sepolia_rpc_url,
            chain_id=SEPOLIA_CHAIN_ID,
            usdc=USDC_ADDRESSES[SEPOLIA_CHAIN_ID],
        ),
        ChainConfig(
            name="arbitrum",
            rpc_url=arbitrum_rpc_url,
            chain_id=ARBITRUM_SEPOLIA_CHAIN_ID,
            usdc=USDC_ADDRESSES[ARBITRUM_SEPOLIA_CHAIN_ID],
        ),
    )
