"""
Unified Deposit Relayer

Watches Sepolia and Arbitrum Sepolia for USDC transfers into the unified
contract and calls relayToken() to forward them to the configured recipient.
The relayer account must be whitelisted on the contract.

Usage:
    # Run the monitors and the /health endpoint
    unified-relayer run

    # Show recipient and whitelist status per chain
    unified-relayer status
"""

__version__ = "0.1.0"

from .chains import ChainConfig, USDC_ADDRESSES
from .config import MonitorConfig, Settings
from .events import TransferDecodeError, TransferEvent, decode_transfer_log
from .evm import RelayResult, UnifiedContractClient
from .monitor import ChainMonitor, MonitorService, RelayOutcome

__all__ = [
    "__version__",
    "ChainConfig",
    "USDC_ADDRESSES",
    "MonitorConfig",
    "Settings",
    "TransferDecodeError",
    "TransferEvent",
    "decode_transfer_log",
    "RelayResult",
    "UnifiedContractClient",
    "ChainMonitor",
    "MonitorService",
    "RelayOutcome",
]
