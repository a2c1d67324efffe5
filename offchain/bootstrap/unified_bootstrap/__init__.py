"""
Unified Contract Bootstrap

One-shot administrative setup of the unified contract from its owner EOA,
using EIP-7702 self-delegation for each call.

Usage:
    # Run setRecipient, setRelayer and relayETH in order
    unified-bootstrap run

    # Verify ownership and show calldata only
    unified-bootstrap run --dry-run
"""

__version__ = "0.1.0"

from .bootstrap import BootstrapResult, BootstrapRunner
from .config import BootstrapSettings
from .delegation import DelegatedExecutionClient, sign_self_authorization
from .errors import BootstrapError, ConfigurationError, NotOwnerError, TransactionFailedError

__all__ = [
    "__version__",
    "BootstrapResult",
    "BootstrapRunner",
    "BootstrapSettings",
    "DelegatedExecutionClient",
    "sign_self_authorization",
    "BootstrapError",
    "ConfigurationError",
    "NotOwnerError",
    "TransactionFailedError",
]
