"""
Errors that abort the bootstrap run.
"""


class BootstrapError(Exception):
    """Base error for the bootstrap sequence."""


class ConfigurationError(BootstrapError):
    """Required configuration is missing or invalid."""


class NotOwnerError(BootstrapError):
    """The signer does not own the target contract."""

    def __init__(self, signer: str, owner: str):
        self.signer = signer
        self.owner = owner
        super().__init__(f"EOA {signer} is not the owner. Contract owner is: {owner}")


class TransactionFailedError(BootstrapError):
    """A delegated transaction reverted or was not confirmed in time."""

    def __init__(self, step: str, tx_hash: str, reason: str):
        self.step = step
        self.tx_hash = tx_hash
        self.reason = reason
        super().__init__(f"{step} transaction {tx_hash} failed: {reason}")
