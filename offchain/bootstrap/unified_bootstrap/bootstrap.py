"""
One-time administrative bootstrap of the unified contract.

Runs from the owner EOA using EIP-7702 self-delegation:
1. Verify the EOA owns the contract
2. setRecipient(recipient)
3. setRelayer(eoa, true)
4. relayETH()

Steps are strictly sequential and any failure aborts the run. There is no
resume or rollback.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import structlog
from web3.exceptions import TimeExhausted

from .config import BootstrapSettings
from .delegation import DelegatedExecutionClient
from .errors import NotOwnerError, TransactionFailedError

logger = structlog.get_logger()


@dataclass(frozen=True)
class BootstrapStep:
    """A delegated contract call and the pause that follows it."""

    name: str
    args: tuple[Any, ...] = ()
    pause_after: bool = False


@dataclass
class BootstrapResult:
    """Outcome of a bootstrap run."""

    owner: str
    tx_hashes: dict[str, str] = field(default_factory=dict)


class BootstrapRunner:
    """Executes the bootstrap steps against one contract."""

    def __init__(
        self,
        settings: BootstrapSettings,
        client: DelegatedExecutionClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.client = client
        self._sleep = sleep

    def steps(self) -> list[BootstrapStep]:
        """The ordered delegated calls."""
        return [
            BootstrapStep("setRecipient", (self.settings.recipient_address,), pause_after=True),
            BootstrapStep("setRelayer", (self.client.address, True), pause_after=True),
            BootstrapStep("relayETH"),
        ]

    def check_owner(self) -> str:
        """
        Verify the signer owns the contract.

        Raises:
            NotOwnerError: if owner() differs from the signer (case-insensitive)
        """
        owner = self.client.read_owner()
        if owner.lower() != self.client.address.lower():
            raise NotOwnerError(signer=self.client.address, owner=owner)

        logger.info("owner_check_passed", owner=owner)
        return owner

    def plan(self) -> list[tuple[str, str]]:
        """(step name, calldata) for each step, without sending anything."""
        self.check_owner()
        return [(step.name, self.client.encode_call(step.name, list(step.args))) for step in self.steps()]

    def run(self) -> BootstrapResult:
        """Run all steps in order."""
        logger.info(
            "bootstrap_starting",
            eoa=self.client.address,
            delegated_contract=self.client.contract_address,
            chain_id=self.client.chain_id,
        )

        result = BootstrapResult(owner=self.check_owner())

        for step in self.steps():
            result.tx_hashes[step.name] = self._execute(step)

            if step.pause_after and self.settings.step_delay_seconds > 0:
                logger.info("step_pause", step=step.name, seconds=self.settings.step_delay_seconds)
                self._sleep(self.settings.step_delay_seconds)

        logger.info("bootstrap_complete", **result.tx_hashes)
        return result

    def _execute(self, step: BootstrapStep) -> str:
        data = self.client.encode_call(step.name, list(step.args))

        # A fresh authorization per transaction, signed right before sending
        authorization = self.client.sign_authorization()
        tx_hash = self.client.send_delegated_call(data, authorization)

        logger.info(
            "delegated_tx_submitted",
            step=step.name,
            tx_hash=tx_hash,
            explorer=self.explorer_link(tx_hash),
        )

        if self.settings.wait_for_receipt:
            self._confirm(step, tx_hash)

        return tx_hash

    def _confirm(self, step: BootstrapStep, tx_hash: str) -> None:
        try:
            receipt = self.client.wait_for_receipt(tx_hash, timeout=self.settings.confirmation_timeout_seconds)
        except TimeExhausted as e:
            raise TransactionFailedError(step.name, tx_hash, "not confirmed in time") from e

        if receipt["status"] != 1:
            raise TransactionFailedError(step.name, tx_hash, "reverted")

        logger.info(
            "delegated_tx_confirmed",
            step=step.name,
            tx_hash=tx_hash,
            block_number=receipt["blockNumber"],
        )

    def explorer_link(self, tx_hash: str) -> Optional[str]:
        if not self.settings.explorer_tx_url:
            return None
        return self.settings.explorer_tx_url + tx_hash
