"""
Per-chain deposit monitor - follows USDC transfers into the unified
contract and relays them.

Delivery is best effort: the monitor starts from the chain head, keeps no
record of processed logs, and a restart neither replays the gap nor
de-duplicates anything that is seen twice.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

import structlog

from .chains import ChainConfig
from .config import MonitorConfig
from .events import TransferDecodeError, TransferEvent, decode_transfer_log
from .evm import UnifiedContractClient

logger = structlog.get_logger()


class RelayOutcome(str, Enum):
    """How processing of a single transfer ended."""

    RELAYED = "relayed"
    REVERTED = "reverted"
    NOT_WHITELISTED = "not_whitelisted"
    WHITELIST_CHECK_FAILED = "whitelist_check_failed"
    RELAY_FAILED = "relay_failed"


@dataclass
class MonitorState:
    """Current monitor state."""

    is_running: bool = False
    last_block: Optional[int] = None
    transfers_seen: int = 0
    transfers_relayed: int = 0
    transfers_skipped: int = 0


class ChainMonitor:
    """
    Watches one chain for USDC transfers into the unified address.

    A poller task follows the Transfer logs and feeds decoded events into a
    bounded queue; worker tasks drain the queue and relay each event.
    """

    def __init__(
        self,
        chain: ChainConfig,
        config: MonitorConfig,
        client: Optional[UnifiedContractClient] = None,
    ):
        self.chain = chain
        self.config = config
        self.client = client or UnifiedContractClient(
            chain=chain,
            private_key=config.relayer_private_key,
            unified_address=config.unified_address,
        )
        self.state = MonitorState()
        self.queue: asyncio.Queue[TransferEvent] = asyncio.Queue(maxsize=config.relay_queue_size)
        self._tasks: list[asyncio.Task[None]] = []

    async def log_recipient(self) -> None:
        """Best-effort read of the contract recipient, for the startup log."""
        try:
            recipient = await self.client.get_recipient()
            logger.info("current_recipient", chain=self.chain.name, recipient=recipient)
        except Exception as e:
            logger.warning("recipient_read_failed", chain=self.chain.name, error=str(e))

    async def handle_log(self, log: Mapping[str, Any]) -> Optional[TransferEvent]:
        """
        Decode a log and queue it for relaying.

        Logs that fail to decode are dropped. Waits for queue space when the
        relay workers are behind.
        """
        try:
            event = decode_transfer_log(log)
        except TransferDecodeError as e:
            logger.error("transfer_decode_failed", chain=self.chain.name, error=str(e))
            return None

        self.state.transfers_seen += 1
        logger.info(
            "usdc_received",
            chain=self.chain.name,
            from_address=event.from_address,
            to_address=event.to_address,
            amount=event.amount,
            tx_hash=event.tx_hash,
        )
        await self.queue.put(event)
        return event

    async def process_transfer(self, event: TransferEvent) -> RelayOutcome:
        """Check the whitelist, then relay the transferred amount."""
        try:
            is_whitelisted = await self.client.is_whitelisted(self.client.address)
        except Exception as e:
            logger.error(
                "whitelist_check_failed",
                chain=self.chain.name,
                relayer=self.client.address,
                error=str(e),
            )
            self.state.transfers_skipped += 1
            return RelayOutcome.WHITELIST_CHECK_FAILED

        if not is_whitelisted:
            logger.error("relayer_not_whitelisted", chain=self.chain.name, relayer=self.client.address)
            self.state.transfers_skipped += 1
            return RelayOutcome.NOT_WHITELISTED

        result = await self.client.relay_token(self.chain.usdc, event.amount)

        if result.success:
            self.state.transfers_relayed += 1
            return RelayOutcome.RELAYED
        if result.reverted:
            return RelayOutcome.REVERTED
        return RelayOutcome.RELAY_FAILED

    async def poll_once(self) -> int:
        """
        Fetch Transfer logs mined since the last poll.

        The first call only records the current head. The range is fetched in
        windows of at most max_block_range blocks, and last_block advances
        after each window. Returns the number of logs handled.
        """
        head = await self.client.block_number()

        if self.state.last_block is None:
            self.state.last_block = head
            return 0

        handled = 0
        while self.state.last_block < head:
            from_block = self.state.last_block + 1
            to_block = min(from_block + self.config.max_block_range - 1, head)

            logs = await self.client.get_transfer_logs(from_block, to_block)
            for log in logs:
                await self.handle_log(log)

            self.state.last_block = to_block
            handled += len(logs)

        return handled

    async def run(self) -> None:
        """Follow Transfer logs until stopped."""
        self.state.is_running = True
        logger.info(
            "monitoring_usdc_transfers",
            chain=self.chain.name,
            chain_id=self.chain.chain_id,
            usdc=self.chain.usdc,
            unified_address=self.config.unified_address,
            relayer=self.client.address,
        )

        await self.log_recipient()

        while self.state.is_running:
            try:
                await self.poll_once()
            except Exception as e:
                # Range is re-requested on the next tick
                logger.error("poll_failed", chain=self.chain.name, error=str(e))

            await asyncio.sleep(self.config.poll_interval_seconds)

    async def _worker(self) -> None:
        while True:
            event = await self.queue.get()
            try:
                await self.process_transfer(event)
            except Exception as e:
                logger.error(
                    "transfer_processing_error",
                    chain=self.chain.name,
                    tx_hash=event.tx_hash,
                    error=str(e),
                )
            finally:
                self.queue.task_done()

    def start(self) -> None:
        """Spawn the poller and relay workers on the running loop."""
        self._tasks.append(asyncio.create_task(self.run(), name=f"{self.chain.name}-poller"))
        for i in range(self.config.relay_workers):
            self._tasks.append(
                asyncio.create_task(self._worker(), name=f"{self.chain.name}-relay-{i}")
            )

    async def stop(self) -> None:
        """Cancel the poller and workers."""
        self.state.is_running = False
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        logger.info(
            "monitor_stopped",
            chain=self.chain.name,
            seen=self.state.transfers_seen,
            relayed=self.state.transfers_relayed,
            skipped=self.state.transfers_skipped,
        )


class MonitorService:
    """All chain monitors of the process."""

    def __init__(self, config: MonitorConfig, monitors: Optional[list[ChainMonitor]] = None):
        self.config = config
        if monitors is None:
            # Chains lacking an RPC URL, or a process lacking credentials, are skipped
            monitors = []
            for chain in config.monitorable_chains():
                try:
                    monitors.append(ChainMonitor(chain, config))
                except Exception as e:
                    logger.error("monitor_init_failed", chain=chain.name, error=str(e))
        self.monitors = monitors

    @property
    def monitored_chains(self) -> list[str]:
        return [m.chain.name for m in self.monitors]

    def start(self) -> None:
        for monitor in self.monitors:
            monitor.start()

    async def stop(self) -> None:
        for monitor in self.monitors:
            await monitor.stop()
