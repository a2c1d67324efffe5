"""
EVM interaction with the unified contract.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog
from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.types import TxReceipt

from .chains import ChainConfig
from .events import build_transfer_filter

logger = structlog.get_logger()


# Unified contract ABI (minimal for relaying)
UNIFIED_ABI = [
    {
        "inputs": [],
        "name": "recipient",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "", "type": "address"}],
        "name": "whitelistedRelayers",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "token", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "name": "relayToken",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


@dataclass
class RelayResult:
    """Result of submitting a relayToken transaction."""

    success: bool
    tx_hash: Optional[str] = None
    error: Optional[str] = None
    gas_used: Optional[int] = None
    reverted: bool = False


class UnifiedContractClient:
    """
    Async client for the unified contract on one chain.

    Wraps the RPC connection, the relayer account and the contract instance.
    """

    def __init__(
        self,
        chain: ChainConfig,
        private_key: str,
        unified_address: str,
        w3: Optional[AsyncWeb3] = None,
    ):
        self.chain = chain
        self.w3 = w3 or AsyncWeb3(AsyncHTTPProvider(chain.rpc_url))
        self.account = Account.from_key(private_key)
        self.unified_address = AsyncWeb3.to_checksum_address(unified_address)
        self.contract = self.w3.eth.contract(address=self.unified_address, abi=UNIFIED_ABI)

    @property
    def address(self) -> str:
        """Relayer account address."""
        return self.account.address

    async def get_recipient(self) -> str:
        """Read the contract's configured recipient."""
        return await self.contract.functions.recipient().call()

    async def is_whitelisted(self, relayer: Optional[str] = None) -> bool:
        """Check whitelistedRelayers(relayer), defaulting to our own address."""
        return await self.contract.functions.whitelistedRelayers(relayer or self.address).call()

    async def block_number(self) -> int:
        return await self.w3.eth.block_number

    async def get_transfer_logs(self, from_block: int, to_block: int) -> list[Any]:
        """Fetch USDC Transfer logs into the unified address for a block range."""
        params: dict[str, Any] = build_transfer_filter(self.chain.usdc, self.unified_address)
        params["fromBlock"] = from_block
        params["toBlock"] = to_block
        return list(await self.w3.eth.get_logs(params))

    async def send_relay_token(self, token: str, amount: int) -> str:
        """Sign and broadcast relayToken(token, amount). Returns the tx hash."""
        nonce = await self.w3.eth.get_transaction_count(self.address, "pending")
        tx = await self.contract.functions.relayToken(
            AsyncWeb3.to_checksum_address(token), amount
        ).build_transaction(
            {
                "from": self.address,
                "nonce": nonce,
                "chainId": self.chain.chain_id,
            }
        )

        signed_tx = self.account.sign_transaction(tx)
        tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        return tx_hash.to_0x_hex()

    async def wait_for_receipt(self, tx_hash: str) -> TxReceipt:
        return await self.w3.eth.wait_for_transaction_receipt(tx_hash)

    async def relay_token(self, token: str, amount: int) -> RelayResult:
        """Submit relayToken and wait for it to be mined. Never raises."""
        tx_hash: Optional[str] = None
        try:
            tx_hash = await self.send_relay_token(token, amount)
            logger.info(
                "relay_tx_sent",
                chain=self.chain.name,
                tx_hash=tx_hash,
                token=token,
                amount=amount,
            )

            receipt = await self.wait_for_receipt(tx_hash)
            receipt_hash = receipt["transactionHash"].to_0x_hex()

            if receipt["status"] == 1:
                logger.info(
                    "relay_tx_confirmed",
                    chain=self.chain.name,
                    tx_hash=receipt_hash,
                    block_number=receipt["blockNumber"],
                    gas_used=receipt["gasUsed"],
                )
                return RelayResult(success=True, tx_hash=receipt_hash, gas_used=receipt["gasUsed"])

            logger.error("relay_tx_reverted", chain=self.chain.name, tx_hash=receipt_hash)
            return RelayResult(
                success=False,
                tx_hash=receipt_hash,
                error="Transaction reverted",
                reverted=True,
            )

        except Exception as e:
            logger.error("relay_tx_failed", chain=self.chain.name, tx_hash=tx_hash, error=str(e))
            return RelayResult(success=False, tx_hash=tx_hash, error=str(e))
