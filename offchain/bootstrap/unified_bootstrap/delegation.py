"""
EIP-7702 delegated execution from the owner EOA.

Each call is sent as a set-code transaction addressed to the EOA itself,
carrying an authorization that points the EOA's code at the unified contract.
"""

from typing import Any, Optional

import structlog
from eth_account import Account
from eth_account.datastructures import SignedSetCodeAuthorization
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.types import TxReceipt

logger = structlog.get_logger()

SET_CODE_TX_TYPE = 4


# Unified contract ABI (admin functions)
UNIFIED_ADMIN_ABI = [
    {
        "inputs": [],
        "name": "owner",
        "outputs": [{"name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"name": "newRecipient", "type": "address"}],
        "name": "setRecipient",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [
            {"name": "relayer", "type": "address"},
            {"name": "status", "type": "bool"},
        ],
        "name": "setRelayer",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "relayETH",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


def sign_self_authorization(
    account: LocalAccount,
    contract_address: str,
    chain_id: int,
    account_nonce: int,
) -> SignedSetCodeAuthorization:
    """
    Sign an EIP-7702 authorization that the account itself will submit.

    The enclosing transaction consumes account_nonce before the authorization
    list is processed, so the authorization must carry account_nonce + 1.
    """
    authorization = {
        "chainId": chain_id,
        "address": Web3.to_checksum_address(contract_address),
        "nonce": account_nonce + 1,
    }
    signed = account.sign_authorization(authorization)

    logger.debug(
        "signed_authorization",
        signer=account.address,
        contract=authorization["address"],
        chain_id=chain_id,
        nonce=authorization["nonce"],
    )

    return signed


def build_delegated_transaction(
    sender: str,
    data: str,
    authorization: SignedSetCodeAuthorization,
    chain_id: int,
    nonce: int,
    gas: int,
    max_fee_per_gas: int,
    max_priority_fee_per_gas: int,
) -> dict[str, Any]:
    """Build a set-code transaction that executes data on the sender's own account."""
    return {
        "type": SET_CODE_TX_TYPE,
        "chainId": chain_id,
        "nonce": nonce,
        "to": Web3.to_checksum_address(sender),
        "value": 0,
        "data": data,
        "gas": gas,
        "maxFeePerGas": max_fee_per_gas,
        "maxPriorityFeePerGas": max_priority_fee_per_gas,
        "authorizationList": [authorization],
    }


class DelegatedExecutionClient:
    """Sync client that sends the owner's delegated calls."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        contract_address: str,
        gas_limit: int = 500_000,
        w3: Optional[Web3] = None,
        chain_id: Optional[int] = None,
    ):
        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url))
        self.account: LocalAccount = Account.from_key(private_key)
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=UNIFIED_ADMIN_ABI)
        self.gas_limit = gas_limit
        self._chain_id = chain_id

    @property
    def address(self) -> str:
        """Signer (EOA) address."""
        return self.account.address

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = self.w3.eth.chain_id
        return self._chain_id

    def read_owner(self) -> str:
        """Call owner() on the contract."""
        return self.contract.functions.owner().call()

    def encode_call(self, fn_name: str, args: Optional[list[Any]] = None) -> str:
        """ABI-encode a contract call."""
        return self.contract.encode_abi(fn_name, args=args or [])

    def next_nonce(self) -> int:
        return self.w3.eth.get_transaction_count(self.address, "pending")

    def sign_authorization(self, account_nonce: Optional[int] = None) -> SignedSetCodeAuthorization:
        """Sign a fresh authorization for the next transaction from this account."""
        if account_nonce is None:
            account_nonce = self.next_nonce()
        return sign_self_authorization(self.account, self.contract_address, self.chain_id, account_nonce)

    def fee_params(self) -> tuple[int, int]:
        """(maxFeePerGas, maxPriorityFeePerGas) from the latest base fee."""
        base_fee = self.w3.eth.get_block("latest")["baseFeePerGas"]
        priority_fee = self.w3.eth.max_priority_fee
        return 2 * base_fee + priority_fee, priority_fee

    def send_delegated_call(self, data: str, authorization: SignedSetCodeAuthorization) -> str:
        """Sign and broadcast a delegated call. Returns the tx hash."""
        max_fee, priority_fee = self.fee_params()
        tx = build_delegated_transaction(
            sender=self.address,
            data=data,
            authorization=authorization,
            chain_id=self.chain_id,
            nonce=self.next_nonce(),
            gas=self.gas_limit,
            max_fee_per_gas=max_fee,
            max_priority_fee_per_gas=priority_fee,
        )

        signed_tx = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        return tx_hash.to_0x_hex()

    def wait_for_receipt(self, tx_hash: str, timeout: float) -> TxReceipt:
        return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
