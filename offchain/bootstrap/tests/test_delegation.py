"""
Tests for EIP-7702 authorization signing and delegated transactions.

Signing runs offline with a well-known development key.
"""

from unittest.mock import MagicMock

import pytest
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3

from unified_bootstrap.delegation import (
    SET_CODE_TX_TYPE,
    DelegatedExecutionClient,
    build_delegated_transaction,
    sign_self_authorization,
)

OWNER_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
SEPOLIA = 11155111


def selector(signature: str) -> str:
    return Web3.keccak(text=signature)[:4].to_0x_hex()


@pytest.fixture
def offline_client() -> DelegatedExecutionClient:
    """Client with a real (unconnected) Web3 for ABI encoding."""
    return DelegatedExecutionClient(
        rpc_url="http://localhost:8545",
        private_key=OWNER_KEY,
        contract_address=CONTRACT.lower(),
        chain_id=SEPOLIA,
    )


@pytest.fixture
def mocked_client() -> DelegatedExecutionClient:
    """Client whose RPC calls are answered by a mock."""
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.get_block.return_value = {"baseFeePerGas": 10}
    w3.eth.max_priority_fee = 2
    w3.eth.send_raw_transaction.return_value = HexBytes("0x" + "ab" * 32)
    return DelegatedExecutionClient(
        rpc_url="http://localhost:8545",
        private_key=OWNER_KEY,
        contract_address=CONTRACT,
        w3=w3,
        chain_id=SEPOLIA,
    )


class TestSignSelfAuthorization:
    """Tests for the authorization tuple."""

    def test_nonce_is_one_ahead_of_account(self) -> None:
        account = Account.from_key(OWNER_KEY)

        auth = sign_self_authorization(account, CONTRACT, SEPOLIA, account_nonce=5)

        assert auth.nonce == 6
        assert auth.chain_id == SEPOLIA
        assert Web3.to_checksum_address(auth.address) == CONTRACT

    def test_each_signature_is_for_its_own_nonce(self) -> None:
        account = Account.from_key(OWNER_KEY)

        first = sign_self_authorization(account, CONTRACT, SEPOLIA, account_nonce=0)
        second = sign_self_authorization(account, CONTRACT, SEPOLIA, account_nonce=1)

        assert first.signature != second.signature


class TestEncodeCall:
    """Tests for admin calldata."""

    def test_set_recipient(self, offline_client: DelegatedExecutionClient) -> None:
        data = offline_client.encode_call("setRecipient", [RECIPIENT])

        assert data.startswith(selector("setRecipient(address)"))
        assert data.endswith(RECIPIENT[2:].lower())

    def test_set_relayer(self, offline_client: DelegatedExecutionClient) -> None:
        data = offline_client.encode_call("setRelayer", [OWNER, True])

        assert data.startswith(selector("setRelayer(address,bool)"))
        assert data.endswith("1")
        assert len(data) == 2 + 8 + 64 * 2

    def test_relay_eth_has_no_arguments(self, offline_client: DelegatedExecutionClient) -> None:
        assert offline_client.encode_call("relayETH") == selector("relayETH()")

    def test_contract_address_checksummed(self, offline_client: DelegatedExecutionClient) -> None:
        assert offline_client.contract_address == CONTRACT
        assert offline_client.address == OWNER


class TestDelegatedTransaction:
    """Tests for building and sending set-code transactions."""

    def test_transaction_targets_sender(self) -> None:
        account = Account.from_key(OWNER_KEY)
        auth = sign_self_authorization(account, CONTRACT, SEPOLIA, account_nonce=3)

        tx = build_delegated_transaction(
            sender=OWNER.lower(),
            data="0x",
            authorization=auth,
            chain_id=SEPOLIA,
            nonce=3,
            gas=500_000,
            max_fee_per_gas=22,
            max_priority_fee_per_gas=2,
        )

        assert tx["to"] == OWNER
        assert tx["nonce"] == 3
        assert tx["authorizationList"] == [auth]

    def test_signed_transaction_is_type_4(self) -> None:
        account = Account.from_key(OWNER_KEY)
        auth = sign_self_authorization(account, CONTRACT, SEPOLIA, account_nonce=0)
        tx = build_delegated_transaction(
            sender=OWNER,
            data=selector("relayETH()"),
            authorization=auth,
            chain_id=SEPOLIA,
            nonce=0,
            gas=500_000,
            max_fee_per_gas=2_000_000_000,
            max_priority_fee_per_gas=1_000_000_000,
        )

        signed = account.sign_transaction(tx)

        assert signed.raw_transaction[0] == SET_CODE_TX_TYPE

    def test_sign_authorization_uses_pending_nonce(self, mocked_client: DelegatedExecutionClient) -> None:
        auth = mocked_client.sign_authorization()

        assert auth.nonce == 8
        mocked_client.w3.eth.get_transaction_count.assert_called_once_with(OWNER, "pending")

    def test_send_delegated_call(self, mocked_client: DelegatedExecutionClient) -> None:
        auth = mocked_client.sign_authorization()

        tx_hash = mocked_client.send_delegated_call(selector("relayETH()"), auth)

        assert tx_hash == "0x" + "ab" * 32
        raw = mocked_client.w3.eth.send_raw_transaction.call_args.args[0]
        assert raw[0] == SET_CODE_TX_TYPE

    def test_fee_params(self, mocked_client: DelegatedExecutionClient) -> None:
        assert mocked_client.fee_params() == (22, 2)

    def test_wait_for_receipt_passes_timeout(self, mocked_client: DelegatedExecutionClient) -> None:
        mocked_client.wait_for_receipt("0x01", timeout=30)

        mocked_client.w3.eth.wait_for_transaction_receipt.assert_called_once_with("0x01", timeout=30)
