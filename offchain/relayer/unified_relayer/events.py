"""
ERC-20 Transfer log filtering and decoding.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from eth_abi import decode
from hexbytes import HexBytes
from web3 import Web3


TRANSFER_EVENT_SIGNATURE = "Transfer(address,address,uint256)"
TRANSFER_TOPIC = HexBytes(Web3.keccak(text=TRANSFER_EVENT_SIGNATURE))


class TransferDecodeError(ValueError):
    """Raised when a log cannot be decoded as an ERC-20 Transfer."""


@dataclass(frozen=True)
class TransferEvent:
    """A decoded inbound USDC transfer. Lives only for one relay attempt."""

    from_address: str
    to_address: str
    amount: int
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    log_index: Optional[int] = None


def address_to_topic(address: str) -> HexBytes:
    """Left-pad an address to a 32-byte indexed topic."""
    return HexBytes(bytes(12) + bytes(HexBytes(Web3.to_checksum_address(address))))


def topic_to_address(topic: Any) -> str:
    """Extract the checksummed address held in the low 20 bytes of a topic."""
    raw = bytes(HexBytes(topic))
    if len(raw) != 32:
        raise TransferDecodeError(f"Indexed address topic must be 32 bytes, got {len(raw)}")
    if any(raw[:12]):
        raise TransferDecodeError("Indexed address topic has non-zero padding")
    return Web3.to_checksum_address(raw[12:])


def build_transfer_filter(token_address: str, to_address: str) -> dict[str, Any]:
    """
    Build a log filter for Transfer(from, to, value) on a token.

    topic[1] (from) is left unconstrained, topic[2] (to) must equal to_address.
    """
    return {
        "address": Web3.to_checksum_address(token_address),
        "topics": [
            TRANSFER_TOPIC,
            None,
            address_to_topic(to_address),
        ],
    }


def decode_transfer_log(log: Mapping[str, Any]) -> TransferEvent:
    """
    Decode a raw log into a TransferEvent.

    Raises:
        TransferDecodeError: if the log is not a well-formed ERC-20 Transfer
    """
    try:
        topics = [HexBytes(t) for t in log["topics"]]
        data = bytes(HexBytes(log.get("data") or b""))
    except (KeyError, TypeError, ValueError) as e:
        raise TransferDecodeError(f"Malformed log: {e}") from e

    if len(topics) != 3:
        raise TransferDecodeError(f"Expected 3 topics, got {len(topics)}")
    if topics[0] != TRANSFER_TOPIC:
        raise TransferDecodeError(f"Unexpected event topic {topics[0].hex()}")

    try:
        (amount,) = decode(["uint256"], data)
    except Exception as e:
        raise TransferDecodeError(f"Invalid Transfer data: {e}") from e

    tx_hash = log.get("transactionHash")
    return TransferEvent(
        from_address=topic_to_address(topics[1]),
        to_address=topic_to_address(topics[2]),
        amount=amount,
        tx_hash=HexBytes(tx_hash).to_0x_hex() if tx_hash is not None else None,
        block_number=log.get("blockNumber"),
        log_index=log.get("logIndex"),
    )
