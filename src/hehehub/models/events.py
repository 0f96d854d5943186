"""Contract event types consumed by the ownership reconciler.

Two event kinds exist on the HeheHub NFT contract:
- Minted: a meme was minted as an NFT (MemeMinted on-chain)
- Transferred: an NFT changed hands (ERC-721 Transfer on-chain)

Raw log entries produced by the event source (or any other caller) are turned
into typed events with parse_event(). Unknown or malformed entries parse to
None so that one bad entry never aborts a reconciliation.
"""

from dataclasses import dataclass, replace
from typing import Any, Mapping, Union

import structlog
from eth_utils.address import is_hex_address, to_normalized_address

logger = structlog.get_logger()

MINTED_EVENT_NAMES = frozenset({"Minted", "MemeMinted"})
TRANSFERRED_EVENT_NAMES = frozenset({"Transferred", "Transfer"})


@dataclass(frozen=True)
class MintedEvent:
    """An item was minted to minter_address for the content at content_ref."""

    item_id: int
    minter_address: str
    content_ref: str
    block_sequence: int


@dataclass(frozen=True)
class TransferredEvent:
    """An item moved from from_address to to_address."""

    item_id: int
    from_address: str
    to_address: str
    block_sequence: int


Event = Union[MintedEvent, TransferredEvent]


def normalize_address(value: Any) -> str | None:
    """Normalize an Ethereum address to lowercase 0x-prefixed hex.

    Returns:
        Canonical address, or None if value is not a 20-byte hex address
    """
    if not isinstance(value, str) or not is_hex_address(value):
        return None
    return to_normalized_address(value)


def _to_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        text = value.strip()
        try:
            number = int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            return None
        return number if number >= 0 else None
    return None


def _first(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in mapping:
            return mapping[key]
    return None


def log_position(raw: Any) -> tuple[str, int] | None:
    """(tx hash, log index) identifying the on-chain log behind a raw entry.

    Returns:
        Lowercase tx hash and log index, or None if the entry does not carry both
    """
    if not isinstance(raw, Mapping):
        return None
    tx_hash = _first(raw, "tx_hash", "transactionHash")
    log_index = _to_int(_first(raw, "log_index", "logIndex"))
    if not isinstance(tx_hash, str) or not tx_hash or log_index is None:
        return None
    return tx_hash.lower(), log_index


def parse_event(raw: Any) -> Event | None:
    """Turn a raw log entry into a typed event.

    Typed events are returned with their addresses normalized. Raw entries
    are mappings with an event
    name ("event_name" or "eventName"), an "args" mapping and a block number
    ("block_number", "blockNumber" or "block_sequence"). Argument names follow
    either the contract ABI (tokenId, minter, memeUrl, from, to) or this
    module's field names.

    Returns:
        MintedEvent, TransferredEvent, or None for unknown or malformed entries
    """
    if isinstance(raw, MintedEvent):
        minter = normalize_address(raw.minter_address)
        return replace(raw, minter_address=minter) if minter else None
    if isinstance(raw, TransferredEvent):
        from_address = normalize_address(raw.from_address)
        to_address = normalize_address(raw.to_address)
        if from_address is None or to_address is None:
            return None
        return replace(raw, from_address=from_address, to_address=to_address)
    if not isinstance(raw, Mapping):
        logger.debug("events.ignored", reason="not_a_mapping", raw_type=type(raw).__name__)
        return None

    event_name = _first(raw, "event_name", "eventName")
    args = raw.get("args")
    if not isinstance(args, Mapping):
        logger.debug("events.ignored", reason="missing_args", event_name=event_name)
        return None

    block_sequence = _to_int(_first(raw, "block_number", "blockNumber", "block_sequence"))
    item_id = _to_int(_first(args, "item_id", "tokenId"))
    if block_sequence is None or item_id is None:
        logger.debug("events.ignored", reason="bad_numbers", event_name=event_name)
        return None

    if event_name in MINTED_EVENT_NAMES:
        minter = normalize_address(_first(args, "minter_address", "minter"))
        content_ref = _first(args, "content_ref", "memeUrl")
        if minter is None or not isinstance(content_ref, str):
            logger.debug("events.ignored", reason="malformed_minted", item_id=item_id)
            return None
        return MintedEvent(
            item_id=item_id,
            minter_address=minter,
            content_ref=content_ref,
            block_sequence=block_sequence,
        )

    if event_name in TRANSFERRED_EVENT_NAMES:
        from_address = normalize_address(_first(args, "from_address", "from"))
        to_address = normalize_address(_first(args, "to_address", "to"))
        if from_address is None or to_address is None:
            logger.debug("events.ignored", reason="malformed_transferred", item_id=item_id)
            return None
        return TransferredEvent(
            item_id=item_id,
            from_address=from_address,
            to_address=to_address,
            block_sequence=block_sequence,
        )

    logger.debug("events.ignored", reason="unknown_event", event_name=event_name)
    return None
