"""Unit tests for raw log entry parsing."""

import pytest

from conftest import ALICE, BOB
from hehehub.models.events import (
    MintedEvent,
    TransferredEvent,
    log_position,
    normalize_address,
    parse_event,
)


def test_parse_contract_minted_entry():
    event = parse_event(
        {
            "event_name": "MemeMinted",
            "args": {"tokenId": 7, "minter": ALICE, "memeUrl": "https://x/7.png"},
            "block_number": 120,
            "log_index": 3,
        }
    )

    assert event == MintedEvent(
        item_id=7,
        minter_address=ALICE.lower(),
        content_ref="https://x/7.png",
        block_sequence=120,
    )


def test_parse_field_named_transferred_entry():
    event = parse_event(
        {
            "eventName": "Transferred",
            "args": {"item_id": "0x10", "from_address": ALICE, "to_address": BOB},
            "blockNumber": "42",
        }
    )

    assert event == TransferredEvent(
        item_id=16,
        from_address=ALICE.lower(),
        to_address=BOB.lower(),
        block_sequence=42,
    )


def test_typed_events_are_normalized():
    event = parse_event(
        TransferredEvent(item_id=1, from_address=ALICE, to_address=BOB, block_sequence=1)
    )

    assert event.from_address == ALICE.lower()
    assert event.to_address == BOB.lower()


@pytest.mark.parametrize(
    "raw",
    [
        {"event_name": "Approval", "args": {"tokenId": 1}, "block_number": 1},
        {"event_name": "MemeMinted", "args": {"tokenId": 1, "minter": ALICE}, "block_number": 1},
        {"event_name": "MemeMinted", "args": {"tokenId": True, "minter": ALICE, "memeUrl": "u"},
         "block_number": 1},
        {"event_name": "Transfer", "args": {"tokenId": 1, "from": ALICE, "to": BOB}},
        {"event_name": "Transfer", "args": {"tokenId": 1, "from": ALICE, "to": "0x12"},
         "block_number": 1},
        {"event_name": "Transfer", "args": "tokenId=1", "block_number": 1},
        ["MemeMinted", 1],
        MintedEvent(item_id=1, minter_address="alice", content_ref="u", block_sequence=1),
    ],
)
def test_malformed_entries_parse_to_none(raw):
    assert parse_event(raw) is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (ALICE, ALICE.lower()),
        (ALICE.lower(), ALICE.lower()),
        ("0x1234", None),
        (None, None),
        (12345, None),
    ],
)
def test_normalize_address(value, expected):
    assert normalize_address(value) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ({"tx_hash": "0xABCD", "log_index": 3}, ("0xabcd", 3)),
        ({"transactionHash": "0xabcd", "logIndex": "0x3"}, ("0xabcd", 3)),
        ({"tx_hash": "0xabcd"}, None),
        ({"log_index": 3}, None),
        (MintedEvent(item_id=1, minter_address=ALICE, content_ref="u", block_sequence=1), None),
    ],
)
def test_log_position(raw, expected):
    assert log_position(raw) == expected
