"""pytest fixtures for HeheHub tests.

Provides:
- Test environment: APP_ENV=test so Settings() skips required-config validation
- ALICE, BOB, CAROL, BURN: addresses in mixed case, as wallets report them
- make_minted / make_transfer: raw log entries shaped like EventSource output
"""

import os

# Must be set before hehehub.app is imported (it builds Settings at import time)
os.environ["APP_ENV"] = "test"

import pytest  # noqa: E402

ALICE = "0xAbC0000000000000000000000000000000000001"
BOB = "0xb0B0000000000000000000000000000000000002"
CAROL = "0xCAfE000000000000000000000000000000000003"
BURN = "0x0a29465289046513541F9deCC5Ee8dEEE10f956f"


@pytest.fixture(scope="session", autouse=True)
def utc_timezone():
    """Enforce UTC timezone for all tests."""
    os.environ["TZ"] = "UTC"
    yield


def make_minted(item_id: int, minter: str, content_ref: str, block: int, log_index: int = 0):
    """Raw MemeMinted entry as produced by EventSource.fetch_events()."""
    return {
        "event_name": "MemeMinted",
        "args": {"tokenId": item_id, "minter": minter, "memeUrl": content_ref},
        "block_number": block,
        "log_index": log_index,
        "tx_hash": f"0x{block:064x}",
    }


def make_transfer(item_id: int, sender: str, recipient: str, block: int, log_index: int = 1):
    """Raw Transfer entry as produced by EventSource.fetch_events()."""
    return {
        "event_name": "Transfer",
        "args": {"from": sender, "to": recipient, "tokenId": item_id},
        "block_number": block,
        "log_index": log_index,
        "tx_hash": f"0x{block:064x}",
    }
