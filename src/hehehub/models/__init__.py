"""Domain values for ownership reconciliation and burns.

Events are parsed from raw log entries; inventory values are what the
reconciler and burn service produce.
"""

from hehehub.models.events import Event, MintedEvent, TransferredEvent, parse_event
from hehehub.models.inventory import (
    BurnDecision,
    BurnOutcome,
    BurnReceipt,
    InventoryEntry,
    Item,
    PendingReward,
    Post,
)

__all__ = [
    "Event",
    "MintedEvent",
    "TransferredEvent",
    "parse_event",
    "Post",
    "Item",
    "BurnDecision",
    "InventoryEntry",
    "BurnReceipt",
    "PendingReward",
    "BurnOutcome",
]
