"""Inventory value objects: items, posts, burn decisions and burn outcomes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Post:
    """A post from the HeheHub API reduced to what burn rewards need."""

    content_ref: str
    like_count: int


@dataclass(frozen=True)
class Item:
    """An NFT owned by the queried address, enriched with its post's likes."""

    item_id: int
    content_ref: str
    like_count: int = 0


@dataclass(frozen=True)
class BurnDecision:
    """Whether an item may be burned and the score it pays out."""

    eligible: bool
    reward_quantum: int


@dataclass(frozen=True)
class InventoryEntry:
    """An owned item together with its burn decision."""

    item: Item
    decision: BurnDecision

    @property
    def item_id(self) -> int:
        return self.item.item_id


@dataclass(frozen=True)
class BurnReceipt:
    """Confirmed burn transaction."""

    tx_hash: str
    block_number: int
    succeeded: bool


@dataclass(frozen=True)
class PendingReward:
    """Score delta owed for a burn that is already confirmed on-chain."""

    item_id: int
    tx_hash: str
    score_delta: int


@dataclass(frozen=True)
class BurnOutcome:
    """Result of a fully completed burn (transaction confirmed and score updated)."""

    item_id: int
    tx_hash: str
    score_delta: int
    new_score: int | None = None
