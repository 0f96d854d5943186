"""Ownership and reward reconciliation over the NFT contract event log.

Derives the current owner of every minted item from Minted/Transferred events,
builds an owner's inventory enriched with post like counts, and computes the
burn decision for each item.

Everything here is a pure function of its inputs: no I/O, no shared state, and
inputs are never mutated. The ownership index is rebuilt from scratch on every
call, so reconciliation can be re-run on every refresh of the event log.

Ordering rules:
- The latest transfer of an item is the one with the highest block number.
- Transfers in the same block are applied in input order (the later wins).
- Entries for the same on-chain log (tx hash and log index) collapse to their
  first occurrence. Entries without a log position collapse when identical.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

import structlog

from hehehub.core.config import DEFAULT_BURN_ADDRESS
from hehehub.models.events import (
    Event,
    MintedEvent,
    TransferredEvent,
    log_position,
    normalize_address,
    parse_event,
)
from hehehub.models.inventory import BurnDecision, Item, Post

logger = structlog.get_logger()

# Items need strictly more likes than this to be burned
BURN_LIKE_THRESHOLD = 3


class OwnershipIndex(Mapping[int, str]):
    """Read-only mapping of item id to current owner (lowercase address).

    Iterates in order of first appearance of each item in the Minted events.
    """

    def __init__(self, owners: Mapping[int, str] | None = None):
        self._owners = dict(owners or {})

    def __getitem__(self, item_id: int) -> str:
        return self._owners[item_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._owners)

    def __len__(self) -> int:
        return len(self._owners)

    def __repr__(self) -> str:
        return f"OwnershipIndex({self._owners!r})"

    def owner_of(self, item_id: int) -> str | None:
        return self._owners.get(item_id)

    def items_owned_by(self, owner: str) -> list[int]:
        """Item ids currently owned by owner (case-insensitive)."""
        normalized = normalize_address(owner)
        if normalized is None:
            return []
        return [item_id for item_id, current in self._owners.items() if current == normalized]


def normalize_content_ref(content_ref: str) -> str:
    """Reduce a content reference to the key shared by all renditions of an asset.

    Strips the query string, then the final "." extension of the last path
    segment: "https://x/a.png?v=2" and "https://x/a.jpg" both become "https://x/a".
    A bare host such as "https://example.com" is left unchanged.
    """
    base = content_ref.split("?", 1)[0]
    scheme_end = base.find("://")
    if scheme_end != -1 and base.find("/", scheme_end + 3) == -1:
        # Host only, no path segment to carry an extension
        return base
    if base.rfind(".") > base.rfind("/"):
        base = base[: base.rfind(".")]
    return base


def _parse_all(events: Iterable[Event | Mapping[str, Any]]) -> list[Event]:
    parsed: list[Event] = []
    seen: set[Any] = set()
    ignored = 0
    for raw in events:
        event = parse_event(raw)
        if event is None:
            ignored += 1
            continue
        key = log_position(raw) or event
        if key in seen:
            continue
        seen.add(key)
        parsed.append(event)

    if ignored:
        logger.debug("reconciler.events_ignored", count=ignored)
    return parsed


def _collect_mints(events: list[Event]) -> dict[int, MintedEvent]:
    # Earliest block wins if an item was (anomalously) minted twice
    mints: dict[int, MintedEvent] = {}
    for event in events:
        if isinstance(event, MintedEvent):
            current = mints.get(event.item_id)
            if current is None or event.block_sequence < current.block_sequence:
                mints[event.item_id] = event
    return mints


def resolve_ownership(events: Iterable[Event | Mapping[str, Any]]) -> OwnershipIndex:
    """Compute the current owner of every minted item.

    Args:
        events: Full event log, typed events or raw log entries, in any order.
            Unknown and malformed entries are skipped.

    Returns:
        OwnershipIndex with one owner per minted item. An item's owner is the
        recipient of its latest transfer, or its minter if it was never
        transferred. Transfers of items that were never minted are ignored.
    """
    parsed = _parse_all(events)
    mints = _collect_mints(parsed)

    latest: dict[int, TransferredEvent] = {}
    for event in parsed:
        if isinstance(event, TransferredEvent):
            current = latest.get(event.item_id)
            if current is None or event.block_sequence >= current.block_sequence:
                latest[event.item_id] = event

    owners = {
        item_id: latest[item_id].to_address if item_id in latest else mint.minter_address
        for item_id, mint in mints.items()
    }

    logger.debug(
        "reconciler.ownership_resolved",
        events=len(parsed),
        items=len(owners),
        transferred=len(latest.keys() & owners.keys()),
    )
    return OwnershipIndex(owners)


def _post_fields(post: Post | Mapping[str, Any]) -> tuple[str, int] | None:
    if isinstance(post, Post):
        return post.content_ref, post.like_count
    if isinstance(post, Mapping):
        content_ref = post.get("content_ref", post.get("contentRef"))
        like_count = post.get("like_count", post.get("likeCount", 0))
        if isinstance(content_ref, str) and isinstance(like_count, int):
            return content_ref, like_count
    return None


def build_inventory(
    index: OwnershipIndex,
    events: Iterable[Event | Mapping[str, Any]],
    owner: str,
    posts: Iterable[Post | Mapping[str, Any]],
    burn_address: str = DEFAULT_BURN_ADDRESS,
) -> list[Item]:
    """List the items owned by owner with their like counts.

    Each item's content reference comes from its Minted event and is matched
    against the posts by normalized content reference (exact match). Items
    without a matching post get like_count 0. The first post wins when two
    posts normalize to the same key.

    Args:
        index: Ownership index from resolve_ownership()
        events: The event log the index was built from
        owner: Wallet address to list (any case)
        posts: Posts as Post values or {contentRef, likeCount} mappings
        burn_address: Designated burn address; its items are never listed

    Returns:
        Items in order of first appearance in the Minted events. Empty if
        owner is not a valid address or is the burn address.
    """
    normalized_owner = normalize_address(owner)
    if normalized_owner is None or normalized_owner == normalize_address(burn_address):
        return []

    mints = _collect_mints(_parse_all(events))

    likes_by_ref: dict[str, int] = {}
    for post in posts:
        fields = _post_fields(post)
        if fields is None:
            continue
        key = normalize_content_ref(fields[0])
        if key:
            likes_by_ref.setdefault(key, fields[1])

    items = []
    for item_id, current_owner in index.items():
        if current_owner != normalized_owner or item_id not in mints:
            continue
        content_ref = mints[item_id].content_ref
        items.append(
            Item(
                item_id=item_id,
                content_ref=content_ref,
                like_count=likes_by_ref.get(normalize_content_ref(content_ref), 0),
            )
        )

    logger.debug(
        "reconciler.inventory_built",
        owner=normalized_owner,
        items=len(items),
        posts_indexed=len(likes_by_ref),
    )
    return items


def compute_reward(item: Item) -> BurnDecision:
    """Burn decision for an item: eligible above 3 likes, reward is half the likes."""
    return BurnDecision(
        eligible=item.like_count > BURN_LIKE_THRESHOLD,
        reward_quantum=item.like_count // 2,
    )
