"""Owner inventory view rebuilt from the chain on every refresh.

The service holds what a client displays: the items the owner currently
holds, each with its burn decision. refresh() re-runs the reconciliation from
a freshly fetched event log; discard() removes an item once its burn has been
confirmed and rewarded.

Collaborator failures degrade instead of propagating:
- event log fetch fails -> no NFTs available (empty inventory)
- posts fetch fails -> items listed with like_count 0
"""

from typing import Any, Protocol

import structlog

from hehehub.core.config import DEFAULT_BURN_ADDRESS
from hehehub.models.events import normalize_address
from hehehub.models.inventory import InventoryEntry, Post
from hehehub.services.exceptions import EventSourceError, ServiceError
from hehehub.services.reconciler import build_inventory, compute_reward, resolve_ownership

logger = structlog.get_logger()


class EventLogSource(Protocol):
    def fetch_events(self) -> list[dict[str, Any]]: ...


class PostsSource(Protocol):
    async def fetch_user_posts(self) -> list[Post]: ...


class InventoryService:
    """Displayed inventory for one owner at a time."""

    def __init__(
        self,
        event_source: EventLogSource,
        posts_source: PostsSource | None = None,
        burn_address: str = DEFAULT_BURN_ADDRESS,
    ):
        self.event_source = event_source
        self.posts_source = posts_source
        self.burn_address = burn_address
        self.owner: str | None = None
        self.entries: list[InventoryEntry] = []
        # False when the last refresh could not read the event log
        self.events_available = True
        # Burned items of the current owner stay hidden even if a lagging RPC
        # still reports them as owned
        self._burned: set[int] = set()

    async def _load_events(self) -> list[dict[str, Any]]:
        try:
            events = self.event_source.fetch_events()
        except EventSourceError as e:
            logger.warning(
                "inventory.events_unavailable",
                error=str(e),
                error_type=type(e).__name__,
            )
            self.events_available = False
            return []
        self.events_available = True
        return events

    async def _load_posts(self) -> list[Post]:
        if self.posts_source is None:
            return []
        try:
            return await self.posts_source.fetch_user_posts()
        except ServiceError as e:
            logger.warning(
                "inventory.posts_unavailable",
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    async def refresh(self, owner: str) -> list[InventoryEntry]:
        """Rebuild the owner's inventory from the current event log and posts.

        Args:
            owner: Wallet address (any case)

        Returns:
            Owned, unburned items with burn decisions, in mint order. Empty
            when the event log cannot be read (events_available is then False).
        """
        normalized_owner = normalize_address(owner)
        if normalized_owner != self.owner:
            self._burned.clear()

        events = await self._load_events()
        posts = await self._load_posts()

        index = resolve_ownership(events)
        items = build_inventory(index, events, owner, posts, burn_address=self.burn_address)

        self.owner = normalized_owner
        self.entries = [
            InventoryEntry(item=item, decision=compute_reward(item))
            for item in items
            if item.item_id not in self._burned
        ]

        logger.info(
            "inventory.refreshed",
            owner=self.owner,
            events=len(events),
            posts=len(posts),
            items=len(self.entries),
            eligible=sum(1 for entry in self.entries if entry.decision.eligible),
        )
        return self.entries

    def get(self, item_id: int) -> InventoryEntry | None:
        for entry in self.entries:
            if entry.item_id == item_id:
                return entry
        return None

    def discard(self, item_id: int) -> None:
        """Remove a burned item from the displayed inventory."""
        self._burned.add(item_id)
        self.entries = [entry for entry in self.entries if entry.item_id != item_id]
        logger.debug("inventory.item_discarded", item_id=item_id, remaining=len(self.entries))
