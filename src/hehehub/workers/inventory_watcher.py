"""Inventory watcher.

Polls the chain head and re-runs the inventory reconciliation whenever a new
block arrives. Each refreshed inventory is handed to an optional callback.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Protocol

import structlog

from hehehub.models.inventory import InventoryEntry
from hehehub.services.exceptions import TransientError
from hehehub.services.inventory import InventoryService

logger = structlog.get_logger()

# Back off this long after an unexpected error
ERROR_BACKOFF_SECONDS = 5

OnUpdate = Callable[[list[InventoryEntry]], Awaitable[Any] | Any]


class ChainHead(Protocol):
    def latest_block(self) -> int: ...


async def poll_once(
    inventory: InventoryService,
    chain_head: ChainHead,
    owner: str,
    last_block: int | None,
    on_update: OnUpdate | None = None,
) -> int | None:
    """Refresh the inventory if the chain head moved past last_block.

    Returns:
        The block the inventory now reflects. Unchanged when the event log
        could not be read, so the next poll refreshes again.
    """
    head = chain_head.latest_block()
    if last_block is not None and head <= last_block:
        return last_block

    entries = await inventory.refresh(owner)
    logger.debug("watcher.refreshed", block=head, items=len(entries))

    if on_update is not None:
        result = on_update(entries)
        if inspect.isawaitable(result):
            await result

    if not inventory.events_available:
        logger.warning("watcher.events_unavailable", block=head, message="Will retry on next poll")
        return last_block
    return head


async def run_inventory_watcher(
    inventory: InventoryService,
    chain_head: ChainHead,
    owner: str,
    poll_interval: float,
    on_update: OnUpdate | None = None,
) -> None:
    """Main watcher loop; runs until cancelled.

    Args:
        inventory: Inventory service to refresh
        chain_head: Source of the current block number (the event source)
        owner: Wallet whose inventory is watched
        poll_interval: Seconds between chain head polls
        on_update: Called with the refreshed entries (sync or async)
    """
    logger.info(
        "worker.started",
        worker="inventory_watcher",
        owner=owner,
        poll_interval=poll_interval,
    )

    last_block: int | None = None

    try:
        while True:
            try:
                last_block = await poll_once(inventory, chain_head, owner, last_block, on_update)

            except asyncio.CancelledError:
                raise

            except TransientError as e:
                logger.warning(
                    "watcher.transient_error",
                    error=str(e),
                    error_type=type(e).__name__,
                    message="Will retry on next poll",
                )

            except Exception as e:
                logger.error(
                    "worker.error",
                    worker_type="inventory_watcher",
                    error_type=type(e).__name__,
                    error_message=str(e),
                    exc_info=True,
                )
                await asyncio.sleep(ERROR_BACKOFF_SECONDS)

            await asyncio.sleep(poll_interval)

    except asyncio.CancelledError:
        logger.info(
            "worker.stopped",
            worker="inventory_watcher",
            message="Graceful shutdown requested",
        )
        raise
