"""Background workers for async processing tasks."""

from hehehub.workers.inventory_watcher import run_inventory_watcher

__all__ = [
    "run_inventory_watcher",
]
