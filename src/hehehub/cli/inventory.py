"""CLI command listing the NFTs a wallet owns.

Usage:
    python -m hehehub.cli inventory <wallet_address> [--api-token TOKEN] [--watch]

Examples:
    # Ownership only (like counts 0)
    python -m hehehub.cli inventory 0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0

    # Include like counts from your own posts
    python -m hehehub.cli inventory 0x742d35Cc... --api-token eyJhbGciOi...
"""

import sys
from argparse import ArgumentParser, Namespace

import structlog

from hehehub.core.chain import build_web3
from hehehub.core.config import Settings, configure_logging
from hehehub.models.events import normalize_address
from hehehub.models.inventory import InventoryEntry
from hehehub.services.blockchain.event_source import EventSource
from hehehub.services.hehe_api import HeheApiClient
from hehehub.services.inventory import InventoryService
from hehehub.services.session import SESSION_TOKEN_KEY, InMemorySessionStore
from hehehub.workers.inventory_watcher import run_inventory_watcher

logger = structlog.get_logger()


def add_arguments(parser: ArgumentParser) -> None:
    parser.add_argument("wallet_address", help="Wallet whose NFTs to list")
    parser.add_argument(
        "--api-token",
        help="HeheHub session token; enables like counts from your posts",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and reprint the inventory on every new block",
    )


def format_inventory(entries: list[InventoryEntry]) -> str:
    """Render inventory entries as a plain-text table."""
    if not entries:
        return "No NFTs owned."

    lines = [f"{'TOKEN':>8}  {'LIKES':>5}  {'BURN':>4}  {'REWARD':>6}  IMAGE"]
    for entry in entries:
        lines.append(
            f"{entry.item.item_id:>8}  {entry.item.like_count:>5}  "
            f"{'yes' if entry.decision.eligible else 'no':>4}  "
            f"{entry.decision.reward_quantum:>6}  {entry.item.content_ref}"
        )
    return "\n".join(lines)


async def async_main(args: Namespace) -> int:
    """List inventory.

    Returns:
        Exit code: 0 (success), 1 (error)
    """
    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    owner = normalize_address(args.wallet_address)
    if owner is None:
        print(f"Error: Invalid wallet address {args.wallet_address}", file=sys.stderr)
        return 1

    w3 = build_web3(settings)
    if w3 is None:
        print(f"Error: Unsupported network {settings.network}", file=sys.stderr)
        return 1

    event_source = EventSource(
        w3=w3,
        contract_address=settings.hehe_nft_contract_address,
        start_block=settings.event_start_block,
        batch_size=settings.event_batch_size,
    )

    session_store = InMemorySessionStore()
    if args.api_token:
        session_store.set(SESSION_TOKEN_KEY, args.api_token)

    async with HeheApiClient(
        base_url=settings.hehe_api_url,
        session_store=session_store,
        timeout=settings.hehe_api_timeout_seconds,
    ) as client:
        inventory = InventoryService(
            event_source=event_source,
            posts_source=client if args.api_token else None,
            burn_address=settings.burn_address,
        )
        if args.watch:
            await run_inventory_watcher(
                inventory=inventory,
                chain_head=event_source,
                owner=owner,
                poll_interval=settings.poll_interval_seconds,
                on_update=lambda entries: print(format_inventory(entries) + "\n"),
            )
            return 0

        entries = await inventory.refresh(owner)

    print(format_inventory(entries))
    return 0
