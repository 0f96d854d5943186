"""CLI entry point for hehehub.cli module.

Enables execution via: python -m hehehub.cli <command> [OPTIONS]
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace

from hehehub.cli import burn, inventory, serve


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(prog="hehehub", description="HeheHub NFT inventory and burns")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    inventory.add_arguments(
        subparsers.add_parser("inventory", help="List the NFTs a wallet owns")
    )
    burn.add_arguments(subparsers.add_parser("burn", help="Burn an NFT for HEHE score"))
    serve.add_arguments(subparsers.add_parser("serve", help="Run the HTTP API"))

    return parser.parse_args(argv)


async def async_main(args: Namespace) -> int:
    commands = {"inventory": inventory.async_main, "burn": burn.async_main}
    return await commands[args.command](args)


def main() -> None:
    """Synchronous entry point for CLI."""
    args = parse_args()
    if args.command == "serve":
        # uvicorn runs its own event loop
        sys.exit(serve.main(args))

    try:
        sys.exit(asyncio.run(async_main(args)))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)  # Standard exit code for SIGINT


if __name__ == "__main__":
    main()
