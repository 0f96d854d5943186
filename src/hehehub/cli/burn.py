"""CLI command burning an NFT for HEHE score.

The NFT is transferred from the wallet in WALLET_PRIVATE_KEY to the burn
address. The score is only updated after the transaction is confirmed.

Usage:
    python -m hehehub.cli burn <token_id> --api-token TOKEN

Examples:
    # Burn token 42
    python -m hehehub.cli burn 42 --api-token eyJhbGciOi...

    # Burn confirmed but the score update failed: retry only the score update
    python -m hehehub.cli burn 42 --api-token eyJhbGciOi... \\
        --retry-score-tx 0xabc... --score-delta 3
"""

import sys
from argparse import ArgumentParser, Namespace

import structlog

from hehehub.core.chain import build_web3
from hehehub.core.config import Settings, configure_logging
from hehehub.models.inventory import PendingReward
from hehehub.services.blockchain.burner import BurnSubmitter
from hehehub.services.blockchain.event_source import EventSource
from hehehub.services.burn import BurnService
from hehehub.services.exceptions import ScoreUpdateError, ServiceError
from hehehub.services.hehe_api import HeheApiClient
from hehehub.services.inventory import InventoryService
from hehehub.services.session import SESSION_TOKEN_KEY, InMemorySessionStore

logger = structlog.get_logger()

EXIT_SCORE_PENDING = 3


def add_arguments(parser: ArgumentParser) -> None:
    parser.add_argument("token_id", type=int, help="Token ID to burn")
    parser.add_argument("--api-token", required=True, help="HeheHub session token")
    parser.add_argument(
        "--retry-score-tx",
        help="Hash of an already confirmed burn; only retries its score update",
    )
    parser.add_argument(
        "--score-delta",
        type=int,
        help="Score owed for --retry-score-tx (printed by the failed run)",
    )


def print_pending(pending: PendingReward) -> None:
    print("\nBurn confirmed on-chain but the HEHE score was NOT updated.", file=sys.stderr)
    print("Do not burn again. Retry the score update with:", file=sys.stderr)
    print(
        f"  python -m hehehub.cli burn {pending.item_id} --api-token <TOKEN> "
        f"--retry-score-tx {pending.tx_hash} --score-delta {pending.score_delta}",
        file=sys.stderr,
    )


async def async_main(args: Namespace) -> int:
    """Burn an NFT.

    Returns:
        Exit code: 0 (success), 1 (not burned), 3 (burned, score update pending)
    """
    settings = Settings()  # type: ignore[call-arg]
    if args.verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)

    if args.retry_score_tx and args.score_delta is None:
        print("Error: --retry-score-tx requires --score-delta", file=sys.stderr)
        return 1

    if not args.retry_score_tx and not settings.wallet_private_key:
        print("Error: WALLET_PRIVATE_KEY is not set", file=sys.stderr)
        return 1

    w3 = build_web3(settings)
    if w3 is None:
        print(f"Error: Unsupported network {settings.network}", file=sys.stderr)
        return 1

    session_store = InMemorySessionStore({SESSION_TOKEN_KEY: args.api_token})

    async with HeheApiClient(
        base_url=settings.hehe_api_url,
        session_store=session_store,
        timeout=settings.hehe_api_timeout_seconds,
    ) as client:
        inventory = InventoryService(
            event_source=EventSource(
                w3=w3,
                contract_address=settings.hehe_nft_contract_address,
                start_block=settings.event_start_block,
                batch_size=settings.event_batch_size,
            ),
            posts_source=client,
            burn_address=settings.burn_address,
        )

        try:
            if args.retry_score_tx:
                burn_service = BurnService(inventory=inventory, submitter=None, score_sink=client)
                outcome = await burn_service.retry_score_update(
                    PendingReward(
                        item_id=args.token_id,
                        tx_hash=args.retry_score_tx,
                        score_delta=args.score_delta,
                    )
                )
            else:
                submitter = BurnSubmitter(
                    w3=w3,
                    contract_address=settings.hehe_nft_contract_address,
                    private_key=settings.wallet_private_key,
                    gas_buffer_percentage=settings.gas_buffer,
                    transaction_timeout=settings.transaction_timeout_seconds,
                )
                await inventory.refresh(submitter.address)
                burn_service = BurnService(
                    inventory=inventory, submitter=submitter, score_sink=client
                )
                outcome = await burn_service.burn(args.token_id)

        except ScoreUpdateError as e:
            logger.error("cli.score_update_pending", error=str(e))
            print_pending(e.pending)
            return EXIT_SCORE_PENDING

        except ServiceError as e:
            logger.error("cli.burn_failed", error=str(e), error_type=type(e).__name__)
            print(f"\nError: {e}", file=sys.stderr)
            print("The NFT was not burned.", file=sys.stderr)
            return 1

        print(f"+{outcome.score_delta} HEHE Score! (tx {outcome.tx_hash})")

        new_score = outcome.new_score
        if new_score is None:
            try:
                new_score = (await client.fetch_me()).hehe_score
            except ServiceError as e:
                logger.warning("cli.profile_unavailable", error=str(e))
        if new_score is not None:
            print(f"HEHE Score: {new_score}")

    return 0
