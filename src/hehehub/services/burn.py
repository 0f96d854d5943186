"""Burn orchestration: transaction first, then score, then inventory.

Sequencing rules:
1. Submit the burn transfer and wait for its receipt.
2. Only if the receipt reports success, compute the reward and send the
   score delta to the score sink.
3. Only if the score update succeeded, remove the item from the displayed
   inventory.

A failed or rejected transaction leaves the inventory untouched and never
calls the score sink. A score update failure after a confirmed burn raises
ScoreUpdateError with the PendingReward; retry_score_update() settles it
without touching the chain again.
"""

from typing import Protocol

import structlog

from hehehub.models.inventory import BurnOutcome, BurnReceipt, PendingReward
from hehehub.services.exceptions import (
    BurnNotEligibleError,
    ItemNotOwnedError,
    ScoreUpdateError,
    TransactionRevertError,
    TransactionSubmissionError,
)
from hehehub.services.inventory import InventoryService
from hehehub.services.reconciler import compute_reward

logger = structlog.get_logger()


class BurnTransactionSubmitter(Protocol):
    async def submit_burn(self, owner: str, burn_address: str, item_id: int) -> BurnReceipt: ...


class ScoreSink(Protocol):
    async def update_score(self, score_increase: int) -> int | None: ...


class BurnService:
    """Burns inventory items for HEHE score."""

    def __init__(
        self,
        inventory: InventoryService,
        submitter: BurnTransactionSubmitter | None,
        score_sink: ScoreSink,
    ):
        self.inventory = inventory
        self.submitter = submitter
        self.score_sink = score_sink
        self._pending: dict[int, PendingReward] = {}

    @property
    def pending_rewards(self) -> list[PendingReward]:
        """Confirmed burns whose score update has not been persisted yet."""
        return list(self._pending.values())

    async def burn(self, item_id: int) -> BurnOutcome:
        """Burn an item from the current inventory and collect its reward.

        Raises:
            ItemNotOwnedError: Item is not in the displayed inventory
            BurnNotEligibleError: Item has too few likes
            TransactionSubmissionError, TransactionTimeoutError: Transaction not confirmed
            TransactionRevertError: Transaction mined with failure status
            ScoreUpdateError: Burn confirmed but score update failed (or still pending)
        """
        if self.submitter is None:
            raise TransactionSubmissionError("No wallet configured for burn transactions")

        pending = self._pending.get(item_id)
        if pending is not None:
            raise ScoreUpdateError(
                f"Item {item_id} is already burned; its score update is pending", pending
            )

        entry = self.inventory.get(item_id)
        if entry is None or self.inventory.owner is None:
            raise ItemNotOwnedError(f"Item {item_id} is not in the current inventory")
        if not entry.decision.eligible:
            raise BurnNotEligibleError(
                f"Item {item_id} has {entry.item.like_count} likes; more than 3 are required"
            )

        logger.info(
            "burn.started",
            item_id=item_id,
            owner=self.inventory.owner,
            like_count=entry.item.like_count,
        )

        receipt = await self.submitter.submit_burn(
            self.inventory.owner, self.inventory.burn_address, item_id
        )

        if not receipt.succeeded:
            logger.error(
                "burn.transaction_failed",
                item_id=item_id,
                tx_hash=receipt.tx_hash,
                block_number=receipt.block_number,
            )
            raise TransactionRevertError(
                f"Burn transaction {receipt.tx_hash} failed; item {item_id} was not burned"
            )

        logger.info("burn.transaction_confirmed", item_id=item_id, tx_hash=receipt.tx_hash)

        decision = compute_reward(entry.item)
        return await self._settle(
            PendingReward(
                item_id=item_id,
                tx_hash=receipt.tx_hash,
                score_delta=decision.reward_quantum,
            )
        )

    async def retry_score_update(self, pending: PendingReward) -> BurnOutcome:
        """Persist the score for an already confirmed burn."""
        logger.info("burn.score_retry", item_id=pending.item_id, tx_hash=pending.tx_hash)
        return await self._settle(pending)

    async def _settle(self, pending: PendingReward) -> BurnOutcome:
        try:
            new_score = await self.score_sink.update_score(pending.score_delta)
        except Exception as e:
            self._pending[pending.item_id] = pending
            logger.error(
                "burn.score_update_failed",
                item_id=pending.item_id,
                tx_hash=pending.tx_hash,
                score_delta=pending.score_delta,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ScoreUpdateError(
                f"Burn {pending.tx_hash} confirmed but score update failed: {e}", pending
            ) from e

        self._pending.pop(pending.item_id, None)
        self.inventory.discard(pending.item_id)

        logger.info(
            "burn.completed",
            item_id=pending.item_id,
            tx_hash=pending.tx_hash,
            score_delta=pending.score_delta,
            new_score=new_score,
        )
        return BurnOutcome(
            item_id=pending.item_id,
            tx_hash=pending.tx_hash,
            score_delta=pending.score_delta,
            new_score=new_score,
        )
