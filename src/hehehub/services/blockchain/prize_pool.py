"""Leaderboard prize pool read from the prize contract."""

from dataclasses import dataclass

import structlog
from web3 import Web3

from hehehub.abi import get_contract_abi
from hehehub.services.exceptions import BlockchainConnectionError

logger = structlog.get_logger()

# Percent of the pool paid to first, second and third place
PRIZE_SHARES_PERCENT = (50, 30, 20)


@dataclass(frozen=True)
class PrizePoolSplit:
    """Prize pool in wei and the payout for each podium place."""

    total_wei: int
    first_wei: int
    second_wei: int
    third_wei: int


def split_prize_pool(total_wei: int) -> PrizePoolSplit:
    """Split the pool 50/30/20 using integer wei arithmetic (rounding down)."""
    first, second, third = (total_wei * share // 100 for share in PRIZE_SHARES_PERCENT)
    return PrizePoolSplit(
        total_wei=total_wei,
        first_wei=first,
        second_wei=second,
        third_wei=third,
    )


class PrizePoolReader:
    """Reads getPrizePool() from the prize contract."""

    def __init__(self, w3: Web3, contract_address: str):
        self.w3 = w3
        self.contract_address = Web3.to_checksum_address(contract_address)
        self.contract = self.w3.eth.contract(
            address=self.contract_address, abi=get_contract_abi("HehePrize")
        )

    async def get_prize_pool(self) -> PrizePoolSplit:
        """
        Query the current prize pool.

        Raises:
            BlockchainConnectionError: If the contract call fails
        """
        try:
            total_wei = int(self.contract.functions.getPrizePool().call())
        except Exception as e:
            logger.error(
                "prize_pool.read_failed",
                error=str(e),
                error_type=type(e).__name__,
                contract_address=self.contract_address,
            )
            raise BlockchainConnectionError(f"Failed to read prize pool: {e}") from e

        logger.debug("prize_pool.read", total_wei=total_wei)
        return split_prize_pool(total_wei)
