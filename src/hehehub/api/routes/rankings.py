"""Leaderboard API endpoints.

- GET /api/rankings - HEHE score leaderboard (podium plus one page)
- GET /api/rankings/prize-pool - Prize pool and its 50/30/20 podium split
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from hehehub.api.dependencies import get_api_client_factory, get_prize_pool_reader
from hehehub.services.exceptions import BlockchainConnectionError, ServiceError
from hehehub.services.hehe_api import RankedUser
from hehehub.services.rankings import paginate_rankings
from hehehub.services.session import InMemorySessionStore

logger = structlog.get_logger()
router = APIRouter(prefix="/api/rankings", tags=["rankings"])


class RankedUserDTO(BaseModel):
    """A leaderboard row."""

    id: str
    username: str
    hehe_score: int
    avatar_url: str | None = None


class RankingsResponse(BaseModel):
    """Response model for a leaderboard page."""

    podium: list[RankedUserDTO] = Field(..., description="Top three users")
    entries: list[RankedUserDTO] = Field(..., description="Users on the requested page")
    page: int
    total_pages: int


class PrizePoolResponse(BaseModel):
    """Response model for the prize pool (amounts in wei)."""

    total_wei: int
    first_wei: int
    second_wei: int
    third_wei: int


def _to_dto(user: RankedUser) -> RankedUserDTO:
    return RankedUserDTO(
        id=user.id,
        username=user.username,
        hehe_score=user.hehe_score,
        avatar_url=user.avatar_url,
    )


@router.get("/prize-pool", response_model=PrizePoolResponse, status_code=status.HTTP_200_OK)
async def get_prize_pool(
    prize_pool_reader=Depends(get_prize_pool_reader),
) -> PrizePoolResponse:
    """Current prize pool read from the prize contract.

    Raises:
        HTTPException 503: Prize contract not configured or unreachable
    """
    if prize_pool_reader is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Prize contract is not configured",
        )

    try:
        split = await prize_pool_reader.get_prize_pool()
    except BlockchainConnectionError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Failed to read prize pool. Please try again later.",
        )

    return PrizePoolResponse(
        total_wei=split.total_wei,
        first_wei=split.first_wei,
        second_wei=split.second_wei,
        third_wei=split.third_wei,
    )


@router.get("", response_model=RankingsResponse, status_code=status.HTTP_200_OK)
async def get_rankings(
    page: int = Query(default=1, ge=1),
    api_client_factory=Depends(get_api_client_factory),
) -> RankingsResponse:
    """Leaderboard ordered by HEHE score, podium first.

    Raises:
        HTTPException 502: HeheHub API unavailable
    """
    try:
        async with api_client_factory(InMemorySessionStore()) as client:
            users = await client.fetch_rankings()
    except ServiceError as e:
        logger.error(
            "unexpected_error_getting_rankings",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to retrieve rankings. Please try again later.",
        )

    result = paginate_rankings(users, page=page)
    logger.debug("rankings_retrieved", users=len(users), page=result.page)

    return RankingsResponse(
        podium=[_to_dto(u) for u in result.podium],
        entries=[_to_dto(u) for u in result.entries],
        page=result.page,
        total_pages=result.total_pages,
    )
