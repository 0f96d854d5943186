"""NFT inventory API endpoints.

- GET /api/inventory/{wallet_address} - Items currently owned by a wallet with
  like counts and burn decisions

Like counts come from the caller's own posts, so they are only filled in when
the request carries the caller's HeheHub bearer token. Without it every item
is listed with like_count 0.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from hehehub.api.dependencies import get_api_client_factory, get_event_source, get_settings
from hehehub.core.config import Settings
from hehehub.models.events import normalize_address
from hehehub.services.inventory import InventoryService
from hehehub.services.session import SESSION_TOKEN_KEY, InMemorySessionStore

logger = structlog.get_logger()
router = APIRouter(prefix="/api/inventory", tags=["inventory"])


class InventoryItemDTO(BaseModel):
    """Data Transfer Object for an owned NFT."""

    token_id: int = Field(..., description="On-chain token ID")
    image_url: str = Field(..., description="Meme URL recorded at mint time")
    like_count: int = Field(..., description="Likes of the matching post (0 if none)")
    burn_eligible: bool = Field(..., description="True if the NFT can be burned for score")
    reward_quantum: int = Field(..., description="HEHE score paid out when burned")


class InventoryResponse(BaseModel):
    """Response model for a wallet's inventory."""

    owner: str = Field(..., description="Lowercase wallet address")
    items: list[InventoryItemDTO]
    total: int = Field(..., description="Number of owned items")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.get("/{wallet_address}", response_model=InventoryResponse, status_code=status.HTTP_200_OK)
async def get_inventory(
    wallet_address: str,
    authorization: Annotated[str | None, Header()] = None,
    settings: Settings = Depends(get_settings),
    event_source=Depends(get_event_source),
    api_client_factory=Depends(get_api_client_factory),
) -> InventoryResponse:
    """List the NFTs a wallet currently owns.

    Returns an empty list when the event log cannot be read (no NFTs
    available) rather than an error.

    Raises:
        HTTPException 400: Invalid wallet address
        HTTPException 503: No NFT contract configured
    """
    owner = normalize_address(wallet_address)
    if owner is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Wallet address must be 0x followed by 40 hex characters",
        )

    if event_source is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="NFT contract is not configured",
        )

    token = _bearer_token(authorization)
    api_client = (
        api_client_factory(InMemorySessionStore({SESSION_TOKEN_KEY: token})) if token else None
    )

    try:
        inventory = InventoryService(
            event_source=event_source,
            posts_source=api_client,
            burn_address=settings.burn_address,
        )
        entries = await inventory.refresh(owner)
    finally:
        if api_client is not None:
            await api_client.aclose()

    logger.info("inventory_retrieved", owner=owner, total=len(entries), with_posts=bool(token))

    return InventoryResponse(
        owner=owner,
        items=[
            InventoryItemDTO(
                token_id=entry.item.item_id,
                image_url=entry.item.content_ref,
                like_count=entry.item.like_count,
                burn_eligible=entry.decision.eligible,
                reward_quantum=entry.decision.reward_quantum,
            )
            for entry in entries
        ],
        total=len(entries),
    )
