"""FastAPI dependency injection functions.

All collaborators are created in the application lifespan and stored on
app.state; tests replace them there.
"""

from typing import Callable

from fastapi import Request

from hehehub.core.config import Settings
from hehehub.services.blockchain.event_source import EventSource
from hehehub.services.blockchain.prize_pool import PrizePoolReader
from hehehub.services.hehe_api import HeheApiClient
from hehehub.services.session import SessionStore


def get_settings(request: Request) -> Settings:
    """Settings loaded at startup."""
    return request.app.state.settings


def get_event_source(request: Request) -> EventSource | None:
    """NFT contract event source, or None if no contract is configured."""
    return request.app.state.event_source


def get_prize_pool_reader(request: Request) -> PrizePoolReader | None:
    """Prize contract reader, or None if no prize contract is configured."""
    return request.app.state.prize_pool_reader


def get_api_client_factory(request: Request) -> Callable[[SessionStore], HeheApiClient]:
    """Factory building a HeheHub API client bound to a session store.

    Example:
        >>> @router.get("/endpoint")
        >>> async def endpoint(api_client_factory=Depends(get_api_client_factory)):
        ...     async with api_client_factory(InMemorySessionStore()) as client:
        ...         rankings = await client.fetch_rankings()
    """
    return request.app.state.api_client_factory
