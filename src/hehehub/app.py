"""FastAPI application factory."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Response, status
from fastapi.middleware.cors import CORSMiddleware

from hehehub.api.routes import inventory, rankings
from hehehub.core.chain import build_web3
from hehehub.core.config import Settings, configure_logging
from hehehub.services.blockchain.event_source import EventSource
from hehehub.services.blockchain.prize_pool import PrizePoolReader
from hehehub.services.hehe_api import HeheApiClient
from hehehub.services.session import SessionStore

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager.

    Startup: load settings, configure logging, build the chain readers and
    the HeheHub API client factory into app.state.
    """
    settings = Settings()  # type: ignore[call-arg]
    configure_logging(settings)

    w3 = build_web3(settings)

    app.state.settings = settings
    app.state.w3 = w3
    app.state.event_source = (
        EventSource(
            w3=w3,
            contract_address=settings.hehe_nft_contract_address,
            start_block=settings.event_start_block,
            batch_size=settings.event_batch_size,
        )
        if w3 is not None and settings.hehe_nft_contract_address
        else None
    )
    app.state.prize_pool_reader = (
        PrizePoolReader(w3=w3, contract_address=settings.hehe_prize_contract_address)
        if w3 is not None and settings.hehe_prize_contract_address
        else None
    )

    def api_client_factory(session_store: SessionStore) -> HeheApiClient:
        return HeheApiClient(
            base_url=settings.hehe_api_url,
            session_store=session_store,
            timeout=settings.hehe_api_timeout_seconds,
        )

    app.state.api_client_factory = api_client_factory

    logger.info(
        "application.startup",
        network=settings.network,
        contract_address=settings.hehe_nft_contract_address,
        prize_contract_address=settings.hehe_prize_contract_address or None,
    )

    yield

    logger.info("application.shutdown")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = Settings()  # type: ignore[call-arg]

    app = FastAPI(
        title="HeheHub NFT API",
        description="NFT inventory, burn rewards and leaderboard",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(inventory.router)
    app.include_router(rankings.router)

    @app.get("/health")
    async def health_check(response: Response):
        """Health check endpoint with RPC connectivity test.

        Returns:
            200: {"status": "healthy"} if the RPC endpoint answers
            503: {"status": "unhealthy", "error": {...}} otherwise
        """
        w3 = app.state.w3
        try:
            if w3 is None or not w3.is_connected():
                raise ConnectionError("RPC endpoint unreachable")

            logger.debug("health_check.success")
            return {"status": "healthy"}

        except Exception as e:
            logger.error(
                "health_check.failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            return {
                "status": "unhealthy",
                "error": {
                    "type": type(e).__name__,
                    "message": str(e),
                },
            }

    return app


# Create app instance for uvicorn
app = create_app()
