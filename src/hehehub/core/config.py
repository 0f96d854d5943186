"""Application configuration using Pydantic BaseSettings."""

import logging

import structlog
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Alchemy RPC endpoints per supported network
NETWORK_RPC_URLS = {
    "ZKSYNC_SEPOLIA": "https://zksync-sepolia.g.alchemy.com/v2/{api_key}",
    "BASE_SEPOLIA": "https://base-sepolia.g.alchemy.com/v2/{api_key}",
    "BASE_MAINNET": "https://base-mainnet.g.alchemy.com/v2/{api_key}",
}

DEFAULT_BURN_ADDRESS = "0x0a29465289046513541F9deCC5Ee8dEEE10f956f"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CORS Configuration
    cors_origins: str = Field(default="http://localhost:3000", alias="CORS_ORIGINS")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Chain access
    # RPC_URL wins over the Alchemy URL derived from NETWORK
    rpc_url: str = Field(default="", alias="RPC_URL")
    alchemy_api_key: str = Field(default="", alias="ALCHEMY_API_KEY")
    network: str = Field(default="ZKSYNC_SEPOLIA", alias="NETWORK")

    # Contracts
    hehe_nft_contract_address: str = Field(default="", alias="HEHE_NFT_CONTRACT_ADDRESS")
    hehe_prize_contract_address: str = Field(default="", alias="HEHE_PRIZE_CONTRACT_ADDRESS")
    burn_address: str = Field(default=DEFAULT_BURN_ADDRESS, alias="BURN_ADDRESS")

    # Event log scanning
    event_start_block: int = Field(default=0, alias="EVENT_START_BLOCK")
    event_batch_size: int = Field(default=1000, alias="EVENT_BATCH_SIZE")

    # HeheHub HTTP API (posts, users, rankings)
    hehe_api_url: str = Field(default="http://localhost:3000", alias="HEHE_API_URL")
    hehe_api_timeout_seconds: float = Field(default=10.0, alias="HEHE_API_TIMEOUT_SECONDS")

    # Burn transactions
    wallet_private_key: str = Field(default="", alias="WALLET_PRIVATE_KEY")
    transaction_timeout_seconds: int = Field(default=180, alias="TRANSACTION_TIMEOUT_SECONDS")
    gas_buffer: float = Field(default=0.20, alias="GAS_BUFFER")

    # Inventory watcher
    poll_interval_seconds: int = Field(default=10, alias="POLL_INTERVAL_SECONDS")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def resolved_rpc_url(self) -> str:
        """RPC endpoint used for all Web3 calls.

        Raises:
            ValueError: If no RPC_URL is set and NETWORK is not supported
        """
        if self.rpc_url:
            return self.rpc_url
        if self.network not in NETWORK_RPC_URLS:
            raise ValueError(f"Unsupported network: {self.network}")
        return NETWORK_RPC_URLS[self.network].format(api_key=self.alchemy_api_key)

    @model_validator(mode="after")
    def validate_required_config(self) -> "Settings":
        """Validate required configuration on startup.

        Fails fast with a clear error message if configuration is incomplete.
        Validation is skipped in test environments.
        """
        if self.app_env in ("test", "testing"):
            return self

        missing = []

        if not self.hehe_nft_contract_address:
            missing.append("HEHE_NFT_CONTRACT_ADDRESS: Deployed HeheHub NFT contract")

        if not self.rpc_url and not self.alchemy_api_key:
            missing.append("RPC_URL or ALCHEMY_API_KEY: Needed to read contract events")

        if missing:
            error_msg = "CRITICAL: Missing required environment variables:\n\n" + "\n".join(
                f"  - {m}" for m in missing
            )
            error_msg += "\n\nPlease update your .env file and restart."
            raise ValueError(error_msg)

        return self


def configure_logging(settings: Settings) -> None:
    """Configure structlog based on application environment.

    - Production: JSON output for log aggregation
    - Development: Console output for human readability
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    if settings.app_env == "production":
        renderer = [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            *renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
