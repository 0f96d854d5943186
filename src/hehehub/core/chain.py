"""Web3 connection setup."""

import structlog
from web3 import Web3

from hehehub.core.config import Settings

logger = structlog.get_logger()


def build_web3(settings: Settings) -> Web3 | None:
    """Web3 over HTTP for the configured network, or None if unsupported."""
    try:
        rpc_url = settings.resolved_rpc_url
    except ValueError as e:
        logger.warning("web3.unavailable", reason=str(e))
        return None
    return Web3(Web3.HTTPProvider(rpc_url))
