"""Service error hierarchy for chain reads, burn transactions and the HeheHub API.

This module defines the exception hierarchy for service-level errors:
- ServiceError: Base for all service errors
- TransientError: Retryable errors (network, rate limits, timeouts)
- PermanentError: Non-retryable errors (authentication, reverts, rule violations)
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hehehub.models.inventory import PendingReward


class ServiceError(Exception):
    """Base exception for all service errors."""

    pass


class TransientError(ServiceError):
    """Transient error that may succeed on retry.

    Examples:
    - Network timeouts
    - RPC endpoint unavailable
    - Transaction submission failures
    """

    pass


class PermanentError(ServiceError):
    """Permanent error that will not succeed on retry.

    Examples:
    - Authentication failures (401, 403)
    - Transaction reverts
    - Burning an item that is not eligible
    """

    pass


# Event source errors
class EventSourceError(TransientError):
    """Fetching contract event logs failed."""

    pass


class BlockchainConnectionError(EventSourceError):
    """Failed to connect to blockchain RPC endpoint."""

    pass


# Burn transaction errors
class BurnError(ServiceError):
    """Base exception for burn failures that leave the item unburned."""

    pass


class ItemNotOwnedError(BurnError, PermanentError):
    """The item is not in the owner's current inventory."""

    pass


class BurnNotEligibleError(BurnError, PermanentError):
    """The item does not have enough likes to be burned for a reward."""

    pass


class TransactionSubmissionError(BurnError, TransientError):
    """Transaction submission failed."""

    pass


class TransactionTimeoutError(BurnError, TransientError):
    """Transaction confirmation timeout."""

    pass


class TransactionRevertError(BurnError, PermanentError):
    """Transaction reverted on-chain (receipt status is not success)."""

    pass


# HeheHub API errors
class HeheApiError(TransientError):
    """HeheHub API request failed (network error or unexpected status)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class HeheApiAuthError(PermanentError):
    """HeheHub API rejected the session token (401, 403) or no token is stored."""

    pass


class ScoreUpdateError(PermanentError):
    """Burn confirmed on-chain but the score update was not persisted.

    The burn must not be re-submitted. Retry only the score update with
    the attached pending reward.
    """

    def __init__(self, message: str, pending: "PendingReward"):
        super().__init__(message)
        self.pending = pending
