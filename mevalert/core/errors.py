"""
Exception classes raised by the hook.

Every error aborts the call that raised it; the hook rolls back all state,
balance and event changes made by that call before the error reaches the
caller.
"""


class HookError(Exception):
    """Base exception for hook operations."""
    pass


# Authorization failures

class UnauthorizedError(HookError):
    """Raised when the caller lacks the owner privilege."""

    def __init__(self, caller: str, action: str):
        super().__init__(f"{caller} is not allowed to {action}")
        self.caller = caller
        self.action = action


class UnauthorizedVenueError(HookError):
    """Raised when a swap hook is invoked by something other than the venue."""
    pass


# State-precondition failures

class PoolNotRegisteredError(HookError):
    """Raised when a pool is not on the allow-list."""

    def __init__(self, pool: str):
        super().__init__(f"Pool {pool} is not registered")
        self.pool = pool


class EmergencyPausedError(HookError):
    """Raised when a guarded entry point is called while paused."""

    def __init__(self, reason: str = ""):
        message = "Hook is paused"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.reason = reason


class AlreadyPausedError(HookError):
    pass


class NotPausedError(HookError):
    pass


class AuctionNotFoundError(HookError):
    """Raised when an auction id has not been assigned for a pool."""

    def __init__(self, pool: str, auction_id: int):
        super().__init__(f"Auction {auction_id} does not exist for pool {pool}")
        self.pool = pool
        self.auction_id = auction_id


class AuctionEndedError(HookError):
    """Raised when bidding after the auction's end time."""
    pass


class AuctionNotEndedError(HookError):
    """Raised when finalizing before the auction's end time."""
    pass


class AuctionAlreadySettledError(HookError):
    pass


class ReentrantCallError(HookError):
    """Raised when a guarded entry point is re-entered during a transfer."""
    pass


# Value failures

class ZeroAmountError(HookError):
    pass


class InvalidDurationError(HookError):
    pass


class InvalidFeeError(HookError):
    pass


class InvalidParameterError(HookError):
    pass


class BidTooLowError(HookError):
    """Raised when a bid is below the auction's minimum."""

    def __init__(self, amount: int, min_bid: int):
        super().__init__(f"Bid {amount} is below the minimum bid {min_bid}")
        self.amount = amount
        self.min_bid = min_bid


class BidNotHigherError(HookError):
    """Raised when a bid does not beat the leading effective bid."""

    def __init__(self, effective_bid: int, highest_effective_bid: int):
        super().__init__(
            f"Effective bid {effective_bid} does not exceed "
            f"current effective bid {highest_effective_bid}"
        )
        self.effective_bid = effective_bid
        self.highest_effective_bid = highest_effective_bid


class LossTooSmallError(HookError):
    pass


class InvalidEvidenceError(HookError):
    pass


class EmptyInsuranceFundError(HookError):
    pass


class InsufficientFeesError(HookError):
    pass


class RecommendationError(HookError):
    """Base exception for rejected signed fee recommendations."""
    pass


class UnknownSignerError(RecommendationError):
    pass


class InvalidNonceError(RecommendationError):
    pass


class RecommendationExpiredError(RecommendationError):
    pass


# Transfer failures

class TransferFailedError(HookError):
    """Raised when native value cannot be moved to or from an account."""

    def __init__(self, sender: str, recipient: str, amount: int, reason: str = ""):
        message = f"Transfer of {amount} from {sender} to {recipient} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.sender = sender
        self.recipient = recipient
        self.amount = amount
