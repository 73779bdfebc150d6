"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth / caller identity
  2xxx: Collateral custody
  3xxx: Market lifecycle
  4xxx: Trading
  5xxx: Payout / fees
  6xxx: Oracle
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired credentials", 401)


class UnauthorizedError(AppError):
    def __init__(self, caller: str, action: str) -> None:
        super().__init__(1006, f"Caller {caller} is not allowed to {action}", 403)


# --- 2xxx: Custody ---

class InsufficientBalanceError(AppError):
    def __init__(self, account_id: str, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance for {account_id}: required {required}, available {available}",
            422,
        )


# --- 3xxx: Market ---

class MarketNotFoundError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3001, f"Market not found: {market_id}", 404)


class MarketClosedError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3002, f"Trading period ended for market {market_id}", 422)


class TooEarlyError(AppError):
    def __init__(self, market_id: str, settlement_time: int) -> None:
        super().__init__(
            3003,
            f"Settlement time not reached for market {market_id} (settles at {settlement_time})",
            422,
        )


class AlreadySettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3004, f"Market already settled: {market_id}", 409)


class NotSettledError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3005, f"Market not settled: {market_id}", 422)


class DuplicateMarketError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(3006, f"Market already exists: {market_id}", 409)


class InvalidMarketParamsError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3007, f"Invalid market parameters: {detail}", 422)


# --- 4xxx: Trading ---

class InvalidAmountError(AppError):
    def __init__(self, amount: int) -> None:
        super().__init__(4001, f"Tokens must be positive, got {amount}", 422)


class InsufficientPaymentError(AppError):
    def __init__(self, required: int, paid: int) -> None:
        super().__init__(
            4002, f"Insufficient payment: cost {required}, paid {paid}", 422
        )


class ReentrantCallError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(4003, f"Reentrant call into market {market_id}", 409)


# --- 5xxx: Payout / fees ---

class AlreadyClaimedError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(5001, f"Already claimed: {account_id}", 409)


class NoWinningsError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(5002, f"No winnings to claim for {account_id}", 422)


class NoFeesError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(5003, f"No protocol fees to withdraw for market {market_id}", 422)


# --- 6xxx: Oracle ---

class ScoreUnavailableError(AppError):
    def __init__(self, market_id: str) -> None:
        super().__init__(6001, f"Engagement score not set for {market_id}", 424)


class OracleNotWritableError(AppError):
    def __init__(self) -> None:
        super().__init__(6002, "Configured oracle does not accept manual scores", 422)
