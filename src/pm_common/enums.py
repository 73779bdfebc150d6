"""Global enums — values are also the wire format and the journal's event_type."""

from enum import Enum


class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"


class MarketStatus(str, Enum):
    ACTIVE = "ACTIVE"        # trading open
    CLOSED = "CLOSED"        # deadline passed, awaiting settle()
    SETTLED = "SETTLED"


class MarketEventType(str, Enum):
    MARKET_CREATED = "MARKET_CREATED"
    TOKENS_PURCHASED = "TOKENS_PURCHASED"
    MARKET_SETTLED = "MARKET_SETTLED"
    REWARDS_CLAIMED = "REWARDS_CLAIMED"
    FEES_WITHDRAWN = "FEES_WITHDRAWN"


class LedgerEntryType(str, Enum):
    DEPOSIT = "DEPOSIT"
    # Buy (user + market escrow paired)
    TRADE_PAYMENT = "TRADE_PAYMENT"
    TRADE_REFUND = "TRADE_REFUND"
    # Claim
    REWARD_PAYOUT = "REWARD_PAYOUT"
    # Protocol
    FEE_WITHDRAWAL = "FEE_WITHDRAWAL"
