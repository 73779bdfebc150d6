"""Domain events emitted by markets and the registry.

Each market keeps its events in an append-only list; the application layer
journals new ones to the market_events table after every operation.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from src.pm_common.enums import MarketEventType


@dataclass(frozen=True)
class MarketEvent:
    market_id: str
    event_type: MarketEventType
    payload: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """JSON-safe payload; fixed-point ints are kept as decimal strings."""
        return {k: (str(v) if isinstance(v, int) and not isinstance(v, bool) else v)
                for k, v in self.payload.items()}


def market_created(market_id: str, theta: int, settlement_time: int) -> MarketEvent:
    return MarketEvent(
        market_id,
        MarketEventType.MARKET_CREATED,
        {"theta": theta, "settlement_time": settlement_time},
    )


def tokens_purchased(market_id: str, account_id: str, side: str, tokens: int, cost: int) -> MarketEvent:
    return MarketEvent(
        market_id,
        MarketEventType.TOKENS_PURCHASED,
        {"account_id": account_id, "side": side, "tokens": tokens, "cost": cost},
    )


def market_settled(market_id: str, final_score: int, long_won: bool) -> MarketEvent:
    return MarketEvent(
        market_id,
        MarketEventType.MARKET_SETTLED,
        {"final_score": final_score, "long_won": long_won},
    )


def rewards_claimed(market_id: str, account_id: str, amount: int) -> MarketEvent:
    return MarketEvent(
        market_id,
        MarketEventType.REWARDS_CLAIMED,
        {"account_id": account_id, "amount": amount},
    )


def fees_withdrawn(market_id: str, recipient: str, amount: int) -> MarketEvent:
    return MarketEvent(
        market_id,
        MarketEventType.FEES_WITHDRAWN,
        {"recipient": recipient, "amount": amount},
    )


def event_as_dict(event: MarketEvent) -> dict[str, Any]:
    data = asdict(event)
    data["event_type"] = event.event_type.value
    data["payload"] = event.to_payload()
    return data
