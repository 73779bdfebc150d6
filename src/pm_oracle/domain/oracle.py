"""Oracle Protocol — resolves a market id to its final engagement score.

Markets depend only on this Protocol, so any score source (mock, HTTP
adapter, on-chain reader) can be injected.
"""

from typing import Protocol


class ScoreOracle(Protocol):
    def get_score(self, market_id: str) -> int:
        """Return the 1e18-scaled score; raise ScoreUnavailableError if unset."""
        ...

    def request_score(self, market_id: str) -> None:
        """Fire-and-forget trigger asking the source to publish a score."""
        ...
