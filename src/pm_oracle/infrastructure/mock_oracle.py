"""MockEngagementOracle — in-memory score store for local runs and tests.

Scores are set explicitly (owner-gated at the API layer). get_score never
blocks: it returns the stored value or raises ScoreUnavailableError.
"""

import logging

from src.pm_common.errors import InvalidAmountError, ScoreUnavailableError

logger = logging.getLogger(__name__)


class MockEngagementOracle:
    def __init__(self) -> None:
        self._scores: dict[str, int] = {}
        self.requested: list[str] = []

    def set_score(self, market_id: str, score: int) -> None:
        if score < 0:
            raise InvalidAmountError(score)
        self._scores[market_id] = score
        logger.info("Engagement score set: market=%s score=%d", market_id, score)

    def has_score(self, market_id: str) -> bool:
        return market_id in self._scores

    def get_score(self, market_id: str) -> int:
        try:
            return self._scores[market_id]
        except KeyError:
            raise ScoreUnavailableError(market_id) from None

    def request_score(self, market_id: str) -> None:
        self.requested.append(market_id)
