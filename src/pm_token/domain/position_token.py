"""Fungible position token, one per side per market.

Only the owning market may mint; there is no burn, transfer or approval.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from src.pm_common.errors import InvalidAmountError, UnauthorizedError

logger = logging.getLogger(__name__)


class PositionToken:
    def __init__(self, name: str, symbol: str, minter: str) -> None:
        self.name = name
        self.symbol = symbol
        self.minter = minter
        self._balances: dict[str, int] = {}
        self._total_supply = 0

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, account_id: str) -> int:
        return self._balances.get(account_id, 0)

    def mint(self, caller: str, account_id: str, amount: int) -> None:
        if caller != self.minter:
            raise UnauthorizedError(caller, f"mint {self.symbol}")
        if amount <= 0:
            raise InvalidAmountError(amount)
        self._balances[account_id] = self._balances.get(account_id, 0) + amount
        self._total_supply += amount
        logger.debug("Minted %d %s to %s", amount, self.symbol, account_id)

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        """Drop every mint made inside the block if it raises."""
        balances = dict(self._balances)
        total_supply = self._total_supply
        try:
            yield
        except Exception:
            self._balances = balances
            self._total_supply = total_supply
            raise
