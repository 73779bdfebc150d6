"""Custody Protocol — dependency inversion for testability.

Markets only see this Protocol. Unit tests inject fakes that conform to it
(for example to call back into a market while a transfer is in flight);
the infrastructure layer provides the in-memory CollateralBook.
"""

from contextlib import AbstractContextManager
from typing import Protocol

from src.pm_account.domain.models import Account, LedgerEntry


class CollateralLedgerProtocol(Protocol):
    def balance_of(self, account_id: str) -> int: ...

    def get_account(self, account_id: str) -> Account | None: ...

    def deposit(self, account_id: str, amount: int) -> tuple[Account, LedgerEntry]: ...

    def transfer(
        self,
        from_account: str,
        to_account: str,
        amount: int,
        entry_type: str,
        reference_type: str,
        reference_id: str,
    ) -> None: ...

    def savepoint(self) -> AbstractContextManager[None]: ...

    def ledger_mark(self) -> int: ...

    def reverse_since(self, mark: int, reference_type: str, reference_id: str) -> None: ...

    def list_ledger_entries(
        self,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
