"""CollateralBook — in-memory implementation of CollateralLedgerProtocol.

Every balance change writes a LedgerEntry. A transfer that exceeds the
source balance raises InsufficientBalanceError and changes nothing.

Transaction ownership: callers that chain several transfers wrap them in
`with book.savepoint():` so a failure part-way restores every balance and
drops the entries written since the savepoint.
A scope that stays open across an await uses `ledger_mark()` and
`reverse_since()` instead: only the entries of one reference are undone,
by amount, so writes made meanwhile by other callers survive.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from src.pm_account.domain.models import Account, LedgerEntry
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import LedgerEntryType
from src.pm_common.errors import InsufficientBalanceError, InvalidAmountError

logger = logging.getLogger(__name__)


class CollateralBook:
    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._entries: list[LedgerEntry] = []
        self._next_entry_id = 1
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def balance_of(self, account_id: str) -> int:
        account = self._accounts.get(account_id)
        return account.balance if account else 0

    def ledger_mark(self) -> int:
        """Id the next ledger entry will get."""
        return self._next_entry_id

    def get_account(self, account_id: str) -> Account | None:
        return self._accounts.get(account_id)

    def list_ledger_entries(
        self,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        """Newest first; `cursor_id` is exclusive."""
        matches = [
            e
            for e in reversed(self._entries)
            if e.account_id == account_id
            and (cursor_id is None or e.id < cursor_id)
            and (entry_type is None or e.entry_type == entry_type)
        ]
        return matches[:limit]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def deposit(self, account_id: str, amount: int) -> tuple[Account, LedgerEntry]:
        if amount <= 0:
            raise InvalidAmountError(amount)
        with self._lock:
            account = self._credit(account_id, amount)
            entry = self._write_entry(
                account, LedgerEntryType.DEPOSIT.value, amount, None, None
            )
        return account, entry

    def transfer(
        self,
        from_account: str,
        to_account: str,
        amount: int,
        entry_type: str,
        reference_type: str,
        reference_id: str,
    ) -> None:
        if amount < 0:
            raise InvalidAmountError(amount)
        if amount == 0:
            return
        with self._lock:
            available = self.balance_of(from_account)
            if available < amount:
                raise InsufficientBalanceError(from_account, amount, available)
            source = self._credit(from_account, -amount)
            self._write_entry(source, entry_type, -amount, reference_type, reference_id)
            target = self._credit(to_account, amount)
            self._write_entry(target, entry_type, amount, reference_type, reference_id)
        logger.debug(
            "Transfer %s: %s -> %s amount=%d ref=%s",
            entry_type, from_account, to_account, amount, reference_id,
        )

    @contextmanager
    def savepoint(self) -> Iterator[None]:
        with self._lock:
            balances = {k: (a.balance, a.version) for k, a in self._accounts.items()}
            entry_count = len(self._entries)
            next_id = self._next_entry_id
            try:
                yield
            except Exception:
                for account_id in list(self._accounts):
                    if account_id not in balances:
                        del self._accounts[account_id]
                for account_id, (balance, version) in balances.items():
                    account = self._accounts[account_id]
                    account.balance = balance
                    account.version = version
                del self._entries[entry_count:]
                self._next_entry_id = next_id
                raise

    def reverse_since(self, mark: int, reference_type: str, reference_id: str) -> None:
        """Undo every entry of one reference written at or after `mark`.

        Balances move back by each entry's amount and the entries are dropped.
        """
        with self._lock:
            undone = [
                e
                for e in self._entries
                if e.id >= mark
                and e.reference_type == reference_type
                and e.reference_id == reference_id
            ]
            if not undone:
                return
            for entry in undone:
                self._credit(entry.account_id, -entry.amount)
            undone_ids = {e.id for e in undone}
            self._entries = [e for e in self._entries if e.id not in undone_ids]
        logger.warning(
            "Reversed %d ledger entries of %s %s", len(undone), reference_type, reference_id
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _credit(self, account_id: str, amount: int) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            account = Account(account_id=account_id, balance=0)
            self._accounts[account_id] = account
        account.balance += amount
        account.version += 1
        return account

    def _write_entry(
        self,
        account: Account,
        entry_type: str,
        amount: int,
        reference_type: str | None,
        reference_id: str | None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            id=self._next_entry_id,
            account_id=account.account_id,
            entry_type=entry_type,
            amount=amount,
            balance_after=account.balance,
            reference_type=reference_type,
            reference_id=reference_id,
            created_at=utc_now(),
        )
        self._next_entry_id += 1
        self._entries.append(entry)
        return entry
