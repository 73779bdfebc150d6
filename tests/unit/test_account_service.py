"""Unit tests for AccountApplicationService over a CollateralBook."""

import pytest

from src.pm_account.application.schemas import cursor_decode, cursor_encode
from src.pm_account.application.service import AccountApplicationService
from src.pm_account.infrastructure.collateral_book import CollateralBook
from src.pm_common.errors import InvalidAmountError
from src.pm_common.fixed_point import SCALE


@pytest.fixture
def svc() -> AccountApplicationService:
    return AccountApplicationService()


class TestBalance:
    def test_unknown_account_is_zero(self, svc, book) -> None:
        resp = svc.get_balance(book, "alice")
        assert resp.balance == 0
        assert resp.balance_display == "0.000000"

    def test_after_deposit(self, svc, book) -> None:
        book.deposit("alice", 15 * SCALE // 10)
        resp = svc.get_balance(book, "alice")
        assert resp.balance == 15 * SCALE // 10
        assert resp.balance_display == "1.500000"


class TestDeposit:
    def test_returns_new_balance_and_entry(self, svc, book) -> None:
        svc.deposit(book, "alice", SCALE)
        resp = svc.deposit(book, "alice", 2 * SCALE)
        assert resp.balance == 3 * SCALE
        assert resp.deposited == 2 * SCALE
        assert resp.deposited_display == "2.000000"
        assert resp.ledger_entry_id == 2

    def test_zero_rejected(self, svc, book) -> None:
        with pytest.raises(InvalidAmountError):
            svc.deposit(book, "alice", 0)


class TestListLedger:
    def test_paginates_newest_first(self, svc) -> None:
        book = CollateralBook()
        for n in range(1, 6):
            book.deposit("alice", n * SCALE)

        first = svc.list_ledger(book, "alice", None, 2, None)
        assert [i.amount for i in first.items] == [5 * SCALE, 4 * SCALE]
        assert first.has_more is True

        second = svc.list_ledger(book, "alice", first.next_cursor, 2, None)
        assert [i.amount for i in second.items] == [3 * SCALE, 2 * SCALE]

        third = svc.list_ledger(book, "alice", second.next_cursor, 2, None)
        assert [i.amount for i in third.items] == [SCALE]
        assert third.has_more is False
        assert third.next_cursor is None

    def test_filters_by_entry_type(self, svc, book) -> None:
        book.deposit("alice", SCALE)
        resp = svc.list_ledger(book, "alice", None, 10, "REWARD_PAYOUT")
        assert resp.items == []

    def test_garbage_cursor_starts_from_top(self, svc, book) -> None:
        book.deposit("alice", SCALE)
        resp = svc.list_ledger(book, "alice", "not-base64!!", 10, None)
        assert len(resp.items) == 1


class TestCursor:
    def test_round_trip(self) -> None:
        assert cursor_decode(cursor_encode(42)) == 42

    def test_none(self) -> None:
        assert cursor_decode(None) is None
