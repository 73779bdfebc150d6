"""AccountApplicationService — thin composition layer over collateral custody.

Balances live in the registry's CollateralBook; nothing here touches the
database. Deposits credit collateral directly (a development faucet with
no external funding source).
"""

import logging

from src.pm_account.application.schemas import (
    BalanceResponse,
    DepositResponse,
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_account.domain.repository import CollateralLedgerProtocol
from src.pm_common.fixed_point import fixed_to_display

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def get_balance(
        self, ledger: CollateralLedgerProtocol, account_id: str
    ) -> BalanceResponse:
        return BalanceResponse.from_amount(account_id, ledger.balance_of(account_id))

    def deposit(
        self, ledger: CollateralLedgerProtocol, account_id: str, amount: int
    ) -> DepositResponse:
        account, entry = ledger.deposit(account_id, amount)
        logger.info("Deposit %s amount=%d balance=%d", account_id, amount, account.balance)
        return DepositResponse.from_result(
            balance=account.balance,
            amount=amount,
            entry_id=entry.id,
        )

    def list_ledger(
        self,
        ledger: CollateralLedgerProtocol,
        account_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a separate count
        entries = ledger.list_ledger_entries(account_id, cursor_id, limit + 1, entry_type)
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [
            LedgerEntryItem(
                id=e.id,
                entry_type=e.entry_type,
                amount=e.amount,
                amount_display=fixed_to_display(e.amount),
                balance_after=e.balance_after,
                balance_after_display=fixed_to_display(e.balance_after),
                reference_type=e.reference_type,
                reference_id=e.reference_id,
                description=e.description,
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)
