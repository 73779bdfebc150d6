"""Domain models for pm_account — pure dataclasses for collateral custody."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Account:
    account_id: str
    balance: int             # collateral, 1e18 scale
    version: int = 0


@dataclass
class LedgerEntry:
    id: int                          # monotonically increasing per book
    account_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # positive=income negative=expense
    balance_after: int               # balance snapshot after op
    reference_type: str | None = None
    reference_id: str | None = None
    description: str | None = None
    created_at: datetime | None = None
