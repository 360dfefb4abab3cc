"""Domain models for pf_transaction — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

from src.pf_transaction.domain.sign import signed_delta

NOTE_MAX_LENGTH = 500          # note as entered by the user
STORED_NOTE_MAX_LENGTH = 640   # column width; also holds transfer leg notes


@dataclass
class Transaction:
    id: str
    user_id: str
    account_id: str
    type: str                   # TransactionType value
    category: str
    amount_cents: int           # always a positive magnitude
    currency: str
    date: datetime
    merchant: str | None = None
    note: str | None = None
    tags: list[str] = field(default_factory=list)
    payment_mode: str | None = None
    transfer_id: str | None = None
    transfer_to_account_id: str | None = None    # set on the outgoing (expense) leg
    transfer_from_account_id: str | None = None  # set on the incoming (income) leg
    account_name: str | None = None              # joined from accounts for display
    account_type: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def signed_amount_cents(self) -> int:
        return signed_delta(self.type, self.amount_cents)

    @property
    def is_transfer_leg(self) -> bool:
        return self.transfer_id is not None


@dataclass
class NewTransaction:
    """Column values for one insert; the database assigns id and timestamps."""

    user_id: str
    account_id: str
    type: str
    category: str
    amount_cents: int
    currency: str
    date: datetime
    merchant: str | None = None
    note: str | None = None
    tags: list[str] = field(default_factory=list)
    payment_mode: str | None = None
    transfer_id: str | None = None
    transfer_to_account_id: str | None = None
    transfer_from_account_id: str | None = None


@dataclass
class TransactionFilter:
    account_id: str | None = None
    type: str | None = None
    category: str | None = None   # case-insensitive substring
    date_from: datetime | None = None
    date_to: datetime | None = None
