"""Domain models for pf_account — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

ACCOUNT_NAME_MAX_LENGTH = 100


@dataclass
class Account:
    id: str
    user_id: str
    name: str
    type: str                     # AccountType value
    currency: str                 # ISO 4217 code, never converted
    opening_balance_cents: int    # set once at creation
    current_balance_cents: int    # mutated only through the balance ledger
    color: str | None = None
    icon: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Adjustment:
    id: str
    user_id: str
    account_id: str
    previous_balance_cents: int
    new_balance_cents: int
    adjustment_amount_cents: int  # new - previous, signed
    reason: str
    created_at: datetime | None = None


@dataclass
class BalanceCheck:
    """Result of recomputing an account balance from its history."""

    account_id: str
    opening_balance_cents: int
    transactions_impact_cents: int
    adjustments_impact_cents: int
    current_balance_cents: int

    @property
    def expected_balance_cents(self) -> int:
        return (
            self.opening_balance_cents
            + self.transactions_impact_cents
            + self.adjustments_impact_cents
        )

    @property
    def drift_cents(self) -> int:
        return self.current_balance_cents - self.expected_balance_cents

    @property
    def consistent(self) -> bool:
        return self.drift_cents == 0
