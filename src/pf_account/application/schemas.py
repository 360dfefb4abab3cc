"""Pydantic schemas for pf_account API (accounts + adjustments)."""

from pydantic import BaseModel, Field

from src.pf_account.domain.models import ACCOUNT_NAME_MAX_LENGTH, Account, Adjustment, BalanceCheck
from src.pf_common.money import format_money, to_major_units

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateAccountRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=ACCOUNT_NAME_MAX_LENGTH)
    type: str = Field(..., description="AccountType value or a legacy alias such as 'metro'")
    currency: str | None = Field(None, min_length=3, max_length=3)
    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=50)
    opening_balance_cents: int = 0


class UpdateAccountRequest(BaseModel):
    """Metadata only. Balances move through transactions and adjustments."""

    name: str | None = Field(None, min_length=1, max_length=ACCOUNT_NAME_MAX_LENGTH)
    type: str | None = None
    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=50)


class CreateAdjustmentRequest(BaseModel):
    account_id: str = Field(..., min_length=1)
    new_balance_cents: int
    reason: str = Field(..., max_length=200)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    id: str
    name: str
    type: str
    currency: str
    color: str | None
    icon: str | None
    opening_balance_cents: int
    opening_balance_display: str
    current_balance_cents: int
    current_balance_display: str
    created_at: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            type=account.type,
            currency=account.currency,
            color=account.color,
            icon=account.icon,
            opening_balance_cents=account.opening_balance_cents,
            opening_balance_display=format_money(account.opening_balance_cents, account.currency),
            current_balance_cents=account.current_balance_cents,
            current_balance_display=format_money(account.current_balance_cents, account.currency),
            created_at=account.created_at.isoformat() if account.created_at else None,
        )


class AccountListResponse(BaseModel):
    items: list[AccountResponse]


class AdjustmentResponse(BaseModel):
    """Result of a balance adjustment. ``adjusted`` is False for a no-op."""

    adjusted: bool
    account_id: str
    adjustment_id: str | None
    previous_balance_cents: int
    new_balance_cents: int
    adjustment_amount_cents: int
    adjustment_amount_display: str
    reason: str | None

    @classmethod
    def from_adjustment(cls, adjustment: Adjustment, currency: str) -> "AdjustmentResponse":
        return cls(
            adjusted=True,
            account_id=adjustment.account_id,
            adjustment_id=adjustment.id,
            previous_balance_cents=adjustment.previous_balance_cents,
            new_balance_cents=adjustment.new_balance_cents,
            adjustment_amount_cents=adjustment.adjustment_amount_cents,
            adjustment_amount_display=format_money(adjustment.adjustment_amount_cents, currency),
            reason=adjustment.reason,
        )

    @classmethod
    def no_change(cls, account: Account) -> "AdjustmentResponse":
        return cls(
            adjusted=False,
            account_id=account.id,
            adjustment_id=None,
            previous_balance_cents=account.current_balance_cents,
            new_balance_cents=account.current_balance_cents,
            adjustment_amount_cents=0,
            adjustment_amount_display=format_money(0, account.currency),
            reason=None,
        )


class AdjustmentItem(BaseModel):
    id: str
    account_id: str
    previous_balance_cents: int
    new_balance_cents: int
    adjustment_amount_cents: int
    reason: str
    created_at: str | None

    @classmethod
    def from_domain(cls, adjustment: Adjustment) -> "AdjustmentItem":
        return cls(
            id=adjustment.id,
            account_id=adjustment.account_id,
            previous_balance_cents=adjustment.previous_balance_cents,
            new_balance_cents=adjustment.new_balance_cents,
            adjustment_amount_cents=adjustment.adjustment_amount_cents,
            reason=adjustment.reason,
            created_at=adjustment.created_at.isoformat() if adjustment.created_at else None,
        )


class AdjustmentListResponse(BaseModel):
    items: list[AdjustmentItem]


class ReconciliationResponse(BaseModel):
    account_id: str
    opening_balance_cents: int
    transactions_impact_cents: int
    adjustments_impact_cents: int
    expected_balance_cents: int
    current_balance_cents: int
    drift_cents: int
    consistent: bool
    expected_balance: str   # major units, e.g. "950.00"
    current_balance: str

    @classmethod
    def from_check(cls, check: BalanceCheck) -> "ReconciliationResponse":
        return cls(
            account_id=check.account_id,
            opening_balance_cents=check.opening_balance_cents,
            transactions_impact_cents=check.transactions_impact_cents,
            adjustments_impact_cents=check.adjustments_impact_cents,
            expected_balance_cents=check.expected_balance_cents,
            current_balance_cents=check.current_balance_cents,
            drift_cents=check.drift_cents,
            consistent=check.consistent,
            expected_balance=str(to_major_units(check.expected_balance_cents)),
            current_balance=str(to_major_units(check.current_balance_cents)),
        )
