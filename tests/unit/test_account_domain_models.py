from datetime import UTC, datetime

from src.pf_account.domain.models import Account, BalanceCheck
from src.pf_transaction.domain.models import Transaction


class TestAccount:
    def test_defaults(self) -> None:
        account = Account(
            id="acc-1",
            user_id="user-1",
            name="HDFC",
            type="bank",
            currency="INR",
            opening_balance_cents=100000,
            current_balance_cents=100000,
        )
        assert account.color is None
        assert account.icon is None
        assert account.created_at is None


class TestBalanceCheck:
    def test_consistent(self) -> None:
        check = BalanceCheck(
            account_id="acc-1",
            opening_balance_cents=100000,
            transactions_impact_cents=-5000,
            adjustments_impact_cents=-45000,
            current_balance_cents=50000,
        )
        assert check.expected_balance_cents == 50000
        assert check.drift_cents == 0
        assert check.consistent is True

    def test_drift_is_current_minus_expected(self) -> None:
        check = BalanceCheck(
            account_id="acc-1",
            opening_balance_cents=0,
            transactions_impact_cents=2000,
            adjustments_impact_cents=0,
            current_balance_cents=2500,
        )
        assert check.drift_cents == 500
        assert check.consistent is False


def _tx(**overrides: object) -> Transaction:
    values: dict[str, object] = {
        "id": "tx-1",
        "user_id": "user-1",
        "account_id": "acc-1",
        "type": "expense",
        "category": "Food",
        "amount_cents": 5000,
        "currency": "INR",
        "date": datetime(2026, 3, 1, tzinfo=UTC),
    }
    values.update(overrides)
    return Transaction(**values)  # type: ignore[arg-type]


class TestTransaction:
    def test_signed_amount_expense(self) -> None:
        assert _tx().signed_amount_cents == -5000

    def test_signed_amount_refund(self) -> None:
        assert _tx(type="refund").signed_amount_cents == 5000

    def test_legacy_transfer_row_has_no_impact(self) -> None:
        assert _tx(type="transfer").signed_amount_cents == 0

    def test_transfer_leg(self) -> None:
        assert _tx().is_transfer_leg is False
        assert _tx(transfer_id="t-1").is_transfer_leg is True

    def test_tags_not_shared_between_instances(self) -> None:
        first, second = _tx(), _tx()
        first.tags.append("lunch")
        assert second.tags == []
