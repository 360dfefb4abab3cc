"""Tests for the sign resolver and balance fold."""

import pytest

from src.pf_common.enums import TransactionType
from src.pf_transaction.domain.sign import calculate_balance, resolve_sign, signed_delta


class TestResolveSign:
    @pytest.mark.parametrize(
        ("tx_type", "sign"),
        [
            ("income", 1),
            ("refund", 1),
            ("expense", -1),
            ("adjustment", 1),
            ("transfer", 0),
        ],
    )
    def test_known_types(self, tx_type: str, sign: int) -> None:
        assert resolve_sign(tx_type) == sign

    def test_accepts_enum(self) -> None:
        assert resolve_sign(TransactionType.EXPENSE) == -1

    def test_unknown_type_has_no_impact(self) -> None:
        assert resolve_sign("gift") == 0


class TestSignedDelta:
    def test_expense_is_negative(self) -> None:
        assert signed_delta("expense", 2500) == -2500

    def test_income_is_positive(self) -> None:
        assert signed_delta("income", 2500) == 2500

    def test_legacy_transfer_row_is_neutral(self) -> None:
        assert signed_delta("transfer", 2500) == 0


class TestCalculateBalance:
    def test_empty_history_is_opening(self) -> None:
        assert calculate_balance(10000, []) == 10000

    def test_folds_history(self) -> None:
        history = [("income", 5000), ("expense", 1200), ("refund", 200), ("transfer", 999)]
        assert calculate_balance(10000, history) == 10000 + 5000 - 1200 + 200

    def test_may_go_negative(self) -> None:
        assert calculate_balance(0, [("expense", 300)]) == -300
