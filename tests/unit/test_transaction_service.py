"""Unit tests for the transaction mutation protocol."""

from datetime import UTC, datetime, timedelta

import pytest

from src.pf_common.enums import PaymentMode, TransactionType
from src.pf_common.errors import (
    AccountNotFoundError,
    InvalidAmountError,
    TransactionNotFoundError,
    TransferLegImmutableError,
    UnsupportedTransactionTypeError,
    ValidationError,
)
from src.pf_transaction.application.schemas import (
    CreateTransactionRequest,
    CreateTransferRequest,
    UpdateTransactionRequest,
)
from src.pf_transaction.application.service import TransactionApplicationService
from src.pf_transaction.application.transfer_service import TransferApplicationService
from src.pf_transaction.domain.models import TransactionFilter
from tests.unit.fakes import OTHER_USER, USER, FakeAccountRepository, FakeSession, SimulatedFailure


def _expense(account_id: str, amount: int = 2500, **kwargs) -> CreateTransactionRequest:
    return CreateTransactionRequest(
        account_id=account_id,
        type=kwargs.pop("type", TransactionType.EXPENSE),
        category=kwargs.pop("category", "Food"),
        amount_cents=amount,
        **kwargs,
    )


class TestCreateTransaction:
    async def test_expense_debits_account(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(name="HDFC", balance=10000)

        resp = await tx_service.create_transaction(
            session,
            USER,
            _expense(acc.id, 2500, tags=["lunch", " lunch", "team"], payment_mode=PaymentMode.UPI),
        )

        assert session.balance(acc.id) == 7500
        assert resp.account.id == acc.id
        assert resp.account.name == "HDFC"
        assert resp.account.type == "bank"
        assert resp.signed_amount_cents == -2500
        assert resp.currency == "INR"
        assert resp.tags == ["lunch", "team"]
        assert resp.payment_mode == "upi"
        assert resp.id in session.committed.transactions

    async def test_income_and_refund_credit(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        await tx_service.create_transaction(
            session, USER, _expense(acc.id, 5000, type=TransactionType.INCOME, category="Salary")
        )
        await tx_service.create_transaction(
            session, USER, _expense(acc.id, 300, type=TransactionType.REFUND)
        )
        assert session.balance(acc.id) == 5300

    async def test_expense_may_overdraw(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=100)
        await tx_service.create_transaction(session, USER, _expense(acc.id, 500))
        assert session.balance(acc.id) == -400

    async def test_currency_is_stored_as_given(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0, currency="INR")
        resp = await tx_service.create_transaction(
            session, USER, _expense(acc.id, 100, currency="usd")
        )
        assert resp.currency == "USD"
        assert session.balance(acc.id) == -100

    @pytest.mark.parametrize("tx_type", [TransactionType.TRANSFER, TransactionType.ADJUSTMENT])
    async def test_protocol_types_are_not_writable(
        self,
        session: FakeSession,
        tx_service: TransactionApplicationService,
        tx_type: TransactionType,
    ) -> None:
        acc = session.seed_account(balance=0)
        with pytest.raises(UnsupportedTransactionTypeError):
            await tx_service.create_transaction(session, USER, _expense(acc.id, type=tx_type))
        assert session.committed.transactions == {}

    async def test_non_positive_amount_rejected(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        request = CreateTransactionRequest.model_construct(
            account_id=acc.id,
            type=TransactionType.EXPENSE,
            category="Food",
            amount_cents=0,
            currency=None,
            date=None,
            merchant=None,
            note=None,
            tags=[],
            payment_mode=None,
        )
        with pytest.raises(InvalidAmountError):
            await tx_service.create_transaction(session, USER, request)

    async def test_blank_category_rejected(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        with pytest.raises(ValidationError):
            await tx_service.create_transaction(session, USER, _expense(acc.id, category="  "))

    async def test_other_owner_account_is_not_found(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=1000, user_id=OTHER_USER)
        with pytest.raises(AccountNotFoundError):
            await tx_service.create_transaction(session, USER, _expense(acc.id))
        assert session.balance(acc.id) == 1000
        assert session.committed.transactions == {}

    async def test_balance_failure_leaves_no_row(
        self,
        session: FakeSession,
        account_repo: FakeAccountRepository,
        tx_service: TransactionApplicationService,
    ) -> None:
        acc = session.seed_account(balance=1000)
        account_repo.fail_on_increment = acc.id

        with pytest.raises(SimulatedFailure):
            await tx_service.create_transaction(session, USER, _expense(acc.id))

        assert session.committed.transactions == {}
        assert session.balance(acc.id) == 1000
        assert session.rollbacks == 1


class TestUpdateTransaction:
    async def test_amount_change_applies_difference(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))

        resp = await tx_service.update_transaction(
            session, USER, tx.id, UpdateTransactionRequest(amount_cents=3500)
        )

        assert resp.amount_cents == 3500
        assert session.balance(acc.id) == 10000 - 3500

    async def test_type_flip_reverses_direction(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))

        await tx_service.update_transaction(
            session, USER, tx.id, UpdateTransactionRequest(type=TransactionType.INCOME)
        )

        assert session.balance(acc.id) == 12000

    async def test_account_move(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        a = session.seed_account(name="A", balance=10000)
        b = session.seed_account(name="B", balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(a.id, 2000))

        resp = await tx_service.update_transaction(
            session, USER, tx.id, UpdateTransactionRequest(account_id=b.id, amount_cents=1500)
        )

        assert resp.account.name == "B"
        assert session.balance(a.id) == 10000
        assert session.balance(b.id) == 8500

    async def test_descriptive_edit_leaves_balance(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))

        resp = await tx_service.update_transaction(
            session,
            USER,
            tx.id,
            UpdateTransactionRequest(note="team lunch", tags=["work"], merchant=None),
        )

        assert resp.note == "team lunch"
        assert resp.tags == ["work"]
        assert resp.merchant is None
        assert session.balance(acc.id) == 8000

    async def test_empty_update_is_a_no_op(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))
        resp = await tx_service.update_transaction(session, USER, tx.id, UpdateTransactionRequest())
        assert resp.amount_cents == 2000
        assert session.balance(acc.id) == 8000

    async def test_missing_target_account_rolls_back(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))

        with pytest.raises(AccountNotFoundError):
            await tx_service.update_transaction(
                session, USER, tx.id, UpdateTransactionRequest(account_id="acc-missing")
            )

        assert session.balance(acc.id) == 8000
        assert session.committed.transactions[tx.id].account_id == acc.id

    async def test_null_required_field_rejected(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))
        with pytest.raises(ValidationError):
            await tx_service.update_transaction(
                session, USER, tx.id, UpdateTransactionRequest(amount_cents=None)
            )

    async def test_unknown_transaction(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        with pytest.raises(TransactionNotFoundError):
            await tx_service.update_transaction(
                session, USER, "tx-missing", UpdateTransactionRequest(note="x")
            )


class TestTransferLegs:
    async def _transfer(
        self, session: FakeSession, transfer_service: TransferApplicationService
    ) -> tuple[str, str, str, str]:
        src = session.seed_account(name="Savings", balance=10000)
        dst = session.seed_account(name="Wallet", balance=0)
        resp = await transfer_service.create_transfer(
            session,
            USER,
            CreateTransferRequest(from_account_id=src.id, to_account_id=dst.id, amount_cents=4000),
        )
        expense, income = resp.transactions
        return src.id, dst.id, expense.id, income.id

    async def test_amount_is_locked(
        self,
        session: FakeSession,
        tx_service: TransactionApplicationService,
        transfer_service: TransferApplicationService,
    ) -> None:
        src, dst, expense_id, _ = await self._transfer(session, transfer_service)
        with pytest.raises(TransferLegImmutableError):
            await tx_service.update_transaction(
                session, USER, expense_id, UpdateTransactionRequest(amount_cents=1)
            )
        assert session.balance(src) == 6000
        assert session.balance(dst) == 4000

    async def test_descriptive_fields_are_editable(
        self,
        session: FakeSession,
        tx_service: TransactionApplicationService,
        transfer_service: TransferApplicationService,
    ) -> None:
        _, _, expense_id, _ = await self._transfer(session, transfer_service)
        resp = await tx_service.update_transaction(
            session,
            USER,
            expense_id,
            UpdateTransactionRequest(category="Savings move", amount_cents=4000),
        )
        assert resp.category == "Savings move"

    async def test_category_and_date_follow_to_the_other_leg(
        self,
        session: FakeSession,
        tx_service: TransactionApplicationService,
        transfer_service: TransferApplicationService,
    ) -> None:
        src, dst, expense_id, income_id = await self._transfer(session, transfer_service)
        moved = datetime(2026, 2, 14, 9, 30, tzinfo=UTC)

        await tx_service.update_transaction(
            session, USER, income_id, UpdateTransactionRequest(category="Rent pot", date=moved)
        )

        expense = session.committed.transactions[expense_id]
        income = session.committed.transactions[income_id]
        assert expense.category == income.category == "Rent pot"
        assert expense.date == income.date == moved
        assert session.balance(src) == 6000
        assert session.balance(dst) == 4000

    async def test_note_stays_per_leg(
        self,
        session: FakeSession,
        tx_service: TransactionApplicationService,
        transfer_service: TransferApplicationService,
    ) -> None:
        _, _, expense_id, income_id = await self._transfer(session, transfer_service)

        await tx_service.update_transaction(
            session, USER, expense_id, UpdateTransactionRequest(note="paid rent")
        )

        assert session.committed.transactions[expense_id].note == "paid rent"
        assert session.committed.transactions[income_id].note == "Transfer from Savings"

    async def test_deleting_one_leg_removes_both(
        self,
        session: FakeSession,
        tx_service: TransactionApplicationService,
        transfer_service: TransferApplicationService,
    ) -> None:
        src, dst, expense_id, income_id = await self._transfer(session, transfer_service)

        resp = await tx_service.delete_transaction(session, USER, income_id)

        assert sorted(resp.deleted_ids) == sorted([expense_id, income_id])
        assert session.committed.transactions == {}
        assert session.balance(src) == 10000
        assert session.balance(dst) == 0


class TestDeleteTransaction:
    async def test_reverses_delta(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id, 2000))

        resp = await tx_service.delete_transaction(session, USER, tx.id)

        assert resp.deleted_ids == [tx.id]
        assert resp.transfer_id is None
        assert session.balance(acc.id) == 10000

    async def test_unknown_transaction(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        with pytest.raises(TransactionNotFoundError):
            await tx_service.delete_transaction(session, USER, "tx-missing")


class TestReads:
    async def test_get_other_owner_is_not_found(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        tx = await tx_service.create_transaction(session, USER, _expense(acc.id))
        with pytest.raises(TransactionNotFoundError):
            await tx_service.get_transaction(session, OTHER_USER, tx.id)

    async def test_pagination_walks_all_rows(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        start = datetime(2026, 3, 1, tzinfo=UTC)
        created = []
        for day in range(5):
            tx = await tx_service.create_transaction(
                session, USER, _expense(acc.id, 100, date=start + timedelta(days=day))
            )
            created.append(tx.id)

        first = await tx_service.list_transactions(session, USER, TransactionFilter(), None, 2)
        second = await tx_service.list_transactions(
            session, USER, TransactionFilter(), first.next_cursor, 2
        )
        third = await tx_service.list_transactions(
            session, USER, TransactionFilter(), second.next_cursor, 2
        )

        assert first.has_more and second.has_more and not third.has_more
        assert third.next_cursor is None
        seen = [t.id for page in (first, second, third) for t in page.items]
        assert seen == list(reversed(created))

    async def test_filters(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        await tx_service.create_transaction(session, USER, _expense(acc.id, category="Groceries"))
        await tx_service.create_transaction(
            session, USER, _expense(acc.id, type=TransactionType.INCOME, category="Salary")
        )

        by_type = await tx_service.list_transactions(
            session, USER, TransactionFilter(type="income"), None, 50
        )
        by_category = await tx_service.list_transactions(
            session, USER, TransactionFilter(category="grocer"), None, 50
        )

        assert [t.category for t in by_type.items] == ["Salary"]
        assert [t.category for t in by_category.items] == ["Groceries"]

    async def test_garbage_cursor_starts_from_top(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        await tx_service.create_transaction(session, USER, _expense(acc.id))
        page = await tx_service.list_transactions(
            session, USER, TransactionFilter(), "not-base64!", 50
        )
        assert len(page.items) == 1

    async def test_tags_ranked_by_usage(
        self, session: FakeSession, tx_service: TransactionApplicationService
    ) -> None:
        acc = session.seed_account(balance=0)
        await tx_service.create_transaction(session, USER, _expense(acc.id, tags=["food", "work"]))
        await tx_service.create_transaction(session, USER, _expense(acc.id, tags=["food"]))

        resp = await tx_service.list_tags(session, USER)

        assert [(t.tag, t.count) for t in resp.items] == [("food", 2), ("work", 1)]
