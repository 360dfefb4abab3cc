"""Unit tests for the adjustment protocol."""

import pytest

from src.pf_account.application.adjustment_service import AdjustmentApplicationService
from src.pf_account.application.schemas import CreateAdjustmentRequest
from src.pf_account.application.service import AccountApplicationService
from src.pf_common.errors import AccountNotFoundError, AdjustmentReasonRequiredError
from tests.unit.fakes import OTHER_USER, USER, FakeSession


class TestCreateAdjustment:
    async def test_sets_balance_and_records_audit(
        self, session: FakeSession, adjustment_service: AdjustmentApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)

        resp = await adjustment_service.create_adjustment(
            session,
            USER,
            CreateAdjustmentRequest(
                account_id=acc.id, new_balance_cents=9550, reason="  Bank charges  "
            ),
        )

        assert resp.adjusted is True
        assert resp.previous_balance_cents == 10000
        assert resp.new_balance_cents == 9550
        assert resp.adjustment_amount_cents == -450
        assert resp.adjustment_amount_display == "-₹4.50"
        assert resp.reason == "Bank charges"
        assert session.balance(acc.id) == 9550
        [audit] = session.committed.adjustments.values()
        assert audit.adjustment_amount_cents == -450

    async def test_same_balance_is_a_no_op(
        self, session: FakeSession, adjustment_service: AdjustmentApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)

        resp = await adjustment_service.create_adjustment(
            session,
            USER,
            CreateAdjustmentRequest(account_id=acc.id, new_balance_cents=10000, reason="check"),
        )

        assert resp.adjusted is False
        assert resp.adjustment_id is None
        assert resp.new_balance_cents == 10000
        assert session.committed.adjustments == {}

    async def test_blank_reason_rejected_before_any_write(
        self, session: FakeSession, adjustment_service: AdjustmentApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000)
        with pytest.raises(AdjustmentReasonRequiredError):
            await adjustment_service.create_adjustment(
                session,
                USER,
                CreateAdjustmentRequest(account_id=acc.id, new_balance_cents=1, reason="   "),
            )
        assert session.balance(acc.id) == 10000
        assert session.commits == 0

    async def test_other_owner_is_not_found(
        self, session: FakeSession, adjustment_service: AdjustmentApplicationService
    ) -> None:
        acc = session.seed_account(balance=10000, user_id=OTHER_USER)
        with pytest.raises(AccountNotFoundError):
            await adjustment_service.create_adjustment(
                session,
                USER,
                CreateAdjustmentRequest(account_id=acc.id, new_balance_cents=1, reason="x"),
            )
        assert session.balance(acc.id) == 10000

    async def test_keeps_account_reconcilable(
        self,
        session: FakeSession,
        adjustment_service: AdjustmentApplicationService,
        account_service: AccountApplicationService,
    ) -> None:
        acc = session.seed_account(balance=10000)
        await adjustment_service.create_adjustment(
            session,
            USER,
            CreateAdjustmentRequest(account_id=acc.id, new_balance_cents=12345, reason="cash found"),
        )
        check = await account_service.reconcile_account(session, USER, acc.id)
        assert check.adjustments_impact_cents == 2345
        assert check.consistent is True


class TestListAdjustments:
    async def test_newest_first_and_filtered(
        self, session: FakeSession, adjustment_service: AdjustmentApplicationService
    ) -> None:
        a = session.seed_account(balance=0)
        b = session.seed_account(balance=0)
        for account_id, value in [(a.id, 100), (b.id, 200), (a.id, 300)]:
            await adjustment_service.create_adjustment(
                session,
                USER,
                CreateAdjustmentRequest(account_id=account_id, new_balance_cents=value, reason="r"),
            )

        only_a = await adjustment_service.list_adjustments(session, USER, a.id)
        everything = await adjustment_service.list_adjustments(session, USER, None)

        assert [i.new_balance_cents for i in only_a.items] == [300, 100]
        assert len(everything.items) == 3
