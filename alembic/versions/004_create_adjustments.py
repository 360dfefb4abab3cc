"""004: create adjustments table

Revision ID: 004
Revises: 003
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE adjustments (
            id                          VARCHAR(36)  PRIMARY KEY DEFAULT gen_random_uuid()::text,
            user_id                     VARCHAR(64)  NOT NULL,
            account_id                  VARCHAR(36)  NOT NULL
                                        REFERENCES accounts (id) ON DELETE CASCADE,
            previous_balance_cents      BIGINT       NOT NULL,
            new_balance_cents           BIGINT       NOT NULL,
            adjustment_amount_cents     BIGINT       NOT NULL,
            reason                      VARCHAR(200) NOT NULL,
            created_at                  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_adjustments_reason_not_blank CHECK (btrim(reason) <> ''),
            CONSTRAINT ck_adjustments_amount_consistent CHECK (
                adjustment_amount_cents = new_balance_cents - previous_balance_cents
            ),
            CONSTRAINT ck_adjustments_nonzero CHECK (adjustment_amount_cents <> 0)
        );
    """)
    op.execute("""
        CREATE INDEX idx_adjustments_user_account_time
        ON adjustments (user_id, account_id, created_at DESC);
    """)
    op.execute("""
        CREATE TRIGGER trg_adjustments_immutable
            BEFORE UPDATE ON adjustments
            FOR EACH ROW EXECUTE FUNCTION fn_reject_update();
    """)
    op.execute("COMMENT ON TABLE adjustments IS 'Balance corrections — append-only audit trail.';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS adjustments CASCADE;")
