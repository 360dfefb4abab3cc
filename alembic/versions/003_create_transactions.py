"""003: create transactions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id                          VARCHAR(36)  PRIMARY KEY DEFAULT gen_random_uuid()::text,
            user_id                     VARCHAR(64)  NOT NULL,
            account_id                  VARCHAR(36)  NOT NULL
                                        REFERENCES accounts (id) ON DELETE RESTRICT,
            type                        VARCHAR(20)  NOT NULL,
            category                    VARCHAR(50)  NOT NULL,
            amount_cents                BIGINT       NOT NULL,
            currency                    CHAR(3)      NOT NULL,
            date                        TIMESTAMPTZ  NOT NULL,
            merchant                    VARCHAR(100),
            note                        VARCHAR(640),
            tags                        VARCHAR(30)[] NOT NULL DEFAULT '{}',
            payment_mode                VARCHAR(20),
            transfer_id                 VARCHAR(36),
            transfer_to_account_id      VARCHAR(36),
            transfer_from_account_id    VARCHAR(36),
            created_at                  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_amount_gt_0 CHECK (amount_cents > 0),
            CONSTRAINT ck_transactions_type CHECK (
                type IN ('income', 'expense', 'transfer', 'refund', 'adjustment')
            ),
            CONSTRAINT ck_transactions_payment_mode CHECK (
                payment_mode IS NULL OR payment_mode IN (
                    'cash', 'debit_card', 'credit_card', 'upi',
                    'net_banking', 'wallet', 'cheque', 'other'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_transactions_user_date ON transactions (user_id, date DESC, id DESC);")
    op.execute("CREATE INDEX idx_transactions_account ON transactions (account_id);")
    op.execute("""
        CREATE INDEX idx_transactions_transfer
        ON transactions (transfer_id)
        WHERE transfer_id IS NOT NULL;
    """)
    op.execute("CREATE INDEX idx_transactions_tags ON transactions USING GIN (tags);")
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE transactions IS "
        "'amount_cents is a positive magnitude; direction comes from type.';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
