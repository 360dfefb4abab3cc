"""002: create accounts table

Revision ID: 002
Revises: 001
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE accounts (
            id                      VARCHAR(36)  PRIMARY KEY DEFAULT gen_random_uuid()::text,
            user_id                 VARCHAR(64)  NOT NULL,
            name                    VARCHAR(100) NOT NULL,
            type                    VARCHAR(20)  NOT NULL,
            currency                CHAR(3)      NOT NULL,
            color                   VARCHAR(20),
            icon                    VARCHAR(50),
            opening_balance_cents   BIGINT       NOT NULL DEFAULT 0,
            current_balance_cents   BIGINT       NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_type CHECK (
                type IN (
                    'bank', 'wallet', 'card', 'debit_card', 'credit_card',
                    'cash', 'investments', 'others'
                )
            ),
            CONSTRAINT ck_accounts_currency CHECK (currency ~ '^[A-Z]{3}$'),
            CONSTRAINT ck_accounts_name_not_blank CHECK (btrim(name) <> '')
        );
    """)
    op.execute("CREATE INDEX idx_accounts_user_created ON accounts (user_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE accounts IS "
        "'Owner accounts. current_balance_cents is written only by the balance ledger.';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
