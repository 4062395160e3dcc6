"""002: create master data tables (customers, officers, waste_types, collectors)

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_TABLES = ("customers", "officers", "waste_types", "collectors")


def upgrade() -> None:
    op.execute("""
        CREATE TABLE customers (
            id              SERIAL          PRIMARY KEY,
            code            VARCHAR(32)     NOT NULL,
            name            VARCHAR(255)    NOT NULL,
            id_number       VARCHAR(64)     NOT NULL,
            address         TEXT            NOT NULL,
            institution     VARCHAR(255),
            balance         NUMERIC(15, 2)  NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_customers_code        UNIQUE (code),
            CONSTRAINT ck_customers_balance_gte_0 CHECK (balance >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE officers (
            id              SERIAL          PRIMARY KEY,
            code            VARCHAR(32)     NOT NULL,
            name            VARCHAR(255)    NOT NULL,
            id_number       VARCHAR(64)     NOT NULL,
            address         TEXT            NOT NULL,
            institution     VARCHAR(255),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_officers_code UNIQUE (code)
        );
    """)
    op.execute("""
        CREATE TABLE waste_types (
            id              SERIAL          PRIMARY KEY,
            code            VARCHAR(32)     NOT NULL,
            name            VARCHAR(255)    NOT NULL,
            buy_price       NUMERIC(10, 2)  NOT NULL,
            sell_price      NUMERIC(10, 2)  NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_waste_types_code          UNIQUE (code),
            CONSTRAINT ck_waste_types_buy_gt_0      CHECK (buy_price > 0),
            CONSTRAINT ck_waste_types_sell_gt_buy   CHECK (sell_price > buy_price)
        );
    """)
    op.execute("""
        CREATE TABLE collectors (
            id              SERIAL          PRIMARY KEY,
            code            VARCHAR(32)     NOT NULL,
            name            VARCHAR(255)    NOT NULL,
            address         TEXT            NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_collectors_code UNIQUE (code)
        );
    """)
    for table in _TABLES:
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)
    op.execute("CREATE INDEX idx_waste_types_name ON waste_types (name, id);")
    op.execute("COMMENT ON COLUMN customers.balance IS 'Rupiah; written only by the ledger';")


def downgrade() -> None:
    for table in reversed(_TABLES):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")
