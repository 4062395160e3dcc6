"""003: create append-only event tables (deposit, withdrawal, sale)

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_EVENT_TABLES = ("deposit_events", "withdrawal_events", "sale_events")


def upgrade() -> None:
    op.execute("""
        CREATE TABLE deposit_events (
            id              BIGSERIAL       PRIMARY KEY,
            customer_id     INTEGER         NOT NULL
                REFERENCES customers (id) ON DELETE RESTRICT,
            waste_type_id   INTEGER         NOT NULL
                REFERENCES waste_types (id) ON DELETE RESTRICT,
            weight          NUMERIC(10, 3)  NOT NULL,
            unit_price      NUMERIC(10, 2)  NOT NULL,
            amount          NUMERIC(15, 2)  NOT NULL,
            balance_after   NUMERIC(15, 2)  NOT NULL,
            occurred_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_deposit_weight_gt_0       CHECK (weight > 0),
            CONSTRAINT ck_deposit_amount_gte_0      CHECK (amount >= 0),
            CONSTRAINT ck_deposit_balance_gte_0     CHECK (balance_after >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE withdrawal_events (
            id              BIGSERIAL       PRIMARY KEY,
            customer_id     INTEGER         NOT NULL
                REFERENCES customers (id) ON DELETE RESTRICT,
            amount          NUMERIC(15, 2)  NOT NULL,
            balance_after   NUMERIC(15, 2)  NOT NULL,
            occurred_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_withdrawal_amount_gt_0    CHECK (amount > 0),
            CONSTRAINT ck_withdrawal_balance_gte_0  CHECK (balance_after >= 0)
        );
    """)
    op.execute("""
        CREATE TABLE sale_events (
            id              BIGSERIAL       PRIMARY KEY,
            collector_id    INTEGER         NOT NULL
                REFERENCES collectors (id) ON DELETE RESTRICT,
            waste_type_id   INTEGER         NOT NULL
                REFERENCES waste_types (id) ON DELETE RESTRICT,
            weight          NUMERIC(10, 3)  NOT NULL,
            unit_price      NUMERIC(10, 2)  NOT NULL,
            amount          NUMERIC(15, 2)  NOT NULL,
            occurred_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_sale_weight_gt_0  CHECK (weight > 0),
            CONSTRAINT ck_sale_amount_gte_0 CHECK (amount >= 0)
        );
    """)

    # Stock sums are index-only scans over one waste type's rows.
    op.execute("""
        CREATE INDEX idx_deposit_waste_type
        ON deposit_events (waste_type_id) INCLUDE (weight);
    """)
    op.execute("""
        CREATE INDEX idx_sale_waste_type
        ON sale_events (waste_type_id) INCLUDE (weight);
    """)
    op.execute("CREATE INDEX idx_deposit_customer ON deposit_events (customer_id);")
    op.execute("CREATE INDEX idx_withdrawal_customer ON withdrawal_events (customer_id);")
    op.execute("CREATE INDEX idx_sale_collector ON sale_events (collector_id);")
    for table in _EVENT_TABLES:
        op.execute(f"CREATE INDEX idx_{table}_time ON {table} (occurred_at DESC);")
        op.execute(f"""
            CREATE TRIGGER trg_{table}_append_only
                BEFORE UPDATE OR DELETE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_reject_event_mutation();
        """)
        op.execute(f"COMMENT ON TABLE {table} IS 'Append-only; never updated or deleted';")


def downgrade() -> None:
    for table in reversed(_EVENT_TABLES):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE;")
