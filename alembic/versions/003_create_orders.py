"""003: create orders table

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


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                  VARCHAR(64)     PRIMARY KEY,
            transaction_ref     VARCHAR(40)     NOT NULL,
            listing_id          VARCHAR(64)     NOT NULL REFERENCES listings (id),
            buyer_id            VARCHAR(64)     NOT NULL,
            seller_id           VARCHAR(64)     NOT NULL,
            unit                VARCHAR(20)     NOT NULL,
            quantity            NUMERIC(18, 4)  NOT NULL,
            unit_price          NUMERIC(18, 2)  NOT NULL,
            commission_rate     NUMERIC(6, 4)   NOT NULL,
            total_amount        NUMERIC(18, 2)  NOT NULL,
            commission_amount   NUMERIC(18, 2)  NOT NULL,
            seller_net          NUMERIC(18, 2)  NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'FUNDS_HELD',
            buyer_confirmed     BOOLEAN         NOT NULL DEFAULT FALSE,
            dispute_reason      VARCHAR(500),
            version             INT             NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            funded_at           TIMESTAMPTZ,
            shipped_at          TIMESTAMPTZ,
            delivered_at        TIMESTAMPTZ,
            completed_at        TIMESTAMPTZ,
            disputed_at         TIMESTAMPTZ,
            refunded_at         TIMESTAMPTZ,
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_orders_transaction_ref   UNIQUE (transaction_ref),
            CONSTRAINT ck_orders_quantity_gt_0     CHECK (quantity > 0),
            CONSTRAINT ck_orders_unit_price_gt_0   CHECK (unit_price > 0),
            CONSTRAINT ck_orders_commission_rate   CHECK (commission_rate >= 0 AND commission_rate < 1),
            CONSTRAINT ck_orders_amounts_gte_0     CHECK (
                total_amount >= 0 AND commission_amount >= 0 AND seller_net >= 0
            ),
            CONSTRAINT ck_orders_split             CHECK (commission_amount + seller_net = total_amount),
            CONSTRAINT ck_orders_not_self_purchase CHECK (buyer_id <> seller_id),
            CONSTRAINT ck_orders_status            CHECK (
                status IN (
                    'FUNDS_HELD', 'SHIPPED', 'DELIVERED',
                    'DISPUTED', 'COMPLETED', 'REFUNDED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_buyer ON orders (buyer_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_seller ON orders (seller_id, id DESC);")
    op.execute("CREATE INDEX idx_orders_listing ON orders (listing_id);")
    op.execute("""
        CREATE INDEX idx_orders_open
        ON orders (status)
        WHERE status IN ('FUNDS_HELD', 'SHIPPED', 'DELIVERED', 'DISPUTED');
    """)
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Escrow orders; listing fields are purchase-time snapshots';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
