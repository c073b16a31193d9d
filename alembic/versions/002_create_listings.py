"""002: create listings table

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


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id              VARCHAR(64)     PRIMARY KEY,
            seller_id       VARCHAR(64)     NOT NULL,
            title           VARCHAR(200)    NOT NULL,
            category        VARCHAR(30)     NOT NULL,
            quantity        NUMERIC(18, 4)  NOT NULL,
            unit            VARCHAR(20)     NOT NULL,
            price_per_unit  NUMERIC(18, 2)  NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'DRAFT',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_quantity_gte_0 CHECK (quantity >= 0),
            CONSTRAINT ck_listings_price_gt_0     CHECK (price_per_unit > 0),
            CONSTRAINT ck_listings_category       CHECK (
                category IN (
                    'GOLD', 'DIAMOND', 'EMERALD', 'RUBY', 'SAPPHIRE',
                    'COPPER', 'LITHIUM', 'COBALT', 'COLTAN', 'URANIUM',
                    'IRON_ORE', 'BAUXITE', 'OTHER_GEMSTONE', 'OTHER_MINERAL'
                )
            ),
            CONSTRAINT ck_listings_unit           CHECK (
                unit IN ('GRAMS', 'KILOGRAMS', 'TONNES', 'CARATS', 'PIECES')
            ),
            CONSTRAINT ck_listings_status         CHECK (
                status IN (
                    'DRAFT', 'PENDING_APPROVAL', 'APPROVED', 'LIVE',
                    'SOLD', 'REJECTED', 'REMOVED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller_id, created_at DESC);")
    op.execute("CREATE INDEX idx_listings_live ON listings (category) WHERE status = 'LIVE';")
    op.execute("""
        CREATE TRIGGER trg_listings_updated_at
            BEFORE UPDATE ON listings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE listings IS 'Mineral listings; quantity is the remaining stock';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
