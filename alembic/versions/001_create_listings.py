"""001: updated_at trigger function + listings reference table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_update_timestamp()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    # Owned by the catalogue service; created here so the engine can run standalone
    op.execute("""
        CREATE TABLE IF NOT EXISTS listings (
            id              VARCHAR(64)     PRIMARY KEY,
            seller_id       VARCHAR(64)     NOT NULL,
            title           VARCHAR(255)    NOT NULL,
            price_cents     BIGINT          NOT NULL,
            is_sold         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_price_positive CHECK (price_cents > 0)
        );
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_listings_seller ON listings (seller_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_update_timestamp();")
