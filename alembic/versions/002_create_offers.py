"""002: create offers and counter_offers tables

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
        CREATE TABLE offers (
            id                  VARCHAR(32)     PRIMARY KEY,
            listing_id          VARCHAR(64)     NOT NULL,
            buyer_id            VARCHAR(64)     NOT NULL,
            seller_id           VARCHAR(64)     NOT NULL,
            listing_price       BIGINT          NOT NULL,
            initial_amount      BIGINT          NOT NULL,
            initial_message     TEXT,
            status              VARCHAR(20)     NOT NULL DEFAULT 'PENDING',
            expires_at          TIMESTAMPTZ     NOT NULL,
            version             INT             NOT NULL DEFAULT 1,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_offers_parties_distinct   CHECK (buyer_id <> seller_id),
            CONSTRAINT ck_offers_listing_price      CHECK (listing_price > 0),
            CONSTRAINT ck_offers_initial_amount     CHECK (
                initial_amount > 0 AND initial_amount < listing_price
            ),
            CONSTRAINT ck_offers_version            CHECK (version >= 1),
            CONSTRAINT ck_offers_status             CHECK (
                status IN ('PENDING', 'COUNTERED', 'ACCEPTED', 'REJECTED', 'EXPIRED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_offers_buyer ON offers (buyer_id, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_offers_seller ON offers (seller_id, created_at DESC, id DESC);")
    op.execute("""
        CREATE INDEX idx_offers_expiry_due
        ON offers (expires_at)
        WHERE status IN ('PENDING', 'COUNTERED');
    """)
    op.execute("""
        CREATE TRIGGER trg_offers_updated_at
            BEFORE UPDATE ON offers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE counter_offers (
            id              VARCHAR(32)     PRIMARY KEY,
            offer_id        VARCHAR(32)     NOT NULL REFERENCES offers (id) ON DELETE CASCADE,
            seq             INT             NOT NULL,
            amount          BIGINT          NOT NULL,
            from_seller     BOOLEAN         NOT NULL,
            message         TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_counter_offers_offer_seq  UNIQUE (offer_id, seq),
            CONSTRAINT ck_counter_offers_amount     CHECK (amount > 0),
            CONSTRAINT ck_counter_offers_seq        CHECK (seq >= 0)
        );
    """)
    op.execute(
        "COMMENT ON TABLE offers IS "
        "'Offer negotiation root record; version is the optimistic-concurrency token';"
    )
    op.execute(
        "COMMENT ON TABLE counter_offers IS "
        "'Ordered negotiation turns; seq 0 is the first counter after the initial offer';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS counter_offers CASCADE;")
    op.execute("DROP TABLE IF EXISTS offers CASCADE;")
