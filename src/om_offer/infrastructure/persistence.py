# src/om_offer/infrastructure/persistence.py
"""OfferRepository — raw SQL persistence implementation.

Optimistic concurrency lives in _CAS_OFFER_SQL: the UPDATE only matches while
the row still carries the version the caller read, and bumps it in the same
statement. Under READ COMMITTED a concurrent writer blocks on the row lock,
then re-evaluates the WHERE clause against the committed version and matches
zero rows, so exactly one of two racing writers wins.

Reads load an offer row and its counter chain in ONE statement (correlated
json_agg subquery). Under READ COMMITTED every statement gets its own
snapshot, so a second SELECT for the chain could observe a counter committed
after the row was read.

Transaction ownership: the CALLER (ConcurrencyGuard / NegotiationEngine)
commits after a successful swap and rolls back otherwise.
"""
import json
from dataclasses import replace
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.enums import OfferRole, OfferStatus
from src.om_common.errors import InternalError
from src.om_offer.domain.models import CounterOffer, Offer

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_INSERT_OFFER_SQL = text("""
    INSERT INTO offers (id, listing_id, buyer_id, seller_id, listing_price,
        initial_amount, initial_message, status, expires_at, version,
        created_at, updated_at)
    VALUES (:id, :listing_id, :buyer_id, :seller_id, :listing_price,
        :initial_amount, :initial_message, :status, :expires_at, :version,
        :created_at, :updated_at)
""")

_CAS_OFFER_SQL = text("""
    UPDATE offers
    SET status = :status,
        expires_at = :expires_at,
        updated_at = :updated_at,
        version = version + 1
    WHERE id = :id AND version = :expected_version
    RETURNING version, updated_at
""")

_INSERT_COUNTER_SQL = text("""
    INSERT INTO counter_offers (id, offer_id, seq, amount, from_seller, message, created_at)
    VALUES (:id, :offer_id, :seq, :amount, :from_seller, :message, :created_at)
    ON CONFLICT (id) DO NOTHING
""")

_OFFER_COLUMNS = """
    o.id, o.listing_id, o.buyer_id, o.seller_id, o.listing_price,
    o.initial_amount, o.initial_message, o.status, o.expires_at, o.version,
    o.created_at, o.updated_at,
    COALESCE(
        (SELECT json_agg(json_build_object(
                    'id', c.id,
                    'amount', c.amount,
                    'from_seller', c.from_seller,
                    'message', c.message,
                    'created_at', c.created_at
                ) ORDER BY c.seq)
         FROM counter_offers c
         WHERE c.offer_id = o.id),
        CAST('[]' AS JSON)
    ) AS counters
"""

_GET_OFFER_BY_ID_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM offers o WHERE o.id = :id
""")

# Keyset pagination on (created_at, id); the cursor is the last offer ID seen.
# An unknown cursor makes the row comparison NULL, so the page is empty.
_LIST_BY_BUYER_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM offers o
    WHERE o.buyer_id = :user_id
      AND (CAST(:cursor_id AS TEXT) IS NULL
           OR (o.created_at, o.id) < (SELECT created_at, id FROM offers WHERE id = :cursor_id))
    ORDER BY o.created_at DESC, o.id DESC
    LIMIT :limit
""")

_LIST_BY_SELLER_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM offers o
    WHERE o.seller_id = :user_id
      AND (CAST(:cursor_id AS TEXT) IS NULL
           OR (o.created_at, o.id) < (SELECT created_at, id FROM offers WHERE id = :cursor_id))
    ORDER BY o.created_at DESC, o.id DESC
    LIMIT :limit
""")

_LIST_DUE_SQL = text(f"""
    SELECT {_OFFER_COLUMNS}
    FROM offers o
    WHERE o.status IN ('PENDING', 'COUNTERED')
      AND o.expires_at <= :now
    ORDER BY o.expires_at ASC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _counters_from_json(offer_id: str, raw: Any) -> list[CounterOffer]:
    # asyncpg hands JSON columns back as text
    items = json.loads(raw) if isinstance(raw, str) else raw
    return [
        CounterOffer(
            id=item["id"],
            offer_id=offer_id,
            amount=item["amount"],
            from_seller=item["from_seller"],
            message=item["message"],
            created_at=datetime.fromisoformat(item["created_at"]),
        )
        for item in items
    ]


def _check_chain(offer: Offer) -> None:
    """Raise InternalError if the chain cannot belong to this record.

    Every counter bumps the version, PENDING has no counters, COUNTERED has at
    least one, and turns alternate starting with the seller.
    """
    turns = len(offer.counter_offers)
    consistent = (
        turns <= offer.version - 1
        and not (offer.status == OfferStatus.PENDING and turns > 0)
        and not (offer.status == OfferStatus.COUNTERED and turns == 0)
        and all(c.from_seller == (i % 2 == 0) for i, c in enumerate(offer.counter_offers))
    )
    if not consistent:
        raise InternalError(
            f"Offer {offer.id} chain does not match its record "
            f"(v{offer.version}, {offer.status.value}, {turns} counters)"
        )


def _row_to_offer(row: Any) -> Offer:
    """Convert a DB result row (offer columns plus aggregated counters) to an Offer."""
    offer = Offer(
        id=row.id,
        listing_id=row.listing_id,
        buyer_id=row.buyer_id,
        seller_id=row.seller_id,
        listing_price=row.listing_price,
        initial_amount=row.initial_amount,
        initial_message=row.initial_message,
        status=OfferStatus(row.status),
        expires_at=row.expires_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        counter_offers=_counters_from_json(row.id, row.counters),
        version=row.version,
    )
    _check_chain(offer)
    return offer


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OfferRepository:
    """Concrete implementation of OfferRepositoryProtocol using raw SQL."""

    async def insert(self, offer: Offer, db: AsyncSession) -> None:
        await db.execute(
            _INSERT_OFFER_SQL,
            {
                "id": offer.id,
                "listing_id": offer.listing_id,
                "buyer_id": offer.buyer_id,
                "seller_id": offer.seller_id,
                "listing_price": offer.listing_price,
                "initial_amount": offer.initial_amount,
                "initial_message": offer.initial_message,
                "status": offer.status.value,
                "expires_at": offer.expires_at,
                "version": offer.version,
                "created_at": offer.created_at,
                "updated_at": offer.updated_at,
            },
        )
        await self._insert_counters(offer, db)

    async def get_by_id(self, offer_id: str, db: AsyncSession) -> Offer | None:
        result = await db.execute(_GET_OFFER_BY_ID_SQL, {"id": offer_id})
        row = result.fetchone()
        if row is None:
            return None
        return _row_to_offer(row)

    async def compare_and_swap(
        self, offer: Offer, expected_version: int, db: AsyncSession
    ) -> Offer | None:
        result = await db.execute(
            _CAS_OFFER_SQL,
            {
                "id": offer.id,
                "expected_version": expected_version,
                "status": offer.status.value,
                "expires_at": offer.expires_at,
                "updated_at": offer.updated_at,
            },
        )
        row = result.fetchone()
        if row is None:
            return None
        await self._insert_counters(offer, db)
        # updated_at comes back from the row: the timestamp trigger overrides the candidate's
        return replace(
            offer,
            version=row.version,
            updated_at=row.updated_at,
            counter_offers=list(offer.counter_offers),
        )

    async def list_by_user(
        self,
        user_id: str,
        role: OfferRole,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Offer]:
        sql = _LIST_BY_SELLER_SQL if role == OfferRole.SELLER else _LIST_BY_BUYER_SQL
        result = await db.execute(
            sql, {"user_id": user_id, "cursor_id": cursor_id, "limit": limit}
        )
        return [_row_to_offer(row) for row in result.fetchall()]

    async def list_due_for_expiry(
        self, now: datetime, limit: int, db: AsyncSession
    ) -> list[Offer]:
        result = await db.execute(_LIST_DUE_SQL, {"now": now, "limit": limit})
        return [_row_to_offer(row) for row in result.fetchall()]

    # -----------------------------------------------------------------------

    async def _insert_counters(self, offer: Offer, db: AsyncSession) -> None:
        # Already-stored turns hit ON CONFLICT DO NOTHING; (offer_id, seq) is
        # also UNIQUE so a turn can never be written at the same position twice.
        for seq, turn in enumerate(offer.counter_offers):
            await db.execute(
                _INSERT_COUNTER_SQL,
                {
                    "id": turn.id,
                    "offer_id": turn.offer_id,
                    "seq": seq,
                    "amount": turn.amount,
                    "from_seller": turn.from_seller,
                    "message": turn.message,
                    "created_at": turn.created_at,
                },
            )
