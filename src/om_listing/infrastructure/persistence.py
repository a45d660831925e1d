"""ListingRepository — read-only raw SQL lookup against the listings table."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_listing.domain.models import Listing

_GET_LISTING_SQL = text("""
    SELECT id, seller_id, price_cents, is_sold
    FROM listings
    WHERE id = :listing_id
""")


def _row_to_listing(row: Any) -> Listing:
    return Listing(
        id=row.id,
        seller_id=row.seller_id,
        price_cents=row.price_cents,
        is_sold=row.is_sold,
    )


class ListingRepository:
    """Concrete implementation of ListingRepositoryProtocol."""

    async def get_listing(self, listing_id: str, db: AsyncSession) -> Listing | None:
        result = await db.execute(_GET_LISTING_SQL, {"listing_id": listing_id})
        row = result.fetchone()
        return _row_to_listing(row) if row else None
