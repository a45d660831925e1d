# src/om_listing/domain/repository.py
"""Listing collaborator Protocol.

The engine consults the listing system exactly once, at offer creation, to
snapshot the asking price and seller. It never writes listings.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_listing.domain.models import Listing


class ListingRepositoryProtocol(Protocol):
    async def get_listing(self, listing_id: str, db: AsyncSession) -> Listing | None: ...
