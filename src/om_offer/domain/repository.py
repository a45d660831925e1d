# src/om_offer/domain/repository.py
"""OfferRepository Protocol — the offer record store.

The store is the only suspension point in the engine. Its contract:

  * ``insert`` persists a brand-new record at version 1.
  * ``compare_and_swap`` commits ``offer`` only if the stored version still
    equals ``expected_version``; on success it returns the stored record with
    version incremented by one, on mismatch (or missing row) it returns None.
    Counter-offers present on ``offer`` but not yet stored are appended.
  * Reads return detached copies; mutating a returned Offer never changes
    the stored record.
"""
from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.enums import OfferRole
from src.om_offer.domain.models import Offer


class OfferRepositoryProtocol(Protocol):
    async def insert(self, offer: Offer, db: AsyncSession) -> None: ...

    async def get_by_id(self, offer_id: str, db: AsyncSession) -> Offer | None: ...

    async def compare_and_swap(
        self, offer: Offer, expected_version: int, db: AsyncSession
    ) -> Offer | None: ...

    # Newest first. An unknown cursor_id yields an empty page.
    async def list_by_user(
        self,
        user_id: str,
        role: OfferRole,
        limit: int,
        cursor_id: str | None,
        db: AsyncSession,
    ) -> list[Offer]: ...

    async def list_due_for_expiry(
        self, now: datetime, limit: int, db: AsyncSession
    ) -> list[Offer]: ...
