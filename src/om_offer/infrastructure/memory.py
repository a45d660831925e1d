"""InMemoryOfferRepository — reference implementation of OfferRepositoryProtocol.

Used by the unit tests and local demos. It honours the same contract as the
SQL repository: detached copies on read, version-checked compare-and-swap.
Every method yields to the event loop once before touching state, so
concurrently scheduled engine operations genuinely interleave at the store
boundary the way they would against a real database.
"""
import asyncio
import copy
from dataclasses import replace
from datetime import datetime
from typing import Any

from src.om_common.enums import OfferRole
from src.om_offer.domain.models import Offer


class InMemoryOfferRepository:
    def __init__(self) -> None:
        self._offers: dict[str, Offer] = {}
        self.cas_attempts = 0
        self.cas_failures = 0

    async def insert(self, offer: Offer, db: Any = None) -> None:
        await asyncio.sleep(0)
        if offer.id in self._offers:
            raise ValueError(f"Offer {offer.id} already exists")
        self._offers[offer.id] = copy.deepcopy(offer)

    async def get_by_id(self, offer_id: str, db: Any = None) -> Offer | None:
        await asyncio.sleep(0)
        stored = self._offers.get(offer_id)
        return copy.deepcopy(stored) if stored else None

    async def compare_and_swap(
        self, offer: Offer, expected_version: int, db: Any = None
    ) -> Offer | None:
        await asyncio.sleep(0)
        # No await between the version check and the write: atomic w.r.t. the loop
        self.cas_attempts += 1
        stored = self._offers.get(offer.id)
        if stored is None or stored.version != expected_version:
            self.cas_failures += 1
            return None
        committed = replace(
            copy.deepcopy(offer), version=stored.version + 1
        )
        self._offers[offer.id] = committed
        return copy.deepcopy(committed)

    async def list_by_user(
        self,
        user_id: str,
        role: OfferRole,
        limit: int,
        cursor_id: str | None,
        db: Any = None,
    ) -> list[Offer]:
        await asyncio.sleep(0)
        if role == OfferRole.SELLER:
            mine = [o for o in self._offers.values() if o.seller_id == user_id]
        else:
            mine = [o for o in self._offers.values() if o.buyer_id == user_id]
        mine.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        if cursor_id is not None:
            anchor = self._offers.get(cursor_id)
            if anchor is None:
                # Same as the SQL store: an unknown cursor matches nothing
                return []
            mine = [o for o in mine if (o.created_at, o.id) < (anchor.created_at, anchor.id)]
        return [copy.deepcopy(o) for o in mine[:limit]]

    async def list_due_for_expiry(
        self, now: datetime, limit: int, db: Any = None
    ) -> list[Offer]:
        await asyncio.sleep(0)
        due = [o for o in self._offers.values() if o.is_active and o.expires_at <= now]
        due.sort(key=lambda o: o.expires_at)
        return [copy.deepcopy(o) for o in due[:limit]]

    def force_update(self, offer: Offer) -> None:
        """Overwrite a stored record without version checks. Test setup only."""
        self._offers[offer.id] = copy.deepcopy(offer)
