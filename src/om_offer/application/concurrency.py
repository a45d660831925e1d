"""ConcurrencyGuard — optimistic compare-and-swap with a bounded retry budget.

Each attempt:
  1. read the record and its version
  2. expire it first if its deadline has passed (committed through the same CAS)
  3. run the action: rule set + state machine -> candidate record, or None
  4. compare_and_swap(candidate, expected_version=version read in step 1)
  5. success -> commit and return; version mismatch -> roll back and retry

Business-rule errors raised by the action are never retried. Exhausting the
budget raises OfferConflictError so the caller can refresh and resubmit; two
writers are never merged.
"""
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.datetime_utils import Clock, utc_now
from src.om_common.errors import OfferConflictError, OfferNotFoundError
from src.om_offer.domain import state_machine
from src.om_offer.domain.models import Offer
from src.om_offer.domain.repository import OfferRepositoryProtocol

logger = logging.getLogger(__name__)

# (current record, now) -> candidate to commit, or None when nothing needs writing
OfferAction = Callable[[Offer, datetime], Offer | None]
ExpiredHook = Callable[[Offer], Awaitable[None]]

DEFAULT_MAX_ATTEMPTS = 3


def no_change(offer: Offer, now: datetime) -> Offer | None:
    return None


class ConcurrencyGuard:
    def __init__(
        self,
        repo: OfferRepositoryProtocol,
        clock: Clock = utc_now,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        on_expired: ExpiredHook | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._repo = repo
        self._clock = clock
        self._max_attempts = max_attempts
        self._on_expired = on_expired

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    async def run(
        self,
        db: AsyncSession,
        offer_id: str,
        action: OfferAction,
        *,
        max_attempts: int | None = None,
    ) -> Offer:
        """Apply ``action`` to the latest committed state of ``offer_id``."""
        budget = max_attempts or self._max_attempts
        for attempt in range(1, budget + 1):
            try:
                current = await self._repo.get_by_id(offer_id, db)
                if current is None:
                    raise OfferNotFoundError(offer_id)

                now = self._clock()
                if state_machine.is_due_for_expiry(current, now):
                    expired = await self._expire(db, current, now)
                    if expired is None:
                        logger.debug(
                            "CAS conflict expiring offer=%s v%d (attempt %d/%d)",
                            offer_id, current.version, attempt, budget,
                        )
                        continue
                    current = expired

                candidate = action(current, now)
                if candidate is None:
                    await db.rollback()
                    return current

                committed = await self._swap(db, candidate, current.version)
            except Exception:
                await db.rollback()
                raise

            if committed is not None:
                return committed
            logger.debug(
                "CAS conflict on offer=%s v%d (attempt %d/%d)",
                offer_id, current.version, attempt, budget,
            )

        logger.warning("Offer %s: retry budget exhausted after %d attempts", offer_id, budget)
        raise OfferConflictError(offer_id, budget)

    async def try_expire(self, db: AsyncSession, offer: Offer) -> Offer | None:
        """Single CAS of EXPIRED against the version carried by ``offer``.

        Returns the committed record, or None when the offer is not due or
        another writer moved the version first. No re-read, no retry.
        """
        now = self._clock()
        if not state_machine.is_due_for_expiry(offer, now):
            return None
        try:
            return await self._expire(db, offer, now)
        except Exception:
            await db.rollback()
            raise

    async def _expire(self, db: AsyncSession, offer: Offer, now: datetime) -> Offer | None:
        expired = await self._swap(db, state_machine.expire(offer, now=now), offer.version)
        if expired is None:
            return None
        logger.info("Offer %s expired (v%d)", offer.id, expired.version)
        await self._fire_expired(expired)
        return expired

    async def _swap(
        self, db: AsyncSession, candidate: Offer, expected_version: int
    ) -> Offer | None:
        committed = await self._repo.compare_and_swap(candidate, expected_version, db)
        if committed is None:
            await db.rollback()
            return None
        await db.commit()
        return committed

    async def _fire_expired(self, offer: Offer) -> None:
        if self._on_expired is None:
            return
        try:
            await self._on_expired(offer)
        except Exception:
            # The expiry is committed; delivery is the notifier's concern
            logger.exception("Expiry hook failed for offer %s", offer.id)
