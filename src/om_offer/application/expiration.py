"""Expiration: lazy per-read resolution plus a periodic background sweep.

Both paths commit EXPIRED through the ConcurrencyGuard, so an expiry racing a
legitimate accept/reject is decided by the version column: whichever commits
first wins. The sweep makes a single attempt per offer and simply skips on
conflict; a response that beat the clock stands.
"""
import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.datetime_utils import Clock, utc_now
from src.om_offer.application.concurrency import ConcurrencyGuard, no_change
from src.om_offer.domain.models import Offer
from src.om_offer.domain.repository import OfferRepositoryProtocol
from src.om_offer.domain.state_machine import is_due_for_expiry

logger = logging.getLogger(__name__)


class ExpirationResolver:
    def __init__(self, guard: ConcurrencyGuard, clock: Clock = utc_now) -> None:
        self._guard = guard
        self._clock = clock

    async def resolve(self, offer: Offer, db: AsyncSession) -> Offer:
        """Return ``offer`` as a reader should see it right now.

        No store round trip unless the offer is actually due; terminal and
        not-yet-due offers come straight back, which also makes a second
        resolve of an EXPIRED offer a no-op.
        """
        if not is_due_for_expiry(offer, self._clock()):
            return offer
        return await self._guard.run(db, offer.id, no_change)

    async def expire_or_skip(self, offer: Offer, db: AsyncSession) -> Offer | None:
        """Single CAS attempt for the sweep, against the version the sweep listed.

        None when the offer is not due or another writer (a response, a reader
        that already expired it) committed first.
        """
        expired = await self._guard.try_expire(db, offer)
        if expired is None:
            logger.debug("Sweep skipped offer %s (v%d)", offer.id, offer.version)
        return expired


SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class ExpirationSweeper:
    """Background task: expire stale PENDING/COUNTERED offers on a fixed cadence."""

    def __init__(
        self,
        repo: OfferRepositoryProtocol,
        resolver: ExpirationResolver,
        session_factory: SessionFactory,
        *,
        interval_seconds: float,
        batch_size: int = 200,
        clock: Clock = utc_now,
    ) -> None:
        self._repo = repo
        self._resolver = resolver
        self._session_factory = session_factory
        self._interval = interval_seconds
        self._batch_size = batch_size
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    async def sweep_once(self, db: AsyncSession) -> int:
        """One pass over at most batch_size due offers. Returns how many this pass expired."""
        due = await self._repo.list_due_for_expiry(self._clock(), self._batch_size, db)
        await db.rollback()
        expired = 0
        for offer in due:
            result = await self._resolver.expire_or_skip(offer, db)
            if result is not None:
                expired += 1
        if due:
            logger.info("Expiry sweep: %d due, %d expired", len(due), expired)
        return expired

    async def run_forever(self) -> None:
        while True:
            try:
                async with self._session_factory() as db:
                    await self.sweep_once(db)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Expiry sweep pass failed; retrying next interval")
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run_forever(), name="offer-expiry-sweep")
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
