"""NegotiationEngine — the only entry point the rest of the application calls.

Four mutations (create, counter, accept, reject) and two reads (get, list).
Every mutation on an existing offer goes through the ConcurrencyGuard; every
read goes through the ExpirationResolver so callers never see a
logically-expired offer as active.

The engine does not talk to payment or notification: it returns the updated
Offer and the caller decides what to hand to those collaborators.
"""
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.datetime_utils import Clock, utc_now
from src.om_common.enums import OfferRole
from src.om_common.errors import (
    ListingNotFoundError,
    ListingUnavailableError,
    NotAuthorizedError,
    OfferNotFoundError,
    SelfOfferError,
)
from src.om_common.id_generator import generate_counter_offer_id, generate_offer_id
from src.om_listing.domain.repository import ListingRepositoryProtocol
from src.om_offer.application.concurrency import ConcurrencyGuard, ExpiredHook
from src.om_offer.application.expiration import ExpirationResolver
from src.om_offer.domain import state_machine
from src.om_offer.domain.models import Offer
from src.om_offer.domain.repository import OfferRepositoryProtocol
from src.om_offer.domain.rules import DEFAULT_POLICY, NegotiationPolicy

logger = logging.getLogger(__name__)


class NegotiationEngine:
    def __init__(
        self,
        repo: OfferRepositoryProtocol,
        listings: ListingRepositoryProtocol,
        *,
        clock: Clock = utc_now,
        policy: NegotiationPolicy = DEFAULT_POLICY,
        on_expired: ExpiredHook | None = None,
        offer_id_factory: Callable[[], str] = generate_offer_id,
        counter_id_factory: Callable[[], str] = generate_counter_offer_id,
    ) -> None:
        self._repo = repo
        self._listings = listings
        self._clock = clock
        self._policy = policy
        self._offer_id_factory = offer_id_factory
        self._counter_id_factory = counter_id_factory
        self._guard = ConcurrencyGuard(
            repo, clock=clock, max_attempts=policy.max_attempts, on_expired=on_expired
        )
        self._resolver = ExpirationResolver(self._guard, clock=clock)

    @property
    def guard(self) -> ConcurrencyGuard:
        return self._guard

    @property
    def resolver(self) -> ExpirationResolver:
        return self._resolver

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------

    async def create_offer(
        self,
        db: AsyncSession,
        buyer_id: str,
        listing_id: str,
        amount: int,
        message: str | None = None,
    ) -> Offer:
        listing = await self._listings.get_listing(listing_id, db)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if listing.is_sold:
            raise ListingUnavailableError(listing_id)
        if listing.seller_id == buyer_id:
            raise SelfOfferError()

        offer = state_machine.open_offer(
            offer_id=self._offer_id_factory(),
            listing_id=listing.id,
            buyer_id=buyer_id,
            seller_id=listing.seller_id,
            listing_price=listing.price_cents,
            amount=amount,
            message=message,
            now=self._clock(),
            policy=self._policy,
        )
        try:
            await self._repo.insert(offer, db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Offer %s created: listing=%s buyer=%s amount=%d",
            offer.id, listing.id, buyer_id, amount,
        )
        return offer

    async def submit_counter(
        self,
        db: AsyncSession,
        offer_id: str,
        actor_id: str,
        amount: int,
        message: str | None = None,
    ) -> Offer:
        # One ID per intended action: a retried attempt re-proposes the same turn
        counter_id = self._counter_id_factory()
        offer = await self._guard.run(
            db,
            offer_id,
            lambda current, now: state_machine.counter(
                current,
                actor_id=actor_id,
                amount=amount,
                message=message,
                counter_offer_id=counter_id,
                now=now,
                policy=self._policy,
            ),
        )
        logger.info(
            "Offer %s countered by %s at %d (v%d)", offer_id, actor_id, amount, offer.version
        )
        return offer

    async def accept(self, db: AsyncSession, offer_id: str, actor_id: str) -> Offer:
        offer = await self._guard.run(
            db,
            offer_id,
            lambda current, now: state_machine.accept(current, actor_id=actor_id, now=now),
        )
        logger.info("Offer %s accepted by %s at %d", offer_id, actor_id, offer.current_amount)
        return offer

    async def reject(self, db: AsyncSession, offer_id: str, actor_id: str) -> Offer:
        offer = await self._guard.run(
            db,
            offer_id,
            lambda current, now: state_machine.reject(current, actor_id=actor_id, now=now),
        )
        logger.info("Offer %s rejected by %s", offer_id, actor_id)
        return offer

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get_offer(
        self, db: AsyncSession, offer_id: str, actor_id: str | None = None
    ) -> Offer:
        """Fetch with expiry applied. When actor_id is given, only the two parties may read."""
        offer = await self._repo.get_by_id(offer_id, db)
        if offer is None:
            raise OfferNotFoundError(offer_id)
        if actor_id is not None and not offer.is_party(actor_id):
            raise NotAuthorizedError(f"{actor_id} is not a party to offer {offer_id}")
        return await self._resolver.resolve(offer, db)

    async def list_offers(
        self,
        db: AsyncSession,
        user_id: str,
        role: OfferRole | str,
        limit: int = 50,
        cursor_id: str | None = None,
    ) -> list[Offer]:
        role = OfferRole(role)
        offers = await self._repo.list_by_user(user_id, role, limit, cursor_id, db)
        return [await self._resolver.resolve(offer, db) for offer in offers]
