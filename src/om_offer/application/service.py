# src/om_offer/application/service.py
"""OfferApplicationService — composition layer between the router and the engine.

This is the engine's caller in the sense of the collaborator contracts:
after a successful accept it requests payment, after every state change it
notifies. Both happen after the offer is committed, so a collaborator failure
is logged for reconciliation and never turns a committed transition into an
error response.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.enums import OfferRole, TransitionKind
from src.om_common.redis_client import get_redis
from src.om_listing.infrastructure.persistence import ListingRepository
from src.om_offer.application.engine import NegotiationEngine
from src.om_offer.application.schemas import (
    CounterOfferRequest,
    CreateOfferRequest,
    OfferListResponse,
    OfferResponse,
)
from src.om_offer.domain.collaborators import (
    OfferNotifierProtocol,
    PaymentCollaboratorProtocol,
)
from src.om_offer.domain.models import Offer
from src.om_offer.domain.rules import NegotiationPolicy
from src.om_offer.infrastructure.notifier import RedisOfferNotifier
from src.om_offer.infrastructure.payment_queue import RedisPaymentQueue
from src.om_offer.infrastructure.persistence import OfferRepository

logger = logging.getLogger(__name__)


class OfferApplicationService:
    def __init__(
        self,
        engine: NegotiationEngine,
        notifier: OfferNotifierProtocol,
        payments: PaymentCollaboratorProtocol,
    ) -> None:
        self._engine = engine
        self._notifier = notifier
        self._payments = payments

    @property
    def engine(self) -> NegotiationEngine:
        return self._engine

    async def create_offer(
        self, db: AsyncSession, buyer_id: str, req: CreateOfferRequest
    ) -> OfferResponse:
        offer = await self._engine.create_offer(
            db, buyer_id, req.listing_id, req.amount_cents, req.message
        )
        await self._notify(offer, TransitionKind.CREATED)
        return OfferResponse.from_domain(offer)

    async def submit_counter(
        self, db: AsyncSession, offer_id: str, actor_id: str, req: CounterOfferRequest
    ) -> OfferResponse:
        offer = await self._engine.submit_counter(
            db, offer_id, actor_id, req.amount_cents, req.message
        )
        await self._notify(offer, TransitionKind.COUNTERED)
        return OfferResponse.from_domain(offer)

    async def accept(self, db: AsyncSession, offer_id: str, actor_id: str) -> OfferResponse:
        offer = await self._engine.accept(db, offer_id, actor_id)
        try:
            await self._payments.request_payment(
                offer.id, offer.current_amount, offer.buyer_id, offer.seller_id
            )
        except Exception:
            logger.exception(
                "Payment request failed for accepted offer %s (%d cents); needs reconciliation",
                offer.id, offer.current_amount,
            )
        await self._notify(offer, TransitionKind.ACCEPTED)
        return OfferResponse.from_domain(offer)

    async def reject(self, db: AsyncSession, offer_id: str, actor_id: str) -> OfferResponse:
        offer = await self._engine.reject(db, offer_id, actor_id)
        await self._notify(offer, TransitionKind.REJECTED)
        return OfferResponse.from_domain(offer)

    async def get_offer(self, db: AsyncSession, offer_id: str, actor_id: str) -> OfferResponse:
        offer = await self._engine.get_offer(db, offer_id, actor_id=actor_id)
        return OfferResponse.from_domain(offer)

    async def list_offers(
        self,
        db: AsyncSession,
        user_id: str,
        role: OfferRole,
        limit: int,
        cursor: str | None,
    ) -> OfferListResponse:
        # Fetch limit+1 to detect has_more without COUNT(*)
        offers = await self._engine.list_offers(db, user_id, role, limit + 1, cursor)
        has_more = len(offers) > limit
        page = offers[:limit]
        return OfferListResponse(
            role=role.value,
            items=[OfferResponse.from_domain(o) for o in page],
            next_cursor=page[-1].id if has_more and page else None,
            has_more=has_more,
        )

    async def _notify(self, offer: Offer, transition: TransitionKind) -> None:
        try:
            await self._notifier.notify(offer, transition)
        except Exception:
            logger.exception("Notification %s failed for offer %s", transition.value, offer.id)


_service: OfferApplicationService | None = None


def build_offer_service() -> OfferApplicationService:
    """Wire the production service: PostgreSQL stores, Redis collaborators."""
    notifier = RedisOfferNotifier(get_redis, settings.OFFER_EVENTS_CHANNEL)
    payments = RedisPaymentQueue(get_redis, settings.PAYMENT_QUEUE_KEY)

    async def on_expired(offer: Offer) -> None:
        await notifier.notify(offer, TransitionKind.EXPIRED)

    engine = NegotiationEngine(
        OfferRepository(),
        ListingRepository(),
        policy=NegotiationPolicy.from_settings(),
        on_expired=on_expired,
    )
    return OfferApplicationService(engine, notifier, payments)


def get_offer_service() -> OfferApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = build_offer_service()
    return _service
