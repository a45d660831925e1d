"""Offer state machine — pure (record, action) -> record transitions.

    PENDING   ──► ACCEPTED | REJECTED | COUNTERED | EXPIRED
    COUNTERED ──► ACCEPTED | REJECTED | COUNTERED | EXPIRED
    ACCEPTED, REJECTED, EXPIRED: terminal

Transitions never touch the input record; they return a new Offer with the
same ``version`` as the input. The store bumps the version when it commits
the candidate via compare-and-swap.
"""

from dataclasses import replace
from datetime import datetime

from src.om_common.enums import OfferStatus
from src.om_common.errors import OfferNotActiveError
from src.om_offer.domain import rules
from src.om_offer.domain.models import CounterOffer, Offer
from src.om_offer.domain.rules import DEFAULT_POLICY, NegotiationPolicy

ALLOWED_TRANSITIONS: dict[OfferStatus, frozenset[OfferStatus]] = {
    OfferStatus.PENDING: frozenset(
        {OfferStatus.ACCEPTED, OfferStatus.REJECTED, OfferStatus.COUNTERED, OfferStatus.EXPIRED}
    ),
    OfferStatus.COUNTERED: frozenset(
        {OfferStatus.ACCEPTED, OfferStatus.REJECTED, OfferStatus.COUNTERED, OfferStatus.EXPIRED}
    ),
    OfferStatus.ACCEPTED: frozenset(),
    OfferStatus.REJECTED: frozenset(),
    OfferStatus.EXPIRED: frozenset(),
}


def can_transition(current: OfferStatus, target: OfferStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def _require_transition(offer: Offer, target: OfferStatus) -> None:
    if not can_transition(offer.status, target):
        raise OfferNotActiveError(offer.id, offer.status.value)


def is_due_for_expiry(offer: Offer, now: datetime) -> bool:
    return offer.is_active and now >= offer.expires_at


def open_offer(
    *,
    offer_id: str,
    listing_id: str,
    buyer_id: str,
    seller_id: str,
    listing_price: int,
    amount: int,
    message: str | None,
    now: datetime,
    policy: NegotiationPolicy = DEFAULT_POLICY,
) -> Offer:
    """Create transition: a fresh PENDING offer with no counters."""
    rules.validate_create(listing_price, amount, message, policy)
    return Offer(
        id=offer_id,
        listing_id=listing_id,
        buyer_id=buyer_id,
        seller_id=seller_id,
        listing_price=listing_price,
        initial_amount=amount,
        initial_message=message,
        status=OfferStatus.PENDING,
        expires_at=now + policy.ttl,
        created_at=now,
        updated_at=now,
        counter_offers=[],
        version=1,
    )


def counter(
    offer: Offer,
    *,
    actor_id: str,
    amount: int,
    message: str | None,
    counter_offer_id: str,
    now: datetime,
    policy: NegotiationPolicy = DEFAULT_POLICY,
) -> Offer:
    """Append one turn to the chain and renew the sliding TTL."""
    rules.validate_counter(offer, actor_id, amount, message, policy)
    _require_transition(offer, OfferStatus.COUNTERED)
    turn = CounterOffer(
        id=counter_offer_id,
        offer_id=offer.id,
        amount=amount,
        from_seller=offer.is_seller(actor_id),
        message=message,
        created_at=now,
    )
    return replace(
        offer,
        status=OfferStatus.COUNTERED,
        counter_offers=[*offer.counter_offers, turn],
        expires_at=now + policy.ttl,
        updated_at=now,
    )


def accept(offer: Offer, *, actor_id: str, now: datetime) -> Offer:
    """Agree on current_amount. expires_at is left as-is."""
    rules.validate_accept(offer, actor_id)
    _require_transition(offer, OfferStatus.ACCEPTED)
    return replace(
        offer,
        status=OfferStatus.ACCEPTED,
        counter_offers=list(offer.counter_offers),
        updated_at=now,
    )


def reject(offer: Offer, *, actor_id: str, now: datetime) -> Offer:
    rules.validate_reject(offer, actor_id)
    _require_transition(offer, OfferStatus.REJECTED)
    return replace(
        offer,
        status=OfferStatus.REJECTED,
        counter_offers=list(offer.counter_offers),
        updated_at=now,
    )


def expire(offer: Offer, *, now: datetime) -> Offer:
    """System-initiated. Only legal for an active offer whose deadline has passed."""
    _require_transition(offer, OfferStatus.EXPIRED)
    if now < offer.expires_at:
        raise ValueError(
            f"Offer {offer.id} is not due for expiry until {offer.expires_at.isoformat()}"
        )
    return replace(
        offer,
        status=OfferStatus.EXPIRED,
        counter_offers=list(offer.counter_offers),
        updated_at=now,
    )
