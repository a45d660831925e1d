"""Negotiation rule set — pure validation, no I/O.

Every check raises the matching AppError subclass; nothing here mutates the
offer. The state machine calls these before computing any transition, so a
record that reaches the store always satisfies:

  * actors alternate across [initial offer (buyer), counter_offers...]
  * each side moves strictly toward the other: seller amounts down, buyer
    amounts up, each measured against that side's own previous proposal
  * every amount satisfies floor <= amount < listing_price
  * terminal records are never modified
"""

from dataclasses import dataclass
from datetime import timedelta

from src.om_common.cents import meets_floor, min_amount_for_floor
from src.om_common.errors import (
    AmountOutOfBoundsError,
    InvalidMessageError,
    NotAuthorizedError,
    OfferNotActiveError,
    WrongDirectionError,
    WrongTurnError,
)
from src.om_offer.domain.models import Offer

MAX_MESSAGE_LENGTH = 1000


@dataclass(frozen=True)
class NegotiationPolicy:
    ttl: timedelta = timedelta(days=7)
    floor_bps: int = 5000
    max_attempts: int = 3

    @classmethod
    def from_settings(cls) -> "NegotiationPolicy":
        from config.settings import settings

        return cls(
            ttl=timedelta(hours=settings.OFFER_TTL_HOURS),
            floor_bps=settings.OFFER_FLOOR_BPS,
            max_attempts=settings.OFFER_CAS_MAX_ATTEMPTS,
        )


DEFAULT_POLICY = NegotiationPolicy()


def check_amount_bounds(
    amount: int, listing_price: int, policy: NegotiationPolicy = DEFAULT_POLICY
) -> None:
    """Raise AmountOutOfBoundsError unless floor <= amount < listing_price and amount > 0."""
    if amount <= 0 or amount >= listing_price or not meets_floor(
        amount, listing_price, policy.floor_bps
    ):
        raise AmountOutOfBoundsError(
            amount, min_amount_for_floor(listing_price, policy.floor_bps), listing_price
        )


def check_message(message: str | None) -> None:
    if message is not None and len(message) > MAX_MESSAGE_LENGTH:
        raise InvalidMessageError(MAX_MESSAGE_LENGTH)


def validate_create(
    listing_price: int,
    amount: int,
    message: str | None = None,
    policy: NegotiationPolicy = DEFAULT_POLICY,
) -> None:
    check_amount_bounds(amount, listing_price, policy)
    check_message(message)


def validate_counter(
    offer: Offer,
    actor_id: str,
    amount: int,
    message: str | None,
    policy: NegotiationPolicy = DEFAULT_POLICY,
) -> None:
    """Checks run in a fixed order: party, active, turn, bounds, direction."""
    if not offer.is_party(actor_id):
        raise NotAuthorizedError(f"{actor_id} is not a party to offer {offer.id}")
    if not offer.is_active:
        raise OfferNotActiveError(offer.id, offer.status.value)

    from_seller = offer.is_seller(actor_id)
    if from_seller == offer.last_turn_from_seller:
        raise WrongTurnError()

    check_amount_bounds(amount, offer.listing_price, policy)

    # Each side is measured against its own previous proposal. The seller's
    # opening position is the asking price. No minimum step size.
    previous = offer.last_amount_by(from_seller)
    if previous is None:
        previous = offer.listing_price
    if from_seller and amount >= previous:
        raise WrongDirectionError(amount, previous, from_seller=True)
    if not from_seller and amount <= previous:
        raise WrongDirectionError(amount, previous, from_seller=False)

    check_message(message)


def _validate_response(offer: Offer, actor_id: str, action: str) -> None:
    if not offer.is_active:
        raise OfferNotActiveError(offer.id, offer.status.value)
    if not offer.is_party(actor_id):
        raise NotAuthorizedError(f"{actor_id} is not a party to offer {offer.id}")
    if actor_id != offer.awaiting_response_from():
        raise NotAuthorizedError(f"cannot {action} your own latest proposal on offer {offer.id}")


def validate_accept(offer: Offer, actor_id: str) -> None:
    _validate_response(offer, actor_id, "accept")


def validate_reject(offer: Offer, actor_id: str) -> None:
    _validate_response(offer, actor_id, "reject")
