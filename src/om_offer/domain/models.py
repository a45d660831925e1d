"""Offer domain model — pure dataclasses, no SQLAlchemy dependency.

An Offer owns its CounterOffer chain. The chain is ordered by insertion and
encodes turn-taking: the buyer's initial offer is turn 0, each CounterOffer is
one further turn.
"""
from dataclasses import dataclass, field
from datetime import datetime

from src.om_common.enums import ACTIVE_STATUSES, TERMINAL_STATUSES, OfferStatus


@dataclass(frozen=True)
class CounterOffer:
    id: str
    offer_id: str
    amount: int  # cents
    from_seller: bool  # False == buyer turn
    message: str | None
    created_at: datetime


@dataclass
class Offer:
    id: str
    listing_id: str
    buyer_id: str
    seller_id: str
    listing_price: int  # cents, snapshot taken at creation
    initial_amount: int  # cents
    initial_message: str | None
    status: OfferStatus
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    counter_offers: list[CounterOffer] = field(default_factory=list)
    version: int = 1

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def current_amount(self) -> int:
        """Latest proposed price: last counter, or the initial offer when there are none."""
        if self.counter_offers:
            return self.counter_offers[-1].amount
        return self.initial_amount

    @property
    def last_turn_from_seller(self) -> bool:
        """Side that made the most recent chain entry. The initial offer is the buyer's."""
        if self.counter_offers:
            return self.counter_offers[-1].from_seller
        return False

    @property
    def accepted_amount(self) -> int | None:
        if self.status != OfferStatus.ACCEPTED:
            return None
        return self.current_amount

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

    def is_seller(self, user_id: str) -> bool:
        return user_id == self.seller_id

    def awaiting_response_from(self) -> str:
        """User ID of the party whose turn it is to respond."""
        return self.buyer_id if self.last_turn_from_seller else self.seller_id

    def chain(self) -> list[tuple[bool, int]]:
        """[(from_seller, amount), ...] starting with the buyer's initial offer."""
        turns = [(False, self.initial_amount)]
        turns.extend((c.from_seller, c.amount) for c in self.counter_offers)
        return turns

    def last_amount_by(self, from_seller: bool) -> int | None:
        """Most recent amount proposed by one side; None if that side has not proposed yet."""
        for turn_from_seller, amount in reversed(self.chain()):
            if turn_from_seller == from_seller:
                return amount
        return None
