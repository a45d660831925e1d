"""Protocols for the collaborators the application layer calls after the engine.

The engine itself never calls these: it returns the updated Offer and the
caller decides what to hand to payment and notification.
"""
from typing import Protocol

from src.om_common.enums import TransitionKind
from src.om_offer.domain.models import Offer


class OfferNotifierProtocol(Protocol):
    async def notify(self, offer: Offer, transition: TransitionKind) -> None: ...


class PaymentCollaboratorProtocol(Protocol):
    async def request_payment(
        self, offer_id: str, amount_cents: int, buyer_id: str, seller_id: str
    ) -> None: ...
