# src/om_offer/application/schemas.py
"""Pydantic request/response schemas for the offers API.

Amounts travel as integer cents; each amount also carries a ``*_display``
string for clients that render it directly.
"""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from src.om_common.cents import cents_to_display
from src.om_offer.domain.models import CounterOffer, Offer
from src.om_offer.domain.rules import MAX_MESSAGE_LENGTH


class CreateOfferRequest(BaseModel):
    listing_id: str = Field(min_length=1, max_length=64)
    amount_cents: int = Field(gt=0)
    message: str | None = Field(default=None, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class CounterOfferRequest(BaseModel):
    amount_cents: int = Field(gt=0)
    message: str | None = Field(default=None, max_length=MAX_MESSAGE_LENGTH)

    @field_validator("message")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class CounterOfferResponse(BaseModel):
    id: str
    amount_cents: int
    amount_display: str
    from_seller: bool
    message: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, c: CounterOffer) -> "CounterOfferResponse":
        return cls(
            id=c.id,
            amount_cents=c.amount,
            amount_display=cents_to_display(c.amount),
            from_seller=c.from_seller,
            message=c.message,
            created_at=c.created_at,
        )


class OfferResponse(BaseModel):
    id: str
    listing_id: str
    buyer_id: str
    seller_id: str
    listing_price_cents: int
    initial_amount_cents: int
    initial_message: str | None
    current_amount_cents: int
    current_amount_display: str
    accepted_amount_cents: int | None
    status: str
    awaiting_response_from: str | None
    counter_offers: list[CounterOfferResponse]
    expires_at: datetime
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, o: Offer) -> "OfferResponse":
        return cls(
            id=o.id,
            listing_id=o.listing_id,
            buyer_id=o.buyer_id,
            seller_id=o.seller_id,
            listing_price_cents=o.listing_price,
            initial_amount_cents=o.initial_amount,
            initial_message=o.initial_message,
            current_amount_cents=o.current_amount,
            current_amount_display=cents_to_display(o.current_amount),
            accepted_amount_cents=o.accepted_amount,
            status=o.status.value,
            awaiting_response_from=o.awaiting_response_from() if o.is_active else None,
            counter_offers=[CounterOfferResponse.from_domain(c) for c in o.counter_offers],
            expires_at=o.expires_at,
            version=o.version,
            created_at=o.created_at,
            updated_at=o.updated_at,
        )


class OfferListResponse(BaseModel):
    role: Literal["buyer", "seller"]
    items: list[OfferResponse]
    next_cursor: str | None
    has_more: bool
