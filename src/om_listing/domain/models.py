"""Listing snapshot as seen by the negotiation engine — read-only."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Listing:
    id: str
    seller_id: str
    price_cents: int
    is_sold: bool = False
