"""Global enums — must match DB CHECK constraints exactly.

Ref: alembic/versions/002_create_offers.py
"""

from enum import Enum


class OfferStatus(str, Enum):
    PENDING = "PENDING"
    COUNTERED = "COUNTERED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


# No outbound transitions from these
TERMINAL_STATUSES: frozenset[OfferStatus] = frozenset(
    {OfferStatus.ACCEPTED, OfferStatus.REJECTED, OfferStatus.EXPIRED}
)

ACTIVE_STATUSES: frozenset[OfferStatus] = frozenset(
    {OfferStatus.PENDING, OfferStatus.COUNTERED}
)


class OfferRole(str, Enum):
    """Which side of the offers a user is listing."""
    BUYER = "buyer"
    SELLER = "seller"


class TransitionKind(str, Enum):
    """Handed to the notification collaborator after a state change."""
    CREATED = "CREATED"
    COUNTERED = "COUNTERED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
