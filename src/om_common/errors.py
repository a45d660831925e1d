"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Listing
  3xxx: Offer
  9xxx: System

Every error carries a ``kind`` naming its place in the negotiation error
taxonomy (NotAuthorized, NotActive, WrongTurn, WrongDirection, OutOfBounds,
Conflict, NotFound). Callers translate ``kind`` into user-facing copy; the
engine itself carries no presentation logic.
"""


class AppError(Exception):
    """Base application error."""

    kind: str = "Internal"

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    kind = "NotAuthenticated"

    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


# --- 2xxx: Listing ---

class ListingNotFoundError(AppError):
    kind = "NotFound"

    def __init__(self, listing_id: str) -> None:
        super().__init__(2001, f"Listing not found: {listing_id}", 404)


class ListingUnavailableError(AppError):
    kind = "NotActive"

    def __init__(self, listing_id: str) -> None:
        super().__init__(2002, f"Listing is no longer available: {listing_id}", 422)


class SelfOfferError(AppError):
    kind = "NotAuthorized"

    def __init__(self) -> None:
        super().__init__(2003, "Cannot make an offer on your own listing", 422)


# --- 3xxx: Offer ---

class OfferNotFoundError(AppError):
    kind = "NotFound"

    def __init__(self, offer_id: str) -> None:
        super().__init__(3001, f"Offer not found: {offer_id}", 404)


class NotAuthorizedError(AppError):
    kind = "NotAuthorized"

    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Not authorized: {detail}", 403)


class OfferNotActiveError(AppError):
    kind = "NotActive"

    def __init__(self, offer_id: str, status: str) -> None:
        super().__init__(3003, f"Offer {offer_id} in status {status} is no longer active", 409)


class WrongTurnError(AppError):
    kind = "WrongTurn"

    def __init__(self) -> None:
        super().__init__(3004, "It is the other party's turn to respond", 422)


class WrongDirectionError(AppError):
    kind = "WrongDirection"

    def __init__(self, amount: int, previous: int, from_seller: bool) -> None:
        if from_seller:
            detail = (
                f"seller counter {amount} must be lower than the seller's "
                f"previous amount {previous}"
            )
        else:
            detail = (
                f"buyer counter {amount} must be higher than the buyer's "
                f"previous amount {previous}"
            )
        super().__init__(3005, f"Wrong direction: {detail}", 422)


class AmountOutOfBoundsError(AppError):
    kind = "OutOfBounds"

    def __init__(self, amount: int, minimum: int, listing_price: int) -> None:
        super().__init__(
            3006,
            f"Amount {amount} out of bounds: must be >= {minimum} and < {listing_price} cents",
            422,
        )


class OfferConflictError(AppError):
    kind = "Conflict"

    def __init__(self, offer_id: str, attempts: int) -> None:
        super().__init__(
            3007,
            f"Offer {offer_id} was modified concurrently ({attempts} attempts); refresh and retry",
            409,
        )


class InvalidMessageError(AppError):
    kind = "InvalidInput"

    def __init__(self, max_length: int) -> None:
        super().__init__(3008, f"Message exceeds {max_length} characters", 422)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
