"""Tests for om_common.errors and om_common.response."""

import pytest

from src.om_common.errors import (
    AmountOutOfBoundsError,
    AppError,
    InternalError,
    InvalidCredentialsError,
    InvalidMessageError,
    ListingNotFoundError,
    ListingUnavailableError,
    NotAuthorizedError,
    OfferConflictError,
    OfferNotActiveError,
    OfferNotFoundError,
    SelfOfferError,
    WrongDirectionError,
    WrongTurnError,
)
from src.om_common.response import (
    ApiResponse,
    error_response,
    from_app_error,
    success_response,
)


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500
        assert err.kind == "Internal"

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    @pytest.mark.parametrize(
        ("err", "code", "status", "kind"),
        [
            (InvalidCredentialsError(), 1001, 401, "NotAuthenticated"),
            (ListingNotFoundError("lst_1"), 2001, 404, "NotFound"),
            (ListingUnavailableError("lst_1"), 2002, 422, "NotActive"),
            (SelfOfferError(), 2003, 422, "NotAuthorized"),
            (OfferNotFoundError("ofr_1"), 3001, 404, "NotFound"),
            (NotAuthorizedError("nope"), 3002, 403, "NotAuthorized"),
            (OfferNotActiveError("ofr_1", "ACCEPTED"), 3003, 409, "NotActive"),
            (WrongTurnError(), 3004, 422, "WrongTurn"),
            (WrongDirectionError(9000, 8500, from_seller=True), 3005, 422, "WrongDirection"),
            (AmountOutOfBoundsError(4000, 5000, 10_000), 3006, 422, "OutOfBounds"),
            (OfferConflictError("ofr_1", 3), 3007, 409, "Conflict"),
            (InvalidMessageError(1000), 3008, 422, "InvalidInput"),
            (InternalError(), 9002, 500, "Internal"),
        ],
    )
    def test_codes_and_kinds(self, err: AppError, code: int, status: int, kind: str) -> None:
        assert err.code == code
        assert err.http_status == status
        assert err.kind == kind

    def test_out_of_bounds_message_names_limits(self) -> None:
        err = AmountOutOfBoundsError(4000, 5000, 10_000)
        assert "4000" in err.message
        assert "5000" in err.message
        assert "10000" in err.message

    def test_wrong_direction_message_depends_on_side(self) -> None:
        assert "lower" in WrongDirectionError(9000, 8500, from_seller=True).message
        assert "higher" in WrongDirectionError(7000, 8500, from_seller=False).message

    def test_not_active_message_names_status(self) -> None:
        assert "EXPIRED" in OfferNotActiveError("ofr_1", "EXPIRED").message


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "ofr_1"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.error_kind is None
        assert resp.data == {"id": "ofr_1"}

    def test_success_response_keeps_request_id(self) -> None:
        resp = success_response(None, request_id="req_abc")
        assert resp.request_id == "req_abc"

    def test_error_response(self) -> None:
        resp = error_response(3004, "It is the other party's turn", "WrongTurn")
        assert resp.code == 3004
        assert resp.error_kind == "WrongTurn"
        assert resp.data is None

    def test_generates_request_id(self) -> None:
        resp = ApiResponse()
        assert resp.request_id.startswith("req_")
        assert resp.timestamp

    def test_from_app_error(self) -> None:
        resp = from_app_error(WrongTurnError(), request_id="req_xyz")
        assert resp.code == 3004
        assert resp.error_kind == "WrongTurn"
        assert resp.request_id == "req_xyz"
        assert resp.data is None
