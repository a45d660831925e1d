"""HTTP-level tests for /api/v1/offers via httpx ASGITransport.

The service is rebuilt on the in-memory store and the DB session is a mock;
authentication runs for real against tokens from create_access_token.
"""
import itertools
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from src.main import app
from src.om_common.database import get_db_session
from src.om_common.datetime_utils import FixedClock
from src.om_gateway.auth.jwt_handler import create_access_token
from src.om_listing.domain.models import Listing
from src.om_offer.application.engine import NegotiationEngine
from src.om_offer.application.service import OfferApplicationService, get_offer_service
from src.om_offer.infrastructure.memory import InMemoryOfferRepository


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def payments() -> AsyncMock:
    return AsyncMock()


@pytest.fixture(autouse=True)
def overrides(clock: FixedClock, payments: AsyncMock):
    listings = MagicMock()
    listings.get_listing = AsyncMock(
        return_value=Listing(id="lst_1", seller_id="seller", price_cents=10_000)
    )
    ids = (f"ofr_{i}" for i in itertools.count(1))
    engine = NegotiationEngine(
        InMemoryOfferRepository(), listings, clock=clock, offer_id_factory=lambda: next(ids)
    )
    service = OfferApplicationService(engine, AsyncMock(), payments)

    async def _db():
        yield AsyncMock()

    app.dependency_overrides[get_offer_service] = lambda: service
    app.dependency_overrides[get_db_session] = _db
    yield service
    app.dependency_overrides.clear()


async def _create(client: AsyncClient, amount: int = 7000) -> dict:
    resp = await client.post(
        "/api/v1/offers",
        json={"listing_id": "lst_1", "amount_cents": amount, "message": "Would you take this?"},
        headers=_auth("buyer"),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


class TestAuth:
    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/offers")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/offers", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401


class TestNegotiationFlow:
    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient) -> None:
        data = await _create(client)
        assert data["id"] == "ofr_1"
        assert data["status"] == "PENDING"
        assert data["current_amount_cents"] == 7000
        assert data["current_amount_display"] == "$70.00"
        assert data["awaiting_response_from"] == "seller"

    @pytest.mark.asyncio
    async def test_counter_counter_accept(self, client: AsyncClient, payments: AsyncMock) -> None:
        offer = await _create(client)
        url = f"/api/v1/offers/{offer['id']}"

        resp = await client.post(
            f"{url}/counter", json={"amount_cents": 8500}, headers=_auth("seller")
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["status"] == "COUNTERED"

        resp = await client.post(
            f"{url}/counter", json={"amount_cents": 8000}, headers=_auth("buyer")
        )
        assert resp.status_code == 201

        resp = await client.post(f"{url}/accept", headers=_auth("seller"))
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["status"] == "ACCEPTED"
        assert body["data"]["accepted_amount_cents"] == 8000
        assert [c["amount_cents"] for c in body["data"]["counter_offers"]] == [8500, 8000]
        payments.request_payment.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reject(self, client: AsyncClient) -> None:
        offer = await _create(client)
        resp = await client.post(f"/api/v1/offers/{offer['id']}/reject", headers=_auth("seller"))
        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "REJECTED"


class TestErrors:
    @pytest.mark.asyncio
    async def test_out_of_bounds_envelope(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/offers",
            json={"listing_id": "lst_1", "amount_cents": 4000},
            headers=_auth("buyer"),
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == 3006
        assert body["error_kind"] == "OutOfBounds"
        assert body["data"] is None

    @pytest.mark.asyncio
    async def test_wrong_turn(self, client: AsyncClient) -> None:
        offer = await _create(client)
        resp = await client.post(
            f"/api/v1/offers/{offer['id']}/counter",
            json={"amount_cents": 7500},
            headers=_auth("buyer"),
        )
        assert resp.status_code == 422
        assert resp.json()["error_kind"] == "WrongTurn"

    @pytest.mark.asyncio
    async def test_not_active_after_accept(self, client: AsyncClient) -> None:
        offer = await _create(client)
        await client.post(f"/api/v1/offers/{offer['id']}/accept", headers=_auth("seller"))
        resp = await client.post(f"/api/v1/offers/{offer['id']}/reject", headers=_auth("seller"))
        assert resp.status_code == 409
        assert resp.json()["error_kind"] == "NotActive"

    @pytest.mark.asyncio
    async def test_outsider_cannot_read(self, client: AsyncClient) -> None:
        offer = await _create(client)
        resp = await client.get(f"/api/v1/offers/{offer['id']}", headers=_auth("mallory"))
        assert resp.status_code == 403
        assert resp.json()["error_kind"] == "NotAuthorized"

    @pytest.mark.asyncio
    async def test_unknown_offer(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/offers/ofr_missing", headers=_auth("buyer"))
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        resp = await client.get(
            "/api/v1/offers/ofr_missing",
            headers={**_auth("buyer"), "X-Request-ID": "req_test123"},
        )
        assert resp.headers["X-Request-ID"] == "req_test123"
        assert resp.json()["request_id"] == "req_test123"

    @pytest.mark.asyncio
    async def test_malformed_body(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/offers", json={"listing_id": "lst_1"}, headers=_auth("buyer")
        )
        assert resp.status_code == 422


class TestReads:
    @pytest.mark.asyncio
    async def test_get_expired_offer(self, client: AsyncClient, clock: FixedClock) -> None:
        offer = await _create(client)
        clock.advance(days=7, minutes=1)

        resp = await client.get(f"/api/v1/offers/{offer['id']}", headers=_auth("seller"))

        assert resp.status_code == 200
        assert resp.json()["data"]["status"] == "EXPIRED"
        assert resp.json()["data"]["awaiting_response_from"] is None

    @pytest.mark.asyncio
    async def test_list_by_role(self, client: AsyncClient, clock: FixedClock) -> None:
        for amount in (6000, 6500, 7000):
            await _create(client, amount)
            clock.advance(minutes=1)

        resp = await client.get("/api/v1/offers?role=seller&limit=2", headers=_auth("seller"))
        data = resp.json()["data"]
        assert data["role"] == "seller"
        assert [o["id"] for o in data["items"]] == ["ofr_3", "ofr_2"]
        assert data["has_more"] is True

        resp = await client.get(
            f"/api/v1/offers?role=seller&limit=2&cursor={data['next_cursor']}",
            headers=_auth("seller"),
        )
        assert [o["id"] for o in resp.json()["data"]["items"]] == ["ofr_1"]

        resp = await client.get("/api/v1/offers", headers=_auth("seller"))
        assert resp.json()["data"]["items"] == []

    @pytest.mark.asyncio
    async def test_bad_role(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/offers?role=broker", headers=_auth("buyer"))
        assert resp.status_code == 422


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
