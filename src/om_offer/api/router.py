"""om_offer REST endpoints.

POST /offers                      — buyer opens an offer on a listing
GET  /offers?role=buyer|seller    — caller's offers, cursor pagination
GET  /offers/{offer_id}           — one offer with its counter-offer chain
POST /offers/{offer_id}/counter   — counter-offer (either party, alternating)
POST /offers/{offer_id}/accept    — accept the other party's latest amount
POST /offers/{offer_id}/reject    — reject the other party's latest amount
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.database import get_db_session
from src.om_common.enums import OfferRole
from src.om_common.response import ApiResponse, success_response
from src.om_gateway.auth.dependencies import get_current_user_id
from src.om_offer.application.schemas import CounterOfferRequest, CreateOfferRequest
from src.om_offer.application.service import OfferApplicationService, get_offer_service

router = APIRouter(prefix="/offers", tags=["offers"])

UserId = Annotated[str, Depends(get_current_user_id)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[OfferApplicationService, Depends(get_offer_service)]


def _ok(request: Request, data: object) -> ApiResponse:
    return success_response(data, getattr(request.state, "request_id", None))


@router.post("", status_code=201)
async def create_offer(
    req: CreateOfferRequest, request: Request, user_id: UserId, db: Db, svc: Service
) -> ApiResponse:
    result = await svc.create_offer(db, user_id, req)
    return _ok(request, result.model_dump(mode="json"))


@router.get("")
async def list_offers(
    request: Request,
    user_id: UserId,
    db: Db,
    svc: Service,
    role: OfferRole = Query(OfferRole.BUYER, description="buyer or seller"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None, description="Pagination cursor (last offer ID)"),
) -> ApiResponse:
    result = await svc.list_offers(db, user_id, role, limit, cursor)
    return _ok(request, result.model_dump(mode="json"))


@router.get("/{offer_id}")
async def get_offer(
    offer_id: str, request: Request, user_id: UserId, db: Db, svc: Service
) -> ApiResponse:
    result = await svc.get_offer(db, offer_id, user_id)
    return _ok(request, result.model_dump(mode="json"))


@router.post("/{offer_id}/counter", status_code=201)
async def submit_counter(
    offer_id: str,
    req: CounterOfferRequest,
    request: Request,
    user_id: UserId,
    db: Db,
    svc: Service,
) -> ApiResponse:
    result = await svc.submit_counter(db, offer_id, user_id, req)
    return _ok(request, result.model_dump(mode="json"))


@router.post("/{offer_id}/accept")
async def accept_offer(
    offer_id: str, request: Request, user_id: UserId, db: Db, svc: Service
) -> ApiResponse:
    result = await svc.accept(db, offer_id, user_id)
    return _ok(request, result.model_dump(mode="json"))


@router.post("/{offer_id}/reject")
async def reject_offer(
    offer_id: str, request: Request, user_id: UserId, db: Db, svc: Service
) -> ApiResponse:
    result = await svc.reject(db, offer_id, user_id)
    return _ok(request, result.model_dump(mode="json"))
