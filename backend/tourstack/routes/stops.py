"""
TourStack Backend — Stop Routes
=================================

What:  /api/stops: list a tour's stops, create, update, delete, reorder.

Paths mirror the editor client:
    GET    /api/stops/{tour_id}
    POST   /api/stops                  body carries tourId
    PUT    /api/stops/{stop_id}
    DELETE /api/stops/{stop_id}
    PUT    /api/stops/reorder/{tour_id}

The reorder route is declared before PUT /{stop_id} so "reorder" is never
read as a stop id.
"""

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.database import get_db_session
from tourstack.schemas.common import ErrorResponse
from tourstack.schemas.tour import ReorderStopsRequest, StopCreate, StopResponse, StopUpdate
from tourstack.services.stop_service import StopService, stop_service

router = APIRouter(prefix="/api/stops", tags=["Stops"])


def get_stop_service() -> StopService:
    return stop_service


@router.get("/{tour_id}", response_model=List[StopResponse], summary="List a tour's stops in order")
async def list_stops(
    tour_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: StopService = Depends(get_stop_service),
) -> List[StopResponse]:
    return await service.list_for_tour(db, tour_id)


@router.post(
    "",
    response_model=StopResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Append a stop to a tour",
)
async def create_stop(
    body: StopCreate,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    service: StopService = Depends(get_stop_service),
) -> StopResponse:
    # Visitor URLs point at the origin the editor is using
    base_url = str(request.base_url).rstrip("/")
    return await service.create_stop(db, body, base_url)


@router.put(
    "/reorder/{tour_id}",
    response_model=List[StopResponse],
    responses={404: {"model": ErrorResponse}},
    summary="Set stop order from a list of ids",
)
async def reorder_stops(
    tour_id: str,
    body: ReorderStopsRequest,
    db: AsyncSession = Depends(get_db_session),
    service: StopService = Depends(get_stop_service),
) -> List[StopResponse]:
    return await service.reorder(db, tour_id, body.stop_ids)


@router.put(
    "/{stop_id}",
    response_model=StopResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Partially update a stop",
)
async def update_stop(
    stop_id: str,
    body: StopUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: StopService = Depends(get_stop_service),
) -> StopResponse:
    return await service.update_stop(db, stop_id, body)


@router.delete(
    "/{stop_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a stop",
)
async def delete_stop(
    stop_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: StopService = Depends(get_stop_service),
) -> Response:
    await service.delete_stop(db, stop_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
