"""
TourStack Backend — Tour Routes
=================================

What:  /api/tours: list, fetch, create, update, delete and duplicate.
How:   Thin wrappers around TourService. Every tour in a response carries
       its stops, ordered.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.database import get_db_session
from tourstack.schemas.common import ErrorResponse
from tourstack.schemas.tour import TourCreate, TourResponse, TourUpdate
from tourstack.services.tour_service import TourService, tour_service

router = APIRouter(prefix="/api/tours", tags=["Tours"])


def get_tour_service() -> TourService:
    return tour_service


@router.get("", response_model=List[TourResponse], summary="List tours, most recently updated first")
async def list_tours(
    db: AsyncSession = Depends(get_db_session),
    service: TourService = Depends(get_tour_service),
) -> List[TourResponse]:
    return await service.list_tours(db)


@router.get(
    "/{tour_id}",
    response_model=TourResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one tour with its stops",
)
async def get_tour(
    tour_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: TourService = Depends(get_tour_service),
) -> TourResponse:
    return await service.get_tour(db, tour_id)


@router.post(
    "",
    response_model=TourResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create a draft tour",
)
async def create_tour(
    body: TourCreate,
    db: AsyncSession = Depends(get_db_session),
    service: TourService = Depends(get_tour_service),
) -> TourResponse:
    return await service.create_tour(db, body)


@router.put(
    "/{tour_id}",
    response_model=TourResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Partially update a tour (and embedded stops)",
)
async def update_tour(
    tour_id: str,
    body: TourUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: TourService = Depends(get_tour_service),
) -> TourResponse:
    return await service.update_tour(db, tour_id, body)


@router.delete(
    "/{tour_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a tour and its stops",
)
async def delete_tour(
    tour_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: TourService = Depends(get_tour_service),
) -> Response:
    await service.delete_tour(db, tour_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{tour_id}/duplicate",
    response_model=TourResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
    summary="Copy a tour and its stops as a new draft",
)
async def duplicate_tour(
    tour_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: TourService = Depends(get_tour_service),
) -> TourResponse:
    return await service.duplicate_tour(db, tour_id)
