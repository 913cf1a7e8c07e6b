"""
TourStack Backend — Template Routes
=====================================

What:  /api/templates. Templates describe a positioning technology (QR,
       GPS, BLE beacon, ...) and the custom fields each stop needs for it.
Who:   The editor's template picker and tour creation dialog.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.database import get_db_session
from tourstack.schemas.common import ErrorResponse
from tourstack.schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate
from tourstack.services.template_service import TemplateService, template_service

router = APIRouter(prefix="/api/templates", tags=["Templates"])


def get_template_service() -> TemplateService:
    return template_service


@router.get(
    "",
    response_model=List[TemplateResponse],
    responses={500: {"model": ErrorResponse}},
    summary="List templates ordered by name",
)
async def list_templates(
    db: AsyncSession = Depends(get_db_session),
    service: TemplateService = Depends(get_template_service),
) -> List[TemplateResponse]:
    return await service.list_templates(db)


@router.get(
    "/{template_id}",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Get one template",
)
async def get_template(
    template_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    return await service.get_template(db, template_id)


@router.post(
    "",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create a custom template",
)
async def create_template(
    body: TemplateCreate,
    db: AsyncSession = Depends(get_db_session),
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    return await service.create_template(db, body)


@router.put(
    "/{template_id}",
    response_model=TemplateResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Update a template",
)
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: TemplateService = Depends(get_template_service),
) -> TemplateResponse:
    return await service.update_template(db, template_id, body)


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a template",
)
async def delete_template(
    template_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: TemplateService = Depends(get_template_service),
) -> Response:
    await service.delete_template(db, template_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
