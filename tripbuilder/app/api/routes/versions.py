"""Itinerary version endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from tripbuilder.app.api.auth import get_current_context
from tripbuilder.app.api.dependencies import get_version_service
from tripbuilder.app.api.schemas import CreateVersionRequest, VersionResponse
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.sales.versions import ItineraryVersionService

router = APIRouter(prefix="/clients/{client_id}/versions", tags=["versions"])

ServiceDep = Annotated[ItineraryVersionService, Depends(get_version_service)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


@router.post("", response_model=VersionResponse, status_code=status.HTTP_201_CREATED)
def create_version(
    client_id: UUID,
    request: CreateVersionRequest,
    ctx: ContextDep,
    service: ServiceDep,
) -> VersionResponse:
    """Save the next itinerary version.

    Args:
        client_id: Client ID
        request: Day plans, total cost and change description
        ctx: Request context (user_id)
        service: Version service

    Returns:
        Created version with its number
    """
    version = service.save_version(
        client_id,
        request.payload(),
        request.total_cost,
        request.change_description,
        ctx,
    )
    return VersionResponse.model_validate(version)


@router.get("", response_model=list[VersionResponse])
def list_versions(client_id: UUID, ctx: ContextDep, service: ServiceDep) -> list[VersionResponse]:
    """All versions, newest first."""
    return [VersionResponse.model_validate(v) for v in service.list_versions(client_id)]


@router.get("/latest", response_model=VersionResponse)
def latest_version(client_id: UUID, ctx: ContextDep, service: ServiceDep) -> VersionResponse:
    return VersionResponse.model_validate(service.latest_version(client_id))


@router.get("/{version_number}", response_model=VersionResponse)
def get_version(
    client_id: UUID, version_number: int, ctx: ContextDep, service: ServiceDep
) -> VersionResponse:
    return VersionResponse.model_validate(service.get_version(client_id, version_number))
