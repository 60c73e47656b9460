"""Sales client endpoints - registration and follow-up queries."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from tripbuilder.app.api.auth import get_current_context
from tripbuilder.app.api.dependencies import get_client_service
from tripbuilder.app.api.schemas import ClientResponse, CreateClientRequest
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.repositories import NewSalesClient
from tripbuilder.app.sales.clients import SalesClientService

router = APIRouter(prefix="/clients", tags=["clients"])

ServiceDep = Annotated[SalesClientService, Depends(get_client_service)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    request: CreateClientRequest,
    response: Response,
    ctx: ContextDep,
    service: ServiceDep,
) -> ClientResponse:
    """Register a sales client for the calling sales person.

    A duplicate registration returns the existing client with 200.
    """
    record, created = service.register(
        NewSalesClient(sales_person_id=ctx.user_id, **request.model_dump()),
        ctx,
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return ClientResponse.model_validate(record)


@router.get("/due", response_model=list[ClientResponse])
def list_due(
    ctx: ContextDep,
    service: ServiceDep,
    on: Annotated[date | None, Query()] = None,
) -> list[ClientResponse]:
    """Follow-ups due on a date (default today) for the calling sales person."""
    records = service.due_follow_ups(ctx.user_id, on or date.today())
    return [ClientResponse.model_validate(r) for r in records]


@router.get("/confirmed", response_model=list[ClientResponse])
def list_confirmed(ctx: ContextDep, service: ServiceDep) -> list[ClientResponse]:
    """Confirmed clients of the calling sales person, newest first."""
    return [ClientResponse.model_validate(r) for r in service.confirmed(ctx.user_id)]


@router.get("/{client_id}", response_model=ClientResponse)
def get_client(client_id: UUID, ctx: ContextDep, service: ServiceDep) -> ClientResponse:
    """Get a sales client."""
    return ClientResponse.model_validate(service.get(client_id))
