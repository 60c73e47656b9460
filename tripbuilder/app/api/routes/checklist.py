"""Booking checklist endpoints for confirmed packages."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from tripbuilder.app.api.auth import get_current_context
from tripbuilder.app.api.dependencies import get_fulfillment_repository
from tripbuilder.app.api.schemas import (
    ChecklistItemResponse,
    ChecklistProgressResponse,
    ChecklistUpdateRequest,
)
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.repositories import FulfillmentRepository
from tripbuilder.app.errors import NotFoundError
from tripbuilder.app.sales.confirmation import checklist_progress

router = APIRouter(tags=["checklist"])

FulfillmentDep = Annotated[FulfillmentRepository, Depends(get_fulfillment_repository)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


@router.get("/clients/{client_id}/checklist", response_model=list[ChecklistItemResponse])
def list_checklist(
    client_id: UUID, ctx: ContextDep, fulfillment: FulfillmentDep
) -> list[ChecklistItemResponse]:
    """Checklist items by day, whole-trip items first."""
    return [ChecklistItemResponse.model_validate(i) for i in fulfillment.list_checklist(client_id)]


@router.get("/clients/{client_id}/checklist/progress", response_model=ChecklistProgressResponse)
def get_progress(
    client_id: UUID, ctx: ContextDep, fulfillment: FulfillmentDep
) -> ChecklistProgressResponse:
    return ChecklistProgressResponse.model_validate(
        checklist_progress(fulfillment.list_checklist(client_id))
    )


@router.patch("/checklist/{item_id}", response_model=ChecklistItemResponse)
def update_item(
    item_id: UUID,
    request: ChecklistUpdateRequest,
    ctx: ContextDep,
    fulfillment: FulfillmentDep,
) -> ChecklistItemResponse:
    """Mark a checklist item booked or unbooked."""
    item = fulfillment.update_checklist_item(
        item_id, ctx, is_booked=request.is_booked, booking_notes=request.booking_notes
    )
    return ChecklistItemResponse.model_validate(item)


@router.delete("/clients/{client_id}/fulfillment", status_code=status.HTTP_204_NO_CONTENT)
def reset_fulfillment(client_id: UUID, ctx: ContextDep, fulfillment: FulfillmentDep) -> None:
    """Delete the assignment and checklist so a later confirmation regenerates them."""
    if not fulfillment.reset_fulfillment(client_id):
        raise NotFoundError(f"no fulfillment for client {client_id}")
