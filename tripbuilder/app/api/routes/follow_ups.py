"""Follow-up endpoints - funnel history, suggestions and transitions."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends

from tripbuilder.app.api.auth import get_current_context
from tripbuilder.app.api.dependencies import get_state_machine
from tripbuilder.app.api.schemas import (
    AssignmentResponse,
    ChecklistItemResponse,
    ClientResponse,
    HistoryEntryResponse,
    NextStatusResponse,
    TransitionRequest,
    TransitionResponse,
)
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.sales.follow_up import FollowUpStateMachine

router = APIRouter(prefix="/clients/{client_id}/follow-ups", tags=["follow-ups"])

MachineDep = Annotated[FollowUpStateMachine, Depends(get_state_machine)]
ContextDep = Annotated[RequestContext, Depends(get_current_context)]


@router.get("", response_model=list[HistoryEntryResponse])
def list_history(
    client_id: UUID, ctx: ContextDep, machine: MachineDep
) -> list[HistoryEntryResponse]:
    """Transition history, newest first."""
    return [HistoryEntryResponse.model_validate(e) for e in machine.history(client_id)]


@router.get("/next", response_model=NextStatusResponse)
def next_status(client_id: UUID, ctx: ContextDep, machine: MachineDep) -> NextStatusResponse:
    """Suggested next status and the statuses an operator may choose."""
    return NextStatusResponse.model_validate(machine.suggest(client_id))


@router.post("", response_model=TransitionResponse)
def transition(
    client_id: UUID,
    request: TransitionRequest,
    ctx: ContextDep,
    machine: MachineDep,
) -> TransitionResponse:
    """Record a funnel transition.

    Confirming requires `version_number`; the response then carries the
    operations assignment and its checklist.

    Args:
        client_id: Client ID
        request: Target status, remarks, schedule and version
        ctx: Request context (user_id)
        machine: Follow-up state machine

    Returns:
        Updated client, the new history entry and any confirmation result
    """
    result = machine.transition(
        client_id,
        request.status,
        request.remarks,
        ctx,
        next_follow_up_date=request.next_follow_up_date,
        next_follow_up_time=request.next_follow_up_time,
        version_number=request.version_number,
    )

    response = TransitionResponse(
        client=ClientResponse.model_validate(result.client),
        entry=HistoryEntryResponse.model_validate(result.entry) if result.entry else None,
    )
    if result.confirmation is not None:
        response.confirmation = result.confirmation.outcome.value
        response.assignment = AssignmentResponse.model_validate(result.confirmation.assignment)
        response.checklist = [
            ChecklistItemResponse.model_validate(i) for i in result.confirmation.items
        ]
    return response
