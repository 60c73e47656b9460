"""Request and response bodies for the HTTP layer."""

from datetime import date, datetime, time
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tripbuilder.app.models.common import ChecklistItemType, FollowUpStatus, TransportationType
from tripbuilder.app.models.itinerary import (
    ClientProfile,
    DayPlan,
    ItineraryPayload,
    check_day_sequence,
)


class RecordResponse(BaseModel):
    """Response built from a repository record."""

    model_config = ConfigDict(from_attributes=True)


class QuoteRequest(BaseModel):
    """Request body for POST /pricing/quote."""

    client: ClientProfile
    day_plans: list[DayPlan]
    profit_margin: float = 0.0
    exchange_rate: float | None = Field(None, gt=0)

    @model_validator(mode="after")
    def validate_days(self) -> "QuoteRequest":
        """Ensure one plan per trip day."""
        check_day_sequence(self.day_plans, self.client.number_of_days)
        return self


class CreateClientRequest(BaseModel):
    """Request body for POST /clients; the caller is the sales person."""

    name: str = Field(..., min_length=1)
    country_code: str = Field(..., min_length=1)
    whatsapp: str = Field(..., min_length=1)
    email: str | None = None
    travel_date: date
    number_of_days: int = Field(..., ge=1)
    number_of_adults: int = Field(..., ge=0)
    number_of_children: int = Field(0, ge=0)
    transportation_mode: TransportationType
    total_cost: float = Field(0.0, ge=0)
    next_follow_up_date: date | None = None
    next_follow_up_time: time | None = None


class ClientResponse(RecordResponse):
    client_id: UUID
    sales_person_id: UUID
    name: str
    country_code: str
    whatsapp: str
    email: str | None
    travel_date: date
    number_of_days: int
    number_of_adults: int
    number_of_children: int
    transportation_mode: TransportationType
    total_cost: float
    current_status: FollowUpStatus
    next_follow_up_date: date | None
    next_follow_up_time: time | None
    created_at: datetime


class CreateVersionRequest(BaseModel):
    """Request body for POST /clients/{client_id}/versions."""

    day_plans: list[DayPlan]
    total_cost: float = Field(..., ge=0)
    change_description: str | None = None

    def payload(self) -> ItineraryPayload:
        return ItineraryPayload(day_plans=self.day_plans)


class VersionResponse(RecordResponse):
    version_id: UUID
    client_id: UUID
    version_number: int
    payload: ItineraryPayload
    total_cost: float
    change_description: str
    follow_up_status: FollowUpStatus
    created_at: datetime
    created_by: UUID


class TransitionRequest(BaseModel):
    """Request body for POST /clients/{client_id}/follow-ups."""

    status: FollowUpStatus
    remarks: str | None = None
    next_follow_up_date: date | None = None
    next_follow_up_time: time | None = None
    version_number: int | None = Field(None, ge=1)


class HistoryEntryResponse(RecordResponse):
    entry_id: UUID
    sequence: int
    status: FollowUpStatus
    remarks: str
    next_follow_up_date: date | None
    next_follow_up_time: time | None
    itinerary_version_number: int | None
    created_at: datetime
    created_by: UUID


class NextStatusResponse(RecordResponse):
    current: FollowUpStatus
    suggested: FollowUpStatus
    allowed: list[FollowUpStatus]
    requires_scheduling: bool


class ChecklistItemResponse(RecordResponse):
    item_id: UUID
    item_type: ChecklistItemType
    item_ref: str
    item_name: str
    day_number: int | None
    is_booked: bool
    booked_at: datetime | None
    booked_by: UUID | None
    booking_notes: str | None


class AssignmentResponse(RecordResponse):
    assignment_id: UUID
    operations_person_id: UUID
    version_number: int
    status: str
    created_at: datetime


class TransitionResponse(BaseModel):
    """Response for POST /clients/{client_id}/follow-ups."""

    client: ClientResponse
    entry: HistoryEntryResponse | None
    confirmation: str | None = None
    assignment: AssignmentResponse | None = None
    checklist: list[ChecklistItemResponse] = Field(default_factory=list)


class ChecklistUpdateRequest(BaseModel):
    """Request body for PATCH /checklist/{item_id}."""

    is_booked: bool
    booking_notes: str | None = None


class ChecklistProgressResponse(RecordResponse):
    total: int
    completed: int
    percentage: int
