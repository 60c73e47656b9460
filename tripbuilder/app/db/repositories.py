"""Repository protocol interfaces for sales, versioning and fulfillment data."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Protocol
from uuid import UUID

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.models.common import ChecklistItemType, FollowUpStatus, TransportationType
from tripbuilder.app.models.itinerary import ItineraryPayload


@dataclass(frozen=True)
class NewSalesClient:
    """Sales client fields supplied at registration."""

    sales_person_id: UUID
    name: str
    country_code: str
    whatsapp: str
    travel_date: date
    number_of_days: int
    number_of_adults: int
    number_of_children: int
    transportation_mode: TransportationType
    email: str | None = None
    total_cost: float = 0.0
    next_follow_up_date: date | None = None
    next_follow_up_time: time | None = None

    @property
    def natural_key(self) -> tuple[UUID, str, str, date]:
        return (self.sales_person_id, self.country_code, self.whatsapp, self.travel_date)


@dataclass(frozen=True)
class SalesClientRecord:
    """Sales client data record."""

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
    updated_at: datetime

    @property
    def total_pax(self) -> int:
        return self.number_of_adults + self.number_of_children


@dataclass(frozen=True)
class ItineraryVersionRecord:
    """Immutable numbered snapshot of a client's day plans and price."""

    version_id: UUID
    client_id: UUID
    version_number: int
    payload: ItineraryPayload
    total_cost: float
    change_description: str
    follow_up_status: FollowUpStatus
    created_at: datetime
    created_by: UUID


@dataclass(frozen=True)
class NewFollowUpEntry:
    """Pending status transition, validated before it reaches a repository."""

    client_id: UUID
    sales_person_id: UUID
    status: FollowUpStatus
    remarks: str
    next_follow_up_date: date | None
    next_follow_up_time: time | None
    itinerary_version_number: int | None
    created_by: UUID


@dataclass(frozen=True)
class FollowUpEntryRecord:
    """Append-only record of a status transition."""

    entry_id: UUID
    client_id: UUID
    sales_person_id: UUID
    sequence: int
    status: FollowUpStatus
    remarks: str
    next_follow_up_date: date | None
    next_follow_up_time: time | None
    itinerary_version_number: int | None
    created_at: datetime
    created_by: UUID


@dataclass(frozen=True)
class NewChecklistItem:
    """Checklist row derived from a confirmed version."""

    item_type: ChecklistItemType
    item_ref: str
    item_name: str
    day_number: int | None


@dataclass(frozen=True)
class FulfillmentPlan:
    """Operations assignment and checklist to create alongside confirmation."""

    version_number: int
    operations_person_id: UUID
    items: list[NewChecklistItem] = field(default_factory=list)


@dataclass(frozen=True)
class PackageAssignmentRecord:
    """Operations-side assignment of a confirmed package."""

    assignment_id: UUID
    client_id: UUID
    sales_person_id: UUID
    operations_person_id: UUID
    version_number: int
    status: str
    created_at: datetime
    created_by: UUID


@dataclass(frozen=True)
class ChecklistItemRecord:
    """One bookable unit of a confirmed package."""

    item_id: UUID
    client_id: UUID
    assignment_id: UUID
    item_type: ChecklistItemType
    item_ref: str
    item_name: str
    day_number: int | None
    is_booked: bool
    booked_at: datetime | None
    booked_by: UUID | None
    booking_notes: str | None
    created_at: datetime


@dataclass(frozen=True)
class OperationsPersonRecord:
    """Operations staff member who can receive assignments."""

    person_id: UUID
    name: str
    is_active: bool


class SalesClientRepository(Protocol):
    """Repository for sales client records."""

    def create_client(
        self, client: NewSalesClient, remarks: str, ctx: RequestContext
    ) -> SalesClientRecord:
        """Register a client at `itinerary-created` with its first history entry.

        Args:
            client: Client fields
            remarks: Remarks for the initial history entry
            ctx: Request context (actor)

        Returns:
            Created client record

        Raises:
            DuplicateClientError: If the natural key is already registered
        """
        ...

    def get_client(self, client_id: UUID) -> SalesClientRecord | None:
        """Get client by ID."""
        ...

    def list_due_follow_ups(self, sales_person_id: UUID, on: date) -> list[SalesClientRecord]:
        """Clients of a sales person with a follow-up due on a date, by time."""
        ...

    def list_by_status(
        self, sales_person_id: UUID, status: FollowUpStatus
    ) -> list[SalesClientRecord]:
        """Clients of a sales person currently at a status, newest first."""
        ...


class ItineraryVersionStore(Protocol):
    """Store of immutable, monotonically numbered itinerary versions."""

    def latest_version(self, client_id: UUID) -> ItineraryVersionRecord | None:
        """Highest-numbered version for the client."""
        ...

    def get_version(self, client_id: UUID, version_number: int) -> ItineraryVersionRecord | None:
        """Specific version for the client."""
        ...

    def list_versions(self, client_id: UUID) -> list[ItineraryVersionRecord]:
        """All versions for the client, newest first."""
        ...

    def create_version(
        self,
        client_id: UUID,
        payload: ItineraryPayload,
        total_cost: float,
        change_description: str,
        follow_up_status: FollowUpStatus,
        actor_id: UUID,
    ) -> ItineraryVersionRecord:
        """Create the next version atomically.

        The version number is assigned as current max + 1 in the same atomic
        step as the insert; concurrent callers never share a number and
        numbers never skip.

        Raises:
            ValidationFailure: If change_description is blank or actor_id missing
            NotFoundError: If the client does not exist
            AtomicityError: If the atomic step fails; nothing is written
        """
        ...


class FollowUpRepository(Protocol):
    """Repository for funnel transitions and their history."""

    def list_history(self, client_id: UUID) -> list[FollowUpEntryRecord]:
        """History entries for the client, newest first."""
        ...

    def record_transition(
        self, entry: NewFollowUpEntry, fulfillment: FulfillmentPlan | None = None
    ) -> FollowUpEntryRecord:
        """Append a history entry and advance the client's status as one unit.

        The transition is checked against the status read under the write
        lock, so a concurrent writer cannot move a client out of a final
        status.

        When `fulfillment` is given, the assignment and checklist are created
        in the same unit; if any part fails nothing is written.

        Raises:
            NotFoundError: If the client does not exist
            InvalidTransitionError: If the locked status does not allow it
            AtomicityError: If the write could not be completed
        """
        ...


class FulfillmentRepository(Protocol):
    """Repository for operations assignments and booking checklists."""

    def get_assignment(self, client_id: UUID) -> PackageAssignmentRecord | None:
        """Assignment for the client, if any."""
        ...

    def list_checklist(self, client_id: UUID) -> list[ChecklistItemRecord]:
        """Checklist items for the client, ordered by day (whole-trip items first)."""
        ...

    def update_checklist_item(
        self,
        item_id: UUID,
        ctx: RequestContext,
        *,
        is_booked: bool,
        booking_notes: str | None = None,
    ) -> ChecklistItemRecord:
        """Mark a checklist item booked or unbooked.

        Raises:
            NotFoundError: If the item does not exist
        """
        ...

    def reset_fulfillment(self, client_id: UUID) -> bool:
        """Delete the assignment and checklist; True if anything was removed."""
        ...

    def add_operations_person(self, name: str, is_active: bool = True) -> OperationsPersonRecord:
        """Register an operations staff member."""
        ...

    def list_active_operations_people(self) -> list[OperationsPersonRecord]:
        """Operations staff eligible for assignment."""
        ...
