"""In-memory implementations of repository interfaces.

All repositories built over the same InMemoryDatabase share one lock, so a
multi-record write (status + history, or confirmation + checklist) is applied
as a unit.
"""

import dataclasses
import threading
import uuid
from datetime import UTC, date, datetime

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.repositories import (
    ChecklistItemRecord,
    FollowUpEntryRecord,
    FulfillmentPlan,
    ItineraryVersionRecord,
    NewFollowUpEntry,
    NewSalesClient,
    OperationsPersonRecord,
    PackageAssignmentRecord,
    SalesClientRecord,
)
from tripbuilder.app.errors import (
    AtomicityError,
    DuplicateClientError,
    NotFoundError,
    ValidationFailure,
)
from tripbuilder.app.models.common import FollowUpStatus
from tripbuilder.app.models.itinerary import ItineraryPayload
from tripbuilder.app.sales.funnel import check_transition
from tripbuilder.app.validation import require_text


def _now() -> datetime:
    return datetime.now(UTC)


def _snapshot(version: ItineraryVersionRecord) -> ItineraryVersionRecord:
    """Copy handed to callers; the stored payload is never shared."""
    return dataclasses.replace(version, payload=version.payload.model_copy(deep=True))


class InMemoryDatabase:
    """Shared state for the in-memory repositories."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.clients: dict[uuid.UUID, SalesClientRecord] = {}
        self.versions: dict[uuid.UUID, list[ItineraryVersionRecord]] = {}
        self.history: dict[uuid.UUID, list[FollowUpEntryRecord]] = {}
        self.assignments: dict[uuid.UUID, PackageAssignmentRecord] = {}
        self.checklist: dict[uuid.UUID, list[ChecklistItemRecord]] = {}
        self.operations_people: dict[uuid.UUID, OperationsPersonRecord] = {}

    def append_history(self, entry: NewFollowUpEntry) -> FollowUpEntryRecord:
        """Append a history entry; caller holds the lock."""
        entries = self.history.setdefault(entry.client_id, [])
        record = FollowUpEntryRecord(
            entry_id=uuid.uuid4(),
            client_id=entry.client_id,
            sales_person_id=entry.sales_person_id,
            sequence=len(entries) + 1,
            status=entry.status,
            remarks=entry.remarks,
            next_follow_up_date=entry.next_follow_up_date,
            next_follow_up_time=entry.next_follow_up_time,
            itinerary_version_number=entry.itinerary_version_number,
            created_at=_now(),
            created_by=entry.created_by,
        )
        entries.append(record)
        return record


class InMemorySalesClientRepository:
    """In-memory implementation of SalesClientRepository."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    def create_client(
        self, client: NewSalesClient, remarks: str, ctx: RequestContext
    ) -> SalesClientRecord:
        """Register a client with its initial history entry."""
        remarks = require_text(remarks, "remarks")

        with self._db.lock:
            for existing in self._db.clients.values():
                key = (
                    existing.sales_person_id,
                    existing.country_code,
                    existing.whatsapp,
                    existing.travel_date,
                )
                if key == client.natural_key:
                    raise DuplicateClientError(existing.client_id)

            now = _now()
            record = SalesClientRecord(
                client_id=uuid.uuid4(),
                sales_person_id=client.sales_person_id,
                name=client.name,
                country_code=client.country_code,
                whatsapp=client.whatsapp,
                email=client.email,
                travel_date=client.travel_date,
                number_of_days=client.number_of_days,
                number_of_adults=client.number_of_adults,
                number_of_children=client.number_of_children,
                transportation_mode=client.transportation_mode,
                total_cost=client.total_cost,
                current_status=FollowUpStatus.itinerary_created,
                next_follow_up_date=client.next_follow_up_date,
                next_follow_up_time=client.next_follow_up_time,
                created_at=now,
                updated_at=now,
            )
            self._db.clients[record.client_id] = record
            self._db.append_history(
                NewFollowUpEntry(
                    client_id=record.client_id,
                    sales_person_id=record.sales_person_id,
                    status=record.current_status,
                    remarks=remarks,
                    next_follow_up_date=record.next_follow_up_date,
                    next_follow_up_time=record.next_follow_up_time,
                    itinerary_version_number=None,
                    created_by=ctx.user_id,
                )
            )
            return record

    def get_client(self, client_id: uuid.UUID) -> SalesClientRecord | None:
        """Get client by ID."""
        return self._db.clients.get(client_id)

    def list_due_follow_ups(
        self, sales_person_id: uuid.UUID, on: date
    ) -> list[SalesClientRecord]:
        """Clients with a follow-up due on a date, ordered by time."""
        results = [
            c
            for c in self._db.clients.values()
            if c.sales_person_id == sales_person_id and c.next_follow_up_date == on
        ]
        results.sort(key=lambda c: (c.next_follow_up_time is None, c.next_follow_up_time))
        return results

    def list_by_status(
        self, sales_person_id: uuid.UUID, status: FollowUpStatus
    ) -> list[SalesClientRecord]:
        """Clients currently at a status, newest first."""
        results = [
            c
            for c in self._db.clients.values()
            if c.sales_person_id == sales_person_id and c.current_status == status
        ]
        results.sort(key=lambda c: c.created_at, reverse=True)
        return results


class InMemoryItineraryVersionStore:
    """In-memory implementation of ItineraryVersionStore."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    def latest_version(self, client_id: uuid.UUID) -> ItineraryVersionRecord | None:
        """Highest-numbered version for the client."""
        versions = self._db.versions.get(client_id)
        if not versions:
            return None
        return _snapshot(versions[-1])

    def get_version(
        self, client_id: uuid.UUID, version_number: int
    ) -> ItineraryVersionRecord | None:
        """Specific version for the client."""
        for version in self._db.versions.get(client_id, []):
            if version.version_number == version_number:
                return _snapshot(version)
        return None

    def list_versions(self, client_id: uuid.UUID) -> list[ItineraryVersionRecord]:
        """All versions, newest first."""
        return [_snapshot(v) for v in reversed(self._db.versions.get(client_id, []))]

    def create_version(
        self,
        client_id: uuid.UUID,
        payload: ItineraryPayload,
        total_cost: float,
        change_description: str,
        follow_up_status: FollowUpStatus,
        actor_id: uuid.UUID,
    ) -> ItineraryVersionRecord:
        """Create the next version under the database lock."""
        change_description = require_text(change_description, "change_description")
        if actor_id is None:
            raise ValidationFailure("actor_id")

        with self._db.lock:
            client = self._db.clients.get(client_id)
            if client is None:
                raise NotFoundError(f"sales client not found: {client_id}")

            versions = self._db.versions.setdefault(client_id, [])
            current = versions[-1].version_number if versions else 0
            record = ItineraryVersionRecord(
                version_id=uuid.uuid4(),
                client_id=client_id,
                version_number=current + 1,
                payload=payload.model_copy(deep=True),
                total_cost=total_cost,
                change_description=change_description,
                follow_up_status=follow_up_status,
                created_at=_now(),
                created_by=actor_id,
            )
            versions.append(record)
            self._db.clients[client_id] = dataclasses.replace(
                client, total_cost=total_cost, updated_at=record.created_at
            )
            return _snapshot(record)


class InMemoryFollowUpRepository:
    """In-memory implementation of FollowUpRepository."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    def list_history(self, client_id: uuid.UUID) -> list[FollowUpEntryRecord]:
        """History entries, newest first."""
        return list(reversed(self._db.history.get(client_id, [])))

    def record_transition(
        self, entry: NewFollowUpEntry, fulfillment: FulfillmentPlan | None = None
    ) -> FollowUpEntryRecord:
        """Append history, advance status and optionally create fulfillment."""
        with self._db.lock:
            client = self._db.clients.get(entry.client_id)
            if client is None:
                raise NotFoundError(f"sales client not found: {entry.client_id}")

            # Every check happens before the first mutation
            check_transition(
                client.current_status, entry.status, reconfirm=fulfillment is not None
            )
            if fulfillment is not None and entry.client_id in self._db.assignments:
                raise AtomicityError(f"assignment already exists for {entry.client_id}")

            record = self._db.append_history(entry)
            self._db.clients[entry.client_id] = dataclasses.replace(
                client,
                current_status=entry.status,
                next_follow_up_date=entry.next_follow_up_date,
                next_follow_up_time=entry.next_follow_up_time,
                updated_at=record.created_at,
            )

            if fulfillment is not None:
                assignment = PackageAssignmentRecord(
                    assignment_id=uuid.uuid4(),
                    client_id=entry.client_id,
                    sales_person_id=client.sales_person_id,
                    operations_person_id=fulfillment.operations_person_id,
                    version_number=fulfillment.version_number,
                    status="pending",
                    created_at=record.created_at,
                    created_by=entry.created_by,
                )
                self._db.assignments[entry.client_id] = assignment
                self._db.checklist[entry.client_id] = [
                    ChecklistItemRecord(
                        item_id=uuid.uuid4(),
                        client_id=entry.client_id,
                        assignment_id=assignment.assignment_id,
                        item_type=item.item_type,
                        item_ref=item.item_ref,
                        item_name=item.item_name,
                        day_number=item.day_number,
                        is_booked=False,
                        booked_at=None,
                        booked_by=None,
                        booking_notes=None,
                        created_at=record.created_at,
                    )
                    for item in fulfillment.items
                ]

            return record


class InMemoryFulfillmentRepository:
    """In-memory implementation of FulfillmentRepository."""

    def __init__(self, db: InMemoryDatabase | None = None) -> None:
        self._db = db or InMemoryDatabase()

    def get_assignment(self, client_id: uuid.UUID) -> PackageAssignmentRecord | None:
        """Assignment for the client, if any."""
        return self._db.assignments.get(client_id)

    def list_checklist(self, client_id: uuid.UUID) -> list[ChecklistItemRecord]:
        """Checklist items ordered by day, whole-trip items first."""
        items = list(self._db.checklist.get(client_id, []))
        items.sort(key=lambda i: (i.day_number is not None, i.day_number or 0))
        return items

    def update_checklist_item(
        self,
        item_id: uuid.UUID,
        ctx: RequestContext,
        *,
        is_booked: bool,
        booking_notes: str | None = None,
    ) -> ChecklistItemRecord:
        """Mark a checklist item booked or unbooked."""
        with self._db.lock:
            for items in self._db.checklist.values():
                for index, item in enumerate(items):
                    if item.item_id != item_id:
                        continue
                    updated = dataclasses.replace(
                        item,
                        is_booked=is_booked,
                        booked_at=_now() if is_booked else None,
                        booked_by=ctx.user_id if is_booked else None,
                        booking_notes=booking_notes
                        if booking_notes is not None
                        else item.booking_notes,
                    )
                    items[index] = updated
                    return updated
        raise NotFoundError(f"checklist item not found: {item_id}")

    def reset_fulfillment(self, client_id: uuid.UUID) -> bool:
        """Delete the assignment and checklist for the client."""
        with self._db.lock:
            removed = self._db.assignments.pop(client_id, None) is not None
            removed = self._db.checklist.pop(client_id, None) is not None or removed
            return removed

    def add_operations_person(self, name: str, is_active: bool = True) -> OperationsPersonRecord:
        """Register an operations staff member."""
        record = OperationsPersonRecord(person_id=uuid.uuid4(), name=name, is_active=is_active)
        with self._db.lock:
            self._db.operations_people[record.person_id] = record
        return record

    def list_active_operations_people(self) -> list[OperationsPersonRecord]:
        """Operations staff eligible for assignment."""
        return [p for p in self._db.operations_people.values() if p.is_active]
