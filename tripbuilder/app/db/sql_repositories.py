"""SQL implementations of repository interfaces.

Repositories built over the same Session share its transaction. Each write
method commits once on success and rolls back on any failure, so a
multi-record write is never partially applied.
"""

import logging
import uuid
from datetime import UTC, date, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.models import (
    BookingChecklistItem,
    FollowUpHistory,
    ItineraryVersion,
    OperationsPerson,
    PackageAssignment,
    SalesClient,
)
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
    InvalidTransitionError,
    NotFoundError,
    ValidationFailure,
)
from tripbuilder.app.models.common import ChecklistItemType, FollowUpStatus, TransportationType
from tripbuilder.app.models.itinerary import ItineraryPayload
from tripbuilder.app.sales.funnel import check_transition
from tripbuilder.app.utils.logging import log_event
from tripbuilder.app.validation import require_text

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def _client_record(row: SalesClient) -> SalesClientRecord:
    return SalesClientRecord(
        client_id=row.client_id,
        sales_person_id=row.sales_person_id,
        name=row.name,
        country_code=row.country_code,
        whatsapp=row.whatsapp,
        email=row.email,
        travel_date=row.travel_date,
        number_of_days=row.number_of_days,
        number_of_adults=row.number_of_adults,
        number_of_children=row.number_of_children,
        transportation_mode=TransportationType(row.transportation_mode),
        total_cost=float(row.total_cost),
        current_status=FollowUpStatus(row.current_status),
        next_follow_up_date=row.next_follow_up_date,
        next_follow_up_time=row.next_follow_up_time,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _version_record(row: ItineraryVersion) -> ItineraryVersionRecord:
    return ItineraryVersionRecord(
        version_id=row.version_id,
        client_id=row.client_id,
        version_number=row.version_number,
        payload=ItineraryPayload.model_validate(row.itinerary_data),
        total_cost=float(row.total_cost),
        change_description=row.change_description,
        follow_up_status=FollowUpStatus(row.follow_up_status),
        created_at=row.created_at,
        created_by=row.created_by,
    )


def _history_record(row: FollowUpHistory) -> FollowUpEntryRecord:
    return FollowUpEntryRecord(
        entry_id=row.entry_id,
        client_id=row.client_id,
        sales_person_id=row.sales_person_id,
        sequence=row.sequence,
        status=FollowUpStatus(row.status),
        remarks=row.remarks,
        next_follow_up_date=row.next_follow_up_date,
        next_follow_up_time=row.next_follow_up_time,
        itinerary_version_number=row.itinerary_version_number,
        created_at=row.created_at,
        created_by=row.created_by,
    )


def _assignment_record(row: PackageAssignment) -> PackageAssignmentRecord:
    return PackageAssignmentRecord(
        assignment_id=row.assignment_id,
        client_id=row.client_id,
        sales_person_id=row.sales_person_id,
        operations_person_id=row.operations_person_id,
        version_number=row.version_number,
        status=row.status,
        created_at=row.created_at,
        created_by=row.created_by,
    )


def _checklist_record(row: BookingChecklistItem) -> ChecklistItemRecord:
    return ChecklistItemRecord(
        item_id=row.item_id,
        client_id=row.client_id,
        assignment_id=row.assignment_id,
        item_type=ChecklistItemType(row.item_type),
        item_ref=row.item_ref,
        item_name=row.item_name,
        day_number=row.day_number,
        is_booked=row.is_booked,
        booked_at=row.booked_at,
        booked_by=row.booked_by,
        booking_notes=row.booking_notes,
        created_at=row.created_at,
    )


def _lock_client(session: Session, client_id: uuid.UUID) -> SalesClient:
    """Load the client row with a write lock held until commit."""
    row = session.execute(
        select(SalesClient).where(SalesClient.client_id == client_id).with_for_update()
    ).scalar_one_or_none()
    if row is None:
        raise NotFoundError(f"sales client not found: {client_id}")
    return row


def _append_history(session: Session, entry: NewFollowUpEntry, now: datetime) -> FollowUpHistory:
    """Insert the next history row; caller holds the client lock."""
    current = session.execute(
        select(func.max(FollowUpHistory.sequence)).where(
            FollowUpHistory.client_id == entry.client_id
        )
    ).scalar()
    row = FollowUpHistory(
        entry_id=uuid.uuid4(),
        client_id=entry.client_id,
        sales_person_id=entry.sales_person_id,
        sequence=(current or 0) + 1,
        status=entry.status.value,
        remarks=entry.remarks,
        next_follow_up_date=entry.next_follow_up_date,
        next_follow_up_time=entry.next_follow_up_time,
        itinerary_version_number=entry.itinerary_version_number,
        created_at=now,
        created_by=entry.created_by,
    )
    session.add(row)
    return row


class SqlSalesClientRepository:
    """SQL implementation of SalesClientRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create_client(
        self, client: NewSalesClient, remarks: str, ctx: RequestContext
    ) -> SalesClientRecord:
        """Register a client with its initial history entry."""
        remarks = require_text(remarks, "remarks")

        existing = self._session.execute(
            select(SalesClient.client_id).where(
                SalesClient.sales_person_id == client.sales_person_id,
                SalesClient.country_code == client.country_code,
                SalesClient.whatsapp == client.whatsapp,
                SalesClient.travel_date == client.travel_date,
            )
        ).scalar_one_or_none()
        if existing is not None:
            raise DuplicateClientError(existing)

        now = _now()
        row = SalesClient(
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
            transportation_mode=client.transportation_mode.value,
            total_cost=client.total_cost,
            current_status=FollowUpStatus.itinerary_created.value,
            next_follow_up_date=client.next_follow_up_date,
            next_follow_up_time=client.next_follow_up_time,
            created_at=now,
            updated_at=now,
        )

        try:
            self._session.add(row)
            self._session.flush()
            _append_history(
                self._session,
                NewFollowUpEntry(
                    client_id=row.client_id,
                    sales_person_id=row.sales_person_id,
                    status=FollowUpStatus.itinerary_created,
                    remarks=remarks,
                    next_follow_up_date=row.next_follow_up_date,
                    next_follow_up_time=row.next_follow_up_time,
                    itinerary_version_number=None,
                    created_by=ctx.user_id,
                ),
                now,
            )
            self._session.commit()
        except IntegrityError as e:
            # Lost a race on the natural key
            self._session.rollback()
            winner = self._session.execute(
                select(SalesClient.client_id).where(
                    SalesClient.sales_person_id == client.sales_person_id,
                    SalesClient.country_code == client.country_code,
                    SalesClient.whatsapp == client.whatsapp,
                    SalesClient.travel_date == client.travel_date,
                )
            ).scalar_one_or_none()
            if winner is None:
                raise AtomicityError("could not register sales client") from e
            raise DuplicateClientError(winner) from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise AtomicityError("could not register sales client") from e

        return _client_record(row)

    def get_client(self, client_id: uuid.UUID) -> SalesClientRecord | None:
        """Get client by ID."""
        row = self._session.get(SalesClient, client_id)
        if row is None:
            return None
        return _client_record(row)

    def list_due_follow_ups(
        self, sales_person_id: uuid.UUID, on: date
    ) -> list[SalesClientRecord]:
        """Clients with a follow-up due on a date, ordered by time."""
        rows = self._session.execute(
            select(SalesClient)
            .where(
                SalesClient.sales_person_id == sales_person_id,
                SalesClient.next_follow_up_date == on,
            )
            .order_by(SalesClient.next_follow_up_time)
        ).scalars()
        return [_client_record(row) for row in rows]

    def list_by_status(
        self, sales_person_id: uuid.UUID, status: FollowUpStatus
    ) -> list[SalesClientRecord]:
        """Clients currently at a status, newest first."""
        rows = self._session.execute(
            select(SalesClient)
            .where(
                SalesClient.sales_person_id == sales_person_id,
                SalesClient.current_status == status.value,
            )
            .order_by(SalesClient.created_at.desc())
        ).scalars()
        return [_client_record(row) for row in rows]


class SqlItineraryVersionStore:
    """SQL implementation of ItineraryVersionStore."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def latest_version(self, client_id: uuid.UUID) -> ItineraryVersionRecord | None:
        """Highest-numbered version for the client."""
        row = self._session.execute(
            select(ItineraryVersion)
            .where(ItineraryVersion.client_id == client_id)
            .order_by(ItineraryVersion.version_number.desc())
            .limit(1)
        ).scalar_one_or_none()
        if row is None:
            return None
        return _version_record(row)

    def get_version(
        self, client_id: uuid.UUID, version_number: int
    ) -> ItineraryVersionRecord | None:
        """Specific version for the client."""
        row = self._session.execute(
            select(ItineraryVersion).where(
                ItineraryVersion.client_id == client_id,
                ItineraryVersion.version_number == version_number,
            )
        ).scalar_one_or_none()
        if row is None:
            return None
        return _version_record(row)

    def list_versions(self, client_id: uuid.UUID) -> list[ItineraryVersionRecord]:
        """All versions, newest first."""
        rows = self._session.execute(
            select(ItineraryVersion)
            .where(ItineraryVersion.client_id == client_id)
            .order_by(ItineraryVersion.version_number.desc())
        ).scalars()
        return [_version_record(row) for row in rows]

    def create_version(
        self,
        client_id: uuid.UUID,
        payload: ItineraryPayload,
        total_cost: float,
        change_description: str,
        follow_up_status: FollowUpStatus,
        actor_id: uuid.UUID,
    ) -> ItineraryVersionRecord:
        """Lock the client row, read max(version_number) and insert max + 1.

        The unique (client_id, version_number) constraint backs the lock on
        databases that ignore FOR UPDATE.
        """
        change_description = require_text(change_description, "change_description")
        if actor_id is None:
            raise ValidationFailure("actor_id")

        try:
            client = _lock_client(self._session, client_id)
            current = self._session.execute(
                select(func.max(ItineraryVersion.version_number)).where(
                    ItineraryVersion.client_id == client_id
                )
            ).scalar()
            now = _now()
            row = ItineraryVersion(
                version_id=uuid.uuid4(),
                client_id=client_id,
                version_number=(current or 0) + 1,
                itinerary_data=payload.model_dump(mode="json"),
                total_cost=total_cost,
                change_description=change_description,
                follow_up_status=follow_up_status.value,
                created_at=now,
                created_by=actor_id,
            )
            self._session.add(row)
            client.total_cost = total_cost
            client.updated_at = now
            self._session.commit()
        except NotFoundError:
            self._session.rollback()
            raise
        except SQLAlchemyError as e:
            self._session.rollback()
            log_event(
                logger,
                "version_create_failed",
                f"Version creation failed for client {client_id}",
                level=logging.ERROR,
                client_id=str(client_id),
                error=type(e).__name__,
            )
            raise AtomicityError(f"could not create itinerary version for {client_id}") from e

        return _version_record(row)


class SqlFollowUpRepository:
    """SQL implementation of FollowUpRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_history(self, client_id: uuid.UUID) -> list[FollowUpEntryRecord]:
        """History entries, newest first."""
        rows = self._session.execute(
            select(FollowUpHistory)
            .where(FollowUpHistory.client_id == client_id)
            .order_by(FollowUpHistory.sequence.desc())
        ).scalars()
        return [_history_record(row) for row in rows]

    def record_transition(
        self, entry: NewFollowUpEntry, fulfillment: FulfillmentPlan | None = None
    ) -> FollowUpEntryRecord:
        """Append history, advance status and optionally create fulfillment."""
        try:
            client = _lock_client(self._session, entry.client_id)
            check_transition(
                FollowUpStatus(client.current_status),
                entry.status,
                reconfirm=fulfillment is not None,
            )
            now = _now()
            history = _append_history(self._session, entry, now)

            client.current_status = entry.status.value
            client.next_follow_up_date = entry.next_follow_up_date
            client.next_follow_up_time = entry.next_follow_up_time
            client.updated_at = now

            if fulfillment is not None:
                assignment = PackageAssignment(
                    assignment_id=uuid.uuid4(),
                    client_id=entry.client_id,
                    sales_person_id=client.sales_person_id,
                    operations_person_id=fulfillment.operations_person_id,
                    version_number=fulfillment.version_number,
                    status="pending",
                    created_at=now,
                    created_by=entry.created_by,
                )
                assignment.items = [
                    BookingChecklistItem(
                        item_id=uuid.uuid4(),
                        client_id=entry.client_id,
                        item_type=item.item_type.value,
                        item_ref=item.item_ref,
                        item_name=item.item_name,
                        day_number=item.day_number,
                        is_booked=False,
                        created_at=now,
                    )
                    for item in fulfillment.items
                ]
                self._session.add(assignment)

            self._session.commit()
        except (NotFoundError, InvalidTransitionError):
            self._session.rollback()
            raise
        except SQLAlchemyError as e:
            self._session.rollback()
            log_event(
                logger,
                "transition_failed",
                f"Status transition failed for client {entry.client_id}",
                level=logging.ERROR,
                client_id=str(entry.client_id),
                status=entry.status.value,
                error=type(e).__name__,
            )
            raise AtomicityError(f"could not record transition for {entry.client_id}") from e

        return _history_record(history)


class SqlFulfillmentRepository:
    """SQL implementation of FulfillmentRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_assignment(self, client_id: uuid.UUID) -> PackageAssignmentRecord | None:
        """Assignment for the client, if any."""
        row = self._session.execute(
            select(PackageAssignment).where(PackageAssignment.client_id == client_id)
        ).scalar_one_or_none()
        if row is None:
            return None
        return _assignment_record(row)

    def list_checklist(self, client_id: uuid.UUID) -> list[ChecklistItemRecord]:
        """Checklist items ordered by day, whole-trip items first."""
        rows = self._session.execute(
            select(BookingChecklistItem)
            .where(BookingChecklistItem.client_id == client_id)
            .order_by(
                BookingChecklistItem.day_number.is_not(None),
                BookingChecklistItem.day_number,
            )
        ).scalars()
        return [_checklist_record(row) for row in rows]

    def update_checklist_item(
        self,
        item_id: uuid.UUID,
        ctx: RequestContext,
        *,
        is_booked: bool,
        booking_notes: str | None = None,
    ) -> ChecklistItemRecord:
        """Mark a checklist item booked or unbooked."""
        row = self._session.get(BookingChecklistItem, item_id)
        if row is None:
            raise NotFoundError(f"checklist item not found: {item_id}")

        try:
            row.is_booked = is_booked
            row.booked_at = _now() if is_booked else None
            row.booked_by = ctx.user_id if is_booked else None
            if booking_notes is not None:
                row.booking_notes = booking_notes
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise AtomicityError(f"could not update checklist item {item_id}") from e

        return _checklist_record(row)

    def reset_fulfillment(self, client_id: uuid.UUID) -> bool:
        """Delete the assignment and its checklist for the client."""
        row = self._session.execute(
            select(PackageAssignment).where(PackageAssignment.client_id == client_id)
        ).scalar_one_or_none()
        if row is None:
            return False

        try:
            self._session.delete(row)
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise AtomicityError(f"could not reset fulfillment for {client_id}") from e
        return True

    def add_operations_person(self, name: str, is_active: bool = True) -> OperationsPersonRecord:
        """Register an operations staff member."""
        row = OperationsPerson(person_id=uuid.uuid4(), name=name, is_active=is_active)
        try:
            self._session.add(row)
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise AtomicityError(f"could not add operations person {name}") from e
        return OperationsPersonRecord(person_id=row.person_id, name=row.name, is_active=row.is_active)

    def list_active_operations_people(self) -> list[OperationsPersonRecord]:
        """Operations staff eligible for assignment."""
        rows = self._session.execute(
            select(OperationsPerson)
            .where(OperationsPerson.is_active.is_(True))
            .order_by(OperationsPerson.name)
        ).scalars()
        return [
            OperationsPersonRecord(person_id=row.person_id, name=row.name, is_active=row.is_active)
            for row in rows
        ]
