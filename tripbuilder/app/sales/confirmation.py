"""Booking confirmation - materializes the fulfillment checklist exactly once."""

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from tripbuilder.app.db.repositories import (
    ChecklistItemRecord,
    FollowUpEntryRecord,
    FollowUpRepository,
    FulfillmentPlan,
    FulfillmentRepository,
    ItineraryVersionRecord,
    NewChecklistItem,
    NewFollowUpEntry,
    OperationsPersonRecord,
    PackageAssignmentRecord,
    SalesClientRecord,
)
from tripbuilder.app.errors import AtomicityError
from tripbuilder.app.models.catalog import CatalogSnapshot
from tripbuilder.app.models.common import ChecklistItemType, FollowUpStatus, TransportationType
from tripbuilder.app.utils.logging import log_event
from tripbuilder.app.utils.metrics import confirmations_total

logger = logging.getLogger(__name__)

PersonChooser = Callable[[Sequence[OperationsPersonRecord]], OperationsPersonRecord]


class ConfirmationOutcome(str, Enum):
    """Result of a confirmation attempt."""

    created = "created"
    already_exists = "already_exists"


@dataclass(frozen=True)
class ConfirmationResult:
    """Assignment state after a confirmation attempt."""

    outcome: ConfirmationOutcome
    assignment: PackageAssignmentRecord
    items: list[ChecklistItemRecord]
    history_entry: FollowUpEntryRecord | None


@dataclass(frozen=True)
class ChecklistProgress:
    """Booked share of a checklist."""

    total: int
    completed: int
    percentage: int


def _name(catalog: CatalogSnapshot | None, lookup: str, ref: str) -> str | None:
    if catalog is None:
        return None
    item = getattr(catalog, lookup)(ref)
    return item.name if item is not None else None


def build_checklist(
    client: SalesClientRecord,
    version: ItineraryVersionRecord,
    catalog: CatalogSnapshot | None = None,
) -> list[NewChecklistItem]:
    """Expand a version's day plans into one checklist item per bookable unit.

    Self-drive trips also get a whole-trip transportation item with no day
    number. Catalog names are used when the catalog still has the item.
    """
    items: list[NewChecklistItem] = []

    if client.transportation_mode != TransportationType.cab:
        items.append(
            NewChecklistItem(
                item_type=ChecklistItemType.transportation,
                item_ref="main-transport",
                item_name=f"{client.transportation_mode.value} for {client.number_of_days} days",
                day_number=None,
            )
        )

    for plan in version.payload.day_plans:
        day = plan.day

        if plan.hotel is not None:
            hotel_name = _name(catalog, "hotel", plan.hotel.hotel_id) or plan.hotel.place
            label = f"Hotel booking for Day {day}"
            items.append(
                NewChecklistItem(
                    item_type=ChecklistItemType.hotel,
                    item_ref=plan.hotel.hotel_id,
                    item_name=f"{label} at {hotel_name}" if hotel_name else label,
                    day_number=day,
                )
            )

        for sightseeing_id in plan.sightseeing:
            name = _name(catalog, "sightseeing", sightseeing_id)
            items.append(
                NewChecklistItem(
                    item_type=ChecklistItemType.sightseeing,
                    item_ref=sightseeing_id,
                    item_name=f"Sightseeing arrangement for Day {day}"
                    + (f": {name}" if name else ""),
                    day_number=day,
                )
            )

        for selection in plan.activities:
            name = _name(catalog, "activity", selection.activity_id)
            items.append(
                NewChecklistItem(
                    item_type=ChecklistItemType.activity,
                    item_ref=selection.activity_id,
                    item_name=f"Activity booking for Day {day}" + (f": {name}" if name else ""),
                    day_number=day,
                )
            )

        for ticket_id in plan.entry_tickets:
            name = _name(catalog, "entry_ticket", ticket_id)
            items.append(
                NewChecklistItem(
                    item_type=ChecklistItemType.entry_ticket,
                    item_ref=ticket_id,
                    item_name=f"Entry ticket for Day {day}" + (f": {name}" if name else ""),
                    day_number=day,
                )
            )

        for meal_id in plan.meals:
            meal = catalog.meal(meal_id) if catalog is not None else None
            suffix = f": {meal.type.value} at {meal.place}" if meal is not None else ""
            items.append(
                NewChecklistItem(
                    item_type=ChecklistItemType.meal,
                    item_ref=meal_id,
                    item_name=f"Meal arrangement for Day {day}{suffix}",
                    day_number=day,
                )
            )

    return items


def checklist_progress(items: Sequence[ChecklistItemRecord]) -> ChecklistProgress:
    """Count booked items and round the percentage."""
    total = len(items)
    completed = sum(1 for item in items if item.is_booked)
    percentage = round(completed / total * 100) if total else 0
    return ChecklistProgress(total=total, completed=completed, percentage=percentage)


class BookingConfirmationTrigger:
    """Creates the operations assignment and checklist on confirmation.

    Idempotent per client: when an assignment already exists the trigger
    reports it and writes nothing. Otherwise the status change, history
    entry, assignment and checklist are written as one unit.
    """

    def __init__(
        self,
        follow_ups: FollowUpRepository,
        fulfillment: FulfillmentRepository,
        catalog: CatalogSnapshot | None = None,
        choose_person: PersonChooser = random.choice,
    ) -> None:
        self._follow_ups = follow_ups
        self._fulfillment = fulfillment
        self._catalog = catalog
        self._choose_person = choose_person

    def _existing(self, client_id: UUID) -> ConfirmationResult | None:
        assignment = self._fulfillment.get_assignment(client_id)
        if assignment is None:
            return None
        confirmations_total.labels(outcome=ConfirmationOutcome.already_exists.value).inc()
        log_event(
            logger,
            "confirmation_exists",
            f"Assignment already exists for client {client_id}",
            client_id=str(client_id),
            assignment_id=str(assignment.assignment_id),
        )
        return ConfirmationResult(
            outcome=ConfirmationOutcome.already_exists,
            assignment=assignment,
            items=self._fulfillment.list_checklist(client_id),
            history_entry=None,
        )

    def confirm(
        self,
        client: SalesClientRecord,
        version: ItineraryVersionRecord,
        entry: NewFollowUpEntry,
    ) -> ConfirmationResult:
        """Confirm a client against an explicitly chosen version.

        Args:
            client: Client being confirmed
            version: Version selected for fulfillment
            entry: Validated history entry for the confirmed status

        Returns:
            Created or pre-existing assignment with its checklist

        Raises:
            AtomicityError: If the assignment could not be created; the
                client's status is left unchanged
        """
        if entry.status != FollowUpStatus.advance_paid_confirmed:
            raise ValueError("confirmation requires the confirmed status")

        existing = self._existing(client.client_id)
        if existing is not None:
            return existing

        people = self._fulfillment.list_active_operations_people()
        if not people:
            confirmations_total.labels(outcome="failed").inc()
            log_event(
                logger,
                "confirmation_failed",
                "No active operations person available",
                level=logging.ERROR,
                client_id=str(client.client_id),
            )
            raise AtomicityError("no active operations person available for assignment")

        plan = FulfillmentPlan(
            version_number=version.version_number,
            operations_person_id=self._choose_person(people).person_id,
            items=build_checklist(client, version, self._catalog),
        )

        try:
            history_entry = self._follow_ups.record_transition(entry, fulfillment=plan)
        except AtomicityError:
            # A concurrent confirmation may have won the unique assignment slot
            existing = self._existing(client.client_id)
            if existing is not None:
                return existing
            confirmations_total.labels(outcome="failed").inc()
            raise

        assignment = self._fulfillment.get_assignment(client.client_id)
        if assignment is None:
            raise AtomicityError(f"assignment missing after confirmation of {client.client_id}")

        confirmations_total.labels(outcome=ConfirmationOutcome.created.value).inc()
        items = self._fulfillment.list_checklist(client.client_id)
        log_event(
            logger,
            "confirmation_created",
            f"Client {client.client_id} confirmed on version {version.version_number}",
            client_id=str(client.client_id),
            version_number=version.version_number,
            assignment_id=str(assignment.assignment_id),
            items=len(items),
        )
        return ConfirmationResult(
            outcome=ConfirmationOutcome.created,
            assignment=assignment,
            items=items,
            history_entry=history_entry,
        )
