"""Follow-up state machine - validates and records sales funnel transitions."""

import logging
from dataclasses import dataclass
from datetime import date, time
from uuid import UUID

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.repositories import (
    FollowUpEntryRecord,
    FollowUpRepository,
    ItineraryVersionStore,
    NewFollowUpEntry,
    SalesClientRecord,
    SalesClientRepository,
)
from tripbuilder.app.errors import NotFoundError, ValidationFailure
from tripbuilder.app.models.common import FollowUpStatus
from tripbuilder.app.sales.confirmation import BookingConfirmationTrigger, ConfirmationResult
from tripbuilder.app.sales.funnel import (
    allowed_next,
    check_transition,
    requires_follow_up_scheduling,
    suggest_next,
)
from tripbuilder.app.utils.logging import log_event
from tripbuilder.app.utils.metrics import funnel_transitions_total
from tripbuilder.app.validation import require_actor, require_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FollowUpSuggestion:
    """Suggested and allowed next statuses for a client."""

    current: FollowUpStatus
    suggested: FollowUpStatus
    allowed: tuple[FollowUpStatus, ...]
    requires_scheduling: bool


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a funnel transition."""

    client: SalesClientRecord
    entry: FollowUpEntryRecord | None
    confirmation: ConfirmationResult | None = None


class FollowUpStateMachine:
    """Applies funnel transitions for sales clients.

    Every transition writes exactly one history entry together with the
    client's new status. Transitions into the confirmed status go through
    the BookingConfirmationTrigger so that the assignment is created in the
    same unit.
    """

    def __init__(
        self,
        clients: SalesClientRepository,
        versions: ItineraryVersionStore,
        follow_ups: FollowUpRepository,
        confirmation: BookingConfirmationTrigger,
    ) -> None:
        self._clients = clients
        self._versions = versions
        self._follow_ups = follow_ups
        self._confirmation = confirmation

    def _get_client(self, client_id: UUID) -> SalesClientRecord:
        client = self._clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"sales client not found: {client_id}")
        return client

    def suggest(self, client_id: UUID) -> FollowUpSuggestion:
        """Suggested next status for a client, with the allowed choices."""
        client = self._get_client(client_id)
        suggested = suggest_next(client.current_status)
        return FollowUpSuggestion(
            current=client.current_status,
            suggested=suggested,
            allowed=allowed_next(client.current_status),
            requires_scheduling=requires_follow_up_scheduling(suggested),
        )

    def history(self, client_id: UUID) -> list[FollowUpEntryRecord]:
        """Transition history, newest first."""
        self._get_client(client_id)
        return self._follow_ups.list_history(client_id)

    def transition(
        self,
        client_id: UUID,
        status: FollowUpStatus,
        remarks: str | None,
        ctx: RequestContext | None,
        *,
        next_follow_up_date: date | None = None,
        next_follow_up_time: time | None = None,
        version_number: int | None = None,
    ) -> TransitionResult:
        """Move a client to a new funnel status.

        Args:
            client_id: Client to update
            status: Target status
            remarks: Mandatory remarks for the history entry
            ctx: Acting user
            next_follow_up_date: Required unless the target is absorbing
            next_follow_up_time: Required unless the target is absorbing
            version_number: Version selected for fulfillment; required when
                confirming, otherwise defaults to the latest version

        Raises:
            ValidationFailure: Missing remarks, schedule, version or actor
            InvalidTransitionError: Target not allowed from current status
            NotFoundError: Unknown client or version
            AtomicityError: Confirmation could not create the assignment
        """
        actor_id = require_actor(ctx)
        remarks = require_text(remarks, "remarks")

        scheduled = requires_follow_up_scheduling(status)
        if scheduled:
            if next_follow_up_date is None:
                raise ValidationFailure("next_follow_up_date")
            if next_follow_up_time is None:
                raise ValidationFailure("next_follow_up_time")
        else:
            next_follow_up_date = None
            next_follow_up_time = None

        confirming = status == FollowUpStatus.advance_paid_confirmed
        if confirming and version_number is None:
            raise ValidationFailure(
                "version_number", "version_number must name the version to fulfil"
            )

        client = self._get_client(client_id)

        # Early rejection; repositories re-check against the locked row
        check_transition(client.current_status, status, reconfirm=confirming)

        if version_number is not None:
            version = self._versions.get_version(client_id, version_number)
            if version is None:
                raise NotFoundError(f"version {version_number} not found for {client_id}")
        else:
            version = self._versions.latest_version(client_id)

        entry = NewFollowUpEntry(
            client_id=client_id,
            sales_person_id=client.sales_person_id,
            status=status,
            remarks=remarks,
            next_follow_up_date=next_follow_up_date,
            next_follow_up_time=next_follow_up_time,
            itinerary_version_number=version.version_number if version is not None else None,
            created_by=actor_id,
        )

        if confirming:
            if version is None:
                raise NotFoundError(f"version {version_number} not found for {client_id}")
            confirmation = self._confirmation.confirm(client, version, entry)
            return TransitionResult(
                client=self._get_client(client_id),
                entry=confirmation.history_entry,
                confirmation=confirmation,
            )

        record = self._follow_ups.record_transition(entry)
        funnel_transitions_total.labels(status=status.value).inc()
        log_event(
            logger,
            "funnel_transition",
            f"Client {client_id}: {client.current_status.value} -> {status.value}",
            client_id=str(client_id),
            from_status=client.current_status.value,
            to_status=status.value,
            version_number=entry.itinerary_version_number,
            actor_id=str(actor_id),
        )
        return TransitionResult(client=self._get_client(client_id), entry=record)
