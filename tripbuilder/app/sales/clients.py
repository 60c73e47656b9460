"""Sales client registration and follow-up queries."""

import dataclasses
import logging
from datetime import date, datetime, time, timedelta
from uuid import UUID

from tripbuilder.app.config import Settings, get_settings
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.repositories import (
    NewSalesClient,
    SalesClientRecord,
    SalesClientRepository,
)
from tripbuilder.app.errors import DuplicateClientError, NotFoundError
from tripbuilder.app.models.common import FollowUpStatus
from tripbuilder.app.utils.logging import log_event
from tripbuilder.app.validation import require_actor, require_text

logger = logging.getLogger(__name__)

INITIAL_REMARKS = "Initial itinerary created"


def parse_follow_up_time(value: str) -> time:
    """Parse an HH:MM follow-up time."""
    return datetime.strptime(value, "%H:%M").time()


class SalesClientService:
    """Registers clients at the start of the funnel and answers sales queries."""

    def __init__(
        self, clients: SalesClientRepository, settings: Settings | None = None
    ) -> None:
        self._clients = clients
        self._settings = settings or get_settings()

    def register(
        self,
        client: NewSalesClient,
        ctx: RequestContext | None,
        *,
        today: date | None = None,
    ) -> tuple[SalesClientRecord, bool]:
        """Register a client, tolerating duplicates.

        A client whose natural key is already registered is not created again;
        the existing record is returned instead.

        Args:
            client: Client fields; follow-up date/time default to tomorrow at
                the configured time
            ctx: Acting user
            today: Reference date for the default follow-up

        Returns:
            (client record, created) where created is False for a duplicate
        """
        actor_id = require_actor(ctx)
        require_text(client.name, "name")
        require_text(client.whatsapp, "whatsapp")

        today = today or date.today()
        if client.next_follow_up_date is None or client.next_follow_up_time is None:
            client = dataclasses.replace(
                client,
                next_follow_up_date=client.next_follow_up_date
                or today + timedelta(days=self._settings.initial_follow_up_delay_days),
                next_follow_up_time=client.next_follow_up_time
                or parse_follow_up_time(self._settings.default_follow_up_time),
            )

        try:
            record = self._clients.create_client(
                client, INITIAL_REMARKS, RequestContext(user_id=actor_id)
            )
        except DuplicateClientError as e:
            existing = self._clients.get_client(e.client_id)
            if existing is None:
                raise
            log_event(
                logger,
                "duplicate_client",
                f"Client already registered: {existing.client_id}",
                client_id=str(existing.client_id),
                sales_person_id=str(client.sales_person_id),
            )
            return existing, False

        log_event(
            logger,
            "client_registered",
            f"Registered client {record.client_id}",
            client_id=str(record.client_id),
            sales_person_id=str(record.sales_person_id),
        )
        return record, True

    def get(self, client_id: UUID) -> SalesClientRecord:
        client = self._clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"sales client not found: {client_id}")
        return client

    def due_follow_ups(self, sales_person_id: UUID, on: date) -> list[SalesClientRecord]:
        """Clients with a follow-up due on a date, earliest time first."""
        return self._clients.list_due_follow_ups(sales_person_id, on)

    def confirmed(self, sales_person_id: UUID) -> list[SalesClientRecord]:
        """Clients who paid the advance."""
        return self._clients.list_by_status(
            sales_person_id, FollowUpStatus.advance_paid_confirmed
        )
