"""Itinerary version service - saves numbered snapshots of a client's package."""

import logging
from uuid import UUID

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.repositories import (
    ItineraryVersionRecord,
    ItineraryVersionStore,
    SalesClientRepository,
)
from tripbuilder.app.errors import NotFoundError
from tripbuilder.app.models.itinerary import ItineraryPayload
from tripbuilder.app.utils.logging import log_event
from tripbuilder.app.utils.metrics import itinerary_versions_total
from tripbuilder.app.validation import require_actor, require_text

logger = logging.getLogger(__name__)


class ItineraryVersionService:
    """Creates and reads itinerary versions.

    The client's current funnel status is captured on each new version.
    """

    def __init__(self, clients: SalesClientRepository, versions: ItineraryVersionStore) -> None:
        self._clients = clients
        self._versions = versions

    def save_version(
        self,
        client_id: UUID,
        payload: ItineraryPayload,
        total_cost: float,
        change_description: str | None,
        ctx: RequestContext | None,
    ) -> ItineraryVersionRecord:
        """Persist the next version of a client's itinerary.

        Args:
            client_id: Client the itinerary belongs to
            payload: Day plans to snapshot
            total_cost: Final price of the snapshot
            change_description: Mandatory summary of what changed
            ctx: Acting user

        Returns:
            Created version with its assigned number

        Raises:
            ValidationFailure: Blank change description or missing actor
            NotFoundError: Unknown client
            AtomicityError: Version number could not be assigned atomically
        """
        actor_id = require_actor(ctx)
        change_description = require_text(change_description, "change_description")

        client = self._clients.get_client(client_id)
        if client is None:
            raise NotFoundError(f"sales client not found: {client_id}")

        version = self._versions.create_version(
            client_id,
            payload,
            total_cost,
            change_description,
            client.current_status,
            actor_id,
        )
        itinerary_versions_total.inc()
        log_event(
            logger,
            "version_created",
            f"Created version {version.version_number} for client {client_id}",
            client_id=str(client_id),
            version_number=version.version_number,
            total_cost=total_cost,
            follow_up_status=client.current_status.value,
            actor_id=str(actor_id),
        )
        return version

    def list_versions(self, client_id: UUID) -> list[ItineraryVersionRecord]:
        """All versions, newest first."""
        if self._clients.get_client(client_id) is None:
            raise NotFoundError(f"sales client not found: {client_id}")
        return self._versions.list_versions(client_id)

    def latest_version(self, client_id: UUID) -> ItineraryVersionRecord:
        """Highest-numbered version.

        Raises:
            NotFoundError: Unknown client or no versions yet
        """
        version = self._versions.latest_version(client_id)
        if version is None:
            raise NotFoundError(f"no versions for client {client_id}")
        return version

    def get_version(self, client_id: UUID, version_number: int) -> ItineraryVersionRecord:
        version = self._versions.get_version(client_id, version_number)
        if version is None:
            raise NotFoundError(f"version {version_number} not found for {client_id}")
        return version
