"""FastAPI dependencies wiring repositories and services."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from tripbuilder.app.adapters.catalog import get_catalog
from tripbuilder.app.config import Settings, get_settings
from tripbuilder.app.db.engine import get_session
from tripbuilder.app.db.repositories import (
    FollowUpRepository,
    FulfillmentRepository,
    ItineraryVersionStore,
    SalesClientRepository,
)
from tripbuilder.app.db.sql_repositories import (
    SqlFollowUpRepository,
    SqlFulfillmentRepository,
    SqlItineraryVersionStore,
    SqlSalesClientRepository,
)
from tripbuilder.app.models.catalog import CatalogSnapshot
from tripbuilder.app.sales.clients import SalesClientService
from tripbuilder.app.sales.confirmation import BookingConfirmationTrigger
from tripbuilder.app.sales.follow_up import FollowUpStateMachine
from tripbuilder.app.sales.versions import ItineraryVersionService

SessionDep = Annotated[Session, Depends(get_session)]


def get_client_repository(session: SessionDep) -> SalesClientRepository:
    return SqlSalesClientRepository(session)


def get_version_store(session: SessionDep) -> ItineraryVersionStore:
    return SqlItineraryVersionStore(session)


def get_follow_up_repository(session: SessionDep) -> FollowUpRepository:
    return SqlFollowUpRepository(session)


def get_fulfillment_repository(session: SessionDep) -> FulfillmentRepository:
    return SqlFulfillmentRepository(session)


def get_client_service(
    clients: Annotated[SalesClientRepository, Depends(get_client_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SalesClientService:
    return SalesClientService(clients, settings)


def get_version_service(
    clients: Annotated[SalesClientRepository, Depends(get_client_repository)],
    versions: Annotated[ItineraryVersionStore, Depends(get_version_store)],
) -> ItineraryVersionService:
    return ItineraryVersionService(clients, versions)


def get_state_machine(
    clients: Annotated[SalesClientRepository, Depends(get_client_repository)],
    versions: Annotated[ItineraryVersionStore, Depends(get_version_store)],
    follow_ups: Annotated[FollowUpRepository, Depends(get_follow_up_repository)],
    fulfillment: Annotated[FulfillmentRepository, Depends(get_fulfillment_repository)],
    catalog: Annotated[CatalogSnapshot, Depends(get_catalog)],
) -> FollowUpStateMachine:
    """State machine with the confirmation trigger over the same repositories."""
    trigger = BookingConfirmationTrigger(follow_ups, fulfillment, catalog)
    return FollowUpStateMachine(clients, versions, follow_ups, trigger)
