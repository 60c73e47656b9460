"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import Generator
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tripbuilder.app.adapters.catalog import load_catalog
from tripbuilder.app.config import DEFAULT_CATALOG_PATH
from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.inmemory import (
    InMemoryDatabase,
    InMemoryFollowUpRepository,
    InMemoryFulfillmentRepository,
    InMemoryItineraryVersionStore,
    InMemorySalesClientRepository,
)
from tripbuilder.app.db.models import Base
from tripbuilder.app.db.repositories import NewSalesClient
from tripbuilder.app.models.catalog import CatalogSnapshot
from tripbuilder.app.models.common import TransportationType
from tripbuilder.app.models.itinerary import (
    ActivitySelection,
    DayPlan,
    HotelSelection,
    ItineraryPayload,
)


@pytest.fixture
def catalog() -> CatalogSnapshot:
    """Catalog shipped with the package."""
    return load_catalog(DEFAULT_CATALOG_PATH)


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext(user_id=uuid.uuid4())


@pytest.fixture
def new_client(ctx: RequestContext) -> NewSalesClient:
    """Nine travellers, three days from Christmas, by cab."""
    return NewSalesClient(
        sales_person_id=ctx.user_id,
        name="Asha Rao",
        country_code="+91",
        whatsapp="9876543210",
        email="asha@example.com",
        travel_date=date(2026, 12, 25),
        number_of_days=3,
        number_of_adults=7,
        number_of_children=2,
        transportation_mode=TransportationType.cab,
    )


@pytest.fixture
def payload() -> ItineraryPayload:
    """Three nights at one hotel, a fort visit and a dive."""
    hotel = HotelSelection(hotel_id="hotel-seaview", room_type_id="deluxe", place="Baga")
    return ItineraryPayload(
        day_plans=[
            DayPlan(day=1, hotel=hotel, sightseeing=["fort-aguada"]),
            DayPlan(
                day=2,
                hotel=hotel,
                activities=[ActivitySelection(activity_id="scuba", option_id="boat-4")],
                meals=["beach-dinner"],
            ),
            DayPlan(day=3, hotel=hotel, entry_tickets=["museum"]),
        ]
    )


@pytest.fixture
def memory_db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def client_repo(memory_db: InMemoryDatabase) -> InMemorySalesClientRepository:
    return InMemorySalesClientRepository(memory_db)


@pytest.fixture
def version_store(memory_db: InMemoryDatabase) -> InMemoryItineraryVersionStore:
    return InMemoryItineraryVersionStore(memory_db)


@pytest.fixture
def follow_up_repo(memory_db: InMemoryDatabase) -> InMemoryFollowUpRepository:
    return InMemoryFollowUpRepository(memory_db)


@pytest.fixture
def fulfillment_repo(memory_db: InMemoryDatabase) -> InMemoryFulfillmentRepository:
    return InMemoryFulfillmentRepository(memory_db)


@pytest.fixture
def sqlite_session() -> Generator[Session, None, None]:
    """Session on a fresh in-memory SQLite database.

    Usage:
        def test_something(sqlite_session):
            repo = SqlSalesClientRepository(sqlite_session)
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)

    with factory() as session:
        yield session

    Base.metadata.drop_all(engine)
    engine.dispose()
