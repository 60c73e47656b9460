"""Integration tests for atomic version numbering under concurrent writers."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from tripbuilder.app.db.context import RequestContext
from tripbuilder.app.db.inmemory import (
    InMemoryItineraryVersionStore,
    InMemorySalesClientRepository,
)
from tripbuilder.app.db.repositories import NewSalesClient
from tripbuilder.app.errors import NotFoundError, ValidationFailure
from tripbuilder.app.models.common import FollowUpStatus
from tripbuilder.app.models.itinerary import ItineraryPayload


def test_concurrent_versions_are_gapless(
    client_repo: InMemorySalesClientRepository,
    version_store: InMemoryItineraryVersionStore,
    new_client: NewSalesClient,
    payload: ItineraryPayload,
    ctx: RequestContext,
) -> None:
    """N simultaneous writers get exactly current+1 .. current+N."""
    client = client_repo.create_client(new_client, "Initial itinerary created", ctx)
    version_store.create_version(
        client.client_id, payload, 400, "Seed", FollowUpStatus.itinerary_created, ctx.user_id
    )
    writers = 25

    def write(i: int) -> int:
        version = version_store.create_version(
            client.client_id,
            payload,
            400 + i,
            f"Edit {i}",
            FollowUpStatus.itinerary_created,
            ctx.user_id,
        )
        return version.version_number

    with ThreadPoolExecutor(max_workers=8) as pool:
        numbers = list(pool.map(write, range(writers)))

    assert sorted(numbers) == list(range(2, writers + 2))
    listed = [v.version_number for v in version_store.list_versions(client.client_id)]
    assert listed == list(range(writers + 1, 0, -1))


def test_versions_are_immutable_snapshots(
    client_repo: InMemorySalesClientRepository,
    version_store: InMemoryItineraryVersionStore,
    new_client: NewSalesClient,
    payload: ItineraryPayload,
    ctx: RequestContext,
) -> None:
    client = client_repo.create_client(new_client, "Initial itinerary created", ctx)
    version = version_store.create_version(
        client.client_id, payload, 470, "First", FollowUpStatus.itinerary_created, ctx.user_id
    )

    payload.day_plans[0].sightseeing.append("old-goa-churches")

    stored = version_store.get_version(client.client_id, 1)
    assert stored is not None
    assert stored.payload.day_plans[0].sightseeing == ["fort-aguada"]
    assert version.version_number == 1
    updated = client_repo.get_client(client.client_id)
    assert updated is not None
    assert updated.total_cost == 470


def test_read_results_do_not_alias_stored_versions(
    client_repo: InMemorySalesClientRepository,
    version_store: InMemoryItineraryVersionStore,
    new_client: NewSalesClient,
    payload: ItineraryPayload,
    ctx: RequestContext,
) -> None:
    client = client_repo.create_client(new_client, "Initial itinerary created", ctx)
    created = version_store.create_version(
        client.client_id, payload, 470, "First", FollowUpStatus.itinerary_created, ctx.user_id
    )
    read = version_store.get_version(client.client_id, 1)
    latest = version_store.latest_version(client.client_id)
    assert read is not None
    assert latest is not None

    created.payload.day_plans[0].sightseeing.append("created")
    read.payload.day_plans[0].sightseeing.append("read")
    latest.payload.day_plans[1].meals.append("latest")
    version_store.list_versions(client.client_id)[0].payload.day_plans.pop()

    stored = version_store.get_version(client.client_id, 1)
    assert stored is not None
    assert stored.payload.day_plans[0].sightseeing == ["fort-aguada"]
    assert stored.payload.day_plans[1].meals == ["beach-dinner"]
    assert len(stored.payload.day_plans) == 3


def test_create_version_rejects_bad_input(
    client_repo: InMemorySalesClientRepository,
    version_store: InMemoryItineraryVersionStore,
    new_client: NewSalesClient,
    payload: ItineraryPayload,
    ctx: RequestContext,
) -> None:
    client = client_repo.create_client(new_client, "Initial itinerary created", ctx)

    with pytest.raises(ValidationFailure):
        version_store.create_version(
            client.client_id, payload, 470, "", FollowUpStatus.itinerary_created, ctx.user_id
        )
    with pytest.raises(NotFoundError):
        version_store.create_version(
            ctx.user_id, payload, 470, "Edit", FollowUpStatus.itinerary_created, ctx.user_id
        )

    assert version_store.latest_version(client.client_id) is None
