"""Unit tests for cost aggregation."""

import logging
from datetime import date

import pytest

from tripbuilder.app.models.catalog import (
    Activity,
    ActivityOption,
    CatalogSnapshot,
    Hotel,
    RoomType,
    Sightseeing,
    VehicleCostProfile,
)
from tripbuilder.app.models.common import TransportationType
from tripbuilder.app.models.itinerary import (
    ActivitySelection,
    ClientProfile,
    DayPlan,
    HotelSelection,
    Pax,
)
from tripbuilder.app.pricing.aggregator import (
    PricingRules,
    calculate_cost_breakdown,
    convert_to_secondary,
    price_itinerary,
    recalculate_itinerary_costs,
    should_update_costs,
)

RULES = PricingRules(self_drive_car_surcharge=15, self_drive_scooter_surcharge=8, exchange_rate=83)


@pytest.fixture
def scenario_catalog() -> CatalogSnapshot:
    """Peak 100 / mid 80 / off 60 room, a stop costing 50 for a party of nine, a 30 dive."""
    return CatalogSnapshot(
        hotels=(
            Hotel(
                id="h1",
                name="Seaview",
                room_types=(
                    RoomType(
                        id="r1",
                        name="Deluxe",
                        peak_season_price=100,
                        season_price=80,
                        off_season_price=60,
                    ),
                ),
            ),
        ),
        sightseeings=(
            Sightseeing(
                id="s1",
                name="Fort",
                vehicle_costs=VehicleCostProfile(car=40, van=50, minibus=90, bus=150),
            ),
        ),
        activities=(
            Activity(
                id="a1",
                name="Dive",
                options=(ActivityOption(id="o1", name="Shared", cost=30, capacity=4),),
            ),
        ),
    )


def _client(
    mode: TransportationType = TransportationType.cab,
    vehicle_id: str | None = None,
    adults: int = 9,
) -> ClientProfile:
    return ClientProfile(
        name="Test",
        travel_start_date=date(2026, 12, 25),
        number_of_days=3,
        pax=Pax(adults=adults),
        transportation_mode=mode,
        vehicle_id=vehicle_id,
    )


def _scenario_plans() -> list[DayPlan]:
    hotel = HotelSelection(hotel_id="h1", room_type_id="r1")
    return [
        DayPlan(day=1, hotel=hotel, sightseeing=["s1"]),
        DayPlan(
            day=2, hotel=hotel, activities=[ActivitySelection(activity_id="a1", option_id="o1")]
        ),
        DayPlan(day=3, hotel=hotel),
    ]


def test_end_to_end_scenario(scenario_catalog: CatalogSnapshot) -> None:
    """Nine travellers, three peak nights, one stop, one dive: 300 + 50 + 90."""
    breakdown = calculate_cost_breakdown(
        _client(), _scenario_plans(), scenario_catalog, rules=RULES
    )

    assert breakdown.categories.accommodation == 300
    assert breakdown.categories.sightseeing == 50
    assert breakdown.categories.activities == 90
    assert breakdown.categories.transportation == 0
    assert breakdown.categories.tickets == 0
    assert breakdown.categories.meals == 0
    assert breakdown.total_base_cost == 440
    assert breakdown.final_price == 440
    assert breakdown.catalog_misses == []


def test_repeated_activity_is_charged_every_day(scenario_catalog: CatalogSnapshot) -> None:
    """Dive on days 1 and 3 for nine: two days of ceil(9 / 4) boats at 30."""
    dive = ActivitySelection(activity_id="a1", option_id="o1")
    plans = [
        DayPlan(day=1, activities=[dive]),
        DayPlan(day=2),
        DayPlan(day=3, activities=[dive]),
    ]

    breakdown = calculate_cost_breakdown(_client(), plans, scenario_catalog, rules=RULES)

    assert breakdown.categories.activities == 2 * 30 * 3
    assert [d.costs.activities for d in breakdown.days] == [90, 0, 90]


def test_alternating_hotels_priced_per_night(scenario_catalog: CatalogSnapshot) -> None:
    """Stays A, B, A cost two nights at A plus one at B."""
    palms = Hotel(
        id="h2",
        name="Palms",
        room_types=(
            RoomType(
                id="r2",
                name="Standard",
                peak_season_price=70,
                season_price=55,
                off_season_price=40,
            ),
        ),
    )
    catalog = scenario_catalog.model_copy(
        update={"hotels": (*scenario_catalog.hotels, palms)}
    )
    seaview = HotelSelection(hotel_id="h1", room_type_id="r1")
    plans = [
        DayPlan(day=1, hotel=seaview),
        DayPlan(day=2, hotel=HotelSelection(hotel_id="h2", room_type_id="r2")),
        DayPlan(day=3, hotel=seaview),
    ]

    breakdown = calculate_cost_breakdown(_client(), plans, catalog, rules=RULES)

    assert breakdown.categories.accommodation == 2 * 100 + 1 * 70
    assert [d.costs.accommodation for d in breakdown.days] == [100, 70, 100]
    assert breakdown.total_base_cost == 270


def test_per_day_breakdown_sums_to_total(scenario_catalog: CatalogSnapshot) -> None:
    breakdown = calculate_cost_breakdown(
        _client(), _scenario_plans(), scenario_catalog, rules=RULES
    )

    assert [d.day for d in breakdown.days] == [1, 2, 3]
    assert breakdown.days[0].costs.total == 150
    assert breakdown.days[1].costs.total == 190
    assert breakdown.days[2].costs.total == 100
    assert sum(d.costs.total for d in breakdown.days) == breakdown.total_base_cost


def test_profit_margin_and_secondary_currency(scenario_catalog: CatalogSnapshot) -> None:
    breakdown = calculate_cost_breakdown(
        _client(),
        _scenario_plans(),
        scenario_catalog,
        profit_margin=30,
        exchange_rate=80,
        rules=RULES,
    )

    assert breakdown.final_price == 470
    assert breakdown.exchange_rate == 80
    assert breakdown.final_price_secondary == 37600


def test_default_exchange_rate_from_rules(scenario_catalog: CatalogSnapshot) -> None:
    breakdown = calculate_cost_breakdown(
        _client(), _scenario_plans(), scenario_catalog, rules=RULES
    )

    assert breakdown.exchange_rate == 83
    assert breakdown.final_price_secondary == convert_to_secondary(440, 83)


def test_tickets_and_meals_per_person(catalog: CatalogSnapshot) -> None:
    plans = [
        DayPlan(day=1, entry_tickets=["museum"], meals=["beach-dinner"]),
        DayPlan(day=2),
        DayPlan(day=3),
    ]

    breakdown = calculate_cost_breakdown(_client(adults=4), plans, catalog, rules=RULES)

    assert breakdown.categories.tickets == 8
    assert breakdown.categories.meals == 48


def test_self_drive_rental_and_sightseeing_surcharge(catalog: CatalogSnapshot) -> None:
    """Rental is charged per trip day; each stop adds the flat car surcharge."""
    client = _client(
        mode=TransportationType.self_drive_car, vehicle_id="rental-swift", adults=2
    )
    plans = [
        DayPlan(day=1, sightseeing=["fort-aguada", "old-goa-churches"]),
        DayPlan(day=2),
        DayPlan(day=3),
    ]

    breakdown = calculate_cost_breakdown(client, plans, catalog, rules=RULES)

    assert breakdown.categories.transportation == 35 * 3
    assert breakdown.categories.sightseeing == 30
    assert breakdown.days[0].costs.transportation == 35


def test_scooter_surcharge(catalog: CatalogSnapshot) -> None:
    client = _client(
        mode=TransportationType.self_drive_scooter, vehicle_id="rental-activa", adults=2
    )
    plans = [DayPlan(day=1, sightseeing=["fort-aguada"]), DayPlan(day=2), DayPlan(day=3)]

    breakdown = calculate_cost_breakdown(client, plans, catalog, rules=RULES)

    assert breakdown.categories.sightseeing == 8
    assert breakdown.categories.transportation == 24


def test_cab_mode_has_no_rental(catalog: CatalogSnapshot) -> None:
    breakdown = calculate_cost_breakdown(
        _client(vehicle_id="rental-swift"),
        [DayPlan(day=1), DayPlan(day=2), DayPlan(day=3)],
        catalog,
        rules=RULES,
    )

    assert breakdown.categories.transportation == 0


def test_catalog_miss_is_skipped_and_reported(
    scenario_catalog: CatalogSnapshot, caplog: pytest.LogCaptureFixture
) -> None:
    """Unknown references price at zero without raising."""
    plans = _scenario_plans()
    plans[0] = DayPlan(
        day=1,
        hotel=HotelSelection(hotel_id="h1", room_type_id="r1"),
        sightseeing=["s1", "gone"],
        entry_tickets=["deleted-ticket"],
    )
    plans[2] = DayPlan(day=3, hotel=HotelSelection(hotel_id="closed", room_type_id="r1"))

    with caplog.at_level(logging.WARNING):
        breakdown = calculate_cost_breakdown(_client(), plans, scenario_catalog, rules=RULES)

    assert breakdown.total_base_cost == 200 + 50 + 90
    kinds = {(m.day, m.kind, m.ref) for m in breakdown.catalog_misses}
    assert (1, "sightseeing", "gone") in kinds
    assert (1, "entry_ticket", "deleted-ticket") in kinds
    assert (3, "hotel", "closed/r1") in kinds
    assert any("not in catalog" in r.getMessage() for r in caplog.records)


def test_missing_rental_vehicle_is_a_trip_level_miss(catalog: CatalogSnapshot) -> None:
    client = _client(mode=TransportationType.self_drive_car, vehicle_id="sold-car")

    breakdown = calculate_cost_breakdown(
        client, [DayPlan(day=1), DayPlan(day=2), DayPlan(day=3)], catalog, rules=RULES
    )

    assert breakdown.categories.transportation == 0
    assert breakdown.catalog_misses[0].day is None
    assert breakdown.catalog_misses[0].kind == "transportation"


def test_price_itinerary_builds_consistent_itinerary(scenario_catalog: CatalogSnapshot) -> None:
    itinerary, breakdown = price_itinerary(
        _client(), _scenario_plans(), scenario_catalog, profit_margin=25, rules=RULES
    )

    assert itinerary.total_base_cost == 440
    assert itinerary.final_price == 465
    assert itinerary.final_price == breakdown.final_price
    assert [p.day for p in itinerary.payload().day_plans] == [1, 2, 3]


def test_recalculate_uses_current_catalog_and_stored_margin(
    scenario_catalog: CatalogSnapshot,
) -> None:
    itinerary, _ = price_itinerary(
        _client(), _scenario_plans(), scenario_catalog, profit_margin=25, rules=RULES
    )
    cheaper = scenario_catalog.model_copy(update={"activities": ()})

    base, final = recalculate_itinerary_costs(itinerary, cheaper, rules=RULES)

    assert base == 350
    assert final == 375
    assert should_update_costs(itinerary.total_base_cost, base)


def test_should_update_costs_tolerance() -> None:
    assert not should_update_costs(470.0, 470.005)
    assert should_update_costs(470.0, 470.02)
    assert not should_update_costs(470.0, 470.5, tolerance=1.0)
