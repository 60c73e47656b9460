"""Unit tests for season windows, vehicle tiers, activity groups and hotel nights."""

from datetime import date

import pytest

from tripbuilder.app.models.catalog import ActivityOption, RoomType, VehicleCostProfile
from tripbuilder.app.models.common import Season, VehicleTier
from tripbuilder.app.models.itinerary import DayPlan, HotelSelection
from tripbuilder.app.pricing.activities import activity_group_cost, groups_needed
from tripbuilder.app.pricing.hotels import consolidate_hotel_stays
from tripbuilder.app.pricing.seasons import resolve_seasonal_price, season_for
from tripbuilder.app.pricing.vehicles import resolve_vehicle_tier, vehicle_cost_for_pax


@pytest.mark.parametrize(
    ("travel_date", "expected"),
    [
        (date(2026, 12, 19), Season.off),
        (date(2026, 12, 20), Season.peak),
        (date(2026, 12, 31), Season.peak),
        (date(2027, 1, 1), Season.peak),
        (date(2027, 1, 5), Season.peak),
        (date(2027, 1, 6), Season.off),
        (date(2026, 6, 30), Season.off),
        (date(2026, 7, 1), Season.mid),
        (date(2026, 8, 31), Season.mid),
        (date(2026, 9, 1), Season.off),
    ],
)
def test_season_boundaries(travel_date: date, expected: Season) -> None:
    """Window edges are inclusive and the peak window wraps the new year."""
    assert season_for(travel_date) == expected


def test_seasonal_price_picks_matching_rate() -> None:
    room = RoomType(
        id="deluxe", name="Deluxe", peak_season_price=100, season_price=80, off_season_price=60
    )

    assert resolve_seasonal_price(room, date(2026, 12, 25)) == (100, Season.peak)
    assert resolve_seasonal_price(room, date(2026, 7, 15)) == (80, Season.mid)
    assert resolve_seasonal_price(room, date(2026, 3, 10)) == (60, Season.off)


@pytest.mark.parametrize(
    ("pax", "expected"),
    [
        (1, VehicleTier.car),
        (6, VehicleTier.car),
        (7, VehicleTier.van),
        (14, VehicleTier.van),
        (15, VehicleTier.minibus),
        (20, VehicleTier.minibus),
        (21, VehicleTier.bus),
        (45, VehicleTier.bus),
    ],
)
def test_vehicle_tier_brackets(pax: int, expected: VehicleTier) -> None:
    assert resolve_vehicle_tier(pax) == expected


def test_vehicle_cost_uses_tier_rate() -> None:
    profile = VehicleCostProfile(car=50, van=80, minibus=120, bus=200)

    assert vehicle_cost_for_pax(profile, 4) == 50
    assert vehicle_cost_for_pax(profile, 9) == 80
    assert vehicle_cost_for_pax(profile, 30) == 200


def test_activity_groups_round_up() -> None:
    """capacity=4, pax=9 bills three groups."""
    option = ActivityOption(id="boat-4", name="Shared boat", cost=30, capacity=4)

    assert groups_needed(4, 9) == 3
    assert activity_group_cost(option, 9) == 90


def test_activity_single_group_when_capacity_suffices() -> None:
    """capacity=10, pax=9 bills the full flat cost once, no split."""
    option = ActivityOption(id="boat-10", name="Private boat", cost=250, capacity=10)

    assert groups_needed(10, 9) == 1
    assert activity_group_cost(option, 9) == 250


def test_activity_exact_multiple() -> None:
    assert groups_needed(4, 8) == 2


def test_hotel_nights_counted_per_occurrence() -> None:
    """A, B, A counts two nights for A even though they are not contiguous."""
    a = HotelSelection(hotel_id="hotel-a", room_type_id="deluxe")
    b = HotelSelection(hotel_id="hotel-b", room_type_id="std")
    plans = [DayPlan(day=1, hotel=a), DayPlan(day=2, hotel=b), DayPlan(day=3, hotel=a)]

    assert consolidate_hotel_stays(plans) == {("hotel-a", "deluxe"): 2, ("hotel-b", "std"): 1}


def test_hotel_consolidation_skips_days_without_lodging() -> None:
    plans = [DayPlan(day=1), DayPlan(day=2, hotel=HotelSelection(hotel_id="h", room_type_id="r"))]

    assert consolidate_hotel_stays(plans) == {("h", "r"): 1}
