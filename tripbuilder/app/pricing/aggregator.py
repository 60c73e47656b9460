"""Cost aggregation - turns day plans into a category and per-day breakdown.

Pure function of a catalog snapshot, the day plans and the client profile:
- Transportation: self-drive rental per day; zero in cab mode
- Accommodation: consolidated nights x seasonal nightly rate
- Sightseeing: vehicle tier cost per stop in cab mode, flat surcharge otherwise
- Activities: group-based option cost
- Tickets and meals: per-person cost x pax

References to catalog items that no longer exist are priced at zero and
reported in `catalog_misses`; historical day plans may outlive catalog edits.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from tripbuilder.app.config import Settings, get_settings
from tripbuilder.app.models.catalog import CatalogSnapshot
from tripbuilder.app.models.common import CostCategory, TransportationType
from tripbuilder.app.models.itinerary import (
    CatalogMiss,
    CategoryCosts,
    ClientProfile,
    CostBreakdown,
    DayCost,
    DayPlan,
    Itinerary,
)
from tripbuilder.app.pricing.activities import activity_group_cost
from tripbuilder.app.pricing.hotels import consolidate_hotel_stays
from tripbuilder.app.pricing.seasons import resolve_seasonal_price
from tripbuilder.app.pricing.vehicles import vehicle_cost_for_pax
from tripbuilder.app.utils.logging import log_event
from tripbuilder.app.utils.metrics import catalog_misses_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingRules:
    """Flat rates that are not part of the catalog."""

    self_drive_car_surcharge: float = 15.0
    self_drive_scooter_surcharge: float = 8.0
    exchange_rate: float = 83.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "PricingRules":
        return cls(
            self_drive_car_surcharge=settings.self_drive_car_surcharge,
            self_drive_scooter_surcharge=settings.self_drive_scooter_surcharge,
            exchange_rate=settings.default_exchange_rate,
        )

    def sightseeing_surcharge(self, mode: TransportationType) -> float:
        if mode == TransportationType.self_drive_car:
            return self.self_drive_car_surcharge
        if mode == TransportationType.self_drive_scooter:
            return self.self_drive_scooter_surcharge
        return 0.0


@dataclass
class _Accumulator:
    """Running per-category totals for one scope (a day or the whole trip)."""

    values: dict[CostCategory, float] = field(
        default_factory=lambda: {category: 0.0 for category in CostCategory}
    )

    def add(self, category: CostCategory, amount: float) -> None:
        self.values[category] += amount

    def to_costs(self) -> CategoryCosts:
        costs = {category.value: amount for category, amount in self.values.items()}
        return CategoryCosts(**costs, total=sum(self.values.values()))


class _MissRecorder:
    """Collects catalog misses for the breakdown."""

    def __init__(self) -> None:
        self.misses: list[CatalogMiss] = []

    def record(self, day: int | None, kind: str, ref: str) -> None:
        self.misses.append(CatalogMiss(day=day, kind=kind, ref=ref))
        catalog_misses_total.labels(kind=kind).inc()
        log_event(
            logger,
            "catalog_miss",
            f"Skipping {kind} {ref}: not in catalog",
            level=logging.WARNING,
            day=day,
            kind=kind,
            ref=ref,
        )


def convert_to_secondary(amount: float, exchange_rate: float) -> float:
    """Convert a primary-currency amount for secondary-currency display."""
    return amount * exchange_rate


def _price_day(
    plan: DayPlan,
    client: ClientProfile,
    catalog: CatalogSnapshot,
    rules: PricingRules,
    rental_per_day: float,
    misses: _MissRecorder,
) -> _Accumulator:
    day = _Accumulator()
    total_pax = client.pax.total
    mode = client.transportation_mode

    day.add(CostCategory.transportation, rental_per_day)

    if plan.hotel is not None:
        room_type = catalog.room_type(plan.hotel.hotel_id, plan.hotel.room_type_id)
        if room_type is None:
            misses.record(plan.day, "hotel", f"{plan.hotel.hotel_id}/{plan.hotel.room_type_id}")
        else:
            price, _ = resolve_seasonal_price(room_type, client.travel_start_date)
            day.add(CostCategory.accommodation, price)

    for sightseeing_id in plan.sightseeing:
        sightseeing = catalog.sightseeing(sightseeing_id)
        if sightseeing is None:
            misses.record(plan.day, "sightseeing", sightseeing_id)
            continue
        if mode == TransportationType.cab:
            if sightseeing.vehicle_costs is not None:
                day.add(
                    CostCategory.sightseeing,
                    vehicle_cost_for_pax(sightseeing.vehicle_costs, total_pax),
                )
        else:
            day.add(CostCategory.sightseeing, rules.sightseeing_surcharge(mode))

    for selection in plan.activities:
        option = catalog.activity_option(selection.activity_id, selection.option_id)
        if option is None:
            misses.record(plan.day, "activity", f"{selection.activity_id}/{selection.option_id}")
            continue
        day.add(CostCategory.activities, activity_group_cost(option, total_pax))

    for ticket_id in plan.entry_tickets:
        ticket = catalog.entry_ticket(ticket_id)
        if ticket is None:
            misses.record(plan.day, "entry_ticket", ticket_id)
            continue
        day.add(CostCategory.tickets, ticket.cost * total_pax)

    for meal_id in plan.meals:
        meal = catalog.meal(meal_id)
        if meal is None:
            misses.record(plan.day, "meal", meal_id)
            continue
        day.add(CostCategory.meals, meal.cost * total_pax)

    return day


def _rental_per_day(
    client: ClientProfile, catalog: CatalogSnapshot, misses: _MissRecorder
) -> float:
    if not client.is_self_drive:
        return 0.0
    if client.vehicle_id is None:
        return 0.0
    vehicle = catalog.transportation(client.vehicle_id)
    if vehicle is None:
        misses.record(None, "transportation", client.vehicle_id)
        return 0.0
    return vehicle.cost_per_day


def _accommodation_total(
    day_plans: Sequence[DayPlan], client: ClientProfile, catalog: CatalogSnapshot
) -> float:
    total = 0.0
    for (hotel_id, room_type_id), nights in consolidate_hotel_stays(day_plans).items():
        room_type = catalog.room_type(hotel_id, room_type_id)
        if room_type is None:
            continue
        price, _ = resolve_seasonal_price(room_type, client.travel_start_date)
        total += nights * price
    return total


def calculate_cost_breakdown(
    client: ClientProfile,
    day_plans: Sequence[DayPlan],
    catalog: CatalogSnapshot,
    *,
    profit_margin: float = 0.0,
    exchange_rate: float | None = None,
    rules: PricingRules | None = None,
) -> CostBreakdown:
    """Price a set of day plans.

    Args:
        client: Trip parameters (pax, start date, days, transportation mode)
        day_plans: One plan per trip day
        catalog: Catalog snapshot consistent for this call
        profit_margin: Amount added on top of the base cost
        exchange_rate: Secondary-currency rate; defaults to the rules' rate
        rules: Flat surcharges; defaults to values from settings

    Returns:
        Category totals, per-day breakdown and final price
    """
    rules = rules or PricingRules.from_settings(get_settings())
    rate = exchange_rate if exchange_rate is not None else rules.exchange_rate
    ordered = sorted(day_plans, key=lambda plan: plan.day)
    misses = _MissRecorder()

    rental = _rental_per_day(client, catalog, misses)
    # Rental is charged for every trip day, even days without a plan entry
    trip = _Accumulator()
    trip.add(CostCategory.transportation, rental * client.number_of_days)

    days: list[DayCost] = []
    for plan in ordered:
        day = _price_day(plan, client, catalog, rules, rental, misses)
        days.append(DayCost(day=plan.day, costs=day.to_costs()))
        for category in CostCategory:
            if category not in (CostCategory.transportation, CostCategory.accommodation):
                trip.add(category, day.values[category])

    trip.add(CostCategory.accommodation, _accommodation_total(ordered, client, catalog))

    categories = trip.to_costs()
    final_price = categories.total + profit_margin

    return CostBreakdown(
        categories=categories,
        days=days,
        total_base_cost=categories.total,
        profit_margin=profit_margin,
        final_price=final_price,
        exchange_rate=rate,
        final_price_secondary=convert_to_secondary(final_price, rate),
        catalog_misses=misses.misses,
    )


def price_itinerary(
    client: ClientProfile,
    day_plans: Sequence[DayPlan],
    catalog: CatalogSnapshot,
    *,
    profit_margin: float = 0.0,
    exchange_rate: float | None = None,
    rules: PricingRules | None = None,
) -> tuple[Itinerary, CostBreakdown]:
    """Price day plans and build the resulting Itinerary."""
    breakdown = calculate_cost_breakdown(
        client,
        day_plans,
        catalog,
        profit_margin=profit_margin,
        exchange_rate=exchange_rate,
        rules=rules,
    )
    itinerary = Itinerary(
        client=client,
        day_plans=list(day_plans),
        total_base_cost=breakdown.total_base_cost,
        profit_margin=profit_margin,
        final_price=breakdown.final_price,
        exchange_rate=breakdown.exchange_rate,
    )
    return itinerary, breakdown


def recalculate_itinerary_costs(
    itinerary: Itinerary,
    catalog: CatalogSnapshot,
    rules: PricingRules | None = None,
) -> tuple[float, float]:
    """Re-price a stored itinerary against the current catalog.

    Returns:
        (updated_base_cost, updated_final_price) using the stored profit margin
    """
    breakdown = calculate_cost_breakdown(
        itinerary.client,
        itinerary.day_plans,
        catalog,
        profit_margin=itinerary.profit_margin,
        exchange_rate=itinerary.exchange_rate,
        rules=rules,
    )
    return breakdown.total_base_cost, breakdown.final_price


def should_update_costs(
    stored_base_cost: float, calculated_base_cost: float, tolerance: float = 0.01
) -> bool:
    """True when a stored base cost drifted from the recalculated one."""
    return abs(stored_base_cost - calculated_base_cost) > tolerance
