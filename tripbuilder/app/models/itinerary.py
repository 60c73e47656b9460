"""Itinerary models - day plans, priced packages and cost breakdowns."""

from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from tripbuilder.app.models.common import TransportationType


class Pax(BaseModel):
    """Passenger count."""

    adults: int = Field(..., ge=0)
    children: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.adults + self.children


class ClientProfile(BaseModel):
    """Trip parameters that drive pricing."""

    name: str
    travel_start_date: date
    number_of_days: int = Field(..., ge=1)
    pax: Pax
    transportation_mode: TransportationType
    vehicle_id: str | None = Field(
        None, description="Catalog transportation id for self-drive rentals"
    )

    @property
    def is_self_drive(self) -> bool:
        return self.transportation_mode != TransportationType.cab


class HotelSelection(BaseModel):
    """Lodging chosen for one night."""

    hotel_id: str
    room_type_id: str
    place: str | None = None


class ActivitySelection(BaseModel):
    """Activity and the option chosen for it."""

    activity_id: str
    option_id: str


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class DayPlan(BaseModel):
    """Catalog selections for a single trip day."""

    day: int = Field(..., ge=1)
    sightseeing: list[str] = Field(default_factory=list)
    hotel: HotelSelection | None = None
    activities: list[ActivitySelection] = Field(default_factory=list)
    entry_tickets: list[str] = Field(default_factory=list)
    meals: list[str] = Field(default_factory=list)
    area_id: str | None = None

    @field_validator("sightseeing", "entry_tickets", "meals")
    @classmethod
    def validate_unique_refs(cls, v: list[str]) -> list[str]:
        """Treat reference lists as sets, keeping first-seen order."""
        return _dedupe(v)


def check_day_sequence(day_plans: list[DayPlan], number_of_days: int | None = None) -> None:
    """Ensure day numbers are unique and form 1..N.

    Raises:
        ValueError: If days repeat, skip, or disagree with number_of_days.
    """
    days = sorted(plan.day for plan in day_plans)
    expected = list(range(1, len(day_plans) + 1))
    if days != expected:
        raise ValueError(f"day numbers must be unique and contiguous from 1, got {days}")
    if number_of_days is not None and len(day_plans) != number_of_days:
        raise ValueError(
            f"expected {number_of_days} day plans, got {len(day_plans)}"
        )


class ItineraryPayload(BaseModel):
    """Day plans stored in an itinerary version."""

    day_plans: list[DayPlan]

    @field_validator("day_plans")
    @classmethod
    def validate_days(cls, v: list[DayPlan]) -> list[DayPlan]:
        """Ensure contiguous day numbering and return plans in day order."""
        check_day_sequence(v)
        return sorted(v, key=lambda plan: plan.day)


class CategoryCosts(BaseModel):
    """Cost per category plus their sum."""

    transportation: float = 0
    accommodation: float = 0
    sightseeing: float = 0
    activities: float = 0
    tickets: float = 0
    meals: float = 0
    total: float = 0


class DayCost(BaseModel):
    """One day's contribution to each category."""

    day: int
    costs: CategoryCosts


class CatalogMiss(BaseModel):
    """Day-plan reference that was not found in the catalog and was priced at zero."""

    day: int | None
    kind: str
    ref: str


class CostBreakdown(BaseModel):
    """Full priced breakdown of a package."""

    categories: CategoryCosts
    days: list[DayCost]
    total_base_cost: float
    profit_margin: float
    final_price: float
    exchange_rate: float
    final_price_secondary: float
    catalog_misses: list[CatalogMiss] = Field(default_factory=list)


class Itinerary(BaseModel):
    """Priced package for a client."""

    client: ClientProfile
    day_plans: list[DayPlan]
    total_base_cost: float = Field(..., ge=0)
    profit_margin: float = 0
    final_price: float
    exchange_rate: float = Field(..., gt=0)

    @model_validator(mode="after")
    def validate_itinerary(self) -> "Itinerary":
        """Ensure day plans cover the trip and the final price adds up."""
        check_day_sequence(self.day_plans, self.client.number_of_days)
        self.day_plans.sort(key=lambda plan: plan.day)
        if abs(self.final_price - (self.total_base_cost + self.profit_margin)) > 1e-6:
            raise ValueError("final_price must equal total_base_cost + profit_margin")
        return self

    def payload(self) -> ItineraryPayload:
        """Day plans as a version payload."""
        return ItineraryPayload(day_plans=self.day_plans)
