"""Catalog models - read-only inputs to pricing."""

from pydantic import BaseModel, ConfigDict, Field

from tripbuilder.app.models.common import MealType, TransportationType


class CatalogModel(BaseModel):
    """Base for catalog entities; instances are never mutated by the core."""

    model_config = ConfigDict(frozen=True)


class RoomType(CatalogModel):
    """Room type with three nightly rates."""

    id: str
    name: str
    peak_season_price: float = Field(0, ge=0)
    season_price: float = Field(0, ge=0)
    off_season_price: float = Field(0, ge=0)


class Hotel(CatalogModel):
    """Hotel and its room types."""

    id: str
    name: str
    place: str = ""
    star_category: str | None = None
    room_types: tuple[RoomType, ...] = ()
    area_id: str | None = None


class VehicleCostProfile(CatalogModel):
    """Flat shared-transport cost per vehicle class."""

    car: float = Field(0, ge=0)
    van: float = Field(0, ge=0)
    minibus: float = Field(0, ge=0)
    bus: float = Field(0, ge=0)


class Sightseeing(CatalogModel):
    """Sightseeing stop."""

    id: str
    name: str
    description: str = ""
    transportation_mode: TransportationType = TransportationType.cab
    vehicle_costs: VehicleCostProfile | None = None
    area_id: str | None = None


class ActivityOption(CatalogModel):
    """Priced option of an activity; cost covers up to `capacity` people."""

    id: str
    name: str
    cost: float = Field(..., ge=0)
    capacity: int = Field(..., ge=1)


class Activity(CatalogModel):
    """Activity and its options."""

    id: str
    name: str
    location: str = ""
    options: tuple[ActivityOption, ...] = ()
    area_id: str | None = None


class EntryTicket(CatalogModel):
    """Entry ticket priced per person."""

    id: str
    name: str
    cost: float = Field(..., ge=0)
    area_id: str | None = None


class Meal(CatalogModel):
    """Meal priced per person."""

    id: str
    type: MealType
    place: str = ""
    cost: float = Field(..., ge=0)
    area_id: str | None = None


class Transportation(CatalogModel):
    """Rental vehicle or cab service."""

    id: str
    type: TransportationType
    vehicle_name: str
    cost_per_day: float = Field(0, ge=0)
    min_occupancy: int = 1
    max_occupancy: int | None = None


class CatalogSnapshot(CatalogModel):
    """Consistent catalog view for one pricing call.

    Lookups return None for unknown ids; callers decide how to treat a miss.
    """

    hotels: tuple[Hotel, ...] = ()
    sightseeings: tuple[Sightseeing, ...] = ()
    activities: tuple[Activity, ...] = ()
    entry_tickets: tuple[EntryTicket, ...] = ()
    meals: tuple[Meal, ...] = ()
    transportations: tuple[Transportation, ...] = ()

    def hotel(self, hotel_id: str) -> Hotel | None:
        return next((h for h in self.hotels if h.id == hotel_id), None)

    def room_type(self, hotel_id: str, room_type_id: str) -> RoomType | None:
        hotel = self.hotel(hotel_id)
        if hotel is None:
            return None
        return next((rt for rt in hotel.room_types if rt.id == room_type_id), None)

    def sightseeing(self, sightseeing_id: str) -> Sightseeing | None:
        return next((s for s in self.sightseeings if s.id == sightseeing_id), None)

    def activity(self, activity_id: str) -> Activity | None:
        return next((a for a in self.activities if a.id == activity_id), None)

    def activity_option(self, activity_id: str, option_id: str) -> ActivityOption | None:
        activity = self.activity(activity_id)
        if activity is None:
            return None
        return next((o for o in activity.options if o.id == option_id), None)

    def entry_ticket(self, ticket_id: str) -> EntryTicket | None:
        return next((t for t in self.entry_tickets if t.id == ticket_id), None)

    def meal(self, meal_id: str) -> Meal | None:
        return next((m for m in self.meals if m.id == meal_id), None)

    def transportation(self, transportation_id: str) -> Transportation | None:
        return next((t for t in self.transportations if t.id == transportation_id), None)
