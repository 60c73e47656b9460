"""Models package - re-exports for convenience."""

from tripbuilder.app.models.catalog import (
    Activity,
    ActivityOption,
    CatalogSnapshot,
    EntryTicket,
    Hotel,
    Meal,
    RoomType,
    Sightseeing,
    Transportation,
    VehicleCostProfile,
)
from tripbuilder.app.models.common import (
    ChecklistItemType,
    CostCategory,
    FollowUpStatus,
    MealType,
    Season,
    TransportationType,
    VehicleTier,
)
from tripbuilder.app.models.itinerary import (
    ActivitySelection,
    CatalogMiss,
    CategoryCosts,
    ClientProfile,
    CostBreakdown,
    DayCost,
    DayPlan,
    HotelSelection,
    Itinerary,
    ItineraryPayload,
    Pax,
)

__all__ = [
    # Common
    "Season",
    "VehicleTier",
    "TransportationType",
    "MealType",
    "FollowUpStatus",
    "ChecklistItemType",
    "CostCategory",
    # Catalog
    "RoomType",
    "Hotel",
    "VehicleCostProfile",
    "Sightseeing",
    "ActivityOption",
    "Activity",
    "EntryTicket",
    "Meal",
    "Transportation",
    "CatalogSnapshot",
    # Itinerary
    "Pax",
    "ClientProfile",
    "HotelSelection",
    "ActivitySelection",
    "DayPlan",
    "ItineraryPayload",
    "CategoryCosts",
    "DayCost",
    "CatalogMiss",
    "CostBreakdown",
    "Itinerary",
]
