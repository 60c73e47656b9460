"""Common enums shared across catalog, itinerary and sales models."""

from enum import Enum


class Season(str, Enum):
    """Room-rate season tier."""

    peak = "peak"
    mid = "mid"
    off = "off"


class VehicleTier(str, Enum):
    """Shared-transport vehicle class, smallest first."""

    car = "car"
    van = "van"
    minibus = "minibus"
    bus = "bus"


class TransportationType(str, Enum):
    """How the party moves around during the trip."""

    cab = "cab"
    self_drive_car = "self-drive-car"
    self_drive_scooter = "self-drive-scooter"


class MealType(str, Enum):
    """Meal slot."""

    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"


class FollowUpStatus(str, Enum):
    """Sales funnel status of a package. Declaration order is the funnel order."""

    itinerary_created = "itinerary-created"
    itinerary_sent = "itinerary-sent"
    first_follow_up = "1st-follow-up"
    second_follow_up = "2nd-follow-up"
    third_follow_up = "3rd-follow-up"
    fourth_follow_up = "4th-follow-up"
    itinerary_edited = "itinerary-edited"
    updated_itinerary_sent = "updated-itinerary-sent"
    advance_paid_confirmed = "advance-paid-confirmed"
    dead = "dead"


class ChecklistItemType(str, Enum):
    """Bookable unit kind on a fulfillment checklist."""

    sightseeing = "sightseeing"
    hotel = "hotel"
    activity = "activity"
    entry_ticket = "entry_ticket"
    meal = "meal"
    transportation = "transportation"


class CostCategory(str, Enum):
    """Cost breakdown category."""

    transportation = "transportation"
    accommodation = "accommodation"
    sightseeing = "sightseeing"
    activities = "activities"
    tickets = "tickets"
    meals = "meals"
