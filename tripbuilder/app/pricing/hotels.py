"""Hotel stay consolidation."""

from collections import Counter
from collections.abc import Iterable

from tripbuilder.app.models.itinerary import DayPlan


def consolidate_hotel_stays(day_plans: Iterable[DayPlan]) -> dict[tuple[str, str], int]:
    """Count nights per (hotel_id, room_type_id).

    Nights are counted per occurrence, not per contiguous run: A, B, A
    reports two nights for A.
    """
    nights: Counter[tuple[str, str]] = Counter()
    for plan in sorted(day_plans, key=lambda p: p.day):
        if plan.hotel is not None:
            nights[(plan.hotel.hotel_id, plan.hotel.room_type_id)] += 1
    return dict(nights)
