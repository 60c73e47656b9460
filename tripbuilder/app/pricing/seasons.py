"""Seasonal nightly rate resolution."""

from datetime import date

from tripbuilder.app.models.catalog import RoomType
from tripbuilder.app.models.common import Season

# (month, day) bounds, inclusive
PEAK_START = (12, 20)
PEAK_END = (1, 5)
MID_START = (7, 1)
MID_END = (8, 31)


def season_for(travel_date: date) -> Season:
    """Classify a date by month/day; the year only matters for the peak wrap."""
    key = (travel_date.month, travel_date.day)

    # Peak window wraps the year boundary
    if key >= PEAK_START or key <= PEAK_END:
        return Season.peak
    if MID_START <= key <= MID_END:
        return Season.mid
    return Season.off


def resolve_seasonal_price(room_type: RoomType, travel_date: date) -> tuple[float, Season]:
    """Return the nightly price for a room type and the season it came from.

    Args:
        room_type: Room type carrying peak/mid/off rates
        travel_date: Trip start date

    Returns:
        (nightly_price, season)
    """
    season = season_for(travel_date)
    if season is Season.peak:
        return room_type.peak_season_price, season
    if season is Season.mid:
        return room_type.season_price, season
    return room_type.off_season_price, season
