"""Vehicle tier selection for shared (cab) transport."""

from tripbuilder.app.models.catalog import VehicleCostProfile
from tripbuilder.app.models.common import VehicleTier

# Inclusive upper pax bound per tier; anything larger rides the bus.
VEHICLE_BRACKETS: tuple[tuple[int, VehicleTier], ...] = (
    (6, VehicleTier.car),
    (14, VehicleTier.van),
    (20, VehicleTier.minibus),
)


def resolve_vehicle_tier(total_pax: int) -> VehicleTier:
    """Pick the smallest vehicle tier that seats the whole party."""
    for upper_bound, tier in VEHICLE_BRACKETS:
        if total_pax <= upper_bound:
            return tier
    return VehicleTier.bus


def vehicle_cost_for_pax(profile: VehicleCostProfile, total_pax: int) -> float:
    """Flat cost of the tier that fits total_pax."""
    tier = resolve_vehicle_tier(total_pax)
    return getattr(profile, tier.value)
