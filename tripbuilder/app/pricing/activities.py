"""Group-based activity pricing."""

from tripbuilder.app.models.catalog import ActivityOption


def groups_needed(capacity: int, total_pax: int) -> int:
    """Number of groups billed; one group covers everyone when capacity suffices."""
    if capacity >= total_pax:
        return 1
    return -(-total_pax // capacity)


def activity_group_cost(option: ActivityOption, total_pax: int) -> float:
    """Total cost of an activity option for the party.

    The flat cost is charged per group of `capacity` people, rounding the
    group count up.
    """
    return option.cost * groups_needed(option.capacity, total_pax)
