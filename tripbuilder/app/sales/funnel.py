"""Sales funnel rules - suggested next status and allowed transitions."""

from tripbuilder.app.errors import InvalidTransitionError
from tripbuilder.app.models.common import FollowUpStatus

# Primary funnel order; `dead` sits outside it.
PRIMARY_SEQUENCE: tuple[FollowUpStatus, ...] = (
    FollowUpStatus.itinerary_created,
    FollowUpStatus.itinerary_sent,
    FollowUpStatus.first_follow_up,
    FollowUpStatus.second_follow_up,
    FollowUpStatus.third_follow_up,
    FollowUpStatus.fourth_follow_up,
    FollowUpStatus.itinerary_edited,
    FollowUpStatus.updated_itinerary_sent,
    FollowUpStatus.advance_paid_confirmed,
)

# Follow-ups cycle among themselves; the last one falls through to the
# primary successor of the cycle.
FOLLOW_UP_CYCLE: tuple[FollowUpStatus, ...] = (
    FollowUpStatus.first_follow_up,
    FollowUpStatus.second_follow_up,
    FollowUpStatus.third_follow_up,
    FollowUpStatus.fourth_follow_up,
)

ABSORBING: frozenset[FollowUpStatus] = frozenset(
    {FollowUpStatus.advance_paid_confirmed, FollowUpStatus.dead}
)


def _build_suggestions() -> dict[FollowUpStatus, FollowUpStatus]:
    table = {
        current: successor
        for current, successor in zip(PRIMARY_SEQUENCE, PRIMARY_SEQUENCE[1:], strict=False)
    }
    for current, successor in zip(FOLLOW_UP_CYCLE, FOLLOW_UP_CYCLE[1:], strict=False):
        table[current] = successor
    for status in ABSORBING:
        table[status] = status
    return table


SUGGESTED_NEXT: dict[FollowUpStatus, FollowUpStatus] = _build_suggestions()

_CLOSE = (FollowUpStatus.advance_paid_confirmed, FollowUpStatus.dead)

ALLOWED_NEXT: dict[FollowUpStatus, tuple[FollowUpStatus, ...]] = {
    FollowUpStatus.itinerary_created: (
        FollowUpStatus.itinerary_sent,
        FollowUpStatus.first_follow_up,
        FollowUpStatus.itinerary_edited,
        *_CLOSE,
    ),
    FollowUpStatus.itinerary_sent: (
        FollowUpStatus.itinerary_sent,
        FollowUpStatus.first_follow_up,
        FollowUpStatus.itinerary_edited,
        *_CLOSE,
    ),
    FollowUpStatus.first_follow_up: (
        FollowUpStatus.second_follow_up,
        FollowUpStatus.itinerary_edited,
        *_CLOSE,
    ),
    FollowUpStatus.second_follow_up: (
        FollowUpStatus.third_follow_up,
        FollowUpStatus.itinerary_edited,
        *_CLOSE,
    ),
    FollowUpStatus.third_follow_up: (
        FollowUpStatus.fourth_follow_up,
        FollowUpStatus.itinerary_edited,
        *_CLOSE,
    ),
    FollowUpStatus.fourth_follow_up: (FollowUpStatus.itinerary_edited, *_CLOSE),
    FollowUpStatus.itinerary_edited: (FollowUpStatus.updated_itinerary_sent, *_CLOSE),
    FollowUpStatus.updated_itinerary_sent: (FollowUpStatus.first_follow_up, *_CLOSE),
    FollowUpStatus.advance_paid_confirmed: (),
    FollowUpStatus.dead: (),
}


def suggest_next(current: FollowUpStatus) -> FollowUpStatus:
    """Status an operator would normally move to next.

    Absorbing statuses suggest themselves.
    """
    return SUGGESTED_NEXT[current]


def allowed_next(current: FollowUpStatus) -> tuple[FollowUpStatus, ...]:
    """Statuses an operator may pick from the current one."""
    return ALLOWED_NEXT[current]


def requires_follow_up_scheduling(status: FollowUpStatus) -> bool:
    """False exactly for the absorbing statuses."""
    return status not in ABSORBING


def check_transition(
    current: FollowUpStatus, target: FollowUpStatus, *, reconfirm: bool = False
) -> None:
    """Raise InvalidTransitionError unless target is allowed from current.

    With `reconfirm`, confirmed -> confirmed passes so a confirmation retry
    (or a regeneration after a fulfillment reset) reaches the trigger.
    """
    if reconfirm and current == target == FollowUpStatus.advance_paid_confirmed:
        return
    if current in ABSORBING:
        raise InvalidTransitionError(f"status {current.value} is final")
    if target not in ALLOWED_NEXT[current]:
        raise InvalidTransitionError(
            f"cannot move from {current.value} to {target.value}"
        )
