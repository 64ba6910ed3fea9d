"""Capacity and booking rules for a single meeting.

Everything here is a pure function of its arguments. A meeting's status is
input data: it is set when the meeting is created or seeded and is never
recomputed from its date or start time.
"""

import datetime as dt

from talks.errors import ValidationFailure
from talks.models import Meeting, MeetingStatus, MeetingView


def is_full(meeting: Meeting) -> bool:
    return meeting.booked_slots >= meeting.max_slots


def capacity_percent(meeting: Meeting) -> float:
    """Share of booked slots in percent, 0 for a meeting without capacity."""
    if meeting.max_slots <= 0:
        return 0.0
    return 100 * meeting.booked_slots / meeting.max_slots


def can_book(meeting: Meeting) -> bool:
    return meeting.status == MeetingStatus.UPCOMING and not is_full(meeting)


def to_view(meeting: Meeting) -> MeetingView:
    return MeetingView(
        **meeting.model_dump(),
        is_full=is_full(meeting),
        can_book=can_book(meeting),
        capacity_percent=capacity_percent(meeting),
    )


def validate_schedule(date: dt.date, start_time: str, now: dt.datetime) -> dt.datetime:
    """
    Returns the scheduled start as a datetime, or raises ValidationFailure if
    it cannot be parsed or is not strictly in the future.
    """
    try:
        clock = dt.datetime.strptime(start_time.strip(), "%H:%M").time()
    except ValueError:
        raise ValidationFailure(f"Invalid start time: {start_time!r}")
    starts_at = dt.datetime.combine(date, clock)
    if starts_at <= now:
        raise ValidationFailure(
            "Cannot schedule meetings in the past. Time travel module not detected."
        )
    return starts_at
