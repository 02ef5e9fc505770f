from datetime import date, datetime

from hospital.models.staff import Doctor, WeeklyAvailability
from hospital.scheduling.timeutils import day_name, minutes_of_day, to_minutes


def window_for(doctor: Doctor, d: date) -> WeeklyAvailability | None:
    """The doctor's working window on the weekday of ``d``, if any."""
    name = day_name(d)
    return next((w for w in doctor.availability if w.day == name), None)


def is_admissible(doctor: Doctor, at: datetime, admission_minutes: int = 30) -> bool:
    """
    Whether a booking starting at ``at`` fits the doctor's window for that day.

    The start must be at or after the window start and leave ``admission_minutes``
    before the window end. The booking's own duration is not consulted.
    """
    window = window_for(doctor, at.date())
    if window is None:
        return False
    start = minutes_of_day(at)
    return start >= to_minutes(window.start_time) and start + admission_minutes <= to_minutes(window.end_time)
