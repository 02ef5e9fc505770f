from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from hospital.models.appointment import BookedInterval
from hospital.models.schedule import DoctorSchedule, TimeSlot
from hospital.models.staff import Doctor, WeeklyAvailability
from hospital.scheduling.availability import window_for
from hospital.scheduling.timeutils import format_minutes, intervals_overlap, to_minutes


def slot_bounds(
    window: WeeklyAvailability, step: int = 30, whole_hours: bool = True
) -> list[tuple[int, int]]:
    """
    (start, end) minute offsets of consecutive slots covering ``window``.

    With ``whole_hours`` the grid runs from the start hour's :00 up to the end
    hour's :00, so 09:15-17:45 yields 09:00..17:00. Otherwise it begins at the
    exact window start and keeps every slot ending at or before the window end.
    """
    start = to_minutes(window.start_time)
    end = to_minutes(window.end_time)
    if whole_hours:
        start, end = start - start % 60, end - end % 60
    bounds: list[tuple[int, int]] = []
    current = start
    while current + step <= end:
        bounds.append((current, current + step))
        current += step
    return bounds


def _at(d: date, minutes: int) -> datetime:
    return datetime.combine(d, time()) + timedelta(minutes=minutes)


def build_day(
    doctor_id: int,
    d: date,
    window: WeeklyAvailability,
    bookings: Sequence[BookedInterval],
    step: int = 30,
    whole_hours: bool = True,
) -> DoctorSchedule:
    slots: list[TimeSlot] = []
    for slot_start, slot_end in slot_bounds(window, step, whole_hours):
        start_dt, end_dt = _at(d, slot_start), _at(d, slot_end)
        conflict = next(
            (b for b in bookings if intervals_overlap(start_dt, end_dt, b.start, b.end)),
            None,
        )
        slots.append(
            TimeSlot(
                start_time=format_minutes(slot_start),
                end_time=format_minutes(slot_end),
                is_available=conflict is None,
                conflicting_booking_id=conflict.id if conflict else None,
                conflicting_booking_kind=conflict.kind if conflict else None,
            )
        )
    return DoctorSchedule(doctor_id=doctor_id, date=d.isoformat(), time_slots=slots)


def _days(start_date: date, end_date: date) -> Iterable[date]:
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def build_schedule(
    doctor: Doctor,
    start_date: date,
    end_date: date,
    bookings: Sequence[BookedInterval],
    step: int = 30,
    whole_hours: bool = True,
) -> list[DoctorSchedule]:
    """One schedule per day in ``[start_date, end_date]`` on which the doctor works."""
    schedule: list[DoctorSchedule] = []
    for d in _days(start_date, end_date):
        window = window_for(doctor, d)
        if window is None:
            continue
        schedule.append(build_day(doctor.id, d, window, bookings, step, whole_hours))
    return schedule
