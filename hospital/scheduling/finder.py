from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from hospital.models.appointment import BookedInterval
from hospital.models.staff import Doctor
from hospital.scheduling.availability import window_for
from hospital.scheduling.timeutils import intervals_overlap, is_within_range, to_minutes


def works_window(doctor: Doctor, d: date, start_time: str, end_time: str) -> bool:
    """The doctor's window on that weekday fully contains ``[start_time, end_time)``."""
    window = window_for(doctor, d)
    if window is None:
        return False
    return is_within_range(start_time, end_time, window.start_time, window.end_time)


def requested_window(d: date, start_time: str, end_time: str) -> tuple[datetime, datetime]:
    midnight = datetime.combine(d, time())
    return (
        midnight + timedelta(minutes=to_minutes(start_time)),
        midnight + timedelta(minutes=to_minutes(end_time)),
    )


def busy_doctor_ids(
    bookings: Iterable[BookedInterval], d: date, start_time: str, end_time: str
) -> set[int]:
    """Doctors holding any booking that overlaps the requested window on ``d``."""
    start, end = requested_window(d, start_time, end_time)
    return {b.doctor_id for b in bookings if intervals_overlap(b.start, b.end, start, end)}


def filter_available(
    doctors: Sequence[Doctor],
    d: date,
    start_time: str,
    end_time: str,
    busy_ids: Iterable[int],
) -> list[Doctor]:
    busy = set(busy_ids)
    return [
        doctor
        for doctor in doctors
        if works_window(doctor, d, start_time, end_time) and doctor.id not in busy
    ]
