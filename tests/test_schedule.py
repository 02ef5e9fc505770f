"""
Tests for slot grid generation.
"""

from datetime import date

from conftest import MONDAY, SUNDAY, TUESDAY, at

from hospital.models.appointment import BookedInterval
from hospital.models.staff import Doctor, WeeklyAvailability
from hospital.scheduling.schedule import build_day, build_schedule, slot_bounds


def _window(start: str, end: str, day: str = "monday") -> WeeklyAvailability:
    return WeeklyAvailability(day=day, start_time=start, end_time=end)


def _doctor(*windows: WeeklyAvailability) -> Doctor:
    return Doctor(
        id=7,
        email="grey@hospital.test",
        first_name="Meredith",
        last_name="Grey",
        department="surgery",
        specialization="general_surgery",
        availability=list(windows),
    )


class TestSlotBounds:
    def test_full_hours(self):
        bounds = slot_bounds(_window("09:00", "11:00"))
        assert bounds == [(540, 570), (570, 600), (600, 630), (630, 660)]

    def test_whole_hours_drops_minute_offsets(self):
        bounds = slot_bounds(_window("09:15", "11:45"))
        assert bounds[0] == (540, 570)
        assert bounds[-1] == (630, 660)

    def test_exact_window_start(self):
        bounds = slot_bounds(_window("09:15", "11:00"), whole_hours=False)
        assert bounds == [(555, 585), (585, 615), (615, 645)]

    def test_window_shorter_than_a_slot(self):
        assert slot_bounds(_window("09:00", "09:20"), whole_hours=False) == []


class TestBuildDay:
    def test_booked_slot_is_marked(self):
        booking = BookedInterval(id=42, kind="appointment", doctor_id=7, start=at(MONDAY, "10:00"), duration=30)
        day = build_day(7, MONDAY, _window("09:00", "17:00"), [booking])

        assert day.date == "2024-11-25"
        assert len(day.time_slots) == 16
        unavailable = [s for s in day.time_slots if not s.is_available]
        assert len(unavailable) == 1
        assert unavailable[0].start_time == "10:00"
        assert unavailable[0].end_time == "10:30"
        assert unavailable[0].conflicting_booking_id == 42
        assert unavailable[0].conflicting_booking_kind == "appointment"
        assert all(s.conflicting_booking_id is None for s in day.time_slots if s.is_available)

    def test_long_booking_blocks_every_touched_slot(self):
        booking = BookedInterval(id=3, kind="examination", doctor_id=7, start=at(MONDAY, "10:15"), duration=60)
        day = build_day(7, MONDAY, _window("09:00", "12:00"), [booking])
        blocked = [s.start_time for s in day.time_slots if not s.is_available]
        assert blocked == ["10:00", "10:30", "11:00"]

    def test_booking_on_another_day_is_ignored(self):
        booking = BookedInterval(id=1, kind="appointment", doctor_id=7, start=at(TUESDAY, "10:00"), duration=30)
        day = build_day(7, MONDAY, _window("09:00", "12:00"), [booking])
        assert all(s.is_available for s in day.time_slots)

    def test_first_conflicting_booking_wins(self):
        first = BookedInterval(id=1, kind="appointment", doctor_id=7, start=at(MONDAY, "09:00"), duration=20)
        second = BookedInterval(id=2, kind="examination", doctor_id=7, start=at(MONDAY, "09:20"), duration=10)
        day = build_day(7, MONDAY, _window("09:00", "10:00"), [first, second])
        assert day.time_slots[0].conflicting_booking_id == 1


class TestBuildSchedule:
    def test_days_without_window_are_omitted(self):
        doctor = _doctor(_window("09:00", "12:00", "monday"), _window("13:00", "15:00", "wednesday"))
        schedule = build_schedule(doctor, SUNDAY, date(2024, 11, 30), [])
        assert [d.date for d in schedule] == ["2024-11-25", "2024-11-27"]
        assert all(d.doctor_id == 7 for d in schedule)

    def test_single_day_range(self):
        doctor = _doctor(_window("09:00", "10:00"))
        schedule = build_schedule(doctor, MONDAY, MONDAY, [])
        assert len(schedule) == 1
        assert [s.start_time for s in schedule[0].time_slots] == ["09:00", "09:30"]

    def test_reversed_range_is_empty(self):
        doctor = _doctor(_window("09:00", "10:00"))
        assert build_schedule(doctor, TUESDAY, MONDAY, []) == []

    def test_same_input_same_output(self):
        doctor = _doctor(_window("09:00", "17:00"))
        bookings = [BookedInterval(id=5, kind="appointment", doctor_id=7, start=at(MONDAY, "11:00"), duration=45)]
        first = build_schedule(doctor, MONDAY, date(2024, 12, 9), bookings)
        second = build_schedule(doctor, MONDAY, date(2024, 12, 9), bookings)
        assert first == second
        assert len(first) == 3
