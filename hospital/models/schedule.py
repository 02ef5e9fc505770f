from sqlmodel import SQLModel

from hospital.models.appointment import BookingKind


class TimeSlot(SQLModel):
    start_time: str
    end_time: str
    is_available: bool
    conflicting_booking_id: int | None = None
    conflicting_booking_kind: BookingKind | None = None


class DoctorSchedule(SQLModel):
    doctor_id: int
    date: str  # YYYY-MM-DD
    time_slots: list[TimeSlot]
