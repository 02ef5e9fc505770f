"""
Read and reserve contracts the scheduling core depends on.

``SqlRepository`` implements them against the database; tests plug in an
in-memory fake. Any storage failure surfaces as ``PersistenceError``.
"""

from datetime import date, datetime
from typing import Protocol

from hospital.models.appointment import Appointment, AppointmentCreate, BookedInterval
from hospital.models.examination import Examination, ExaminationCreate
from hospital.models.staff import Doctor


class SchedulingRepository(Protocol):
    async def find_doctor_by_id(self, doctor_id: int) -> Doctor | None:
        """Return the doctor, or None when absent or not in the doctor role."""

    async def find_bookings_by_doctor_and_date_range(
        self, doctor_id: int, start: datetime, end: datetime
    ) -> list[BookedInterval]:
        """Non-cancelled appointments and examinations starting in ``[start, end)``."""

    async def find_busy_doctor_ids(self, d: date, start_time: str, end_time: str) -> list[int]:
        """Doctors with a booking overlapping ``[start_time, end_time)`` on ``d``."""

    async def find_doctors(
        self, department: str | None = None, specialization: str | None = None
    ) -> list[Doctor]:
        ...

    async def reserve_appointment(self, data: AppointmentCreate) -> Appointment | None:
        """Insert unless it overlaps an existing booking for the doctor; atomic per doctor."""

    async def reserve_examination(self, data: ExaminationCreate) -> Examination | None:
        """Insert unless it overlaps an existing booking for the doctor; atomic per doctor."""
