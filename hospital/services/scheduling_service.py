"""
Doctor scheduling operations used by the booking flows and the staff API.

The service only reads through a ``SchedulingRepository`` and computes;
slot and window rules live in ``hospital.scheduling``.
"""

import logging
from datetime import date, datetime

from hospital.core.config import settings
from hospital.core.exceptions import NotFoundError, ParseError
from hospital.models.schedule import DoctorSchedule
from hospital.models.staff import Doctor
from hospital.repositories.base import SchedulingRepository
from hospital.scheduling.availability import is_admissible
from hospital.scheduling.finder import filter_available
from hospital.scheduling.schedule import build_schedule
from hospital.scheduling.timeutils import day_range, lookback

logger = logging.getLogger(__name__)


class SchedulingService:
    def __init__(
        self,
        repository: SchedulingRepository,
        *,
        slot_minutes: int | None = None,
        admission_minutes: int | None = None,
        whole_hour_slots: bool | None = None,
    ) -> None:
        self._repository = repository
        self._slot_minutes = settings.slot_duration_minutes if slot_minutes is None else slot_minutes
        self._admission_minutes = (
            settings.admission_window_minutes if admission_minutes is None else admission_minutes
        )
        self._whole_hour_slots = (
            settings.schedule_whole_hour_slots if whole_hour_slots is None else whole_hour_slots
        )
        if self._slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {self._slot_minutes}")

    async def check_doctor_availability(self, doctor_id: int, at: datetime) -> bool:
        """Admission check run before a booking is written. Unknown doctors are unavailable."""
        doctor = await self._repository.find_doctor_by_id(doctor_id)
        if doctor is None:
            return False
        return is_admissible(doctor, at, self._admission_minutes)

    async def get_doctor_schedule(
        self, doctor_id: int, start_date: date, end_date: date
    ) -> list[DoctorSchedule]:
        doctor = await self._repository.find_doctor_by_id(doctor_id)
        if doctor is None:
            raise NotFoundError("Doctor not found")
        if (end_date - start_date).days >= settings.schedule_max_days:
            raise ParseError(f"Schedule range may cover at most {settings.schedule_max_days} days")
        start, end = day_range(start_date, end_date)
        # bookings from the previous evening can run into the first day
        bookings = await self._repository.find_bookings_by_doctor_and_date_range(doctor_id, lookback(start), end)
        return build_schedule(
            doctor,
            start_date,
            end_date,
            bookings,
            step=self._slot_minutes,
            whole_hours=self._whole_hour_slots,
        )

    async def get_available_doctors(
        self,
        d: date,
        start_time: str,
        end_time: str,
        department: str | None = None,
        specialization: str | None = None,
    ) -> list[Doctor]:
        """
        Doctors working the whole window on that weekday with no overlapping booking.

        Any failure is logged and reported as "no doctors available" (empty list)
        rather than raised.
        """
        try:
            doctors = await self._repository.find_doctors(department=department, specialization=specialization)
            busy = await self._repository.find_busy_doctor_ids(d, start_time, end_time)
            return filter_available(doctors, d, start_time, end_time, busy)
        except Exception:
            logger.exception(
                "Available doctor search failed for %s %s-%s; returning no doctors", d, start_time, end_time
            )
            return []
