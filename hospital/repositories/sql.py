import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timedelta
from typing import ParamSpec, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hospital.core.exceptions import PersistenceError
from hospital.models.appointment import Appointment, AppointmentCreate, BookedInterval
from hospital.models.examination import Examination, ExaminationCreate
from hospital.models.staff import (
    COMMON_FIELDS,
    ROLE_FIELDS,
    Doctor,
    DoctorAvailability,
    Staff,
    StaffCreate,
    StaffMember,
    WeeklyAvailability,
    staff_to_member,
)
from hospital.scheduling.finder import busy_doctor_ids, requested_window
from hospital.scheduling.timeutils import intervals_overlap, lookback, utc_naive_now

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def _storage_errors(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception("%s failed", func.__name__)
            raise PersistenceError(f"{func.__name__} failed: {type(e).__name__}") from e

    return wrapper


class SqlRepository:
    """``SchedulingRepository`` plus the staff and booking queries behind the API."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # --- staff ---

    @_storage_errors
    async def find_staff_by_id(self, staff_id: int) -> Staff | None:
        result = await self.session.execute(select(Staff).where(Staff.id == staff_id))
        return result.scalar_one_or_none()

    @_storage_errors
    async def find_staff_by_email(self, email: str) -> Staff | None:
        result = await self.session.execute(select(Staff).where(Staff.email == email))
        return result.scalar_one_or_none()

    async def _availability_by_staff(self, staff_ids: list[int]) -> dict[int, list[DoctorAvailability]]:
        if not staff_ids:
            return {}
        result = await self.session.execute(
            select(DoctorAvailability).where(DoctorAvailability.staff_id.in_(staff_ids))
        )
        by_staff: dict[int, list[DoctorAvailability]] = {}
        for row in result.scalars().all():
            by_staff.setdefault(row.staff_id, []).append(row)
        return by_staff

    @_storage_errors
    async def find_doctor_by_id(self, doctor_id: int) -> Doctor | None:
        staff = await self.find_staff_by_id(doctor_id)
        if not staff or staff.role != "doctor":
            return None
        availability = await self._availability_by_staff([doctor_id])
        return staff_to_member(staff, availability.get(doctor_id, []))

    @_storage_errors
    async def find_doctors(
        self, department: str | None = None, specialization: str | None = None
    ) -> list[Doctor]:
        q = select(Staff).where(Staff.role == "doctor").order_by(Staff.id)
        if department:
            q = q.where(Staff.department == department)
        if specialization:
            q = q.where(Staff.specialization == specialization)
        result = await self.session.execute(q)
        rows = list(result.scalars().all())
        availability = await self._availability_by_staff([r.id for r in rows])
        return [staff_to_member(r, availability.get(r.id, [])) for r in rows]

    @_storage_errors
    async def find_staff_members(
        self, role: str | None = None, department: str | None = None
    ) -> list[StaffMember]:
        q = select(Staff).order_by(Staff.id)
        if role:
            q = q.where(Staff.role == role)
        if department:
            q = q.where(Staff.department == department)
        result = await self.session.execute(q)
        rows = list(result.scalars().all())
        availability = await self._availability_by_staff([r.id for r in rows if r.role == "doctor"])
        return [staff_to_member(r, availability.get(r.id, [])) for r in rows]

    @_storage_errors
    async def update_staff(self, staff: Staff, changes: dict) -> Staff:
        for field, value in changes.items():
            setattr(staff, field, value)
        staff.updated_at = utc_naive_now()
        self.session.add(staff)
        await self.session.flush()
        return staff

    @_storage_errors
    async def delete_staff(self, staff: Staff) -> None:
        # availability and bookings go with the row (ON DELETE CASCADE)
        await self.session.delete(staff)
        await self.session.flush()

    @_storage_errors
    async def create_staff(self, data: StaffCreate, hashed_password: str) -> Staff:
        fields = {*COMMON_FIELDS, *ROLE_FIELDS[data.role]}
        staff = Staff(
            role=data.role,
            hashed_password=hashed_password,
            **data.model_dump(include=fields, exclude_none=True),
        )
        self.session.add(staff)
        await self.session.flush()
        await self.session.refresh(staff)
        if data.role == "doctor" and data.availability:
            await self.replace_availability(staff.id, data.availability)
        return staff

    @_storage_errors
    async def find_availability(self, doctor_id: int) -> list[DoctorAvailability]:
        availability = await self._availability_by_staff([doctor_id])
        return availability.get(doctor_id, [])

    @_storage_errors
    async def replace_availability(
        self, doctor_id: int, windows: list[WeeklyAvailability]
    ) -> list[DoctorAvailability]:
        await self.session.execute(
            delete(DoctorAvailability).where(DoctorAvailability.staff_id == doctor_id)
        )
        rows = [
            DoctorAvailability(staff_id=doctor_id, day=w.day, start_time=w.start_time, end_time=w.end_time)
            for w in windows
        ]
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    # --- bookings ---

    async def _bookings(
        self, start: datetime, end: datetime, doctor_id: int | None = None
    ) -> list[BookedInterval]:
        aq = select(Appointment).where(
            Appointment.date_time >= start,
            Appointment.date_time < end,
            Appointment.status != "cancelled",
        )
        eq = select(Examination).where(
            Examination.scheduled_date >= start,
            Examination.scheduled_date < end,
            Examination.status != "cancelled",
        )
        if doctor_id is not None:
            aq = aq.where(Appointment.doctor_id == doctor_id)
            eq = eq.where(Examination.doctor_id == doctor_id)
        appointments = (await self.session.execute(aq)).scalars().all()
        examinations = (await self.session.execute(eq)).scalars().all()
        bookings = [
            BookedInterval(id=a.id, kind="appointment", doctor_id=a.doctor_id, start=a.date_time, duration=a.duration)
            for a in appointments
        ] + [
            BookedInterval(id=e.id, kind="examination", doctor_id=e.doctor_id, start=e.scheduled_date, duration=e.duration)
            for e in examinations
        ]
        bookings.sort(key=lambda b: (b.start, b.kind, b.id))
        return bookings

    @_storage_errors
    async def find_bookings_by_doctor_and_date_range(
        self, doctor_id: int, start: datetime, end: datetime
    ) -> list[BookedInterval]:
        return await self._bookings(start, end, doctor_id=doctor_id)

    @_storage_errors
    async def find_busy_doctor_ids(self, d: date, start_time: str, end_time: str) -> list[int]:
        start, end = requested_window(d, start_time, end_time)
        bookings = await self._bookings(lookback(start), end)
        return sorted(busy_doctor_ids(bookings, d, start_time, end_time))

    async def _lock_doctor(self, doctor_id: int) -> None:
        # Serializes reservations per doctor until the transaction ends
        await self.session.execute(select(Staff.id).where(Staff.id == doctor_id).with_for_update())

    async def _has_overlap(
        self,
        doctor_id: int,
        start: datetime,
        duration: int,
        exclude: tuple[str, int] | None = None,
    ) -> bool:
        end = start + timedelta(minutes=duration)
        for b in await self._bookings(lookback(start), end, doctor_id=doctor_id):
            if exclude and (b.kind, b.id) == exclude:
                continue
            if intervals_overlap(b.start, b.end, start, end):
                return True
        return False

    @_storage_errors
    async def reserve_appointment(self, data: AppointmentCreate) -> Appointment | None:
        await self._lock_doctor(data.doctor_id)
        if await self._has_overlap(data.doctor_id, data.date_time, data.duration):
            return None
        appointment = Appointment(**data.model_dump())
        self.session.add(appointment)
        await self.session.flush()
        await self.session.refresh(appointment)
        return appointment

    @_storage_errors
    async def reserve_examination(self, data: ExaminationCreate) -> Examination | None:
        await self._lock_doctor(data.doctor_id)
        if await self._has_overlap(data.doctor_id, data.scheduled_date, data.duration):
            return None
        examination = Examination(**data.model_dump())
        self.session.add(examination)
        await self.session.flush()
        await self.session.refresh(examination)
        return examination

    @_storage_errors
    async def reschedule_appointment(self, appointment: Appointment, new_date_time: datetime) -> Appointment | None:
        await self._lock_doctor(appointment.doctor_id)
        if await self._has_overlap(
            appointment.doctor_id, new_date_time, appointment.duration, exclude=("appointment", appointment.id)
        ):
            return None
        appointment.date_time = new_date_time
        appointment.updated_at = utc_naive_now()
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    @_storage_errors
    async def reactivate_appointment(self, appointment: Appointment, status: str) -> Appointment | None:
        """Move a cancelled appointment back to a time-blocking status unless its slot was taken."""
        await self._lock_doctor(appointment.doctor_id)
        if await self._has_overlap(
            appointment.doctor_id, appointment.date_time, appointment.duration, exclude=("appointment", appointment.id)
        ):
            return None
        appointment.status = status
        appointment.cancelled_at = None
        appointment.cancel_reason = None
        appointment.updated_at = utc_naive_now()
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    @_storage_errors
    async def reactivate_examination(self, examination: Examination, status: str) -> Examination | None:
        await self._lock_doctor(examination.doctor_id)
        if await self._has_overlap(
            examination.doctor_id, examination.scheduled_date, examination.duration, exclude=("examination", examination.id)
        ):
            return None
        examination.status = status
        examination.cancelled_at = None
        examination.cancel_reason = None
        examination.updated_at = utc_naive_now()
        self.session.add(examination)
        await self.session.flush()
        return examination

    @_storage_errors
    async def find_appointment_by_id(self, appointment_id: int) -> Appointment | None:
        result = await self.session.execute(select(Appointment).where(Appointment.id == appointment_id))
        return result.scalar_one_or_none()

    @_storage_errors
    async def find_appointments_by_patient(self, patient_id: int) -> list[Appointment]:
        result = await self.session.execute(
            select(Appointment).where(Appointment.patient_id == patient_id).order_by(Appointment.date_time)
        )
        return list(result.scalars().all())

    @_storage_errors
    async def save_appointment(self, appointment: Appointment) -> Appointment:
        appointment.updated_at = utc_naive_now()
        self.session.add(appointment)
        await self.session.flush()
        return appointment

    @_storage_errors
    async def find_examination_by_id(self, examination_id: int) -> Examination | None:
        result = await self.session.execute(select(Examination).where(Examination.id == examination_id))
        return result.scalar_one_or_none()

    @_storage_errors
    async def find_examinations_by_doctor(
        self, doctor_id: int, start: datetime, end: datetime
    ) -> list[Examination]:
        result = await self.session.execute(
            select(Examination)
            .where(
                Examination.doctor_id == doctor_id,
                Examination.scheduled_date >= start,
                Examination.scheduled_date < end,
            )
            .order_by(Examination.scheduled_date)
        )
        return list(result.scalars().all())

    @_storage_errors
    async def find_pending_examinations(self) -> list[Examination]:
        result = await self.session.execute(
            select(Examination)
            .where(Examination.status.in_(["scheduled", "in_progress"]))
            .order_by(Examination.scheduled_date)
        )
        return list(result.scalars().all())

    @_storage_errors
    async def save_examination(self, examination: Examination) -> Examination:
        examination.updated_at = utc_naive_now()
        self.session.add(examination)
        await self.session.flush()
        return examination

