import logging
from datetime import datetime

from hospital.core.exceptions import DoctorUnavailableError, NotFoundError, SchedulingConflictError
from hospital.models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from hospital.repositories.sql import SqlRepository
from hospital.scheduling.timeutils import utc_naive_now, wall_clock
from hospital.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)


async def create_appointment(repo: SqlRepository, data: AppointmentCreate) -> Appointment:
    doctor = await repo.find_doctor_by_id(data.doctor_id)
    if doctor is None:
        raise NotFoundError("Doctor not found")
    if not await SchedulingService(repo).check_doctor_availability(data.doctor_id, data.date_time):
        raise DoctorUnavailableError("Doctor is not available at the requested time")
    appointment = await repo.reserve_appointment(data)
    if appointment is None:
        raise SchedulingConflictError("Doctor already has a booking overlapping the requested time")
    logger.info(
        "Appointment %s booked: doctor=%s patient=%s at %s for %d min",
        appointment.id, data.doctor_id, data.patient_id, data.date_time, data.duration,
    )
    return appointment


async def get_appointment(repo: SqlRepository, appointment_id: int) -> Appointment:
    appointment = await repo.find_appointment_by_id(appointment_id)
    if appointment is None:
        raise NotFoundError("Appointment not found")
    return appointment


async def reschedule_appointment(
    repo: SqlRepository, appointment_id: int, new_date_time: datetime
) -> Appointment:
    appointment = await get_appointment(repo, appointment_id)
    new_date_time = wall_clock(new_date_time)
    if not await SchedulingService(repo).check_doctor_availability(appointment.doctor_id, new_date_time):
        raise DoctorUnavailableError("Doctor is not available at the requested time")
    updated = await repo.reschedule_appointment(appointment, new_date_time)
    if updated is None:
        raise SchedulingConflictError("Doctor already has a booking overlapping the requested time")
    logger.info("Appointment %s rescheduled to %s", appointment_id, new_date_time)
    return updated


async def update_appointment_status(
    repo: SqlRepository,
    appointment_id: int,
    status: AppointmentStatus,
    cancel_reason: str | None = None,
) -> Appointment:
    appointment = await get_appointment(repo, appointment_id)
    if appointment.status == "cancelled" and status != "cancelled":
        # the freed slot may have been rebooked since
        if await repo.reactivate_appointment(appointment, status) is None:
            raise SchedulingConflictError("The appointment's time has been booked since it was cancelled")
        logger.info("Appointment %s reactivated as %s", appointment_id, status)
    appointment.status = status
    if status == "cancelled":
        appointment.cancelled_at = utc_naive_now()
        appointment.cancel_reason = cancel_reason
    return await repo.save_appointment(appointment)


async def list_appointments_for_patient(repo: SqlRepository, patient_id: int) -> list[Appointment]:
    return await repo.find_appointments_by_patient(patient_id)
