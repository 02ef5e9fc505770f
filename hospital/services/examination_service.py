import logging
from datetime import date

from hospital.core.exceptions import DoctorUnavailableError, NotFoundError, SchedulingConflictError
from hospital.models.examination import Examination, ExaminationCreate, ExaminationResults, ExaminationStatus
from hospital.repositories.sql import SqlRepository
from hospital.scheduling.timeutils import day_range, utc_naive_now
from hospital.services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)


async def create_examination(repo: SqlRepository, data: ExaminationCreate) -> Examination:
    # unknown doctors fail the availability check
    if not await SchedulingService(repo).check_doctor_availability(data.doctor_id, data.scheduled_date):
        raise DoctorUnavailableError("Doctor is not available at the requested time")
    examination = await repo.reserve_examination(data)
    if examination is None:
        raise SchedulingConflictError("Doctor already has a booking overlapping the requested time")
    logger.info(
        "Examination %s scheduled: doctor=%s patient=%s at %s",
        examination.id, data.doctor_id, data.patient_id, data.scheduled_date,
    )
    return examination


async def update_examination_status(
    repo: SqlRepository,
    examination_id: int,
    status: ExaminationStatus,
    results: ExaminationResults | None = None,
    cancel_reason: str | None = None,
) -> Examination:
    examination = await repo.find_examination_by_id(examination_id)
    if examination is None:
        raise NotFoundError("Examination not found")
    if examination.status == "cancelled" and status != "cancelled":
        if await repo.reactivate_examination(examination, status) is None:
            raise SchedulingConflictError("The examination's time has been booked since it was cancelled")
        logger.info("Examination %s reactivated as %s", examination_id, status)
    examination.status = status
    if status == "completed":
        examination.completed_at = utc_naive_now()
        if results:
            examination.findings = results.findings
            examination.recommendations = results.recommendations
    elif status == "cancelled":
        examination.cancelled_at = utc_naive_now()
        examination.cancel_reason = cancel_reason
    return await repo.save_examination(examination)


async def get_doctor_examinations(
    repo: SqlRepository, doctor_id: int, start_date: date, end_date: date
) -> list[Examination]:
    start, end = day_range(start_date, end_date)
    return await repo.find_examinations_by_doctor(doctor_id, start, end)


async def get_pending_examinations(repo: SqlRepository) -> list[Examination]:
    return await repo.find_pending_examinations()
