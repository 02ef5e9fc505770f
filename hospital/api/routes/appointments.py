from fastapi import APIRouter, Depends, status

from hospital.api.deps import get_current_staff, get_repository
from hospital.api.schemas.booking import AppointmentStatusUpdate, RescheduleRequest
from hospital.models.appointment import AppointmentCreate, AppointmentPublic
from hospital.models.staff import Staff
from hospital.repositories.sql import SqlRepository
from hospital.services import appointment_service

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> AppointmentPublic:
    """
    Book an appointment.

    400 when the start falls outside the doctor's weekly window (at least 30
    minutes must remain before the window ends), 409 when it overlaps another
    booking of the same doctor.
    """
    appointment = await appointment_service.create_appointment(repo, body)
    return AppointmentPublic.model_validate(appointment)


@router.get("/patient/{patient_id}", response_model=list[AppointmentPublic])
async def list_patient_appointments(
    patient_id: int,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> list[AppointmentPublic]:
    appointments = await appointment_service.list_appointments_for_patient(repo, patient_id)
    return [AppointmentPublic.model_validate(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(
    appointment_id: int,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> AppointmentPublic:
    appointment = await appointment_service.get_appointment(repo, appointment_id)
    return AppointmentPublic.model_validate(appointment)


@router.put("/{appointment_id}/reschedule", response_model=AppointmentPublic)
async def reschedule_appointment(
    appointment_id: int,
    body: RescheduleRequest,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> AppointmentPublic:
    appointment = await appointment_service.reschedule_appointment(repo, appointment_id, body.date_time)
    return AppointmentPublic.model_validate(appointment)


@router.put("/{appointment_id}/status", response_model=AppointmentPublic)
async def update_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> AppointmentPublic:
    appointment = await appointment_service.update_appointment_status(
        repo, appointment_id, body.status, body.cancel_reason
    )
    return AppointmentPublic.model_validate(appointment)
