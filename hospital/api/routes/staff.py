from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from hospital.api.deps import get_current_staff, get_repository, get_scheduling_service, require_roles
from hospital.api.schemas.staff import AvailabilityUpdate, NurseShiftUpdate
from hospital.core.exceptions import ParseError
from hospital.models.schedule import DoctorSchedule
from hospital.models.staff import Doctor, Nurse, Staff, StaffCreate, StaffMember, StaffRole, StaffUpdate, WeeklyAvailability
from hospital.repositories.sql import SqlRepository
from hospital.scheduling.timeutils import to_minutes
from hospital.services import staff_service
from hospital.services.scheduling_service import SchedulingService

router = APIRouter(prefix="/staff", tags=["staff"])


@router.get("/doctors", response_model=list[Doctor])
async def list_doctors(
    department: str | None = Query(None),
    specialization: str | None = Query(None),
    repo: SqlRepository = Depends(get_repository),
) -> list[Doctor]:
    return await staff_service.list_doctors(repo, department=department, specialization=specialization)


@router.get("/doctors/available", response_model=list[Doctor])
async def available_doctors(
    date_param: date = Query(..., alias="date"),
    start_time: str = Query(..., description="HH:MM"),
    end_time: str = Query(..., description="HH:MM"),
    department: str | None = Query(None),
    specialization: str | None = Query(None),
    scheduling: SchedulingService = Depends(get_scheduling_service),
) -> list[Doctor]:
    """Doctors whose weekly window covers [start_time, end_time) on that date and who have no overlapping booking."""
    if to_minutes(start_time) >= to_minutes(end_time):
        raise ParseError("start_time must be before end_time")
    return await scheduling.get_available_doctors(
        date_param,
        start_time,
        end_time,
        department=department,
        specialization=specialization,
    )


@router.get("/doctors/{doctor_id}/schedule", response_model=list[DoctorSchedule])
async def doctor_schedule(
    doctor_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    scheduling: SchedulingService = Depends(get_scheduling_service),
    _: Staff = Depends(require_roles("doctor", "admin")),
) -> list[DoctorSchedule]:
    """30-minute slot grid for every working day in [start_date, end_date]."""
    return await scheduling.get_doctor_schedule(doctor_id, start_date, end_date)


@router.get("/doctors/{doctor_id}/availability", response_model=list[WeeklyAvailability])
async def doctor_availability(
    doctor_id: int,
    repo: SqlRepository = Depends(get_repository),
) -> list[WeeklyAvailability]:
    return await staff_service.get_doctor_availability(repo, doctor_id)


@router.put("/doctors/{doctor_id}/availability", response_model=list[WeeklyAvailability])
async def update_doctor_availability(
    doctor_id: int,
    body: AvailabilityUpdate,
    repo: SqlRepository = Depends(get_repository),
    current: Staff = Depends(require_roles("doctor", "admin")),
) -> list[WeeklyAvailability]:
    if current.role == "doctor" and current.id != doctor_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Doctors can only change their own availability",
        )
    return await staff_service.update_doctor_availability(repo, doctor_id, body.availability)


@router.get("", response_model=list[StaffMember])
async def list_staff(
    role: StaffRole | None = Query(None),
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> list[StaffMember]:
    return await staff_service.list_staff(repo, role=role)


@router.get("/department/{department}", response_model=list[StaffMember])
async def staff_by_department(
    department: str,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> list[StaffMember]:
    return await staff_service.list_staff_by_department(repo, department)


@router.put("/nurses/{nurse_id}/shift", response_model=Nurse)
async def update_nurse_shift(
    nurse_id: int,
    body: NurseShiftUpdate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(require_roles("admin")),
) -> Nurse:
    return await staff_service.update_nurse_shift(repo, nurse_id, body.shift)


@router.post("", response_model=StaffMember, status_code=status.HTTP_201_CREATED)
async def create_staff(
    body: StaffCreate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(require_roles("admin")),
) -> StaffMember:
    return await staff_service.create_staff(repo, body)


@router.get("/{staff_id}", response_model=StaffMember)
async def get_staff(
    staff_id: int,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> StaffMember:
    return await staff_service.get_staff(repo, staff_id)


@router.put("/{staff_id}", response_model=StaffMember)
async def update_staff(
    staff_id: int,
    body: StaffUpdate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(require_roles("admin")),
) -> StaffMember:
    """Partial update; fields that belong to another role are rejected with 422."""
    return await staff_service.update_staff(repo, staff_id, body)


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_staff(
    staff_id: int,
    repo: SqlRepository = Depends(get_repository),
    current: Staff = Depends(require_roles("admin")),
) -> Response:
    """Delete a staff member together with a doctor's availability and bookings."""
    if current.id == staff_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Admins cannot delete their own account",
        )
    await staff_service.delete_staff(repo, staff_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
