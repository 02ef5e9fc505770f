from datetime import date

from fastapi import APIRouter, Depends, Query, status

from hospital.api.deps import get_current_staff, get_repository, require_roles
from hospital.api.schemas.booking import ExaminationStatusUpdate
from hospital.models.examination import ExaminationCreate, ExaminationPublic
from hospital.models.staff import Staff
from hospital.repositories.sql import SqlRepository
from hospital.services import examination_service

router = APIRouter(prefix="/examinations", tags=["examinations"])


@router.post("", response_model=ExaminationPublic, status_code=status.HTTP_201_CREATED)
async def schedule_examination(
    body: ExaminationCreate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> ExaminationPublic:
    examination = await examination_service.create_examination(repo, body)
    return ExaminationPublic.model_validate(examination)


@router.get("/pending", response_model=list[ExaminationPublic])
async def pending_examinations(
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> list[ExaminationPublic]:
    examinations = await examination_service.get_pending_examinations(repo)
    return [ExaminationPublic.model_validate(e) for e in examinations]


@router.get("/doctor/{doctor_id}", response_model=list[ExaminationPublic])
async def doctor_examinations(
    doctor_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(get_current_staff),
) -> list[ExaminationPublic]:
    examinations = await examination_service.get_doctor_examinations(repo, doctor_id, start_date, end_date)
    return [ExaminationPublic.model_validate(e) for e in examinations]


@router.put("/{examination_id}/status", response_model=ExaminationPublic)
async def update_examination_status(
    examination_id: int,
    body: ExaminationStatusUpdate,
    repo: SqlRepository = Depends(get_repository),
    _: Staff = Depends(require_roles("doctor", "nurse", "lab_technician", "admin")),
) -> ExaminationPublic:
    examination = await examination_service.update_examination_status(
        repo, examination_id, body.status, results=body.results, cancel_reason=body.cancel_reason
    )
    return ExaminationPublic.model_validate(examination)
