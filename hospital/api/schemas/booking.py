from datetime import datetime

from pydantic import BaseModel

from hospital.models.appointment import AppointmentStatus
from hospital.models.examination import ExaminationResults, ExaminationStatus


class RescheduleRequest(BaseModel):
    date_time: datetime


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    cancel_reason: str | None = None


class ExaminationStatusUpdate(BaseModel):
    status: ExaminationStatus
    results: ExaminationResults | None = None
    cancel_reason: str | None = None
