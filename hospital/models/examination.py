from datetime import datetime
from typing import Literal

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from hospital.scheduling.timeutils import utc_naive_now, wall_clock

ExaminationStatus = Literal["scheduled", "in_progress", "completed", "cancelled"]
ExaminationType = Literal["physical", "laboratory", "imaging", "specialist"]


class Examination(SQLModel, table=True):
    __tablename__ = "examinations"
    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(index=True)
    doctor_id: int = Field(foreign_key="staff.id", ondelete="CASCADE", index=True)
    type: str
    status: str = Field(default="scheduled", index=True)
    scheduled_date: datetime = Field(index=True)
    duration: int  # minutes
    notes: str | None = None
    findings: str | None = None
    recommendations: str | None = None
    cancel_reason: str | None = None
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None


class ExaminationCreate(SQLModel):
    patient_id: int
    doctor_id: int
    type: ExaminationType
    scheduled_date: datetime
    duration: int = Field(gt=0, le=24 * 60)
    notes: str | None = None

    @field_validator("scheduled_date")
    @classmethod
    def _local_scheduled_date(cls, value: datetime) -> datetime:
        return wall_clock(value)


class ExaminationResults(SQLModel):
    findings: str
    recommendations: str


class ExaminationPublic(SQLModel):
    id: int
    patient_id: int
    doctor_id: int
    type: str
    status: str
    scheduled_date: datetime
    duration: int
    notes: str | None = None
    findings: str | None = None
    recommendations: str | None = None
    cancel_reason: str | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
