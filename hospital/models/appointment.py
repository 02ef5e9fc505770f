from datetime import datetime, timedelta
from typing import Literal

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from hospital.scheduling.timeutils import utc_naive_now, wall_clock

AppointmentStatus = Literal["scheduled", "confirmed", "completed", "cancelled", "no_show"]
AppointmentType = Literal[
    "regular_checkup", "follow_up", "consultation", "emergency", "vaccination", "lab_work"
]
BookingKind = Literal["appointment", "examination"]


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    id: int | None = Field(default=None, primary_key=True)
    patient_id: int = Field(index=True)
    doctor_id: int = Field(foreign_key="staff.id", ondelete="CASCADE", index=True)
    type: str
    status: str = Field(default="scheduled", index=True)
    # facility-local wall clock, naive
    date_time: datetime = Field(index=True)
    duration: int  # minutes
    reason: str
    notes: str | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class AppointmentCreate(SQLModel):
    patient_id: int
    doctor_id: int
    type: AppointmentType
    date_time: datetime
    duration: int = Field(gt=0, le=24 * 60)
    reason: str
    notes: str | None = None

    @field_validator("date_time")
    @classmethod
    def _local_date_time(cls, value: datetime) -> datetime:
        return wall_clock(value)


class AppointmentPublic(SQLModel):
    id: int
    patient_id: int
    doctor_id: int
    type: str
    status: str
    date_time: datetime
    duration: int
    reason: str
    notes: str | None = None
    cancelled_at: datetime | None = None
    cancel_reason: str | None = None
    created_at: datetime
    updated_at: datetime


class BookedInterval(SQLModel):
    """A reservation of a doctor's time, covering ``[start, start + duration)``."""

    id: int
    kind: BookingKind
    doctor_id: int
    start: datetime
    duration: int

    @property
    def end(self) -> datetime:
        return self.start + timedelta(minutes=self.duration)
