from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import Field as PydanticField
from pydantic import TypeAdapter, field_validator, model_validator
from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from hospital.scheduling.timeutils import WEEKDAYS, to_minutes, utc_naive_now

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
StaffRole = Literal["doctor", "nurse", "admin", "emergency", "lab_technician"]


class WeeklyAvailability(SQLModel):
    day: Weekday
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def _valid_clock_time(cls, value: str) -> str:
        to_minutes(value)
        return value

    @model_validator(mode="after")
    def _start_before_end(self) -> "WeeklyAvailability":
        if to_minutes(self.start_time) >= to_minutes(self.end_time):
            raise ValueError(f"start_time must be before end_time on {self.day}")
        return self


def validate_weekly_availability(windows: list[WeeklyAvailability]) -> list[WeeklyAvailability]:
    days = [w.day for w in windows]
    duplicated = sorted({d for d in days if days.count(d) > 1}, key=WEEKDAYS.index)
    if duplicated:
        raise ValueError(f"only one availability window per day is supported: {', '.join(duplicated)}")
    return windows


class Staff(SQLModel, table=True):
    """Every staff role shares this table; role-specific columns are nullable."""

    __tablename__ = "staff"
    id: int | None = Field(default=None, primary_key=True)
    role: str = Field(index=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    first_name: str
    last_name: str
    contact_number: str | None = None
    employee_id: str | None = None
    department: str = Field(index=True)
    # doctor
    specialization: str | None = Field(default=None, index=True)
    license_number: str | None = None
    # nurse
    shift: str | None = None
    certification_number: str | None = None
    # admin
    position: str | None = None
    access_level: str | None = None
    # emergency
    emergency_role: str | None = None
    # lab_technician
    lab_id: str | None = None
    test_types: list[str] | None = Field(default=None, sa_column=Column(JSON))
    # emergency and lab_technician
    active_shift: bool = False
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class DoctorAvailability(SQLModel, table=True):
    __tablename__ = "doctor_availability"
    __table_args__ = (UniqueConstraint("staff_id", "day", name="uq_doctor_availability_staff_day"),)
    id: int | None = Field(default=None, primary_key=True)
    staff_id: int = Field(foreign_key="staff.id", ondelete="CASCADE", index=True)
    day: str
    start_time: str
    end_time: str


# Role variants. Raw staff records are parsed through ``StaffMember``, which
# dispatches on ``role``.


class StaffBase(SQLModel):
    id: int | None = None
    email: str
    first_name: str
    last_name: str
    contact_number: str | None = None
    employee_id: str | None = None
    department: str


class Doctor(StaffBase):
    role: Literal["doctor"] = "doctor"
    specialization: str
    license_number: str | None = None
    availability: list[WeeklyAvailability] = []

    @field_validator("availability")
    @classmethod
    def _availability_days(cls, value: list[WeeklyAvailability]) -> list[WeeklyAvailability]:
        return validate_weekly_availability(value)


class Nurse(StaffBase):
    role: Literal["nurse"] = "nurse"
    shift: Literal["morning", "afternoon", "night"]
    certification_number: str | None = None


class AdminStaff(StaffBase):
    role: Literal["admin"] = "admin"
    position: str | None = None
    access_level: Literal["basic", "intermediate", "full"] = "basic"


class EmergencyTeamMember(StaffBase):
    role: Literal["emergency"] = "emergency"
    emergency_role: str | None = None
    active_shift: bool = False


class LabTechnician(StaffBase):
    role: Literal["lab_technician"] = "lab_technician"
    lab_id: str | None = None
    test_types: list[str] = []
    active_shift: bool = False


StaffMember = Annotated[
    Union[Doctor, Nurse, AdminStaff, EmergencyTeamMember, LabTechnician],
    PydanticField(discriminator="role"),
]

staff_member_adapter: TypeAdapter[StaffMember] = TypeAdapter(StaffMember)


def staff_to_member(
    row: Staff, availability: list[DoctorAvailability] | None = None
) -> Doctor | Nurse | AdminStaff | EmergencyTeamMember | LabTechnician:
    """Build the role variant for a stored staff row."""
    data = row.model_dump(exclude={"hashed_password", "created_at", "updated_at"})
    if row.role == "doctor":
        data["availability"] = [
            {"day": a.day, "start_time": a.start_time, "end_time": a.end_time}
            for a in sorted(availability or [], key=lambda a: WEEKDAYS.index(a.day))
        ]
    data = {k: v for k, v in data.items() if v is not None}
    return staff_member_adapter.validate_python(data)


class StaffCreate(SQLModel):
    """Incoming staff record; role-specific fields are checked against ``StaffMember``."""

    role: StaffRole
    email: str
    password: str = Field(min_length=8)
    first_name: str
    last_name: str
    contact_number: str | None = None
    employee_id: str | None = None
    department: str
    specialization: str | None = None
    license_number: str | None = None
    availability: list[WeeklyAvailability] = []
    shift: str | None = None
    certification_number: str | None = None
    position: str | None = None
    access_level: str | None = None
    emergency_role: str | None = None
    lab_id: str | None = None
    test_types: list[str] | None = None
    active_shift: bool = False

    @model_validator(mode="after")
    def _matches_role_variant(self) -> "StaffCreate":
        data = self.model_dump(exclude={"password"})
        data = {k: v for k, v in data.items() if v is not None}
        staff_member_adapter.validate_python(data)
        return self


# Columns every role shares, and the columns owned by each role
COMMON_FIELDS = ("email", "first_name", "last_name", "contact_number", "employee_id", "department")
ROLE_FIELDS: dict[str, tuple[str, ...]] = {
    "doctor": ("specialization", "license_number"),
    "nurse": ("shift", "certification_number"),
    "admin": ("position", "access_level"),
    "emergency": ("emergency_role", "active_shift"),
    "lab_technician": ("lab_id", "test_types", "active_shift"),
}


class StaffUpdate(SQLModel):
    """Partial update. Only fields that are set are applied; the role never changes."""

    email: str | None = None
    password: str | None = Field(default=None, min_length=8)
    first_name: str | None = None
    last_name: str | None = None
    contact_number: str | None = None
    employee_id: str | None = None
    department: str | None = None
    specialization: str | None = None
    license_number: str | None = None
    shift: str | None = None
    certification_number: str | None = None
    position: str | None = None
    access_level: str | None = None
    emergency_role: str | None = None
    lab_id: str | None = None
    test_types: list[str] | None = None
    active_shift: bool | None = None
