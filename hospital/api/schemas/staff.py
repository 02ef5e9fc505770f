from typing import Literal

from pydantic import BaseModel, field_validator

from hospital.models.staff import WeeklyAvailability, validate_weekly_availability


class AvailabilityUpdate(BaseModel):
    availability: list[WeeklyAvailability]

    @field_validator("availability")
    @classmethod
    def _one_window_per_day(cls, value: list[WeeklyAvailability]) -> list[WeeklyAvailability]:
        return validate_weekly_availability(value)


class NurseShiftUpdate(BaseModel):
    shift: Literal["morning", "afternoon", "night"]
