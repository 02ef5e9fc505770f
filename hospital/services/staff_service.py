import logging

from pydantic import ValidationError

from hospital.core.exceptions import ConflictError, NotFoundError, ParseError
from hospital.core.security import hash_password
from hospital.models.staff import (
    COMMON_FIELDS,
    ROLE_FIELDS,
    Doctor,
    Nurse,
    StaffCreate,
    StaffMember,
    StaffUpdate,
    WeeklyAvailability,
    staff_member_adapter,
    staff_to_member,
    validate_weekly_availability,
)
from hospital.repositories.sql import SqlRepository

logger = logging.getLogger(__name__)


async def create_staff(repo: SqlRepository, data: StaffCreate) -> StaffMember:
    if await repo.find_staff_by_email(data.email):
        raise ConflictError("A staff member with this email already exists")
    staff = await repo.create_staff(data, hash_password(data.password))
    logger.info("Created %s staff member %s", staff.role, staff.id)
    return staff_to_member(staff, await repo.find_availability(staff.id))


async def get_staff(repo: SqlRepository, staff_id: int) -> StaffMember:
    staff = await repo.find_staff_by_id(staff_id)
    if staff is None:
        raise NotFoundError("Staff member not found")
    return staff_to_member(staff, await repo.find_availability(staff_id))


async def list_staff(repo: SqlRepository, role: str | None = None) -> list[StaffMember]:
    return await repo.find_staff_members(role=role)


async def list_staff_by_department(repo: SqlRepository, department: str) -> list[StaffMember]:
    staff = await repo.find_staff_members(department=department)
    if not staff:
        raise NotFoundError(f"No staff found for department: {department}")
    return staff


async def list_doctors(
    repo: SqlRepository, department: str | None = None, specialization: str | None = None
) -> list[Doctor]:
    return await repo.find_doctors(department=department, specialization=specialization)


async def get_doctor_availability(repo: SqlRepository, doctor_id: int) -> list[WeeklyAvailability]:
    doctor = await repo.find_doctor_by_id(doctor_id)
    if doctor is None:
        raise NotFoundError("Doctor not found")
    return doctor.availability


async def update_doctor_availability(
    repo: SqlRepository, doctor_id: int, availability: list[WeeklyAvailability]
) -> list[WeeklyAvailability]:
    """Replace the doctor's weekly windows. Existing bookings are left as they are."""
    doctor = await repo.find_doctor_by_id(doctor_id)
    if doctor is None:
        raise NotFoundError("Doctor not found")
    try:
        validate_weekly_availability(availability)
    except ValueError as e:
        raise ParseError(str(e)) from e
    await repo.replace_availability(doctor_id, availability)
    logger.info("Doctor %s availability updated: %d window(s)", doctor_id, len(availability))
    return await get_doctor_availability(repo, doctor_id)


async def update_staff(repo: SqlRepository, staff_id: int, data: StaffUpdate) -> StaffMember:
    staff = await repo.find_staff_by_id(staff_id)
    if staff is None:
        raise NotFoundError("Staff member not found")
    changes = data.model_dump(exclude_unset=True)
    allowed = {*COMMON_FIELDS, *ROLE_FIELDS[staff.role], "password"}
    foreign = sorted(set(changes) - allowed)
    if foreign:
        raise ParseError(f"Fields do not apply to role {staff.role}: {', '.join(foreign)}")
    if "email" in changes and changes["email"] != staff.email and await repo.find_staff_by_email(changes["email"]):
        raise ConflictError("A staff member with this email already exists")
    if "password" in changes:
        password = changes.pop("password")
        if password is not None:
            changes["hashed_password"] = hash_password(password)
    merged = {
        **staff.model_dump(exclude={"hashed_password", "created_at", "updated_at"}),
        **{k: v for k, v in changes.items() if k != "hashed_password"},
    }
    try:
        staff_member_adapter.validate_python({k: v for k, v in merged.items() if v is not None})
    except ValidationError as e:
        raise ParseError(str(e)) from e
    staff = await repo.update_staff(staff, changes)
    logger.info("Staff member %s updated: %s", staff_id, ", ".join(sorted(changes)) or "no changes")
    return staff_to_member(staff, await repo.find_availability(staff_id))


async def update_nurse_shift(repo: SqlRepository, nurse_id: int, shift: str) -> Nurse:
    staff = await repo.find_staff_by_id(nurse_id)
    if staff is None or staff.role != "nurse":
        raise NotFoundError("Nurse not found")
    return await update_staff(repo, nurse_id, StaffUpdate(shift=shift))


async def delete_staff(repo: SqlRepository, staff_id: int) -> None:
    """Remove a staff member. A doctor's availability and bookings are deleted with them."""
    staff = await repo.find_staff_by_id(staff_id)
    if staff is None:
        raise NotFoundError("Staff member not found")
    await repo.delete_staff(staff)
    logger.info("Deleted %s staff member %s", staff.role, staff_id)
