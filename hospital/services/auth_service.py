from hospital.core.config import settings
from hospital.core.security import create_access_token, verify_password
from hospital.models.staff import Staff
from hospital.repositories.sql import SqlRepository


def make_access_token(staff: Staff) -> tuple[str, int]:
    access = create_access_token(staff.id, staff.role)
    expires_in = settings.access_token_expire_minutes * 60
    return access, expires_in


async def login_staff(
    repo: SqlRepository, email: str, password: str, role: str | None = None
) -> tuple[Staff, str, int] | None:
    """Returns (staff, access_token, expires_in) or None for bad credentials or a role mismatch."""
    staff = await repo.find_staff_by_email(email)
    if not staff or not verify_password(password, staff.hashed_password):
        return None
    if role is not None and staff.role != role:
        return None
    access, expires_in = make_access_token(staff)
    return staff, access, expires_in
