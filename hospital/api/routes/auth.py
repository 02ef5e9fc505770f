import logging

from fastapi import APIRouter, Depends, HTTPException, status

from hospital.api.deps import get_current_staff, get_repository
from hospital.api.schemas.auth import LoginRequest, TokenResponse
from hospital.models.staff import Staff, StaffMember, staff_to_member
from hospital.repositories.sql import SqlRepository
from hospital.services.auth_service import login_staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    repo: SqlRepository = Depends(get_repository),
) -> TokenResponse:
    result = await login_staff(repo, body.email, body.password, body.role)
    if not result:
        logger.info("Failed login for %s", body.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    staff, access, expires_in = result
    return TokenResponse(access_token=access, expires_in=expires_in, role=staff.role)


@router.get("/me", response_model=StaffMember)
async def me(
    current: Staff = Depends(get_current_staff),
    repo: SqlRepository = Depends(get_repository),
) -> StaffMember:
    return staff_to_member(current, await repo.find_availability(current.id))
