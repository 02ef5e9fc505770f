from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from hospital.core.db import get_session
from hospital.core.security import decode_access_token
from hospital.models.staff import Staff
from hospital.repositories.sql import SqlRepository
from hospital.services.scheduling_service import SchedulingService

security = HTTPBearer(auto_error=False)


def get_repository(session: AsyncSession = Depends(get_session)) -> SqlRepository:
    return SqlRepository(session)


def get_scheduling_service(repo: SqlRepository = Depends(get_repository)) -> SchedulingService:
    return SchedulingService(repo)


async def get_current_staff(
    repo: SqlRepository = Depends(get_repository),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Staff:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    claims = decode_access_token(credentials.credentials)
    if not claims:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        staff_id = int(claims.user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    staff = await repo.find_staff_by_id(staff_id)
    if not staff or staff.role != claims.role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return staff


def require_roles(*roles: str) -> Callable[..., Coroutine[Any, Any, Staff]]:
    """Dependency that lets through only staff whose token role is one of ``roles``."""

    async def checker(current: Staff = Depends(get_current_staff)) -> Staff:
        if current.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Insufficient permissions.",
            )
        return current

    return checker
