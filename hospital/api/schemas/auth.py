from pydantic import BaseModel, EmailStr

from hospital.models.staff import StaffRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: StaffRole | None = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    role: str
