from pydantic import BaseModel, EmailStr, constr
from datetime import datetime
from typing import Optional
from uuid import UUID

from models.enums import UserRole

class UserRegister(BaseModel):
    email: EmailStr
    password: constr(min_length=6)
    name: str

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: UUID
    email: EmailStr
    name: str
    role: UserRole
    created_at: datetime
    class Config:
        from_attributes = True

class CurrentUser(UserOut):
    """Authenticated user plus the role record ids the permission policy needs."""
    student_id: Optional[UUID] = None
    department_id: Optional[UUID] = None

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"

class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: constr(min_length=6)

class AdminUserCreate(BaseModel):
    name: str
    email: EmailStr
    password: constr(min_length=6)
    role: UserRole = UserRole.DEPARTMENT_ADMINISTRATOR
    department_id: Optional[UUID] = None
    permissions: Optional[dict] = None

class AdminUserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    department_id: Optional[UUID] = None
    permissions: Optional[dict] = None

class AdminUserOut(UserOut):
    department_id: Optional[UUID] = None
    updated_at: datetime

class PasswordReset(BaseModel):
    new_password: constr(min_length=6)
