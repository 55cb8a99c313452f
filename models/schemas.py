from pydantic import BaseModel, ConfigDict, Field, constr
from datetime import datetime
from typing import Optional, List
from uuid import UUID

from models.enums import QualificationType, RequirementType, ApplicationStatus


# ---------------- Catalog ----------------

class UniversityIn(BaseModel):
    name: constr(min_length=1)
    slug: constr(min_length=1)
    location: str = ""

class UniversityUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None
    location: Optional[str] = None

class UniversityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    name: str
    slug: str
    location: str
    created_at: datetime

class DepartmentIn(BaseModel):
    university_id: UUID
    name: constr(min_length=1)
    code: constr(min_length=1)

class DepartmentUpdate(BaseModel):
    university_id: Optional[UUID] = None
    name: Optional[str] = None
    code: Optional[str] = None

class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    university_id: UUID
    name: str
    code: str
    university_name: Optional[str] = None
    program_count: int = 0

class RequirementIn(BaseModel):
    type: RequirementType
    subject: Optional[str] = None
    min_grade: Optional[str] = None
    description: str = ""

class RequirementUpdate(BaseModel):
    type: Optional[RequirementType] = None
    subject: Optional[str] = None
    min_grade: Optional[str] = None
    description: Optional[str] = None

class RequirementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    program_id: UUID
    type: str
    subject: Optional[str] = None
    min_grade: Optional[str] = None
    description: str

class ProgramIn(BaseModel):
    department_id: UUID
    name: constr(min_length=1)
    requirements: List[RequirementIn] = Field(default_factory=list)

class ProgramUpdate(BaseModel):
    department_id: Optional[UUID] = None
    name: Optional[str] = None

class ProgramOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    department_id: UUID
    name: str
    department_name: Optional[str] = None
    university_name: Optional[str] = None
    requirements: List[RequirementOut] = Field(default_factory=list)


# ---------------- Qualifications ----------------

class QualificationIn(BaseModel):
    type: QualificationType
    subject: constr(min_length=1)
    grade: constr(min_length=1)

class QualificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    student_id: UUID
    type: str
    subject: str
    grade: str
    verified: bool
    created_at: datetime


# ---------------- Applications ----------------

class ApplicationIn(BaseModel):
    program_id: UUID
    status: ApplicationStatus = ApplicationStatus.DRAFT
    # admins may create on behalf of a student user
    user_id: Optional[UUID] = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    note: Optional[str] = None

class NoteIn(BaseModel):
    content: constr(min_length=1)
    internal_only: bool = True

class NoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    content: str
    internal_only: bool
    created_at: datetime
    author_id: UUID
    author_name: Optional[str] = None

class ApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    student_id: UUID
    program_id: UUID
    status: str
    submitted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    program_name: Optional[str] = None
    department_name: Optional[str] = None
    university_name: Optional[str] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    notes: List[NoteOut] = Field(default_factory=list)

class ApplicationPage(BaseModel):
    applications: List[ApplicationOut]
    total: int
    page: int
    total_pages: int

