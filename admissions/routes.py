"""
Admissions API Routes

Catalog (universities, departments, programs, requirements), qualifications,
applications, administrator accounts and dashboards. Handlers stay thin: they
open the session, hand the caller's Policy to the service and serialize.
"""

from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from db import get_db
from models.enums import ApplicationStatus, QualificationType, UserRole
from models.schemas import (
    UniversityIn, UniversityUpdate, UniversityOut,
    DepartmentIn, DepartmentUpdate, DepartmentOut,
    ProgramIn, ProgramUpdate, ProgramOut,
    RequirementIn, RequirementUpdate, RequirementOut,
    QualificationIn, QualificationOut,
    ApplicationIn, ApplicationStatusUpdate, ApplicationOut, ApplicationPage,
    NoteIn, NoteOut,
)
from models.schemas_user import AdminUserCreate, AdminUserUpdate, AdminUserOut, PasswordReset
from recommendation.logic.enricher import CourseRecommendationEnricher
from recommendation.logic.rate_limiter import youtube_rate_limiter
from utils.deps import current_policy, http_errors
from .logic import analytics, applications, departments, programs, qualifications, universities, users
from .logic.applications import ApplyCheck
from .logic.policy import Policy


# =============================================================================
# UNIVERSITIES
# =============================================================================

universities_router = APIRouter(prefix="/universities", tags=["universities"])


@universities_router.get("", response_model=List[UniversityOut], summary="List universities")
def list_universities(q: Optional[str] = None, db_session=Depends(get_db)):
    db: Session
    with db_session as db:
        rows = universities.search_universities(db, q) if q else universities.get_universities(db)
        return [UniversityOut.model_validate(u) for u in rows]


@universities_router.get("/slug/{slug}", response_model=UniversityOut, summary="University by slug")
def university_by_slug(slug: str, db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return UniversityOut.model_validate(universities.get_university_by_slug(db, slug))


@universities_router.get("/{university_id}", response_model=UniversityOut, summary="University by id")
def university_by_id(university_id: UUID, db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return UniversityOut.model_validate(universities.get_university(db, university_id))


@universities_router.post("", response_model=UniversityOut, status_code=201, summary="Create university")
def create_university(payload: UniversityIn, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return UniversityOut.model_validate(universities.create_university(db, policy, payload))


@universities_router.patch("/{university_id}", response_model=UniversityOut, summary="Update university")
def update_university(
    university_id: UUID,
    payload: UniversityUpdate,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return UniversityOut.model_validate(universities.update_university(db, policy, university_id, payload))


@universities_router.delete("/{university_id}", status_code=204, summary="Delete university and its catalog")
def delete_university(university_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        universities.delete_university(db, policy, university_id)


# =============================================================================
# DEPARTMENTS
# =============================================================================

departments_router = APIRouter(prefix="/departments", tags=["departments"])


@departments_router.get("", response_model=List[DepartmentOut], summary="List departments")
def list_departments(
    university_id: Optional[UUID] = None,
    q: Optional[str] = None,
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db:
        if q:
            rows = departments.search_departments(db, q, university_id=university_id)
        else:
            rows = departments.get_departments(db, university_id=university_id)
        return [departments.serialize_department(db, d) for d in rows]


@departments_router.get("/mine", response_model=List[DepartmentOut], summary="Departments I administer")
def my_departments(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return [departments.serialize_department(db, d) for d in departments.get_departments(db, policy)]


@departments_router.get("/{department_id}", response_model=DepartmentOut, summary="Department by id")
def department_by_id(department_id: UUID, db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return departments.serialize_department(db, departments.get_department(db, department_id))


@departments_router.post("", response_model=DepartmentOut, status_code=201, summary="Create department")
def create_department(payload: DepartmentIn, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return departments.serialize_department(db, departments.create_department(db, policy, payload))


@departments_router.patch("/{department_id}", response_model=DepartmentOut, summary="Update department")
def update_department(
    department_id: UUID,
    payload: DepartmentUpdate,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        department = departments.update_department(db, policy, department_id, payload)
        return departments.serialize_department(db, department)


@departments_router.delete("/{department_id}", status_code=204, summary="Delete department")
def delete_department(department_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        departments.delete_department(db, policy, department_id)


# =============================================================================
# PROGRAMS & REQUIREMENTS
# =============================================================================

programs_router = APIRouter(prefix="/programs", tags=["programs"])


@programs_router.get("", response_model=List[ProgramOut], summary="List programs")
def list_programs(
    department_id: Optional[UUID] = None,
    university_id: Optional[UUID] = None,
    q: Optional[str] = None,
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db:
        if q:
            rows = programs.search_programs(db, q)
        else:
            rows = programs.get_programs(db, department_id=department_id, university_id=university_id)
        return [programs.serialize_program(p) for p in rows]


@programs_router.get("/{program_id}", response_model=ProgramOut, summary="Program with requirements")
def program_by_id(program_id: UUID, db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return programs.serialize_program(programs.get_program(db, program_id))


@programs_router.post("", response_model=ProgramOut, status_code=201, summary="Create program")
def create_program(payload: ProgramIn, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        program = programs.create_program(db, policy, payload)
        return programs.serialize_program(programs.get_program(db, program.id))


@programs_router.patch("/{program_id}", response_model=ProgramOut, summary="Update program")
def update_program(
    program_id: UUID,
    payload: ProgramUpdate,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        programs.update_program(db, policy, program_id, payload)
        db.expire_all()
        return programs.serialize_program(programs.get_program(db, program_id))


@programs_router.delete("/{program_id}", status_code=204, summary="Delete program, requirements and applications")
def delete_program(program_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        programs.delete_program(db, policy, program_id)


@programs_router.get("/{program_id}/requirements", response_model=List[RequirementOut], summary="Program requirements")
def list_requirements(program_id: UUID, db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return [RequirementOut.model_validate(r) for r in programs.get_requirements(db, program_id)]


@programs_router.post(
    "/{program_id}/requirements", response_model=RequirementOut, status_code=201, summary="Add requirement"
)
def create_requirement(
    program_id: UUID,
    payload: RequirementIn,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return RequirementOut.model_validate(programs.create_requirement(db, policy, program_id, payload))


@programs_router.patch("/requirements/{requirement_id}", response_model=RequirementOut, summary="Update requirement")
def update_requirement(
    requirement_id: UUID,
    payload: RequirementUpdate,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return RequirementOut.model_validate(programs.update_requirement(db, policy, requirement_id, payload))


@programs_router.delete("/requirements/{requirement_id}", status_code=204, summary="Delete requirement")
def delete_requirement(requirement_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        programs.delete_requirement(db, policy, requirement_id)


@programs_router.get("/{program_id}/eligibility", response_model=ApplyCheck, summary="Can I apply to this program?")
def program_eligibility(program_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return applications.can_student_apply(db, policy.user_id, program_id)


# =============================================================================
# QUALIFICATIONS
# =============================================================================

qualifications_router = APIRouter(prefix="/qualifications", tags=["qualifications"])


@qualifications_router.get("", response_model=List[QualificationOut], summary="List qualifications")
def list_qualifications(
    student_id: Optional[UUID] = None,
    type: Optional[QualificationType] = None,
    verified: Optional[bool] = None,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        rows = qualifications.get_qualifications(db, policy, student_id=student_id, type=type, verified=verified)
        return [QualificationOut.model_validate(q) for q in rows]


@qualifications_router.post("", response_model=QualificationOut, status_code=201, summary="Add qualification")
def create_qualification(payload: QualificationIn, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return QualificationOut.model_validate(qualifications.create_qualification(db, policy, payload))


@qualifications_router.post("/{qualification_id}/verify", response_model=QualificationOut, summary="Verify qualification")
def verify_qualification(qualification_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return QualificationOut.model_validate(qualifications.verify_qualification(db, policy, qualification_id))


@qualifications_router.delete("/{qualification_id}", status_code=204, summary="Delete qualification")
def delete_qualification(qualification_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        qualifications.delete_qualification(db, policy, qualification_id)


# =============================================================================
# APPLICATIONS
# =============================================================================

applications_router = APIRouter(prefix="/applications", tags=["applications"])


@applications_router.get("", response_model=ApplicationPage, summary="List applications (role scoped)")
def list_applications(
    status: Optional[ApplicationStatus] = None,
    program_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    department_id: Optional[UUID] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return applications.get_applications(
            db, policy,
            status=status,
            program_id=program_id,
            student_id=student_id,
            department_id=department_id,
            page=page,
            limit=limit,
        )


@applications_router.get("/review", response_model=List[ApplicationOut], summary="Department review queue")
def review_queue(
    status: Optional[ApplicationStatus] = None,
    search: Optional[str] = None,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return applications.get_applications_for_department_admin(db, policy, status=status, search=search)


@applications_router.get("/{application_id}", response_model=ApplicationOut, summary="Application detail")
def application_by_id(application_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return applications.get_application_by_id(db, policy, application_id)


@applications_router.post("", response_model=ApplicationOut, status_code=201, summary="Create application")
def create_application(payload: ApplicationIn, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        app = applications.create_application(
            db, policy, payload.program_id, status=payload.status, user_id=payload.user_id
        )
        return applications.get_application_by_id(db, policy, app.id)


@applications_router.post("/{application_id}/submit", response_model=ApplicationOut, summary="Submit draft")
def submit_application(application_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        applications.submit_application(db, policy, application_id)
        return applications.get_application_by_id(db, policy, application_id)


@applications_router.patch("/{application_id}/status", response_model=ApplicationOut, summary="Change status")
def update_status(
    application_id: UUID,
    payload: ApplicationStatusUpdate,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        applications.update_application_status(db, policy, application_id, payload.status, note=payload.note)
        return applications.get_application_by_id(db, policy, application_id)


@applications_router.post("/{application_id}/withdraw", status_code=204, summary="Withdraw application")
def withdraw_application(application_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        applications.withdraw_application(db, policy, application_id)


@applications_router.delete("/{application_id}", status_code=204, summary="Delete draft application")
def delete_application(application_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        applications.delete_application(db, policy, application_id)


@applications_router.post("/{application_id}/notes", response_model=NoteOut, status_code=201, summary="Add note")
def add_note(
    application_id: UUID,
    payload: NoteIn,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        note = applications.add_note_to_application(
            db, policy, application_id, payload.content, internal_only=payload.internal_only
        )
        return NoteOut(
            id=note.id,
            content=note.content,
            internal_only=note.internal_only,
            created_at=note.created_at,
            author_id=note.author_id,
        )


# =============================================================================
# ADMIN USERS
# =============================================================================

admin_users_router = APIRouter(prefix="/admin/users", tags=["admin"])


@admin_users_router.get("", response_model=List[AdminUserOut], summary="List administrators")
def list_admin_users(
    role: Optional[UserRole] = None,
    department_id: Optional[UUID] = None,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        rows = users.get_admin_users(db, policy, role=role, department_id=department_id)
        return [users.serialize_admin(u) for u in rows]


@admin_users_router.post("", response_model=AdminUserOut, status_code=201, summary="Create administrator")
def create_admin_user(payload: AdminUserCreate, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        user = users.create_admin_user(db, policy, payload)
        return users.serialize_admin(users.get_admin_user(db, policy, user.id))


@admin_users_router.get("/{user_id}", response_model=AdminUserOut, summary="Administrator by id")
def admin_user_by_id(user_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return users.serialize_admin(users.get_admin_user(db, policy, user_id))


@admin_users_router.patch("/{user_id}", response_model=AdminUserOut, summary="Update administrator")
def update_admin_user(
    user_id: UUID,
    payload: AdminUserUpdate,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        return users.serialize_admin(users.update_admin_user(db, policy, user_id, payload))


@admin_users_router.delete("/{user_id}", status_code=204, summary="Delete administrator")
def delete_admin_user(user_id: UUID, policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        users.delete_admin_user(db, policy, user_id)


@admin_users_router.post("/{user_id}/reset-password", status_code=204, summary="Reset a user's password")
def reset_password(
    user_id: UUID,
    payload: PasswordReset,
    policy: Policy = Depends(current_policy),
    db_session=Depends(get_db),
):
    db: Session
    with db_session as db, http_errors():
        users.reset_user_password(db, policy, user_id, payload.new_password)


# =============================================================================
# DASHBOARDS
# =============================================================================

dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("/student", summary="Student dashboard")
def student_dashboard(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        enricher = CourseRecommendationEnricher(db, rate_limiter=youtube_rate_limiter)
        return analytics.student_dashboard(db, policy, recommend=enricher.recommend)


@dashboard_router.get("/department", summary="Department administrator dashboard")
def department_dashboard(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return analytics.department_admin_dashboard(db, policy)


@dashboard_router.get("/overview", summary="Super administrator overview")
def super_admin_overview(policy: Policy = Depends(current_policy), db_session=Depends(get_db)):
    db: Session
    with db_session as db, http_errors():
        return analytics.super_admin_overview(db, policy)


routers = [
    universities_router,
    departments_router,
    programs_router,
    qualifications_router,
    applications_router,
    admin_users_router,
    dashboard_router,
]
