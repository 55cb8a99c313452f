"""
Application Lifecycle

DRAFT -> PENDING (submit) -> UNDER_REVIEW / CONDITIONAL / APPROVED / REJECTED
(administrator controlled). Only DRAFT may be deleted, only DRAFT and PENDING
may be withdrawn. At most one active (DRAFT/PENDING/UNDER_REVIEW) application
exists per (student, program).

Every mutation writes an AuditLog row in the same transaction.
"""

import logging
import math
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from eligibility.logic import MatchDecision, ProgramMatch, match_student_to_program
from models.enums import ApplicationStatus, ACTIVE_APPLICATION_STATUSES
from models.models import Application, AuditLog, Department, Note, Program
from models.models_user import Student, User
from models.schemas import ApplicationOut, ApplicationPage, NoteOut
from utils.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from .policy import Policy

logger = logging.getLogger("admissions")

CREATABLE_STATUSES = (ApplicationStatus.DRAFT, ApplicationStatus.PENDING)
DELETABLE_STATUSES = (ApplicationStatus.DRAFT.value,)
WITHDRAWABLE_STATUSES = (ApplicationStatus.DRAFT.value, ApplicationStatus.PENDING.value)


class ApplyCheck(BaseModel):
    can_apply: bool
    reasons: List[str] = Field(default_factory=list)
    match: Optional[ProgramMatch] = None


# =============================================================================
# LOADING / SERIALIZATION
# =============================================================================

def _with_relations(stmt):
    return stmt.options(
        selectinload(Application.program).selectinload(Program.department).selectinload(Department.university),
        selectinload(Application.student).selectinload(Student.user),
        selectinload(Application.notes).selectinload(Note.author),
    )


def load_application(db: Session, application_id: UUID) -> Application:
    app = db.execute(
        _with_relations(select(Application).where(Application.id == application_id))
    ).scalar_one_or_none()
    if not app:
        raise NotFoundError("Application not found")
    return app


def find_active_application(
    db: Session, student_id: UUID, program_id: UUID, exclude_id: Optional[UUID] = None
) -> Optional[Application]:
    stmt = select(Application).where(
        Application.student_id == student_id,
        Application.program_id == program_id,
        Application.status.in_(ACTIVE_APPLICATION_STATUSES),
    )
    if exclude_id is not None:
        stmt = stmt.where(Application.id != exclude_id)
    return db.execute(_with_relations(stmt)).scalars().first()


def serialize_application(app: Application, include_internal: bool = True) -> ApplicationOut:
    program = app.program
    department = program.department if program else None
    university = department.university if department else None
    user = app.student.user if app.student else None
    notes = [
        NoteOut(
            id=n.id,
            content=n.content,
            internal_only=n.internal_only,
            created_at=n.created_at,
            author_id=n.author_id,
            author_name=n.author.name if n.author else None,
        )
        for n in app.notes
        if include_internal or not n.internal_only
    ]
    return ApplicationOut(
        id=app.id,
        student_id=app.student_id,
        program_id=app.program_id,
        status=app.status,
        submitted_at=app.submitted_at,
        created_at=app.created_at,
        updated_at=app.updated_at,
        program_name=program.name if program else None,
        department_name=department.name if department else None,
        university_name=university.name if university else None,
        student_name=user.name if user else None,
        student_email=user.email if user else None,
        notes=notes,
    )


def _department_id(app: Application) -> Optional[UUID]:
    return app.program.department_id if app.program else None


# =============================================================================
# APPLY CHECK
# =============================================================================

def can_student_apply(db: Session, user_id: UUID, program_id: UUID) -> ApplyCheck:
    """
    Whether the student behind `user_id` may apply to `program_id`.
    Read-only: repeated calls with unchanged data return the same answer.
    """
    student = db.execute(select(Student).where(Student.user_id == user_id)).scalar_one_or_none()
    if not student:
        return ApplyCheck(can_apply=False, reasons=["Student profile not found"])

    existing = find_active_application(db, student.id, program_id)
    if existing:
        program = existing.program
        return ApplyCheck(
            can_apply=False,
            reasons=[
                f"Already has a {existing.status} application for "
                f"{program.name} at {program.department.university.name}"
            ],
        )

    result = match_student_to_program(db, student.id, program_id)
    if result.decision == MatchDecision.BLOCK:
        return ApplyCheck(
            can_apply=False,
            reasons=[f"Match score of {result.match_score}% is below the minimum required to apply"],
            match=result,
        )
    return ApplyCheck(can_apply=True, match=result)


# =============================================================================
# MUTATIONS
# =============================================================================

def create_application(
    db: Session,
    policy: Policy,
    program_id: UUID,
    status: ApplicationStatus = ApplicationStatus.DRAFT,
    user_id: Optional[UUID] = None,
) -> Application:
    """Create a DRAFT (or directly PENDING) application for `user_id`, defaulting to the caller."""
    status = ApplicationStatus(status)
    if status not in CREATABLE_STATUSES:
        raise ValidationFailedError("Applications can only be created as DRAFT or PENDING")

    program = db.get(Program, program_id)
    if not program:
        raise NotFoundError("Program not found")

    student = db.execute(
        select(Student).where(Student.user_id == (user_id or policy.user_id))
    ).scalar_one_or_none()
    if not student:
        raise NotFoundError("Student not found")

    policy.require("application", "create", department_id=program.department_id, student_id=student.id)

    if find_active_application(db, student.id, program_id):
        raise ConflictError("An active application already exists for this program")

    now = datetime.utcnow()
    app = Application(
        student_id=student.id,
        program_id=program_id,
        status=status.value,
        submitted_at=now if status == ApplicationStatus.PENDING else None,
    )
    db.add(app)
    db.flush()

    AuditLog.record(
        db, "APPLICATION_CREATED", app.id, "Application",
        user_id=policy.user_id,
        details={"programId": str(program_id), "status": app.status},
    )
    db.flush()
    logger.info(f"Application {app.id} created for program {program_id} ({app.status})")
    return app


def submit_application(db: Session, policy: Policy, application_id: UUID) -> Application:
    if policy.is_student and not policy.student_id:
        raise NotFoundError("Student profile not found")
    app = load_application(db, application_id)
    policy.require("application", "submit", department_id=_department_id(app), student_id=app.student_id)

    if app.status != ApplicationStatus.DRAFT.value:
        raise InvalidStateError("Only draft applications can be submitted")

    app.status = ApplicationStatus.PENDING.value
    app.submitted_at = datetime.utcnow()
    AuditLog.record(
        db, "APPLICATION_SUBMITTED", app.id, "Application",
        user_id=policy.user_id,
        details={"programId": str(app.program_id)},
    )
    db.flush()
    return app


def update_application_status(
    db: Session,
    policy: Policy,
    application_id: UUID,
    new_status: ApplicationStatus,
    note: Optional[str] = None,
) -> Application:
    """Department administrators move applications in their own department; an optional internal note is attached."""
    new_status = ApplicationStatus(new_status)
    app = load_application(db, application_id)
    policy.require("application", "review", department_id=_department_id(app))

    if new_status == ApplicationStatus.DRAFT:
        raise InvalidStateError("Applications cannot be moved back to draft")
    if new_status.value in ACTIVE_APPLICATION_STATUSES:
        if find_active_application(db, app.student_id, app.program_id, exclude_id=app.id):
            raise ConflictError("Student already has an active application for this program")

    previous = app.status
    app.status = new_status.value
    if new_status == ApplicationStatus.PENDING and not app.submitted_at:
        app.submitted_at = datetime.utcnow()

    if note:
        db.add(Note(application_id=app.id, author_id=policy.user_id, content=note, internal_only=True))

    AuditLog.record(
        db, "STATUS_CHANGED", app.id, "Application",
        user_id=policy.user_id,
        details={"previousStatus": previous, "newStatus": new_status.value},
    )
    db.flush()
    db.expire(app, ["notes"])
    logger.info(f"Application {app.id} status {previous} -> {new_status.value}")
    return app


def _remove_application(db: Session, app: Application) -> None:
    """Notes first, then the application itself; caller's transaction."""
    notes = db.execute(select(Note).where(Note.application_id == app.id)).scalars().all()
    for n in notes:
        db.delete(n)
    db.delete(app)


def delete_application(db: Session, policy: Policy, application_id: UUID) -> None:
    app = load_application(db, application_id)
    policy.require("application", "delete", department_id=_department_id(app), student_id=app.student_id)

    if app.status not in DELETABLE_STATUSES:
        raise InvalidStateError("Only draft applications can be deleted")

    _remove_application(db, app)
    AuditLog.record(db, "APPLICATION_DELETED", application_id, "Application", user_id=policy.user_id)
    db.flush()


def withdraw_application(db: Session, policy: Policy, application_id: UUID) -> None:
    app = load_application(db, application_id)
    policy.require("application", "withdraw", department_id=_department_id(app), student_id=app.student_id)

    if app.status not in WITHDRAWABLE_STATUSES:
        raise InvalidStateError("Only draft and pending applications can be withdrawn")

    previous = app.status
    _remove_application(db, app)
    AuditLog.record(
        db, "APPLICATION_WITHDRAWN", application_id, "Application",
        user_id=policy.user_id,
        details={"previousStatus": previous},
    )
    db.flush()


def add_note_to_application(
    db: Session,
    policy: Policy,
    application_id: UUID,
    content: str,
    internal_only: bool = True,
) -> Note:
    app = load_application(db, application_id)
    policy.require("note", "create", department_id=_department_id(app), student_id=app.student_id)

    if internal_only and policy.is_student:
        raise PermissionDeniedError("Unauthorized: Students cannot add internal notes")

    note = Note(application_id=app.id, author_id=policy.user_id, content=content, internal_only=internal_only)
    db.add(note)
    db.flush()
    AuditLog.record(
        db, "NOTE_ADDED", note.id, "Note",
        user_id=policy.user_id,
        details={"applicationId": str(app.id), "internalOnly": internal_only},
    )
    db.flush()
    db.expire(app, ["notes"])
    return note


# =============================================================================
# QUERIES
# =============================================================================

def get_application_by_id(db: Session, policy: Policy, application_id: UUID) -> ApplicationOut:
    app = load_application(db, application_id)
    policy.require("application", "read", department_id=_department_id(app), student_id=app.student_id)
    return serialize_application(app, include_internal=policy.is_admin)


def get_applications(
    db: Session,
    policy: Policy,
    status: Optional[ApplicationStatus] = None,
    program_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    department_id: Optional[UUID] = None,
    page: int = 1,
    limit: int = 10,
) -> ApplicationPage:
    """Role-scoped listing: students see their own, department admins their department, super admins all."""
    page = max(page, 1)
    limit = max(limit, 1)
    stmt = select(Application).join(Program, Application.program_id == Program.id)

    if policy.is_student:
        stmt = stmt.where(Application.student_id == policy.require_student())
    elif policy.is_department_admin:
        stmt = stmt.where(Program.department_id == policy.require_department())
    elif department_id:
        stmt = stmt.where(Program.department_id == department_id)

    if status:
        stmt = stmt.where(Application.status == ApplicationStatus(status).value)
    if program_id:
        stmt = stmt.where(Application.program_id == program_id)
    if student_id and not policy.is_student:
        stmt = stmt.where(Application.student_id == student_id)

    total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
    rows = db.execute(
        _with_relations(stmt)
        .order_by(Application.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).scalars().all()

    return ApplicationPage(
        applications=[serialize_application(a, include_internal=policy.is_admin) for a in rows],
        total=total,
        page=page,
        total_pages=math.ceil(total / limit) if total else 0,
    )


def get_applications_for_department_admin(
    db: Session,
    policy: Policy,
    status: Optional[ApplicationStatus] = None,
    search: Optional[str] = None,
) -> List[ApplicationOut]:
    """Department review queue: status filter plus case-insensitive search on student name/email and program name."""
    if not policy.is_department_admin:
        raise PermissionDeniedError("Unauthorized: Only department administrators can access this function")
    department_id = policy.require_department()

    stmt = (
        select(Application)
        .join(Program, Application.program_id == Program.id)
        .join(Student, Application.student_id == Student.id)
        .join(User, Student.user_id == User.id)
        .where(Program.department_id == department_id)
    )
    if status:
        stmt = stmt.where(Application.status == ApplicationStatus(status).value)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(
            User.name.ilike(pattern),
            User.email.ilike(pattern),
            Program.name.ilike(pattern),
        ))

    rows = db.execute(_with_relations(stmt).order_by(Application.created_at.desc())).scalars().all()
    return [serialize_application(a) for a in rows]
