"""
Eligibility Adapter

Loads students, programs and their requirements from the database and
converts ORM rows into matcher records. No matching logic lives here.
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.models import Program, Department, Qualification
from models.models_user import Student
from .contracts import QualificationRecord, RequirementRecord


def fetch_student(db: Session, student_id: UUID) -> Optional[Student]:
    return db.get(Student, student_id)


def fetch_student_for_user(db: Session, user_id: UUID) -> Optional[Student]:
    return db.execute(select(Student).where(Student.user_id == user_id)).scalar_one_or_none()


def fetch_qualifications(db: Session, student_id: UUID, verified_only: bool = False) -> List[QualificationRecord]:
    stmt = select(Qualification).where(Qualification.student_id == student_id)
    if verified_only:
        stmt = stmt.where(Qualification.verified.is_(True))
    rows = db.execute(stmt.order_by(Qualification.created_at)).scalars().all()
    return [QualificationRecord.model_validate(q) for q in rows]


def fetch_program(db: Session, program_id: UUID) -> Optional[Program]:
    stmt = (
        select(Program)
        .where(Program.id == program_id)
        .options(
            selectinload(Program.requirements),
            selectinload(Program.department).selectinload(Department.university),
        )
    )
    return db.execute(stmt).scalar_one_or_none()


def fetch_programs_with_requirements(db: Session) -> List[Program]:
    stmt = (
        select(Program)
        .options(
            selectinload(Program.requirements),
            selectinload(Program.department).selectinload(Department.university),
        )
        .order_by(Program.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())


def to_requirement_records(program: Program) -> List[RequirementRecord]:
    return [RequirementRecord.model_validate(r) for r in program.requirements]
