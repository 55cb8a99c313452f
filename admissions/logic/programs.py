"""
Programs and Program Requirements

Super admins manage any program; department administrators manage programs
(and their requirements) inside their own department only and cannot move a
program to another department. Listing and lookup are public.
"""

import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.models import Application, Department, Note, Program, ProgramRequirement
from models.schemas import ProgramIn, ProgramUpdate, ProgramOut, RequirementIn, RequirementUpdate, RequirementOut
from utils.errors import ConflictError, NotFoundError, PermissionDeniedError
from .policy import Policy

logger = logging.getLogger("admissions")


def _with_relations(stmt):
    return stmt.options(
        selectinload(Program.requirements),
        selectinload(Program.department).selectinload(Department.university),
    )


def serialize_program(program: Program) -> ProgramOut:
    department = program.department
    return ProgramOut(
        id=program.id,
        department_id=program.department_id,
        name=program.name,
        department_name=department.name if department else None,
        university_name=department.university.name if department and department.university else None,
        requirements=[RequirementOut.model_validate(r) for r in program.requirements],
    )


def get_program(db: Session, program_id: UUID) -> Program:
    program = db.execute(_with_relations(select(Program).where(Program.id == program_id))).scalar_one_or_none()
    if not program:
        raise NotFoundError("Program not found")
    return program


def _ensure_unique_name(db: Session, department_id: UUID, name: str, exclude_id: Optional[UUID] = None) -> None:
    stmt = select(Program.id).where(Program.department_id == department_id, Program.name == name)
    if exclude_id:
        stmt = stmt.where(Program.id != exclude_id)
    if db.execute(stmt).first():
        raise ConflictError("A program with this name already exists in this department")


def create_program(db: Session, policy: Policy, data: ProgramIn) -> Program:
    policy.require("program", "create", department_id=data.department_id)
    if not db.get(Department, data.department_id):
        raise NotFoundError("Department not found")
    _ensure_unique_name(db, data.department_id, data.name)

    program = Program(department_id=data.department_id, name=data.name)
    for r in data.requirements:
        program.requirements.append(ProgramRequirement(
            type=r.type.value,
            subject=r.subject,
            min_grade=r.min_grade,
            description=r.description,
        ))
    db.add(program)
    db.flush()
    logger.info(f"Program created: {program.name} ({program.id})")
    return program


def get_programs(
    db: Session,
    department_id: Optional[UUID] = None,
    university_id: Optional[UUID] = None,
) -> List[Program]:
    stmt = select(Program).join(Department, Program.department_id == Department.id)
    if department_id:
        stmt = stmt.where(Program.department_id == department_id)
    if university_id:
        stmt = stmt.where(Department.university_id == university_id)
    return list(db.execute(_with_relations(stmt).order_by(Program.name)).scalars().all())


def search_programs(db: Session, query: str, limit: int = 10) -> List[Program]:
    stmt = select(Program).where(Program.name.ilike(f"%{query.strip()}%")).order_by(Program.name).limit(limit)
    return list(db.execute(_with_relations(stmt)).scalars().all())


def update_program(db: Session, policy: Policy, program_id: UUID, data: ProgramUpdate) -> Program:
    program = get_program(db, program_id)
    policy.require("program", "update", department_id=program.department_id)

    target_department = data.department_id or program.department_id
    if target_department != program.department_id:
        if policy.is_department_admin:
            raise PermissionDeniedError("Unauthorized: You cannot change the department of a program")
        if not db.get(Department, target_department):
            raise NotFoundError("Department not found")

    if data.name and (data.name != program.name or target_department != program.department_id):
        _ensure_unique_name(db, target_department, data.name, exclude_id=program.id)

    program.department_id = target_department
    if data.name:
        program.name = data.name
    db.flush()
    return program


def remove_program(db: Session, program: Program) -> None:
    """Requirements, applications (with notes) and the program itself."""
    applications = db.execute(select(Application).where(Application.program_id == program.id)).scalars().all()
    for app in applications:
        for n in db.execute(select(Note).where(Note.application_id == app.id)).scalars().all():
            db.delete(n)
        db.delete(app)
    for r in list(program.requirements):
        db.delete(r)
    db.delete(program)


def delete_program(db: Session, policy: Policy, program_id: UUID) -> None:
    program = get_program(db, program_id)
    policy.require("program", "delete", department_id=program.department_id)
    remove_program(db, program)
    db.flush()
    logger.info(f"Program deleted: {program_id}")


# =============================================================================
# REQUIREMENTS
# =============================================================================

def _get_requirement(db: Session, requirement_id: UUID) -> ProgramRequirement:
    req = db.get(ProgramRequirement, requirement_id)
    if not req:
        raise NotFoundError("Requirement not found")
    return req


def get_requirements(db: Session, program_id: UUID) -> List[ProgramRequirement]:
    return list(get_program(db, program_id).requirements)


def create_requirement(db: Session, policy: Policy, program_id: UUID, data: RequirementIn) -> ProgramRequirement:
    program = get_program(db, program_id)
    policy.require("requirement", "create", department_id=program.department_id)
    req = ProgramRequirement(
        type=data.type.value,
        subject=data.subject,
        min_grade=data.min_grade,
        description=data.description,
    )
    program.requirements.append(req)
    db.flush()
    return req


def update_requirement(db: Session, policy: Policy, requirement_id: UUID, data: RequirementUpdate) -> ProgramRequirement:
    req = _get_requirement(db, requirement_id)
    policy.require("requirement", "update", department_id=req.program.department_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if field in ("type", "description") and value is None:
            continue
        setattr(req, field, value.value if field == "type" else value)
    db.flush()
    return req


def delete_requirement(db: Session, policy: Policy, requirement_id: UUID) -> None:
    req = _get_requirement(db, requirement_id)
    policy.require("requirement", "delete", department_id=req.program.department_id)
    req.program.requirements.remove(req)
    db.flush()
