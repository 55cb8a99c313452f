"""
Departments

Super admins create/update/delete. Department administrators only see their
own department. A department with programs cannot be deleted.
"""

import logging
import re
from typing import List, Optional
from uuid import UUID
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from models.models import Department, Program, University
from models.schemas import DepartmentIn, DepartmentUpdate, DepartmentOut
from utils.errors import ConflictError, InvalidStateError, NotFoundError, ValidationFailedError
from .policy import Policy

logger = logging.getLogger("admissions")

CODE_RE = re.compile(r"^[A-Z0-9]+$")


def _validate_code(code: str) -> None:
    if not CODE_RE.match(code):
        raise ValidationFailedError("Department code can only contain uppercase letters and numbers")


def _ensure_unique(
    db: Session,
    university_id: UUID,
    name: Optional[str],
    code: Optional[str],
    exclude_id: Optional[UUID] = None,
) -> None:
    def taken(column, value):
        stmt = select(Department.id).where(Department.university_id == university_id, column == value)
        if exclude_id:
            stmt = stmt.where(Department.id != exclude_id)
        return db.execute(stmt).first() is not None

    if name and taken(Department.name, name):
        raise ConflictError("A department with this name already exists in this university")
    if code and taken(Department.code, code):
        raise ConflictError("A department with this code already exists in this university")


def serialize_department(db: Session, department: Department) -> DepartmentOut:
    program_count = db.execute(
        select(func.count(Program.id)).where(Program.department_id == department.id)
    ).scalar_one()
    return DepartmentOut(
        id=department.id,
        university_id=department.university_id,
        name=department.name,
        code=department.code,
        university_name=department.university.name if department.university else None,
        program_count=program_count,
    )


def create_department(db: Session, policy: Policy, data: DepartmentIn) -> Department:
    policy.require("department", "create")
    _validate_code(data.code)
    if not db.get(University, data.university_id):
        raise NotFoundError("University not found")
    _ensure_unique(db, data.university_id, data.name, data.code)

    department = Department(university_id=data.university_id, name=data.name, code=data.code)
    db.add(department)
    db.flush()
    logger.info(f"Department created: {department.code} ({department.id})")
    return department


def get_departments(db: Session, policy: Optional[Policy] = None, university_id: Optional[UUID] = None) -> List[Department]:
    """Department admins are limited to their own department."""
    stmt = select(Department).options(selectinload(Department.university))
    if policy and policy.is_department_admin:
        stmt = stmt.where(Department.id == policy.require_department())
    elif university_id:
        stmt = stmt.where(Department.university_id == university_id)
    return list(db.execute(stmt.order_by(Department.name)).scalars().all())


def get_department(db: Session, department_id: UUID, policy: Optional[Policy] = None) -> Department:
    department = db.get(Department, department_id)
    if not department:
        raise NotFoundError("Department not found")
    if policy:
        policy.require("department", "read", department_id=department.id)
    return department


def update_department(db: Session, policy: Policy, department_id: UUID, data: DepartmentUpdate) -> Department:
    policy.require("department", "update")
    department = get_department(db, department_id)

    if data.code is not None:
        _validate_code(data.code)
    university_id = data.university_id or department.university_id
    if university_id != department.university_id and not db.get(University, university_id):
        raise NotFoundError("University not found")
    moved = university_id != department.university_id
    _ensure_unique(
        db,
        university_id,
        data.name if data.name and (moved or data.name != department.name) else None,
        data.code if data.code and (moved or data.code != department.code) else None,
        exclude_id=department.id,
    )

    department.university_id = university_id
    if data.name:
        department.name = data.name
    if data.code:
        department.code = data.code
    db.flush()
    return department


def delete_department(db: Session, policy: Policy, department_id: UUID) -> None:
    policy.require("department", "delete")
    department = get_department(db, department_id)

    if db.execute(select(Program.id).where(Program.department_id == department.id)).first():
        raise InvalidStateError("Cannot delete department with existing programs")

    for admin in list(department.administrators):
        db.delete(admin)
    db.delete(department)
    db.flush()
    logger.info(f"Department deleted: {department_id}")


def search_departments(db: Session, query: str, university_id: Optional[UUID] = None, limit: int = 10) -> List[Department]:
    pattern = f"%{query.strip()}%"
    stmt = (
        select(Department)
        .options(selectinload(Department.university))
        .where(or_(Department.name.ilike(pattern), Department.code.ilike(pattern)))
    )
    if university_id:
        stmt = stmt.where(Department.university_id == university_id)
    return list(db.execute(stmt.order_by(Department.name).limit(limit)).scalars().all())
