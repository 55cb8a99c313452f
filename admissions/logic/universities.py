"""
Universities

Public read access; create/update/delete are super-admin only. Deleting a
university removes its departments, programs, requirements and applications
in the caller's transaction.
"""

import logging
import re
from typing import List, Optional
from uuid import UUID
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models.models import Department, Program, University
from models.schemas import UniversityIn, UniversityUpdate
from utils.errors import ConflictError, NotFoundError, ValidationFailedError
from .policy import Policy
from .programs import remove_program

logger = logging.getLogger("admissions")

SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def _validate_slug(slug: str) -> None:
    if not SLUG_RE.match(slug):
        raise ValidationFailedError("Slug can only contain lowercase letters, numbers, and hyphens")


def _ensure_unique(db: Session, name: Optional[str], slug: Optional[str], exclude_id: Optional[UUID] = None) -> None:
    def taken(column, value):
        stmt = select(University.id).where(column == value)
        if exclude_id:
            stmt = stmt.where(University.id != exclude_id)
        return db.execute(stmt).first() is not None

    if name and taken(University.name, name):
        raise ConflictError("A university with this name already exists")
    if slug and taken(University.slug, slug):
        raise ConflictError("A university with this slug already exists")


def create_university(db: Session, policy: Policy, data: UniversityIn) -> University:
    policy.require("university", "create")
    _validate_slug(data.slug)
    _ensure_unique(db, data.name, data.slug)

    uni = University(name=data.name, slug=data.slug, location=data.location)
    db.add(uni)
    db.flush()
    logger.info(f"University created: {uni.slug}")
    return uni


def get_universities(db: Session) -> List[University]:
    return list(db.execute(select(University).order_by(University.name)).scalars().all())


def get_university(db: Session, university_id: UUID) -> University:
    uni = db.get(University, university_id)
    if not uni:
        raise NotFoundError("University not found")
    return uni


def get_university_by_slug(db: Session, slug: str) -> University:
    uni = University.get_by_slug(db, slug)
    if not uni:
        raise NotFoundError("University not found")
    return uni


def update_university(db: Session, policy: Policy, university_id: UUID, data: UniversityUpdate) -> University:
    policy.require("university", "update")
    uni = get_university(db, university_id)

    if data.slug is not None:
        _validate_slug(data.slug)
    _ensure_unique(
        db,
        data.name if data.name != uni.name else None,
        data.slug if data.slug != uni.slug else None,
        exclude_id=uni.id,
    )
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(uni, field, value)
    db.flush()
    return uni


def delete_university(db: Session, policy: Policy, university_id: UUID) -> None:
    policy.require("university", "delete")
    uni = get_university(db, university_id)

    departments = db.execute(select(Department).where(Department.university_id == uni.id)).scalars().all()
    for department in departments:
        programs = db.execute(select(Program).where(Program.department_id == department.id)).scalars().all()
        for program in programs:
            remove_program(db, program)
        for admin in list(department.administrators):
            admin.department_id = None
        db.delete(department)
    db.delete(uni)
    db.flush()
    logger.info(f"University deleted: {uni.slug}")


def search_universities(db: Session, query: str, limit: int = 10) -> List[University]:
    pattern = f"%{query.strip()}%"
    stmt = (
        select(University)
        .where(or_(University.name.ilike(pattern), University.slug.ilike(pattern)))
        .order_by(University.name)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())
