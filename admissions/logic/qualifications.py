"""
Qualifications

Students record and delete their own qualifications; new records start
unverified. Administrators verify. Records are otherwise immutable.
"""

from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.orm import Session

from models.enums import QualificationType
from models.models import Qualification
from models.schemas import QualificationIn
from utils.errors import NotFoundError
from .policy import Policy


def get_qualifications(
    db: Session,
    policy: Policy,
    student_id: Optional[UUID] = None,
    type: Optional[QualificationType] = None,
    verified: Optional[bool] = None,
) -> List[Qualification]:
    """Students always get their own; administrators may filter by student."""
    stmt = select(Qualification)
    if policy.is_student:
        if not policy.student_id:
            return []
        policy.require("qualification", "read", student_id=student_id or policy.student_id)
        stmt = stmt.where(Qualification.student_id == policy.student_id)
    elif student_id:
        stmt = stmt.where(Qualification.student_id == student_id)
    if type:
        stmt = stmt.where(Qualification.type == QualificationType(type).value)
    if verified is not None:
        stmt = stmt.where(Qualification.verified.is_(verified))
    return list(db.execute(stmt.order_by(Qualification.created_at.desc())).scalars().all())


def create_qualification(db: Session, policy: Policy, data: QualificationIn) -> Qualification:
    policy.require("qualification", "create")
    if not policy.student_id:
        raise NotFoundError("Student record not found for this user")
    q = Qualification(
        student_id=policy.student_id,
        type=data.type.value,
        subject=data.subject.strip(),
        grade=data.grade.strip(),
        verified=False,
    )
    db.add(q)
    db.flush()
    return q


def _get(db: Session, qualification_id: UUID) -> Qualification:
    q = db.get(Qualification, qualification_id)
    if not q:
        raise NotFoundError("Qualification not found")
    return q


def verify_qualification(db: Session, policy: Policy, qualification_id: UUID) -> Qualification:
    policy.require("qualification", "verify")
    q = _get(db, qualification_id)
    q.verified = True
    db.flush()
    return q


def delete_qualification(db: Session, policy: Policy, qualification_id: UUID) -> None:
    q = _get(db, qualification_id)
    policy.require("qualification", "delete", student_id=q.student_id)
    db.delete(q)
    db.flush()
