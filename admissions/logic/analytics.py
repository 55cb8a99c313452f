"""
Dashboards

Read-only aggregates for the three roles. Returned as plain dicts.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional
from uuid import UUID
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from eligibility.logic import count_program_matches, get_program_matches
from models.enums import ApplicationStatus, QualificationType, UserRole
from models.models import Application, Department, Program, University
from models.models_user import Student, User
from utils.errors import NotFoundError
from .policy import Policy

RECENT_ITEMS = 5


def _status_counts(statuses: List[str]) -> Dict[str, int]:
    counts = Counter(statuses)
    return {s.value: counts.get(s.value, 0) for s in ApplicationStatus}


def student_dashboard(
    db: Session,
    policy: Policy,
    recommend: Optional[Callable[[UUID], list]] = None,
) -> Dict:
    """
    Match counts, application status counts, qualification stats, recent
    activity and (when `recommend` is given) recommended courses.
    """
    student_id = policy.require_student()
    student = db.execute(
        select(Student)
        .where(Student.id == student_id)
        .options(
            selectinload(Student.qualifications),
            selectinload(Student.applications)
            .selectinload(Application.program)
            .selectinload(Program.department)
            .selectinload(Department.university),
        )
    ).scalar_one_or_none()
    if not student:
        raise NotFoundError("Student not found")

    applications = sorted(student.applications, key=lambda a: a.created_at, reverse=True)
    qualifications = student.qualifications
    matches = get_program_matches(db, student_id)

    activity = [
        {
            "type": "application",
            "id": str(a.id),
            "title": f"Applied to {a.program.name}",
            "description": a.program.department.university.name,
            "timestamp": a.created_at,
            "status": a.status,
        }
        for a in applications
    ] + [
        {
            "type": "qualification",
            "id": str(q.id),
            "title": f"Added {q.subject} qualification",
            "description": f"{q.type} - Grade: {q.grade}",
            "timestamp": q.created_at,
            "status": "verified" if q.verified else "pending",
        }
        for q in qualifications
    ]
    activity.sort(key=lambda item: item["timestamp"], reverse=True)

    status_counts = _status_counts([a.status for a in applications])
    return {
        "total_matches": count_program_matches(db, student_id),
        "recent_matches": [
            {
                "program_id": str(m.program_id),
                "program_name": m.program_name,
                "university": m.university_name,
                "match_score": m.match_score,
            }
            for m in matches[:RECENT_ITEMS]
        ],
        "total_applications": len(applications),
        "pending_applications": status_counts[ApplicationStatus.PENDING.value],
        "draft_applications": status_counts[ApplicationStatus.DRAFT.value],
        "application_status_counts": status_counts,
        "total_qualifications": len(qualifications),
        "verified_qualifications": sum(1 for q in qualifications if q.verified),
        "qualification_stats": {
            "total": len(qualifications),
            "verified": sum(1 for q in qualifications if q.verified),
            "high_school": sum(1 for q in qualifications if q.type == QualificationType.HIGH_SCHOOL.value),
            "undergraduate": sum(1 for q in qualifications if q.type == QualificationType.UNDERGRADUATE.value),
        },
        "recent_activity": activity[:RECENT_ITEMS],
        "recommended_courses": recommend(student_id) if recommend else [],
    }


def department_admin_dashboard(db: Session, policy: Policy, now: Optional[datetime] = None) -> Dict:
    policy.require("dashboard", "admin")
    now = now or datetime.utcnow()
    department_id = policy.require_department()
    department = db.execute(
        select(Department).where(Department.id == department_id).options(selectinload(Department.university))
    ).scalar_one_or_none()
    if not department:
        raise NotFoundError("Department not found")

    programs = db.execute(
        select(Program).where(Program.department_id == department_id).options(selectinload(Program.requirements))
    ).scalars().all()
    applications = db.execute(
        select(Application)
        .join(Program, Application.program_id == Program.id)
        .where(Program.department_id == department_id)
        .order_by(Application.created_at.desc())
    ).scalars().all()

    week_ago = now - timedelta(days=7)
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    submitted = [a.submitted_at for a in applications if a.submitted_at]
    status_counts = _status_counts([a.status for a in applications])
    per_program = Counter(a.program_id for a in applications)

    return {
        "department_name": department.name,
        "university_name": department.university.name if department.university else None,
        "total_programs": len(programs),
        "total_requirements": sum(len(p.requirements) for p in programs),
        "total_applications": len(applications),
        "application_status_counts": status_counts,
        "recent_applications": sum(1 for s in submitted if s >= week_ago),
        "todays_applications": sum(1 for s in submitted if s >= today),
        "needs_attention": status_counts[ApplicationStatus.PENDING.value]
        + status_counts[ApplicationStatus.UNDER_REVIEW.value],
        "programs": [
            {
                "id": str(p.id),
                "name": p.name,
                "requirements": len(p.requirements),
                "applications": per_program.get(p.id, 0),
            }
            for p in programs
        ],
    }


def super_admin_overview(db: Session, policy: Policy) -> Dict:
    policy.require("dashboard", "super")

    def count(stmt):
        return db.execute(stmt).scalar_one()

    total_universities = count(select(func.count(University.id)))
    total_departments = count(select(func.count(Department.id)))
    active_universities = count(select(func.count(func.distinct(Department.university_id))))
    role_counts = dict(db.execute(select(User.role, func.count(User.id)).group_by(User.role)).all())

    universities = db.execute(
        select(University).options(selectinload(University.departments).selectinload(Department.administrators))
    ).scalars().all()
    university_stats = sorted(
        (
            {
                "name": u.name,
                "departments": len(u.departments),
                "administrators": sum(len(d.administrators) for d in u.departments),
            }
            for u in universities
        ),
        key=lambda s: s["departments"],
        reverse=True,
    )[:8]

    return {
        "total_universities": total_universities,
        "active_universities": active_universities,
        "total_departments": total_departments,
        "departments_per_university": round(total_departments / total_universities, 1) if total_universities else 0,
        "total_users": sum(role_counts.values()),
        "super_admins": role_counts.get(UserRole.SUPER_ADMIN.value, 0),
        "department_admins": role_counts.get(UserRole.DEPARTMENT_ADMINISTRATOR.value, 0),
        "students": role_counts.get(UserRole.STUDENT.value, 0),
        "university_stats": university_stats,
    }
