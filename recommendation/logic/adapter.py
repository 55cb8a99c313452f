"""
Profile Adapter

Builds a StudentLearningProfile from the database:
- most recent application -> program and department names
- all qualifications
- requirements (with a subject) of every program the student applied to
"""

from uuid import UUID
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from models.models import Application, Program, Department
from models.models_user import Student
from utils.errors import NotFoundError
from .contracts import StudentLearningProfile, ProfileQualification, ProfileRequirement


def load_learning_profile(db: Session, student_id: UUID) -> StudentLearningProfile:
    student = db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")

    applications = db.execute(
        select(Application)
        .where(Application.student_id == student_id)
        .options(
            selectinload(Application.program).selectinload(Program.requirements),
            selectinload(Application.program).selectinload(Program.department),
        )
        .order_by(Application.created_at.desc())
    ).scalars().all()

    program_name = department_name = None
    if applications:
        latest = applications[0].program
        program_name = latest.name
        department_name = latest.department.name if latest.department else None

    requirements = []
    seen_programs = set()
    for app in applications:
        if app.program_id in seen_programs:
            continue
        seen_programs.add(app.program_id)
        for r in app.program.requirements:
            if r.subject:
                requirements.append(ProfileRequirement(type=r.type, subject=r.subject))

    return StudentLearningProfile(
        student_id=student.id,
        program_name=program_name,
        department_name=department_name,
        qualifications=[
            ProfileQualification(type=q.type, subject=q.subject, grade=q.grade)
            for q in student.qualifications
        ],
        requirements=requirements,
    )
