import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Session, relationship
from db import Base
from models.enums import ApplicationStatus


class University(Base):
    __tablename__ = "universities"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), unique=True, nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    location = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    departments = relationship("Department", back_populates="university", order_by="Department.name")

    @classmethod
    def get_by_slug(cls, db: Session, slug: str) -> Optional["University"]:
        return db.query(cls).filter_by(slug=slug).first()


class Department(Base):
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("university_id", "name", name="uq_department_name"),
        UniqueConstraint("university_id", "code", name="uq_department_code"),
    )
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    university_id = Column(UUID(as_uuid=True), ForeignKey("universities.id"), nullable=False)
    name = Column(String(255), nullable=False)
    code = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    university = relationship("University", back_populates="departments")
    programs = relationship("Program", back_populates="department", order_by="Program.name")
    administrators = relationship("DepartmentAdministrator", back_populates="department")


class Program(Base):
    __tablename__ = "programs"
    __table_args__ = (UniqueConstraint("department_id", "name", name="uq_program_name"),)
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    department_id = Column(UUID(as_uuid=True), ForeignKey("departments.id"), nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    department = relationship("Department", back_populates="programs")
    requirements = relationship("ProgramRequirement", back_populates="program", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="program")


class ProgramRequirement(Base):
    __tablename__ = "program_requirements"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    program_id = Column(UUID(as_uuid=True), ForeignKey("programs.id"), nullable=False)
    type = Column(String(32), nullable=False)
    subject = Column(String(255), nullable=True)
    min_grade = Column(String(32), nullable=True)
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    program = relationship("Program", back_populates="requirements")


class Qualification(Base):
    __tablename__ = "qualifications"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False)
    type = Column(String(32), nullable=False)
    subject = Column(String(255), nullable=False)
    grade = Column(String(32), nullable=False)
    verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="qualifications")


class Application(Base):
    __tablename__ = "applications"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False, index=True)
    program_id = Column(UUID(as_uuid=True), ForeignKey("programs.id"), nullable=False, index=True)
    status = Column(String(32), nullable=False, default=ApplicationStatus.DRAFT.value)
    submitted_at = Column(DateTime(timezone=False), nullable=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=False), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="applications")
    program = relationship("Program", back_populates="applications")
    notes = relationship("Note", back_populates="application", order_by="Note.created_at.desc()")


class Note(Base):
    __tablename__ = "notes"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    application_id = Column(UUID(as_uuid=True), ForeignKey("applications.id"), nullable=False)
    author_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    internal_only = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False)

    application = relationship("Application", back_populates="notes")
    author = relationship("User")


class AuditLog(Base):
    __tablename__ = "audit_logs"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    action = Column(String(64), nullable=False)
    entity_id = Column(String(64), nullable=False, index=True)
    entity_type = Column(String(64), nullable=False)
    user_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=False), default=datetime.utcnow, nullable=False, index=True)

    @classmethod
    def record(cls, db: Session, action: str, entity_id, entity_type: str, user_id=None, details: dict | None = None):
        entry = cls(
            action=action,
            entity_id=str(entity_id),
            entity_type=entity_type,
            user_id=user_id,
            details=details,
        )
        db.add(entry)
        return entry


# role records referenced by the relationships above
from models.models_user import User, Student, DepartmentAdministrator, SuperAdmin  # noqa: E402,F401
