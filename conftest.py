"""
Shared fixtures: in-memory SQLite, sessions, a TestClient and small factories.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.pop("YOUTUBE_API_KEY", None)

from contextlib import contextmanager

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base, get_db
from models.enums import UserRole
from models.models import University, Department, Program, ProgramRequirement, Qualification, Application
from models.models_user import User, Student, DepartmentAdministrator, SuperAdmin
from models.schemas_user import CurrentUser
from recommendation.models import RecommendationCache  # noqa: F401
from admissions.logic.policy import Policy
from utils.auth_utils import hash_password, create_token


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client(session_factory):
    import main

    @contextmanager
    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    main.app.dependency_overrides[get_db] = override_get_db
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()


# ---------------- factories ----------------

def make_user(db, role=UserRole.STUDENT, email=None, name="Test User", department=None, password="secret123"):
    user = User(
        email=email or f"{role.value.lower()}-{os.urandom(4).hex()}@uq-mail.com",
        name=name,
        role=role.value,
        password_hash=hash_password(password),
    )
    db.add(user)
    if role == UserRole.STUDENT:
        user.student = Student()
    elif role == UserRole.DEPARTMENT_ADMINISTRATOR:
        user.department_administrator = DepartmentAdministrator(
            department_id=department.id if department else None, permissions={}
        )
    else:
        user.super_admin = SuperAdmin(permissions={})
    db.flush()
    return user


def make_catalog(db, university="Accra Tech", slug="accra-tech", department="Computing", code="CS", program="Computer Science"):
    uni = University(name=university, slug=slug, location="Accra")
    dept = Department(university=uni, name=department, code=code)
    prog = Program(department=dept, name=program)
    db.add_all([uni, dept, prog])
    db.flush()
    return uni, dept, prog


def add_requirement(db, program, type, subject=None, min_grade=None, description=""):
    req = ProgramRequirement(program=program, type=type, subject=subject, min_grade=min_grade, description=description)
    db.add(req)
    db.flush()
    return req


def add_qualification(db, student, type, subject, grade, verified=True):
    q = Qualification(student=student, type=type, subject=subject, grade=grade, verified=verified)
    db.add(q)
    db.flush()
    return q


def add_application(db, student, program, status="DRAFT"):
    app = Application(student=student, program=program, status=status)
    db.add(app)
    db.flush()
    return app


def policy_for(user):
    return Policy.for_user(CurrentUser(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
        student_id=user.student.id if user.student else None,
        department_id=user.department_administrator.department_id if user.department_administrator else None,
    ))


def auth_header(user):
    return {"Authorization": f"Bearer {create_token(str(user.id))}"}
