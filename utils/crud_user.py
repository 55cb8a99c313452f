from sqlalchemy.orm import Session
from sqlalchemy import select
from uuid import UUID
from models.enums import UserRole
from models.models_user import User, Student, DepartmentAdministrator, SuperAdmin

def get_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == email.lower())).scalar_one_or_none()

def create_user(db: Session, *, email: str, name: str, role: str, password_hash: str) -> User:
    user = User(email=email.lower(), name=name, role=role, password_hash=password_hash)
    db.add(user)
    return user

def create_student_user(db: Session, *, email: str, name: str, password_hash: str) -> User:
    """Registration path: a STUDENT user always gets its Student record in the same transaction."""
    user = create_user(db, email=email, name=name, role=UserRole.STUDENT.value, password_hash=password_hash)
    user.student = Student()
    db.flush()
    return user

def attach_role_record(db: Session, user: User, *, department_id: UUID | None = None, permissions: dict | None = None) -> None:
    if user.role == UserRole.SUPER_ADMIN.value:
        db.add(SuperAdmin(user=user, permissions=permissions or {}))
    elif user.role == UserRole.DEPARTMENT_ADMINISTRATOR.value:
        db.add(DepartmentAdministrator(user=user, department_id=department_id, permissions=permissions or {}))
    elif user.role == UserRole.STUDENT.value:
        db.add(Student(user=user))
