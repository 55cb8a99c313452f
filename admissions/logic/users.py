"""
Administrator Accounts

Super admins manage every administrator. Department administrators only
manage department administrators of their own department: they cannot create,
modify or delete super admins, cannot move anyone to another department and
cannot delete themselves.
"""

import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from models.enums import UserRole
from models.models import Department
from models.models_user import User, DepartmentAdministrator, SuperAdmin
from models.schemas_user import AdminUserCreate, AdminUserUpdate, AdminUserOut
from utils.auth_utils import hash_password
from utils.crud_user import attach_role_record, create_user, get_user_by_email
from utils.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from .policy import Policy

logger = logging.getLogger("admissions")

ADMIN_ROLES = (UserRole.SUPER_ADMIN.value, UserRole.DEPARTMENT_ADMINISTRATOR.value)


def serialize_admin(user: User) -> AdminUserOut:
    admin = user.department_administrator
    return AdminUserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        created_at=user.created_at,
        updated_at=user.updated_at,
        department_id=admin.department_id if admin else None,
    )


def _load_admin(db: Session, user_id: UUID) -> User:
    user = db.execute(
        select(User)
        .where(User.id == user_id)
        .options(selectinload(User.department_administrator), selectinload(User.super_admin))
    ).scalar_one_or_none()
    if not user or user.role not in ADMIN_ROLES:
        raise NotFoundError("Admin user not found")
    return user


def _admin_department(user: User) -> Optional[UUID]:
    return user.department_administrator.department_id if user.department_administrator else None


def create_admin_user(db: Session, policy: Policy, data: AdminUserCreate) -> User:
    policy.require("admin_user", "manage")

    role = data.role
    department_id = data.department_id
    if policy.is_department_admin:
        if role == UserRole.SUPER_ADMIN:
            raise PermissionDeniedError("Unauthorized: Cannot create super admin")
        if department_id and department_id != policy.department_id:
            raise PermissionDeniedError("Unauthorized: Cannot assign to other departments")
        role = UserRole.DEPARTMENT_ADMINISTRATOR
        department_id = policy.require_department()

    if get_user_by_email(db, data.email):
        raise ConflictError("User with this email already exists")

    if role == UserRole.DEPARTMENT_ADMINISTRATOR:
        if not department_id:
            raise ValidationFailedError("Department ID is required for department administrators")
        if not db.get(Department, department_id):
            raise NotFoundError("Department not found")

    user = create_user(
        db,
        email=data.email,
        name=data.name,
        role=role.value,
        password_hash=hash_password(data.password),
    )
    attach_role_record(db, user, department_id=department_id, permissions=data.permissions)
    db.flush()
    logger.info(f"Admin user created: {user.email} ({user.role})")
    return user


def get_admin_users(
    db: Session,
    policy: Policy,
    role: Optional[UserRole] = None,
    department_id: Optional[UUID] = None,
) -> List[User]:
    """Department admins see their own department's admins plus super admins."""
    policy.require("admin_user", "manage")
    stmt = (
        select(User)
        .outerjoin(DepartmentAdministrator, DepartmentAdministrator.user_id == User.id)
        .where(User.role.in_(ADMIN_ROLES))
        .options(selectinload(User.department_administrator))
    )
    if policy.is_department_admin:
        stmt = stmt.where(or_(
            DepartmentAdministrator.department_id == policy.department_id,
            User.role == UserRole.SUPER_ADMIN.value,
        ))
    elif department_id:
        stmt = stmt.where(DepartmentAdministrator.department_id == department_id)
    if role:
        stmt = stmt.where(User.role == UserRole(role).value)
    return list(db.execute(stmt.order_by(User.created_at.desc())).scalars().all())


def get_admin_user(db: Session, policy: Policy, user_id: UUID) -> User:
    policy.require("admin_user", "manage")
    user = _load_admin(db, user_id)
    if (
        policy.is_department_admin
        and user.role == UserRole.DEPARTMENT_ADMINISTRATOR.value
        and _admin_department(user) != policy.department_id
    ):
        raise PermissionDeniedError("Unauthorized: Cannot access this user")
    return user


def update_admin_user(db: Session, policy: Policy, user_id: UUID, data: AdminUserUpdate) -> User:
    policy.require("admin_user", "manage")
    user = _load_admin(db, user_id)

    if policy.is_department_admin:
        if user.role == UserRole.SUPER_ADMIN.value:
            raise PermissionDeniedError("Unauthorized: Cannot modify super admin")
        if _admin_department(user) != policy.department_id:
            raise PermissionDeniedError("Unauthorized: Cannot modify this user")
        if data.role == UserRole.SUPER_ADMIN:
            raise PermissionDeniedError("Unauthorized: Cannot assign super admin role")
        if data.department_id and data.department_id != policy.department_id:
            raise PermissionDeniedError("Unauthorized: Cannot change department")

    if data.email and data.email.lower() != user.email:
        if get_user_by_email(db, data.email):
            raise ConflictError("User with this email already exists")
        user.email = data.email.lower()
    if data.name:
        user.name = data.name
    if data.role:
        user.role = data.role.value

    if user.role == UserRole.SUPER_ADMIN.value and data.permissions is not None:
        if user.super_admin:
            user.super_admin.permissions = data.permissions
        else:
            db.add(SuperAdmin(user=user, permissions=data.permissions))
    elif user.role == UserRole.DEPARTMENT_ADMINISTRATOR.value and data.department_id:
        if not db.get(Department, data.department_id):
            raise NotFoundError("Department not found")
        if user.department_administrator:
            user.department_administrator.department_id = data.department_id
        else:
            db.add(DepartmentAdministrator(user=user, department_id=data.department_id, permissions={}))
    db.flush()
    return user


def delete_admin_user(db: Session, policy: Policy, user_id: UUID) -> None:
    policy.require("admin_user", "manage")
    user = _load_admin(db, user_id)

    if policy.is_department_admin:
        if user.role == UserRole.SUPER_ADMIN.value:
            raise PermissionDeniedError("Unauthorized: Cannot delete super admin")
        if _admin_department(user) != policy.department_id:
            raise PermissionDeniedError("Unauthorized: Cannot delete this user")
    if user.id == policy.user_id:
        raise PermissionDeniedError("Cannot delete your own account")

    if user.super_admin:
        db.delete(user.super_admin)
    if user.department_administrator:
        db.delete(user.department_administrator)
    db.delete(user)
    db.flush()
    logger.info(f"Admin user deleted: {user_id}")


def reset_user_password(db: Session, policy: Policy, user_id: UUID, new_password: str) -> None:
    policy.require("admin_user", "manage")
    user = db.execute(
        select(User).where(User.id == user_id).options(selectinload(User.department_administrator))
    ).scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")

    if policy.is_department_admin:
        if user.role == UserRole.SUPER_ADMIN.value:
            raise PermissionDeniedError("Unauthorized: Cannot reset password for super admin")
        if _admin_department(user) != policy.department_id:
            raise PermissionDeniedError("Unauthorized: Cannot reset password for this user")

    user.password_hash = hash_password(new_password)
    db.flush()
