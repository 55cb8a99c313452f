"""
Administrator account management and department-admin restrictions.
"""

import pytest

from conftest import make_user, make_catalog, policy_for
from admissions.logic.users import (
    create_admin_user,
    delete_admin_user,
    get_admin_user,
    get_admin_users,
    reset_user_password,
    update_admin_user,
)
from models.enums import UserRole
from models.models_user import User
from models.schemas_user import AdminUserCreate, AdminUserUpdate
from utils.auth_utils import verify_password
from utils.errors import ConflictError, PermissionDeniedError, ValidationFailedError


@pytest.fixture
def org(db):
    _, dept, _ = make_catalog(db)
    _, other_dept, _ = make_catalog(db, university="Cape Coast", slug="cape-coast")
    return {
        "dept": dept,
        "other_dept": other_dept,
        "super": make_user(db, UserRole.SUPER_ADMIN),
        "admin": make_user(db, UserRole.DEPARTMENT_ADMINISTRATOR, department=dept),
        "outsider": make_user(db, UserRole.DEPARTMENT_ADMINISTRATOR, department=other_dept),
    }


def test_super_admin_creates_department_admin(db, org):
    user = create_admin_user(db, policy_for(org["super"]), AdminUserCreate(
        name="Yaw", email="Yaw@uq-mail.com", password="secret123", department_id=org["dept"].id,
    ))
    assert user.email == "yaw@uq-mail.com"
    assert user.department_administrator.department_id == org["dept"].id

    with pytest.raises(ConflictError):
        create_admin_user(db, policy_for(org["super"]), AdminUserCreate(
            name="Yaw", email="yaw@uq-mail.com", password="secret123", department_id=org["dept"].id,
        ))
    with pytest.raises(ValidationFailedError, match="Department ID is required"):
        create_admin_user(db, policy_for(org["super"]), AdminUserCreate(
            name="Esi", email="esi@uq-mail.com", password="secret123",
        ))


def test_department_admin_creates_only_in_own_department(db, org):
    policy = policy_for(org["admin"])
    with pytest.raises(PermissionDeniedError, match="Cannot create super admin"):
        create_admin_user(db, policy, AdminUserCreate(
            name="X", email="x@uq-mail.com", password="secret123", role=UserRole.SUPER_ADMIN,
        ))
    with pytest.raises(PermissionDeniedError, match="Cannot assign to other departments"):
        create_admin_user(db, policy, AdminUserCreate(
            name="X", email="x@uq-mail.com", password="secret123", department_id=org["other_dept"].id,
        ))
    user = create_admin_user(db, policy, AdminUserCreate(name="X", email="x@uq-mail.com", password="secret123"))
    assert user.department_administrator.department_id == org["dept"].id


def test_students_cannot_manage_admins(db, org):
    with pytest.raises(PermissionDeniedError):
        get_admin_users(db, policy_for(make_user(db)))


def test_department_admin_listing_scope(db, org):
    ids = {u.id for u in get_admin_users(db, policy_for(org["admin"]))}
    assert ids == {org["admin"].id, org["super"].id}
    assert len(get_admin_users(db, policy_for(org["super"]))) == 3


def test_department_admin_cannot_touch_other_departments(db, org):
    policy = policy_for(org["admin"])
    with pytest.raises(PermissionDeniedError, match="Cannot access this user"):
        get_admin_user(db, policy, org["outsider"].id)
    with pytest.raises(PermissionDeniedError, match="Cannot modify super admin"):
        update_admin_user(db, policy, org["super"].id, AdminUserUpdate(name="Boss"))
    with pytest.raises(PermissionDeniedError, match="Cannot change department"):
        update_admin_user(db, policy, org["admin"].id, AdminUserUpdate(department_id=org["other_dept"].id))
    with pytest.raises(PermissionDeniedError, match="Cannot delete this user"):
        delete_admin_user(db, policy, org["outsider"].id)
    with pytest.raises(PermissionDeniedError, match="Cannot reset password for super admin"):
        reset_user_password(db, policy, org["super"].id, "newpass1")


def test_cannot_delete_own_account(db, org):
    with pytest.raises(PermissionDeniedError, match="Cannot delete your own account"):
        delete_admin_user(db, policy_for(org["super"]), org["super"].id)


def test_super_admin_deletes_and_resets(db, org):
    policy = policy_for(org["super"])
    reset_user_password(db, policy, org["admin"].id, "brand-new")
    assert verify_password("brand-new", org["admin"].password_hash)

    delete_admin_user(db, policy, org["outsider"].id)
    assert db.get(User, org["outsider"].id) is None
