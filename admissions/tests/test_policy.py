"""
Role rules of the permission policy, independent of the database.
"""

import uuid

import pytest

from admissions.logic import Policy
from models.enums import UserRole
from utils.errors import PermissionDeniedError

DEPT = uuid.uuid4()
OTHER_DEPT = uuid.uuid4()
STUDENT = uuid.uuid4()


def _student():
    return Policy(uuid.uuid4(), UserRole.STUDENT, student_id=STUDENT)


def _dept_admin(department_id=DEPT):
    return Policy(uuid.uuid4(), UserRole.DEPARTMENT_ADMINISTRATOR, department_id=department_id)


def _super_admin():
    return Policy(uuid.uuid4(), UserRole.SUPER_ADMIN)


def test_only_super_admins_manage_universities():
    assert _super_admin().can_manage("university", "create")
    assert not _dept_admin().can_manage("university", "create")
    with pytest.raises(PermissionDeniedError, match="Only super admins can manage universities"):
        _student().require("university", "delete")


def test_program_management_is_department_scoped():
    assert _super_admin().can_manage("program", "update", department_id=OTHER_DEPT)
    assert _dept_admin().can_manage("program", "update", department_id=DEPT)
    assert _dept_admin().denial("program", "update", department_id=OTHER_DEPT) == (
        "Unauthorized: You can only manage programs in your department"
    )
    assert _student().denial("program", "create", department_id=DEPT) == "Unauthorized: Only admins can manage programs"


def test_application_access():
    assert _student().can_manage("application", "read", student_id=STUDENT)
    assert not _student().can_manage("application", "read", student_id=uuid.uuid4())
    assert _dept_admin().can_manage("application", "read", department_id=DEPT)
    assert not _dept_admin().can_manage("application", "read", department_id=OTHER_DEPT)
    assert _super_admin().can_manage("application", "read", department_id=OTHER_DEPT)


def test_status_review_is_department_admin_only():
    assert _dept_admin().can_manage("application", "review", department_id=DEPT)
    assert not _dept_admin().can_manage("application", "review", department_id=OTHER_DEPT)
    assert not _super_admin().can_manage("application", "review", department_id=DEPT)
    assert not _student().can_manage("application", "review", department_id=DEPT)


def test_qualifications():
    assert _student().can_manage("qualification", "create")
    assert not _dept_admin().can_manage("qualification", "create")
    assert _dept_admin().can_manage("qualification", "verify")
    assert not _student().can_manage("qualification", "verify")
    assert not _student().can_manage("qualification", "delete", student_id=uuid.uuid4())


def test_unknown_permission_is_denied():
    assert _super_admin().denial("spaceship", "launch") == "Unauthorized: unknown permission spaceship:launch"


def test_unassigned_department_admin():
    with pytest.raises(PermissionDeniedError, match="must be assigned to a department"):
        _dept_admin(department_id=None).require_department()
    assert not _dept_admin(department_id=None).can_manage("program", "create", department_id=None)


def test_require_student():
    assert _student().require_student() == STUDENT
    with pytest.raises(PermissionDeniedError):
        _super_admin().require_student()
