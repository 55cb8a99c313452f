"""
Permission Policy

Built once per request from the authenticated user. Every service asks the
policy instead of re-deriving role logic:

    policy.require("program", "update", department_id=program.department_id)

A rule returns None when the action is allowed, otherwise the denial message.
"""

from typing import Callable, Dict, Optional, Tuple
from uuid import UUID

from models.enums import UserRole
from models.schemas_user import CurrentUser
from utils.errors import PermissionDeniedError

Rule = Callable[["Policy", Optional[UUID], Optional[UUID]], Optional[str]]


def _super_admin_only(message: str) -> Rule:
    def rule(policy, department_id, student_id):
        return None if policy.is_super_admin else message
    return rule


def _admins_only(message: str) -> Rule:
    def rule(policy, department_id, student_id):
        return None if policy.is_admin else message
    return rule


def _department_scoped(not_admin: str, other_department: str) -> Rule:
    """Super admins anywhere; department admins inside their own department."""
    def rule(policy, department_id, student_id):
        if policy.is_super_admin:
            return None
        if not policy.is_department_admin:
            return not_admin
        if department_id is None or department_id != policy.department_id:
            return other_department
        return None
    return rule


def _own_department(policy, department_id, student_id):
    if policy.is_department_admin and department_id != policy.department_id:
        return "Unauthorized: You can only access your own department"
    return None


def _application_access(policy, department_id, student_id):
    if policy.is_student:
        if student_id is None or student_id != policy.student_id:
            return "Unauthorized: You can only access your own applications"
    elif policy.is_department_admin:
        if department_id is None or department_id != policy.department_id:
            return "Unauthorized: You can only access applications in your department"
    return None


def _application_create(policy, department_id, student_id):
    if policy.is_student:
        if student_id != policy.student_id:
            return "Unauthorized: You can only create applications for yourself"
    elif policy.is_department_admin:
        if department_id is None or department_id != policy.department_id:
            return "Unauthorized: You can only create applications for programs in your department"
    return None


def _application_submit(policy, department_id, student_id):
    if policy.is_student and student_id != policy.student_id:
        return "Unauthorized: You can only submit your own applications"
    return None


def _application_review(policy, department_id, student_id):
    if not policy.is_department_admin:
        return "Unauthorized: Only department administrators can update application status"
    if department_id != policy.department_id:
        return "Unauthorized: You can only update applications in your department"
    return None


def _note_create(policy, department_id, student_id):
    if policy.is_student and student_id != policy.student_id:
        return "Unauthorized: You can only add notes to your own applications"
    return _application_access(policy, department_id, student_id)


def _qualification_create(policy, department_id, student_id):
    return None if policy.is_student else "Only students can create qualifications"


def _qualification_owner(message: str) -> Rule:
    def rule(policy, department_id, student_id):
        if policy.is_student and student_id != policy.student_id:
            return message
        return None
    return rule


def _requirement_rule(message: str) -> Rule:
    return _department_scoped(message, message)


RULES: Dict[Tuple[str, str], Rule] = {
    # catalog
    ("university", "create"): _super_admin_only("Unauthorized: Only super admins can manage universities"),
    ("university", "update"): _super_admin_only("Unauthorized: Only super admins can manage universities"),
    ("university", "delete"): _super_admin_only("Unauthorized: Only super admins can manage universities"),
    ("department", "create"): _super_admin_only("Unauthorized: Only super admins can create departments"),
    ("department", "update"): _super_admin_only("Unauthorized: Only super admins can update departments"),
    ("department", "delete"): _super_admin_only("Unauthorized: Only super admins can delete departments"),
    ("department", "read"): _own_department,
    ("program", "create"): _department_scoped(
        "Unauthorized: Only admins can manage programs",
        "Unauthorized: You can only create programs in your department",
    ),
    ("program", "update"): _department_scoped(
        "Unauthorized: Only admins can manage programs",
        "Unauthorized: You can only manage programs in your department",
    ),
    ("program", "delete"): _department_scoped(
        "Unauthorized: Only admins can manage programs",
        "Unauthorized: You can only manage programs in your department",
    ),
    ("requirement", "create"): _requirement_rule("You don't have permission to add requirements to this program"),
    ("requirement", "update"): _requirement_rule("You don't have permission to update this requirement"),
    ("requirement", "delete"): _requirement_rule("You don't have permission to delete this requirement"),
    # applications
    ("application", "create"): _application_create,
    ("application", "read"): _application_access,
    ("application", "submit"): _application_submit,
    ("application", "delete"): _application_access,
    ("application", "withdraw"): _application_access,
    ("application", "review"): _application_review,
    ("note", "create"): _note_create,
    # qualifications
    ("qualification", "create"): _qualification_create,
    ("qualification", "read"): _qualification_owner("You can only view your own qualifications"),
    ("qualification", "delete"): _qualification_owner("You can only delete your own qualifications"),
    ("qualification", "verify"): _admins_only("Only administrators can verify qualifications"),
    # accounts and dashboards
    ("admin_user", "manage"): _admins_only("Unauthorized: Insufficient permissions"),
    ("dashboard", "admin"): _admins_only("Unauthorized: Insufficient permissions"),
    ("dashboard", "super"): _super_admin_only("Unauthorized: Insufficient permissions"),
}


class Policy:
    """Role-based permission decisions for one authenticated user."""

    def __init__(
        self,
        user_id: UUID,
        role: UserRole,
        student_id: Optional[UUID] = None,
        department_id: Optional[UUID] = None,
    ):
        self.user_id = user_id
        self.role = UserRole(role)
        self.student_id = student_id
        self.department_id = department_id

    @classmethod
    def for_user(cls, user: CurrentUser) -> "Policy":
        return cls(
            user_id=user.id,
            role=user.role,
            student_id=user.student_id,
            department_id=user.department_id,
        )

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @property
    def is_department_admin(self) -> bool:
        return self.role == UserRole.DEPARTMENT_ADMINISTRATOR

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_admin(self) -> bool:
        return self.is_department_admin or self.is_super_admin

    def denial(
        self,
        resource: str,
        action: str,
        department_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None,
    ) -> Optional[str]:
        rule = RULES.get((resource, action))
        if rule is None:
            return f"Unauthorized: unknown permission {resource}:{action}"
        return rule(self, department_id, student_id)

    def can_manage(
        self,
        resource: str,
        action: str,
        department_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None,
    ) -> bool:
        return self.denial(resource, action, department_id, student_id) is None

    def require(
        self,
        resource: str,
        action: str,
        department_id: Optional[UUID] = None,
        student_id: Optional[UUID] = None,
    ) -> None:
        message = self.denial(resource, action, department_id, student_id)
        if message is not None:
            raise PermissionDeniedError(message)

    def require_department(self) -> UUID:
        """Department admins must be assigned before they can act on department data."""
        if self.is_department_admin and not self.department_id:
            raise PermissionDeniedError("Department administrator must be assigned to a department")
        return self.department_id

    def require_student(self) -> UUID:
        if not self.student_id:
            raise PermissionDeniedError("Student must have a student profile")
        return self.student_id
