"""
Admissions Logic Module

Catalog administration, qualifications, the application lifecycle,
administrator accounts and dashboards. Every service takes a Session and,
for protected operations, the caller's Policy.
"""

from .policy import Policy
from .applications import (
    ApplyCheck,
    can_student_apply,
    create_application,
    submit_application,
    update_application_status,
    delete_application,
    withdraw_application,
    get_applications,
    get_application_by_id,
    get_applications_for_department_admin,
    add_note_to_application,
)

__all__ = [
    "Policy",
    "ApplyCheck",
    "can_student_apply",
    "create_application",
    "submit_application",
    "update_application_status",
    "delete_application",
    "withdraw_application",
    "get_applications",
    "get_application_by_id",
    "get_applications_for_department_admin",
    "add_note_to_application",
]
