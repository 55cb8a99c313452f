from enum import Enum


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    DEPARTMENT_ADMINISTRATOR = "DEPARTMENT_ADMINISTRATOR"
    SUPER_ADMIN = "SUPER_ADMIN"


class QualificationType(str, Enum):
    HIGH_SCHOOL = "HIGH_SCHOOL"
    UNDERGRADUATE = "UNDERGRADUATE"
    LANGUAGE_TEST = "LANGUAGE_TEST"
    OTHER = "OTHER"


class RequirementType(str, Enum):
    GRADE = "GRADE"
    COURSE = "COURSE"
    LANGUAGE = "LANGUAGE"
    INTERVIEW = "INTERVIEW"
    PORTFOLIO = "PORTFOLIO"


class ApplicationStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    CONDITIONAL = "CONDITIONAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Statuses that block a second application to the same program
ACTIVE_APPLICATION_STATUSES = (
    ApplicationStatus.DRAFT.value,
    ApplicationStatus.PENDING.value,
    ApplicationStatus.UNDER_REVIEW.value,
)
