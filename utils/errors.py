class AdmissionsError(Exception):
    """Base class for domain errors raised by the service layer."""
    status_code = 400


class NotFoundError(AdmissionsError):
    status_code = 404


class PermissionDeniedError(AdmissionsError):
    status_code = 403


class InvalidStateError(AdmissionsError):
    """Operation not allowed in the entity's current lifecycle state."""
    status_code = 409


class ConflictError(AdmissionsError):
    """Uniqueness or active-record conflict."""
    status_code = 409


class ValidationFailedError(AdmissionsError):
    status_code = 400
