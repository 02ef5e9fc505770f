"""
Error hierarchy for the hospital backend.

Services raise these; ``hospital.main`` maps each class to an HTTP status.
"""


class HospitalError(Exception):
    """Base class for all application-level errors."""

    status_code = 500


class NotFoundError(HospitalError):
    """Raised when a record is absent or has the wrong role."""

    status_code = 404


class ParseError(HospitalError, ValueError):
    """Raised when an "HH:MM" time or a date cannot be parsed."""

    status_code = 422


class DoctorUnavailableError(HospitalError):
    """Raised when a booking falls outside the doctor's working window."""

    status_code = 400


class ConflictError(HospitalError):
    """Raised when a write clashes with an existing record."""

    status_code = 409


class SchedulingConflictError(ConflictError):
    """Raised when a booking overlaps an existing one for the same doctor."""


class PersistenceError(HospitalError):
    """Raised when the storage layer fails."""

    status_code = 500
