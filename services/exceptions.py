"""
Domain exceptions raised by the patient service
"""


class ClinicError(Exception):
    """Base class for patient/visit storage errors"""

    message = "Clinic records error"

    def __init__(self, message=None):
        super().__init__(message or self.message)


class InvalidIdentifierError(ClinicError, ValueError):
    message = "Invalid identifier"

    def __init__(self, value=None):
        self.value = value
        super().__init__(f"Invalid identifier: {value!r}")


class PatientNotFoundError(ClinicError, LookupError):
    message = "Patient not found"


class VisitNotFoundError(ClinicError, LookupError):
    message = "Visit not found"
