"""Wizard error taxonomy.

The session and the reconciler return these inside their outcomes rather
than raising them; the HTTP layer renders them with the standard error
envelope.
"""

from fastapi import status

from firecert.middleware.exceptions import FireCertException


class ValidationFailed(FireCertException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "VALIDATION_FAILED"

    def __init__(self, errors: dict[str, str], step: int | None = None):
        self.errors = errors
        self.step = step
        super().__init__(
            "Some fields need attention",
            details={"errors": errors, "step": step},
        )


class DocumentUploadFailed(FireCertException):
    status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "DOCUMENT_UPLOAD_FAILED"

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(
            f"Failed to upload document: {slug}",
            details={"slug": slug},
        )


class DuplicatePendingApplication(FireCertException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "DUPLICATE_PENDING_APPLICATION"

    def __init__(self, message: str = "A pending application of this type already exists"):
        super().__init__(message)


class PersistenceError(FireCertException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "PERSISTENCE_ERROR"

    def __init__(self, message: str = "Could not save your submission. Please try again."):
        super().__init__(message)


class SessionBusy(FireCertException):
    status_code = status.HTTP_409_CONFLICT
    error_code = "SESSION_BUSY"

    def __init__(self):
        super().__init__("A submission is in progress for this session")


class InvalidStepTransition(FireCertException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "INVALID_STEP"

    def __init__(self, step: int, current: int):
        super().__init__(
            f"Cannot jump to step {step}; only steps up to {current} can be revisited",
            details={"step": step, "current_step": current},
        )


class UnknownField(FireCertException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "UNKNOWN_FIELD"

    def __init__(self, names: list[str]):
        super().__init__(
            f"Unknown field(s): {', '.join(names)}",
            details={"fields": names},
        )
