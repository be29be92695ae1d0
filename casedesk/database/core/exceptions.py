"""
Domain exceptions raised by the service layer.

Route handlers translate them into HTTP responses through the
``status_code`` attribute; anything not derived from `CaseDeskError` is an
unexpected failure and surfaces as a 500.
"""


class CaseDeskError(Exception):
    """Base class of every expected service-layer failure."""

    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotAuthenticatedError(CaseDeskError):
    status_code = 401
    default_detail = "Not authenticated"


class CaseNotFoundError(CaseDeskError):
    """Raised for missing, deleted and foreign cases alike."""

    status_code = 404
    default_detail = "Case not found or access denied"


class DocumentNotFoundError(CaseDeskError):
    status_code = 404
    default_detail = "Document not found"


class DocumentNotInCaseError(CaseDeskError):
    status_code = 404
    default_detail = "Document is not in this case"


class StoredFileNotFoundError(CaseDeskError):
    status_code = 404
    default_detail = "File not found"


class CaseLimitError(CaseDeskError):
    """Raised before mutation when an attach would exceed a per-case cap."""

    status_code = 409
    default_detail = "Case limit reached"


class DocumentAlreadyAttachedError(CaseDeskError):
    status_code = 409
    default_detail = "Document already belongs to another case"


class ExtractionFailedError(CaseDeskError):
    status_code = 422
    default_detail = "Could not extract readable content from this file"


class InvalidUploadError(CaseDeskError):
    status_code = 400
    default_detail = "Invalid upload"


class RegistrationError(CaseDeskError):
    status_code = 400
    default_detail = "Registration failed"


class InvalidCredentialsError(CaseDeskError):
    status_code = 401
    default_detail = "Invalid username or password"
