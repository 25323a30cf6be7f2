# backend/ostsee/exceptions.py
"""Exception hierarchy shared by the report components and the API.

Every error carries a machine-readable ``error_code`` and the HTTP status the
API answers with; ``to_dict`` yields the JSON body clients receive.
"""
from http import HTTPStatus
from typing import Any, ClassVar, Optional


class OstseeError(Exception):
    error_code: ClassVar[str] = "SERVER_ERROR"
    http_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: ClassVar[str] = "Ein unbekannter Fehler ist aufgetreten"

    def __init__(self, message: Optional[str] = None, *, context: Optional[dict[str, Any]] = None) -> None:
        self.message = message or self.default_message
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": False,
            "code": self.error_code,
            "message": self.message,
        }
        if self.context:
            body["context"] = self.context
        return body


class ValidationError(OstseeError):
    """Input failed the field rules; ``errors`` lists the offending fields."""

    error_code = "VALIDATION_ERROR"
    http_status = HTTPStatus.BAD_REQUEST
    default_message = "Validierungsfehler bei der Eingabe"

    def __init__(self, message: Optional[str] = None, *, errors: Optional[list] = None,
                 context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, context=context)
        self.errors = list(errors or [])

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["errors"] = [e.to_dict() for e in self.errors]
        return body


class DraftValidationError(ValidationError):
    """Submission blocked because the draft fails full validation."""


class AuthenticationError(OstseeError):
    error_code = "UNAUTHORIZED"
    http_status = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized"


class AuthorizationError(OstseeError):
    error_code = "FORBIDDEN"
    http_status = HTTPStatus.FORBIDDEN
    default_message = "Forbidden: Insufficient permissions"


class NotFoundError(OstseeError):
    error_code = "NOT_FOUND"
    http_status = HTTPStatus.NOT_FOUND
    default_message = "Nicht gefunden"


class ConflictError(OstseeError):
    error_code = "CONFLICT"
    http_status = HTTPStatus.CONFLICT
    default_message = "Konflikt"


class SubmissionError(OstseeError):
    """The sightings backend rejected or never answered a submission."""

    error_code = "SUBMISSION_ERROR"
    http_status = HTTPStatus.BAD_GATEWAY
    default_message = "Die Sichtung konnte nicht gespeichert werden"


class DatabaseError(OstseeError):
    error_code = "DATABASE_ERROR"
    http_status = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = "Fehler beim Speichern in der Datenbank"


class StorageError(OstseeError):
    error_code = "STORAGE_ERROR"
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Die Datei konnte nicht gespeichert werden"


class UploadRejectedError(OstseeError):
    error_code = "UPLOAD_REJECTED"
    http_status = HTTPStatus.BAD_REQUEST
    default_message = "Die Datei wurde abgelehnt"


class ConfigurationError(OstseeError):
    error_code = "CONFIGURATION_ERROR"
    http_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Fehlerhafte Konfiguration"
