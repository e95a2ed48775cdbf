"""
Application error taxonomy.

Every error carries the HTTP status it maps to and a localized (Hindi) message
that is returned to the client in the ``{"error": ..., "details": ...}``
envelope. ``details`` holds the English diagnostic, if any.
"""

from typing import Any, Optional


MSG_SERVER_ERROR = "सर्वर त्रुटि"
MSG_DATABASE_ERROR = "डेटाबेस त्रुटि"
MSG_PIN_REQUIRED = "पिन आवश्यक है"
MSG_INVALID_PIN = "अमान्य पिन"
MSG_INVALID_API_KEY = "अमान्य API कुंजी"
MSG_REQUIRED_FIELDS = "आवश्यक फ़ील्ड अनुपलब्ध हैं"
MSG_INVALID_REQUEST = "अमान्य अनुरोध"
MSG_INVALID_DATE = "अमान्य दिनांक"
MSG_INVALID_FILE_TYPE = "अमान्य फ़ाइल प्रकार"
MSG_FILE_TOO_LARGE = "फ़ाइल बहुत बड़ी है"
MSG_TOO_MANY_FILES = "बहुत अधिक फ़ाइलें"
MSG_UPLOAD_FAILED = "अपलोड विफल"
MSG_VIDEO_UPLOAD_FAILED = "वीडियो अपलोड विफल"
MSG_EVENT_NOT_FOUND = "इवेंट नहीं मिला"


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500
    default_message = MSG_SERVER_ERROR

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message if details is None else f"{self.message}: {details}")

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Missing or malformed request input."""
    status_code = 400
    default_message = MSG_INVALID_REQUEST


class AuthError(AppError):
    """Unknown PIN or bad admin key."""
    status_code = 401
    default_message = MSG_INVALID_PIN


class NotFoundError(AppError):
    status_code = 404
    default_message = MSG_EVENT_NOT_FOUND


class StorageError(AppError):
    """Relational store unavailable or query failure."""
    status_code = 500
    default_message = MSG_DATABASE_ERROR


class UploadError(AppError):
    """Blob store rejected or failed an upload."""
    status_code = 500
    default_message = MSG_UPLOAD_FAILED


class MediaError(UploadError):
    """A fatal slot (the primary video) could not be uploaded."""
    default_message = MSG_VIDEO_UPLOAD_FAILED
