"""Numbering domain exceptions."""

from dataclasses import dataclass

from server.exceptions import AppError


@dataclass
class InvalidDocument(AppError):
    status_code: int = 400
    code: str = "document-package-error"


@dataclass
class MalformedNumbering(AppError):
    status_code: int = 422
    code: str = "malformed-definition"


@dataclass
class UploadTooLarge(AppError):
    status_code: int = 413
    code: str = "upload_too_large"
