"""Application-level exception hierarchy mapped to HTTP responses."""

from typing import Any


class AppError(Exception):
    """Base class for expected domain errors surfaced by the API."""

    status_code = 400
    default_detail: Any = "Bad request."

    def __init__(self, detail: Any | None = None) -> None:
        self.detail = self.default_detail if detail is None else detail
        super().__init__(str(self.detail))


class InvalidRequestError(AppError):
    """Error raised when request payload validation fails."""

    status_code = 422
    default_detail = "Invalid request."


class InputError(AppError):
    """The uploaded file violates a size or type precondition."""

    status_code = 400
    default_detail = "Invalid input file."


class FileTooLargeError(InputError):
    status_code = 413
    default_detail = "File size exceeds the upload limit."


class UnsupportedMediaTypeError(InputError):
    status_code = 415
    default_detail = "Invalid file type. Please upload an Excel file (.xlsx or .xls)."


class MissingFilenameError(InputError):
    status_code = 422
    default_detail = "filename is required."


class ParseError(AppError):
    """The workbook cannot be decoded or lacks the expected row layout."""

    status_code = 422
    default_detail = "Failed to parse workbook."


class DatasetValidationError(AppError):
    """The ingested dataset failed schema or quality validation.

    ``detail`` carries the ordered list of diagnostics.
    """

    status_code = 422
    default_detail: Any = ["Dataset validation failed."]


class UnexpectedError(AppError):
    """Fallback error for unhandled exceptions."""

    status_code = 500
    default_detail = "An unexpected error occurred. Please try again later."
