"""
Module: `utils/errors.py`.
Purpose: Error kinds raised by the repository and the upload handler.

Each error knows the HTTP status it is reported with; the application
factory turns them into plain-text responses.
"""


class PostboardError(Exception):
    """Base error with an HTTP status and a human-readable message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(PostboardError):
    status_code = 400


class UnsupportedMediaType(PostboardError):
    status_code = 400


class PayloadTooLarge(PostboardError):
    # Reported the way the multipart parser reports it.
    status_code = 400


class NotFound(PostboardError):
    status_code = 404


class StorageError(PostboardError):
    status_code = 500


class OperationTimeout(PostboardError):
    """The backend call did not finish within the request's time bound."""

    status_code = 500
