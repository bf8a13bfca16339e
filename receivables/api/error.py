"""HTTP error mapping for use case failures"""

from typing import Optional
from fastapi import status
from receivables.libs.result import Error

STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_OPERATION": status.HTTP_409_CONFLICT,
}


def status_for(error: Error) -> int:
    if error.code in STATUS_BY_CODE:
        return STATUS_BY_CODE[error.code]
    if error.code.endswith("_FAILED"):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


class ClientError(Exception):
    """
    Raised by routes when a use case returns an error

    The app's exception handler renders it as
    ``{"success": false, "error": {...}}``.
    """

    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or status_for(error)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.error.to_dict()}
