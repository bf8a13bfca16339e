"""Domain exceptions

Raised inside domain rules and use cases, converted to ``Error`` results at
the use case boundary.
"""

from typing import List, Optional
from receivables.libs.result import Error


class LedgerError(Exception):
    """Base class for expected, caller-correctable failures"""

    code = "LEDGER_ERROR"

    def __init__(self, message: str, reason: str = "", details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details = list(details or [])

    def to_error(self) -> Error:
        return Error(
            code=self.code,
            message=self.message,
            reason=self.reason,
            details=self.details,
        )


class ValidationError(LedgerError):
    """Malformed or missing input; nothing is persisted"""

    code = "VALIDATION_ERROR"

    def __init__(self, details: List[str], message: str = "Validation failed"):
        super().__init__(message, reason="; ".join(details), details=details)


class NotFoundError(LedgerError):
    """Referenced entity does not exist"""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity} with ID {entity_id} not found",
            reason=f"{entity} does not exist",
        )
        self.entity = entity
        self.entity_id = entity_id


class InvalidOperationError(LedgerError):
    """Legal input that is illegal against the current state"""

    code = "INVALID_OPERATION"


class ExternalServiceError(LedgerError):
    """Outbound collaborator failure; never fatal to ledger mutations"""

    code = "EXTERNAL_SERVICE_ERROR"
