"""
Domain errors for the expense records API.

Client-caused errors (validation, missing records, bad ranges) are normal
control flow and carry messages that are safe to return. Store errors are
environment faults: they are logged in full and reported generically.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class FieldError:
    """Single field-level validation failure"""
    field: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "message": self.message}


class ExpenseError(Exception):
    """Base class for all domain errors"""


class ValidationError(ExpenseError, ValueError):
    """Invalid input. Carries every failing field, in field order."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        fields = ", ".join(e.field for e in self.errors)
        super().__init__(f"Validation failed: {fields}")

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationError":
        return cls([FieldError(field, message)])


class NotFoundError(ExpenseError, LookupError):
    """Requested record does not exist"""

    def __init__(self, entity: str, identifier: Any):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} {identifier} not found")


class ConflictError(ExpenseError):
    """Uniqueness violation, e.g. a duplicate category name"""


class InvalidRangeError(ExpenseError, ValueError):
    """Date range is missing, unparsable or inverted"""


class StoreError(ExpenseError):
    """Persistence layer failure"""

    def __init__(self, message: str, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(message)


class StoreUnavailableError(StoreError):
    """I/O or connection failure talking to the backing store"""


class StoreCorruptError(StoreError):
    """Backing store content cannot be interpreted"""


def expense_not_found(expense_id: Any) -> NotFoundError:
    return NotFoundError("Expense", expense_id)
