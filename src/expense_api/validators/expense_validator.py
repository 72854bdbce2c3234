"""
Expense payload validation.

Runs every field rule and aggregates the failures, so a client sees all
problems with a request in a single 400 response.

- Full payloads (create, replace) must carry title, amount, category and date.
- Partial payloads (patch) are checked only for the fields they carry.
- Keys that are not expense fields are dropped.
"""
import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import structlog

from ..errors import FieldError, ValidationError
from ..models import EXPENSE_FIELDS, NO_DESCRIPTION

logger = structlog.get_logger()

TITLE_MIN_LENGTH = 3
CATEGORY_MIN_LENGTH = 3
DESCRIPTION_MIN_LENGTH = 5

# Amounts are whole cents below 10**13, so they convert to a JSON number exactly
AMOUNT_MAX_INTEGER_DIGITS = 13
CENT = Decimal("0.01")

MESSAGES = {
    "title": f"title is required and must have at least {TITLE_MIN_LENGTH} characters",
    "amount": (
        "amount must be a number greater than zero with at most 2 decimal places "
        f"and {AMOUNT_MAX_INTEGER_DIGITS} integer digits"
    ),
    "category": f"category is required and must have at least {CATEGORY_MIN_LENGTH} characters",
    "date": "date must be a valid ISO-8601 calendar date",
    "description": f"description, if given, must have at least {DESCRIPTION_MIN_LENGTH} characters",
}

REQUIRED_FIELDS = ("title", "amount", "category", "date")


class InvalidValue(ValueError):
    """Value rejected by a field cleaner"""


def _clean_text(value: Any, min_length: int) -> str:
    if not isinstance(value, str):
        raise InvalidValue()
    value = value.strip()
    if len(value) < min_length:
        raise InvalidValue()
    return value


def clean_title(value: Any) -> str:
    return _clean_text(value, TITLE_MIN_LENGTH)


def clean_category(value: Any) -> str:
    return _clean_text(value, CATEGORY_MIN_LENGTH)


def clean_description(value: Any) -> str:
    return _clean_text(value, DESCRIPTION_MIN_LENGTH)


def clean_amount(value: Any) -> Decimal:
    # bool is an int subclass; JSON true is not an amount
    if isinstance(value, bool):
        raise InvalidValue()
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidValue()
        value = repr(value)
    elif isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, Decimal)):
        raise InvalidValue()
    try:
        amount = Decimal(value)
    except (InvalidOperation, ValueError):
        raise InvalidValue()
    if not amount.is_finite() or amount <= 0:
        raise InvalidValue()
    if amount.adjusted() >= AMOUNT_MAX_INTEGER_DIGITS:
        raise InvalidValue()
    cents = amount.quantize(CENT)
    if cents != amount:
        raise InvalidValue()
    return cents


def parse_iso_date(value: Any) -> date:
    """Parse an ISO-8601 date or datetime string to a calendar date"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not an ISO-8601 date: {value!r}")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text).date()


def clean_date(value: Any) -> date:
    try:
        return parse_iso_date(value)
    except ValueError:
        raise InvalidValue()


CLEANERS: Dict[str, Callable[[Any], Any]] = {
    "title": clean_title,
    "amount": clean_amount,
    "category": clean_category,
    "date": clean_date,
    "description": clean_description,
}


class ExpenseValidator:
    """
    Validates expense payloads for create, replace and patch.

    Returns cleaned values: stripped strings, Decimal amount, date objects.
    """

    def validate(self, payload: Mapping[str, Any], partial: bool = False) -> Dict[str, Any]:
        cleaned, errors = self._run(payload, partial)
        if errors:
            logger.info("Expense payload rejected",
                        partial=partial,
                        fields=[e.field for e in errors])
            raise ValidationError(errors)
        return cleaned

    def validate_full(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Create/replace: required fields present, description defaulted"""
        cleaned = self.validate(payload, partial=False)
        cleaned.setdefault("description", NO_DESCRIPTION)
        return cleaned

    def validate_partial(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Patch: only supplied fields, each checked like on create"""
        return self.validate(payload, partial=True)

    def _run(
        self, payload: Mapping[str, Any], partial: bool
    ) -> Tuple[Dict[str, Any], List[FieldError]]:
        cleaned: Dict[str, Any] = {}
        errors: List[FieldError] = []

        for name in EXPENSE_FIELDS:
            present = name in payload
            value = payload.get(name)

            if not partial and value is None:
                # null counts as absent on full payloads
                if name in REQUIRED_FIELDS:
                    errors.append(FieldError(name, MESSAGES[name]))
                continue
            if not present:
                continue

            try:
                cleaned[name] = CLEANERS[name](value)
            except InvalidValue:
                errors.append(FieldError(name, MESSAGES[name]))

        return cleaned, errors


_validator: Optional[ExpenseValidator] = None


def get_expense_validator() -> ExpenseValidator:
    """Get or create expense validator instance."""
    global _validator
    if _validator is None:
        _validator = ExpenseValidator()
    return _validator
