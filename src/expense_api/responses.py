"""
Response envelope and error bodies.

Every successful response is wrapped as {"data": ..., "timestamp": ...}.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from .errors import FieldError


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_jsonable(result: Any) -> Any:
    """Domain objects expose to_dict(); sequences are converted item by item"""
    if hasattr(result, "to_dict"):
        return result.to_dict()
    if isinstance(result, (list, tuple)):
        return [to_jsonable(item) for item in result]
    return result


def envelope(result: Any) -> Dict[str, Any]:
    return {"data": to_jsonable(result), "timestamp": utc_timestamp()}


def validation_error_body(errors: Iterable[FieldError]) -> Dict[str, Any]:
    items: List[Dict[str, Any]] = [e.to_dict() for e in errors]
    return {"detail": "Validation failed", "errors": items}
