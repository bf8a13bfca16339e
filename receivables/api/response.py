"""Success envelope for API responses"""

from typing import Any
from pydantic import BaseModel


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if isinstance(value, dict):
        return {key: _dump(item) for key, item in value.items()}
    return value


def ok(data: Any = None) -> dict:
    return {"success": True, "data": _dump(data)}
