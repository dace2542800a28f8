"""
Shared schema helpers.

Request bodies arrive in camelCase (``isPublished``, ``courseId``) and are
exposed to Python code in snake_case.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def ok(data: Any = None, **extra: Any) -> Dict[str, Any]:
    """Build the ``{"success": true, ...}`` response envelope."""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": (total + limit - 1) // limit if limit else 0,
    }


def optional_str(value: Optional[str]) -> Optional[str]:
    """Treat empty strings from HTML forms as missing."""
    return None if value == "" else value
