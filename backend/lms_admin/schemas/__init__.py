"""
Pydantic request schemas for the LMS admin API.
"""

from .common import CamelModel, ok, pagination

__all__ = ["CamelModel", "ok", "pagination"]
