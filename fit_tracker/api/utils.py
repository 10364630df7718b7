"""Helpers shared by endpoint modules."""

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel


def changes_from(payload: BaseModel, nullable: Iterable[str] = ()) -> dict[str, Any]:
    """Fields the client sent. Explicit nulls are kept only for nullable columns."""
    keep = set(nullable)
    return {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in keep
    }
