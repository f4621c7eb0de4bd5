# fleet_inspection/services/validation.py
"""
Small helpers shared by the registry and workflow services.
Entities are validated as frozen drafts: an update is a patch applied to a
snapshot of the stored row, and the merged draft is revalidated as a whole.
"""

import dataclasses
from typing import Optional, TypeVar

from pydantic import BaseModel
from fleet_inspection.errors import ValidationError

D = TypeVar("D")


def apply_patch(snapshot: D, patch: BaseModel) -> D:
    """Return a new draft with only the fields the caller actually sent replaced."""
    changes = patch.model_dump(exclude_unset=True)
    known = {f.name for f in dataclasses.fields(snapshot)}
    return dataclasses.replace(snapshot, **{k: v for k, v in changes.items() if k in known})


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_min_length(value: Optional[str], length: int, message: str) -> None:
    if not value or len(value.strip()) < length:
        raise ValidationError(message)
