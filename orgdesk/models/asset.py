"""
Asset model
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .base_model import BaseModel


@dataclass(kw_only=True)
class Asset(BaseModel):
    """A physical asset, optionally held by a person."""

    paired_fields = (('person_id', 'assigned_at'),)

    name: Optional[str] = field(default=None, metadata={'required': True})
    serial_number: Optional[str] = None
    brand: Optional[str] = field(default=None, metadata={'required': True})
    value: float = 0.0
    person_id: Optional[str] = None
    organization_id: Optional[str] = field(default=None, metadata={'required': True})
    assigned_at: Optional[datetime] = None

    def validate_value(self):
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            return f"'value' must be a number, got {self.value!r}"
        if self.value < 0:
            return f"'value' cannot be negative, got {self.value!r}"
        return None
