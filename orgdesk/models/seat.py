"""
Seat model
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .base_model import BaseModel


@dataclass(kw_only=True)
class Seat(BaseModel):
    """One assignable unit of a license."""

    paired_fields = (('person_id', 'assigned_at'),)

    license_id: Optional[str] = field(default=None, metadata={'required': True})
    code: Optional[str] = None
    person_id: Optional[str] = None
    assigned_at: Optional[datetime] = None

    @property
    def is_assigned(self) -> bool:
        return self.person_id is not None
