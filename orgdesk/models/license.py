"""
License model
"""

from dataclasses import dataclass, field
from typing import Optional

from .base_model import BaseModel


@dataclass(kw_only=True)
class License(BaseModel):
    """A software license owning exactly `total_seats` seats."""

    name: Optional[str] = field(default=None, metadata={'required': True})
    description: Optional[str] = None
    total_seats: int = 1
    organization_id: Optional[str] = field(default=None, metadata={'required': True})

    def validate_total_seats(self):
        if isinstance(self.total_seats, bool) or not isinstance(self.total_seats, int) or self.total_seats < 1:
            return f"'total_seats' must be a positive integer, got {self.total_seats!r}"
        return None
