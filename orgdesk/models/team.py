"""
Team model
"""

from dataclasses import dataclass, field
from typing import Optional

from .base_model import BaseModel


@dataclass(kw_only=True)
class Team(BaseModel):
    """A team model. Members are the people whose team_id points here."""

    name: Optional[str] = field(default=None, metadata={'required': True})
    description: Optional[str] = None
    organization_id: Optional[str] = field(default=None, metadata={'required': True})
