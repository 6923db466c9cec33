"""
Organization model
"""

from dataclasses import dataclass, field
from typing import Optional

from .base_model import BaseModel


@dataclass(kw_only=True)
class Organization(BaseModel):
    """An organization model. Every other record belongs to exactly one."""

    name: Optional[str] = field(default=None, metadata={'required': True})
