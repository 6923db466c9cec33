"""
Person model
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from .base_model import BaseModel

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


@dataclass(kw_only=True)
class Person(BaseModel):
    """A person model."""

    email: Optional[str] = field(default=None, metadata={'required': True})
    name: Optional[str] = field(default=None, metadata={'required': True})
    position: Optional[str] = field(default=None, metadata={'required': True})
    # entity_id of the manager; people form a forest
    reports_to: Optional[str] = None
    team_id: Optional[str] = None
    organization_id: Optional[str] = field(default=None, metadata={'required': True})

    def validate_email(self):
        if self.email and not EMAIL_PATTERN.match(self.email):
            return f"'email' is not a valid address: {self.email!r}"
        return None

    def validate_reports_to(self):
        if self.reports_to and self.reports_to == self.entity_id:
            return "'reports_to' cannot reference the person itself"
        return None
