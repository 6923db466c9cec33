"""
Models for orgdesk
"""

from .base_model import BaseModel, ModelValidationError
from .organization import Organization
from .person import Person
from .team import Team
from .license import License
from .seat import Seat
from .asset import Asset
