"""Domain data accessors"""
from .base import BaseAccessor, MutationError, MutationFailureReason
from .organizations import OrganizationAccessor
from .people import PeopleAccessor
from .teams import TeamAccessor
from .seats import SeatAccessor, UNSET
from .licenses import LicenseAccessor
from .assets import AssetAccessor
