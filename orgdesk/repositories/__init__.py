from .base_repository import BaseRepository
from .organization_repository import OrganizationRepository
from .person_repository import PersonRepository
from .team_repository import TeamRepository
from .license_repository import LicenseRepository
from .seat_repository import SeatRepository, seat_code
from .asset_repository import AssetRepository
