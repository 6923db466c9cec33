from orgdesk.models import License
from orgdesk.repositories.base_repository import BaseRepository


class LicenseRepository(BaseRepository):
    table_name = 'licenses'
    default_sort = [('name', 'ASC')]

    def __init__(self, adapter):
        super().__init__(adapter, License)
