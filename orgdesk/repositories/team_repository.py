from orgdesk.models import Team
from orgdesk.repositories.base_repository import BaseRepository


class TeamRepository(BaseRepository):
    table_name = 'teams'
    default_sort = [('name', 'ASC')]

    def __init__(self, adapter):
        super().__init__(adapter, Team)
