from orgdesk.models import Person
from orgdesk.repositories.base_repository import BaseRepository


class PersonRepository(BaseRepository):
    table_name = 'people'
    # newest first
    default_sort = [('created_at', 'DESC')]

    def __init__(self, adapter):
        super().__init__(adapter, Person)
