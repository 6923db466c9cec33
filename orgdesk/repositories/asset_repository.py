from orgdesk.models import Asset
from orgdesk.repositories.base_repository import BaseRepository


class AssetRepository(BaseRepository):
    table_name = 'assets'
    default_sort = [('created_at', 'DESC')]

    def __init__(self, adapter):
        super().__init__(adapter, Asset)
