"""
base repository for orgdesk
"""
import logging
from typing import Any, Dict, List, Tuple, Type, Union

from orgdesk.data.base import DataAdapter
from orgdesk.models.base_model import BaseModel

logger = logging.getLogger(__name__)


class BaseRepository:
    """
    BaseRepository class
    """

    table_name: str = None
    default_sort: List[Tuple[str, str]] = [('created_at', 'ASC')]

    def __init__(
        self,
        adapter: DataAdapter,
        model: Type[BaseModel]
    ):
        self.adapter = adapter
        self.model = model
        if self.table_name is None:
            self.table_name = model.__name__.lower() + 's'

    def _process_data_before_save(
        self,
        instance: BaseModel
    ) -> Dict[str, Any]:
        """Validate an instance and convert it to an insertable row."""
        instance.prepare_for_save()
        return instance.get_for_db()

    def _process_fields_before_update(
        self,
        changes: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Restrict an update to writable columns and collapse empty strings."""
        writable = self.model.writable_fields()
        unknown = [k for k in changes if k not in writable]
        if unknown:
            raise ValueError(f"Cannot update {', '.join(unknown)} on {self.table_name}")
        data = {}
        for k, v in changes.items():
            if v == '':
                v = None
            if hasattr(v, 'isoformat'):
                v = v.isoformat()
            data[k] = v
        return data

    def _to_models(self, records: List[Dict[str, Any]]) -> List[BaseModel]:
        return [self.model.from_dict(record) for record in records]

    async def get_one(
        self,
        conditions: Dict[str, Any]
    ) -> Union[BaseModel, None]:
        """
        Fetches a single record based on given conditions.

        :param conditions: filter conditions
        :return: a model instance if found, None otherwise
        """
        data = await self.adapter.get_one(self.table_name, conditions)
        if not data:
            return None
        return self.model.from_dict(data)

    async def get_by_id(self, entity_id: str) -> Union[BaseModel, None]:
        return await self.get_one({'id': entity_id})

    async def get_many(
        self,
        conditions: Dict[str, Any] = None,
        sort: List[Tuple[str, str]] = None
    ) -> List[BaseModel]:
        """
        Fetches multiple records based on given conditions.

        :param conditions: filter conditions
        :param sort: sort order, defaults to the repository's ordering
        :return: list of model instances
        """
        records = await self.adapter.select(self.table_name, conditions, sort or self.default_sort)
        return self._to_models(records)

    async def get_for_organization(self, organization_id: str) -> List[BaseModel]:
        """All records belonging to an organization, in the repository's ordering."""
        return await self.get_many({'organization_id': organization_id})

    async def create(
        self,
        instance: BaseModel
    ) -> BaseModel:
        """
        Inserts a model instance and returns the stored record.

        :param instance: The instance to create. Its id and timestamps are assigned remotely.
        :raises ModelValidationError: if the instance is invalid; nothing is written.
        """
        data = self._process_data_before_save(instance)
        record = await self.adapter.insert(self.table_name, data)
        return self.model.from_dict(record)

    async def update(
        self,
        entity_id: str,
        changes: Dict[str, Any]
    ) -> BaseModel:
        """
        Updates the given columns of a record and returns the stored record.
        """
        data = self._process_fields_before_update(changes)
        record = await self.adapter.update(self.table_name, entity_id, data)
        return self.model.from_dict(record)

    async def delete(
        self,
        entity_id: str
    ) -> None:
        """
        Deletes a record. Referential rules are applied by the data source.
        """
        await self.adapter.delete(self.table_name, entity_id)
