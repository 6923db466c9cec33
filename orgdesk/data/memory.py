"""
In-process remote data source.

Keeps every table in memory and applies the same uniqueness and referential
rules the hosted database enforces, so accessors behave identically against it.
"""
import asyncio
import copy
import itertools
import logging
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from uuid import uuid4

from orgdesk.data.base import ConflictError, DataAdapter, DataAdapterError, RecordNotFoundError

logger = logging.getLogger(__name__)

TABLES = ('organizations', 'people', 'teams', 'licenses', 'seats', 'assets')

UNIQUE_CONSTRAINTS = {
    'organizations': [('name',)],
    'people': [('organization_id', 'email')],
    'teams': [('organization_id', 'name')],
    'licenses': [('organization_id', 'name')],
}

# parent table -> (child table, foreign key, action, columns cleared alongside)
ON_DELETE = {
    'organizations': [
        ('people', 'organization_id', 'cascade', ()),
        ('teams', 'organization_id', 'cascade', ()),
        ('licenses', 'organization_id', 'cascade', ()),
        ('assets', 'organization_id', 'cascade', ()),
    ],
    'people': [
        ('seats', 'person_id', 'set_null', ('assigned_at',)),
        ('assets', 'person_id', 'set_null', ('assigned_at',)),
        ('people', 'reports_to', 'set_null', ()),
    ],
    'teams': [
        ('people', 'team_id', 'set_null', ()),
    ],
    'licenses': [
        ('seats', 'license_id', 'cascade', ()),
    ],
}

# relation name used in dotted conditions -> table holding the parent row
RELATIONS = {
    'organization': 'organizations',
    'person': 'people',
    'team': 'teams',
    'license': 'licenses',
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class MemoryDataAdapter(DataAdapter):
    """DataAdapter over plain dicts, safe to share within one event loop."""

    def __init__(self, latency: float = 0):
        """
        Args:
            latency (float): Seconds every operation sleeps before touching the tables.
        """
        self.latency = latency
        self._tables: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in TABLES}
        self._sequence = itertools.count()
        self._failures: Dict[Tuple[str, str], deque] = defaultdict(deque)
        self.calls: List[Tuple[str, str]] = []

    def fail_next(self, table: str, operation: str, exc: Exception = None):
        """
        Makes the next `operation` ('select', 'insert', ...) on `table` raise `exc`.
        """
        self._failures[(table, operation)].append(exc or DataAdapterError(f"{operation} on {table} failed"))

    async def _enter(self, table: str, operation: str):
        if table not in self._tables:
            raise DataAdapterError(f"Unknown table: {table}")
        self.calls.append((table, operation))
        await asyncio.sleep(self.latency)
        pending = self._failures.get((table, operation))
        if pending:
            raise pending.popleft()

    @staticmethod
    def _public(row: Dict[str, Any]) -> Dict[str, Any]:
        return {k: copy.deepcopy(v) for k, v in row.items() if k != '_seq'}

    def _resolve(self, row: Dict[str, Any], key: str) -> Any:
        if '.' not in key:
            return row.get(key)
        relation, column = key.split('.', 1)
        parent = self._tables[RELATIONS[relation]].get(row.get(f"{relation}_id"))
        return parent.get(column) if parent else None

    def _matches(self, row: Dict[str, Any], conditions: Optional[Dict[str, Any]]) -> bool:
        for key, expected in (conditions or {}).items():
            actual = self._resolve(row, key)
            if isinstance(expected, (list, tuple, set)):
                if actual not in expected:
                    return False
            elif actual != expected:
                return False
        return True

    def _sorted(self, rows: List[Dict[str, Any]], sort: Optional[List[Tuple[str, str]]]) -> List[Dict[str, Any]]:
        rows = sorted(rows, key=lambda r: r['_seq'])
        for column, direction in reversed(sort or []):
            rows.sort(
                key=lambda r, c=column: (r.get(c) is None, r.get(c), r['_seq']),
                reverse=direction.upper() == 'DESC'
            )
        return rows

    def _check_unique(self, table: str, row: Dict[str, Any], pending: List[Dict[str, Any]] = ()):
        for columns in UNIQUE_CONSTRAINTS.get(table, []):
            key = tuple(row.get(c) for c in columns)
            if any(v is None for v in key):
                continue
            others = itertools.chain(self._tables[table].values(), pending)
            for other in others:
                if other.get('id') != row.get('id') and tuple(other.get(c) for c in columns) == key:
                    raise ConflictError(table, columns)

    def _new_row(self, data: Dict[str, Any]) -> Dict[str, Any]:
        timestamp = _now_iso()
        row = dict(data)
        row['id'] = row.get('id') or uuid4().hex
        row['created_at'] = timestamp
        row['updated_at'] = timestamp
        row['_seq'] = next(self._sequence)
        return row

    async def select(self, table, conditions=None, sort=None):
        await self._enter(table, 'select')
        rows = [r for r in self._tables[table].values() if self._matches(r, conditions)]
        return [self._public(r) for r in self._sorted(rows, sort)]

    async def get_one(self, table, conditions):
        await self._enter(table, 'get_one')
        for row in self._sorted(list(self._tables[table].values()), None):
            if self._matches(row, conditions):
                return self._public(row)
        return None

    async def insert(self, table, data):
        await self._enter(table, 'insert')
        row = self._new_row(data)
        self._check_unique(table, row)
        self._tables[table][row['id']] = row
        logger.debug("Inserted %s into %s", row['id'], table)
        return self._public(row)

    async def insert_many(self, table, rows):
        await self._enter(table, 'insert_many')
        new_rows = []
        for data in rows:
            row = self._new_row(data)
            self._check_unique(table, row, new_rows)
            new_rows.append(row)
        for row in new_rows:
            self._tables[table][row['id']] = row
        logger.debug("Inserted %s rows into %s", len(new_rows), table)
        return [self._public(r) for r in new_rows]

    async def update(self, table, entity_id, data):
        await self._enter(table, 'update')
        current = self._tables[table].get(entity_id)
        if current is None:
            raise RecordNotFoundError(table, entity_id)
        candidate = dict(current)
        candidate.update({k: v for k, v in data.items() if k not in ('id', 'created_at', '_seq')})
        candidate['updated_at'] = _now_iso()
        self._check_unique(table, candidate)
        self._tables[table][entity_id] = candidate
        return self._public(candidate)

    def _delete_row(self, table: str, entity_id: str):
        row = self._tables[table].pop(entity_id, None)
        if row is None:
            return
        for child_table, foreign_key, action, cleared in ON_DELETE.get(table, []):
            children = [r for r in self._tables[child_table].values() if r.get(foreign_key) == entity_id]
            for child in children:
                if action == 'cascade':
                    self._delete_row(child_table, child['id'])
                else:
                    child[foreign_key] = None
                    for column in cleared:
                        child[column] = None
                    child['updated_at'] = _now_iso()

    async def delete(self, table, entity_id):
        await self._enter(table, 'delete')
        if entity_id not in self._tables[table]:
            raise RecordNotFoundError(table, entity_id)
        self._delete_row(table, entity_id)

    async def delete_many(self, table, conditions):
        await self._enter(table, 'delete_many')
        doomed = [r['id'] for r in self._tables[table].values() if self._matches(r, conditions)]
        for entity_id in doomed:
            self._delete_row(table, entity_id)
        return len(doomed)
