"""
REPOSITORIES - Record store contract and in-memory implementation

The import/export core only calls get_all() and create(); the remaining
operations back the pass-through services. Records are plain dicts keyed by
camelCase field names, with the store-assigned integer id under "Id".
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union

from .exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

ID_FIELD = "Id"


class RecordRepository(Protocol):
    """Operations a record store must provide"""

    def get_all(self) -> List[Record]:
        ...

    def get_by_id(self, record_id: Any) -> Record:
        ...

    def create(self, record: Record) -> Record:
        ...

    def update(self, record_id: Any, changes: Record) -> Record:
        ...

    def delete(self, record_id: Any) -> bool:
        ...


def filter_records(records: Iterable[Record], **criteria: Any) -> List[Record]:
    """Records whose fields equal every given value"""
    return [
        record for record in records
        if all(record.get(field) == value for field, value in criteria.items())
    ]


class InMemoryRepository:
    """List-backed record store; ids are max(existing Id) + 1"""

    def __init__(self, entity: str, records: Optional[List[Record]] = None):
        """
        Args:
            entity: Display name used in "<entity> not found" errors
            records: Seed records (copied)
        """
        self.entity = entity
        self._records: List[Record] = copy.deepcopy(records or [])

    @classmethod
    def from_json(cls, entity: str, path: Union[str, Path]) -> "InMemoryRepository":
        """Seed a repository from a JSON array of records"""
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
        logger.info(f"📊 Loaded {len(records)} {entity} records from: {path}")
        return cls(entity, records)

    def _index_of(self, record_id: Any) -> int:
        try:
            wanted = int(record_id)
        except (TypeError, ValueError):
            raise RecordNotFoundError(self.entity, record_id)
        for index, record in enumerate(self._records):
            if record.get(ID_FIELD) == wanted:
                return index
        raise RecordNotFoundError(self.entity, record_id)

    def _next_id(self) -> int:
        return max([r.get(ID_FIELD, 0) for r in self._records] + [0]) + 1

    def get_all(self) -> List[Record]:
        return copy.deepcopy(self._records)

    def get_by_id(self, record_id: Any) -> Record:
        return copy.deepcopy(self._records[self._index_of(record_id)])

    def create(self, record: Record) -> Record:
        new_record = copy.deepcopy(record)
        new_record[ID_FIELD] = self._next_id()
        self._records.append(new_record)
        return copy.deepcopy(new_record)

    def update(self, record_id: Any, changes: Record) -> Record:
        index = self._index_of(record_id)
        updated = {**self._records[index], **copy.deepcopy(changes), ID_FIELD: int(record_id)}
        self._records[index] = updated
        return copy.deepcopy(updated)

    def delete(self, record_id: Any) -> bool:
        index = self._index_of(record_id)
        del self._records[index]
        return True

    def __len__(self) -> int:
        return len(self._records)
