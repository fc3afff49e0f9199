"""
Document Store
Collection-oriented data-access interface injected into the services
"""
import operator
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel

# (field, op, value); field may be a dotted path into embedded documents
Filter = Tuple[str, str, Any]
# (field, "asc" | "desc")
OrderBy = Tuple[str, str]

Record = Dict[str, Any]


class Collections:
    """Collection names used by the application"""
    USERS = "users"
    KRA_TEMPLATES = "kra_templates"
    KPI_RECORDS = "kpi_records"
    PAYROLL = "payroll"
    INVENTORY = "inventory"
    INVOICES = "invoices"
    COMPANY_SETTINGS = "company_settings"


class WriteKind(str, Enum):
    SET = "set"
    UPDATE = "update"
    DELETE = "delete"


class WriteOp(BaseModel):
    """One entry of an all-or-nothing batch write"""
    collection: str
    id: str
    kind: WriteKind = WriteKind.SET
    record: Optional[Record] = None


def _contains(container: Any, value: Any) -> bool:
    return isinstance(container, (list, tuple)) and value in container


def _in(value: Any, options: Any) -> bool:
    return value in options


def _not_in(value: Any, options: Any) -> bool:
    return value not in options


OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": _in,
    "not-in": _not_in,
    "array-contains": _contains,
}


def validate_filters(filters: Sequence[Filter]) -> None:
    for field, op, _ in filters:
        if op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator '{op}' on '{field}'")


def resolve_path(record: Record, path: str) -> Any:
    """Read a dotted path out of a record, None when any segment is missing"""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def matches(record: Record, filters: Sequence[Filter]) -> bool:
    for field, op, expected in filters:
        actual = resolve_path(record, field)
        try:
            if not OPERATORS[op](actual, expected):
                return False
        except TypeError:
            # Ordering comparisons against missing/mixed types never match
            return False
    return True


class DocumentStore(ABC):
    """
    Minimal document-collection contract.

    Records are plain dicts carrying a string ``id``. Implementations must
    make ``batch_write`` all-or-nothing.
    """

    @abstractmethod
    async def get(self, collection: str, id: str) -> Optional[Record]:
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> List[Record]:
        ...

    @abstractmethod
    async def add(self, collection: str, record: Record) -> str:
        """Insert a record and return its generated id"""

    @abstractmethod
    async def update(self, collection: str, id: str, partial: Record) -> None:
        """Merge top-level fields into an existing record; raises NotFound"""

    @abstractmethod
    async def delete(self, collection: str, id: str) -> None:
        ...

    @abstractmethod
    async def batch_write(self, ops: Sequence[WriteOp]) -> None:
        ...

    @abstractmethod
    def new_id(self) -> str:
        """Generate an id usable in a batch ``SET`` before the record exists"""

    async def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[OrderBy] = None,
    ) -> AsyncIterator[List[Record]]:
        """Yield the current snapshot, then a fresh snapshot after every change"""
        raise NotImplementedError(f"{type(self).__name__} does not support subscriptions")
        yield []  # pragma: no cover

    async def close(self) -> None:
        return None


def to_record(model: BaseModel) -> Record:
    """JSON-safe dict for storage; dates become ISO strings, enums their values"""
    return model.model_dump(mode="json", exclude={"id"})
