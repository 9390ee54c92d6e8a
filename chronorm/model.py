"""Entity base class: a pydantic model persisted as one row of one table."""

from __future__ import annotations

import datetime
import enum
import json
from typing import Any, ClassVar, Iterable, Optional

from pydantic import BaseModel


class Model(BaseModel):
    """Base class for persisted entities.

    The table name defaults to the lowercased class name and can be set with
    ``TABLE_NAME``; the primary key column defaults to ``id`` and can be set
    with ``ID_FIELD`` (the subclass then declares that field itself, and the
    inherited ``id`` is no column unless the subclass declares it again).
    """

    model_config = {"arbitrary_types_allowed": True}

    TABLE_NAME: ClassVar[Optional[str]] = None
    ID_FIELD: ClassVar[str] = "id"

    id: Optional[int] = None

    @classmethod
    def _get_table_name(cls) -> str:
        """Return the SQL table name for this class."""
        return cls.TABLE_NAME or cls.__name__.lower()

    @classmethod
    def _get_id_field(cls) -> str:
        """Return the name of the primary key column."""
        return cls.ID_FIELD

    def get_id(self) -> Any:
        return getattr(self, self._get_id_field())

    def set_id(self, value: Any) -> None:
        setattr(self, self._get_id_field(), value)

    def column_values(self, names: Iterable[str]) -> list[Any]:
        """Return the values to bind for the given columns, serialized for storage."""
        return [_serialize(getattr(self, name)) for name in names]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Model":
        """Build an instance from a row dict, ignoring columns the model does not declare."""
        return cls.model_validate({k: v for k, v in row.items() if k in cls.model_fields})


def _serialize(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime.datetime) and value.tzinfo is not None:
        return value.astimezone(datetime.timezone.utc)
    return value
