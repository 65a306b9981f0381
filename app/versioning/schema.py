"""Tracked-field schemas for versioned CRM entities.

Each versioned entity type declares the ordered list of fields that are
snapshotted, reported as changed and restored on rollback. A field knows how to
turn its ORM value into the JSON form stored in a snapshot and back.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Sequence


class FieldKind(str, Enum):
    PLAIN = "plain"
    DATE = "date"
    DECIMAL = "decimal"
    UUID = "uuid"
    ENUM = "enum"


@dataclass(frozen=True)
class TrackedField:
    """One tracked column: ORM attribute name plus its snapshot key."""

    attr: str
    key: str
    kind: FieldKind = FieldKind.PLAIN
    enum_type: type[Enum] | None = None
    decimal_places: int = 2

    def serialize(self, value: Any) -> Any:
        if value is None:
            return None
        if self.kind is FieldKind.DATE:
            if isinstance(value, datetime):
                value = value.date()
            return value.isoformat()
        if self.kind is FieldKind.DECIMAL:
            quantum = Decimal(1).scaleb(-self.decimal_places)
            return format(Decimal(str(value)).quantize(quantum), "f")
        if self.kind is FieldKind.UUID:
            return str(value)
        if self.kind is FieldKind.ENUM:
            return value.value if isinstance(value, Enum) else str(value)
        return value

    def deserialize(self, value: Any) -> Any:
        if value is None:
            return None
        if self.kind is FieldKind.DATE:
            if isinstance(value, date):
                return value
            # date-only snapshots, older entries may carry a time part
            return date.fromisoformat(str(value)[:10])
        if self.kind is FieldKind.DECIMAL:
            return Decimal(str(value))
        if self.kind is FieldKind.UUID:
            return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
        if self.kind is FieldKind.ENUM:
            if self.enum_type is None:
                raise ValueError(f"Enum field {self.key} has no enum_type")
            return self.enum_type(value)
        return value


@dataclass(frozen=True)
class VersionSchema:
    """
    Describes how one entity type is versioned.

    entity_type: value stored in ``history_entries.entity_type``
    model: the ORM class
    fields: tracked fields in declaration order
    schema_version: bump when ``fields`` changes, recorded on every entry
    label: human-readable name used in error messages
    load_options: relation loaders applied when the entity is returned to a client
    """

    entity_type: str
    model: type
    fields: Sequence[TrackedField]
    label: str
    schema_version: int = 1
    load_options: Callable[[], Sequence[Any]] = field(default=lambda: ())

    def __post_init__(self):
        keys = [f.key for f in self.fields]
        attrs = [f.attr for f in self.fields]
        if len(set(keys)) != len(keys) or len(set(attrs)) != len(attrs):
            raise ValueError(f"Duplicate tracked field in schema {self.entity_type}")

    @property
    def keys(self) -> list[str]:
        return [f.key for f in self.fields]

    def field_by_attr(self, attr: str) -> TrackedField | None:
        for f in self.fields:
            if f.attr == attr:
                return f
        return None

    def field_by_key(self, key: str) -> TrackedField | None:
        for f in self.fields:
            if f.key == key:
                return f
        return None

    def snapshot(self, entity) -> dict[str, Any]:
        """Serialize every tracked field of ``entity``."""
        return {f.key: f.serialize(getattr(entity, f.attr)) for f in self.fields}

    def is_complete(self, snapshot: dict) -> bool:
        return all(key in snapshot for key in self.keys)
