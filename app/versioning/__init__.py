"""Append-only history and rollback for CRM entities."""

from app.versioning.recorder import compute_changed_fields, record_before_update
from app.versioning.repository import VersionedRepository
from app.versioning.rollback import rollback_entity
from app.versioning.schema import FieldKind, TrackedField, VersionSchema

__all__ = [
    "FieldKind",
    "TrackedField",
    "VersionSchema",
    "VersionedRepository",
    "compute_changed_fields",
    "record_before_update",
    "rollback_entity",
]
