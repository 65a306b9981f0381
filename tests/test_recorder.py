# tests/test_recorder.py

import uuid
from datetime import date

import pytest

from app.models.enums import HistoryAction, MeasurementStatus
from app.services.measurement_service import (
    MEASUREMENT_SCHEMA,
    create_measurement,
    measurement_repo,
    update_measurement,
)
from app.utils.exceptions import NotFoundError
from app.versioning import compute_changed_fields, record_before_update
from app.versioning.store import list_entries


@pytest.fixture
async def measurement(db, users):
    return await create_measurement(
        db,
        {
            "manager_id": users["manager"].id,
            "reception_date": date(2025, 3, 1),
            "customer_name": "Olga Petrova",
            "customer_phone": "+7 900 000-00-01",
        },
    )


def test_changed_fields_follow_schema_order_and_ignore_untracked():
    patch = {"status": "ASSIGNED", "customer_name": "X", "updated_at": None}
    assert compute_changed_fields(MEASUREMENT_SCHEMA, patch) == ["customerName", "status"]
    assert compute_changed_fields(MEASUREMENT_SCHEMA, {}) == []


async def test_record_without_actor_writes_nothing(db, measurement):
    entry = await record_before_update(
        db,
        MEASUREMENT_SCHEMA,
        measurement.id,
        MEASUREMENT_SCHEMA.snapshot(measurement),
        {"status": MeasurementStatus.ASSIGNED},
        acting_user_id=None,
    )
    assert entry is None
    assert await list_entries(db, "measurement", measurement.id) == []


async def test_update_without_actor_applies_patch_but_keeps_no_history(db, measurement):
    updated = await update_measurement(
        db, measurement.id, {"status": MeasurementStatus.COMPLETED}, None
    )
    assert updated.status is MeasurementStatus.COMPLETED
    assert await list_entries(db, "measurement", measurement.id) == []


async def test_update_records_pre_update_state(db, users, measurement):
    await update_measurement(
        db,
        measurement.id,
        {"status": MeasurementStatus.ASSIGNED, "comments": "call first"},
        users["manager"].id,
    )
    [entry] = await list_entries(db, "measurement", measurement.id)
    assert entry.action is HistoryAction.UPDATE
    assert entry.changed_by == users["manager"].id
    assert entry.changed_fields == ["comments", "status"]
    assert entry.snapshot["status"] == "NEW"
    assert entry.snapshot["comments"] is None
    assert entry.snapshot["receptionDate"] == "2025-03-01"


async def test_same_value_still_reported_as_changed(db, users, measurement):
    await update_measurement(
        db, measurement.id, {"customer_name": "Olga Petrova"}, users["manager"].id
    )
    [entry] = await list_entries(db, "measurement", measurement.id)
    assert entry.changed_fields == ["customerName"]
    assert entry.snapshot["customerName"] == "Olga Petrova"


async def test_empty_patch_still_records_an_update(db, users, measurement):
    await update_measurement(db, measurement.id, {}, users["manager"].id)
    [entry] = await list_entries(db, "measurement", measurement.id)
    assert entry.action is HistoryAction.UPDATE
    assert entry.changed_fields == []
    assert entry.changed_by == users["manager"].id
    assert entry.snapshot["status"] == "NEW"


async def test_untracked_only_patch_records_empty_changed_fields(db, users, measurement):
    await update_measurement(
        db, measurement.id, {"status": MeasurementStatus.ASSIGNED}, users["manager"].id
    )
    entry = await record_before_update(
        db,
        MEASUREMENT_SCHEMA,
        measurement.id,
        MEASUREMENT_SCHEMA.snapshot(measurement),
        {"updated_at": None},
        acting_user_id=users["support"].id,
    )
    assert entry.changed_fields == []
    assert entry.version == 2


async def test_each_update_snapshots_the_state_left_by_the_previous_one(
    db, users, measurement
):
    for status in (
        MeasurementStatus.ASSIGNED,
        MeasurementStatus.IN_PROGRESS,
        MeasurementStatus.COMPLETED,
    ):
        await update_measurement(db, measurement.id, {"status": status}, users["manager"].id)

    entries = await list_entries(db, "measurement", measurement.id)
    assert [e.snapshot["status"] for e in entries] == ["IN_PROGRESS", "ASSIGNED", "NEW"]
    assert [e.version for e in entries] == [3, 2, 1]


async def test_update_of_missing_entity_is_not_found(db, users):
    missing = uuid.uuid4()
    with pytest.raises(NotFoundError):
        await measurement_repo.update(
            db, missing, {"status": MeasurementStatus.ASSIGNED}, users["manager"].id
        )
    assert await list_entries(db, "measurement", missing) == []
