# tests/test_store.py

import uuid
from datetime import date

import pytest

from app.models.enums import HistoryAction, MeasurementStatus
from app.services.measurement_service import MEASUREMENT_SCHEMA, create_measurement
from app.versioning.store import (
    append_entry,
    delete_entries,
    get_entry_for_entity,
    list_entries,
)


@pytest.fixture
async def measurement(db, users):
    return await create_measurement(
        db,
        {
            "manager_id": users["manager"].id,
            "reception_date": date(2025, 3, 1),
            "customer_name": "Olga Petrova",
            "customer_phone": "+7 900 000-00-01",
            "status": MeasurementStatus.NEW,
        },
    )


async def test_append_assigns_sequential_versions(db, users, measurement):
    snap = MEASUREMENT_SCHEMA.snapshot(measurement)
    first = await append_entry(
        db,
        MEASUREMENT_SCHEMA,
        measurement.id,
        snap,
        ["status"],
        HistoryAction.UPDATE,
        users["manager"].id,
    )
    second = await append_entry(
        db,
        MEASUREMENT_SCHEMA,
        measurement.id,
        snap,
        [],
        HistoryAction.ROLLBACK,
        users["admin"].id,
    )
    await db.commit()

    assert (first.version, second.version) == (1, 2)
    assert first.entity_type == "measurement"
    assert first.schema_version == MEASUREMENT_SCHEMA.schema_version

    entries = await list_entries(db, "measurement", measurement.id)
    # newest first
    assert [e.id for e in entries] == [second.id, first.id]


async def test_append_rejects_incomplete_snapshot(db, users, measurement):
    snap = MEASUREMENT_SCHEMA.snapshot(measurement)
    del snap["comments"]
    with pytest.raises(ValueError, match="comments"):
        await append_entry(
            db,
            MEASUREMENT_SCHEMA,
            measurement.id,
            snap,
            ["status"],
            HistoryAction.UPDATE,
            users["manager"].id,
        )


async def test_append_rejects_unknown_action(db, users, measurement):
    with pytest.raises(ValueError):
        await append_entry(
            db,
            MEASUREMENT_SCHEMA,
            measurement.id,
            MEASUREMENT_SCHEMA.snapshot(measurement),
            ["status"],
            "DELETE",
            users["manager"].id,
        )


async def test_list_is_empty_without_entries(db, measurement):
    assert await list_entries(db, "measurement", measurement.id) == []


async def test_ownership_checked_lookup(db, users, measurement):
    entry = await append_entry(
        db,
        MEASUREMENT_SCHEMA,
        measurement.id,
        MEASUREMENT_SCHEMA.snapshot(measurement),
        ["status"],
        HistoryAction.UPDATE,
        users["manager"].id,
    )
    await db.commit()

    found = await get_entry_for_entity(db, "measurement", measurement.id, entry.id)
    assert found is not None and found.id == entry.id
    # same id, other entity or other entity type
    assert await get_entry_for_entity(db, "measurement", uuid.uuid4(), entry.id) is None
    assert await get_entry_for_entity(db, "contract", measurement.id, entry.id) is None


async def test_delete_entries_removes_only_that_entity(db, users, measurement):
    other = await create_measurement(
        db,
        {
            "manager_id": users["manager"].id,
            "reception_date": date(2025, 3, 2),
            "customer_name": "Ivan",
            "customer_phone": "+7 900 000-00-02",
        },
    )
    for target in (measurement, other):
        await append_entry(
            db,
            MEASUREMENT_SCHEMA,
            target.id,
            MEASUREMENT_SCHEMA.snapshot(target),
            ["customerName"],
            HistoryAction.UPDATE,
            users["manager"].id,
        )
    await db.commit()

    removed = await delete_entries(db, "measurement", measurement.id)
    await db.commit()

    assert removed == 1
    assert await list_entries(db, "measurement", measurement.id) == []
    assert len(await list_entries(db, "measurement", other.id)) == 1
