# tests/test_rollback.py

import uuid
from datetime import date
from decimal import Decimal

import pytest

from app.models.enums import HistoryAction, MeasurementStatus
from app.services.contract_service import contract_repo, create_contract, update_contract
from app.services.measurement_service import (
    MEASUREMENT_SCHEMA,
    create_measurement,
    measurement_repo,
    update_measurement,
)
from app.utils.exceptions import ConflictError, NotFoundError
from app.versioning import rollback_entity
from app.versioning.store import list_entries


def _measurement_data(users, name="Olga Petrova"):
    return {
        "manager_id": users["manager"].id,
        "reception_date": date(2025, 3, 1),
        "customer_name": name,
        "customer_phone": "+7 900 000-00-01",
        "status": MeasurementStatus.NEW,
    }


@pytest.fixture
async def scenario_b(db, users):
    """Measurement M: NEW -> ASSIGNED (by u1) -> IN_PROGRESS (by u2)."""
    m = await create_measurement(db, _measurement_data(users))
    u1, u2 = users["manager"].id, users["surveyor"].id
    await update_measurement(db, m.id, {"status": MeasurementStatus.ASSIGNED}, u1)
    await update_measurement(db, m.id, {"status": MeasurementStatus.IN_PROGRESS}, u2)
    return m


async def test_scenario_a_single_update(db, users):
    m = await create_measurement(db, _measurement_data(users))
    await update_measurement(
        db, m.id, {"status": MeasurementStatus.ASSIGNED}, users["manager"].id
    )

    [entry] = await list_entries(db, "measurement", m.id)
    assert entry.action is HistoryAction.UPDATE
    assert entry.snapshot["status"] == "NEW"
    assert entry.changed_fields == ["status"]
    assert entry.changed_by == users["manager"].id


async def test_scenario_b_newest_first(db, users, scenario_b):
    entries = await list_entries(db, "measurement", scenario_b.id)
    assert [(e.snapshot["status"], e.changed_by) for e in entries] == [
        ("ASSIGNED", users["surveyor"].id),
        ("NEW", users["manager"].id),
    ]


async def test_scenario_c_rollback_restores_and_records_pre_rollback_state(
    db, users, scenario_b
):
    before = await list_entries(db, "measurement", scenario_b.id)
    target = before[-1]  # the NEW snapshot

    restored = await rollback_entity(
        db, measurement_repo, scenario_b.id, target.id, users["support"].id
    )

    assert restored.status is MeasurementStatus.NEW
    assert MEASUREMENT_SCHEMA.snapshot(restored) == target.snapshot
    # relations are loaded for the response
    assert restored.manager.email == "manager@example.com"

    entries = await list_entries(db, "measurement", scenario_b.id)
    assert len(entries) == 3
    newest = entries[0]
    assert newest.action is HistoryAction.ROLLBACK
    assert newest.snapshot["status"] == "IN_PROGRESS"
    assert newest.changed_fields == []
    assert newest.changed_by == users["support"].id
    # earlier entries untouched
    assert [(e.id, e.snapshot) for e in entries[1:]] == [
        (e.id, e.snapshot) for e in before
    ]


async def test_scenario_d_entry_of_other_entity_is_not_found(db, users, scenario_b):
    other = await create_measurement(db, _measurement_data(users, name="Ivan"))
    await update_measurement(
        db, other.id, {"status": MeasurementStatus.CANCELLED}, users["manager"].id
    )
    [foreign] = await list_entries(db, "measurement", other.id)
    # a failed rollback expires every loaded instance, keep plain values
    mid, foreign_id, actor = scenario_b.id, foreign.id, users["manager"].id
    before = [e.id for e in await list_entries(db, "measurement", mid)]

    with pytest.raises(NotFoundError):
        await rollback_entity(db, measurement_repo, mid, foreign_id, actor)

    current = await measurement_repo.get_or_404(db, mid)
    assert current.status is MeasurementStatus.IN_PROGRESS
    after = await list_entries(db, "measurement", mid)
    assert [e.id for e in after] == before


async def test_entry_of_other_entity_type_is_not_found(db, users, contract_data):
    contract = await create_contract(db, contract_data)
    await update_contract(db, contract.id, {"notes": "urgent"}, users["manager"].id)
    [contract_entry] = await list_entries(db, "contract", contract.id)
    m = await create_measurement(db, _measurement_data(users))

    with pytest.raises(NotFoundError):
        await rollback_entity(
            db, measurement_repo, m.id, contract_entry.id, users["manager"].id
        )


async def test_unknown_ids_are_not_found(db, users, scenario_b):
    [_, first] = await list_entries(db, "measurement", scenario_b.id)
    mid, first_id, actor = scenario_b.id, first.id, users["manager"].id
    with pytest.raises(NotFoundError, match="Measurement with ID"):
        await rollback_entity(db, measurement_repo, uuid.uuid4(), first_id, actor)
    with pytest.raises(NotFoundError, match="History entry"):
        await rollback_entity(db, measurement_repo, mid, uuid.uuid4(), actor)


async def test_rollback_of_a_rollback_returns_to_prior_state(db, users, scenario_b):
    entries = await list_entries(db, "measurement", scenario_b.id)
    await rollback_entity(
        db, measurement_repo, scenario_b.id, entries[-1].id, users["admin"].id
    )
    rollback_entry = (await list_entries(db, "measurement", scenario_b.id))[0]

    restored = await rollback_entity(
        db, measurement_repo, scenario_b.id, rollback_entry.id, users["admin"].id
    )
    assert restored.status is MeasurementStatus.IN_PROGRESS
    assert len(await list_entries(db, "measurement", scenario_b.id)) == 4


async def test_rollback_to_current_state_still_writes_entry(db, users):
    m = await create_measurement(db, _measurement_data(users))
    await update_measurement(
        db, m.id, {"customer_name": "Olga Petrova"}, users["manager"].id
    )
    [entry] = await list_entries(db, "measurement", m.id)

    await rollback_entity(db, measurement_repo, m.id, entry.id, users["manager"].id)

    entries = await list_entries(db, "measurement", m.id)
    assert [e.action for e in entries] == [HistoryAction.ROLLBACK, HistoryAction.UPDATE]
    assert entries[0].snapshot == entries[1].snapshot


async def test_restore_tolerates_older_snapshot_layout(db, users, caplog):
    m = await create_measurement(db, _measurement_data(users))
    await update_measurement(
        db,
        m.id,
        {"customer_name": "Changed", "comments": "new comment"},
        users["manager"].id,
    )
    current = await measurement_repo.load_current(db, m.id)

    old_layout = {"customerName": "Olga Petrova", "legacyField": 42}
    restored = measurement_repo.restore_fields(current, old_layout)

    assert restored == ["customerName"]
    assert current.customer_name == "Olga Petrova"
    # fields absent from the snapshot keep their value
    assert current.comments == "new comment"
    assert "legacyField" in caplog.text
    await db.rollback()


async def test_contract_rollback_restores_money_and_dates(db, users, contract_data):
    contract = await create_contract(db, contract_data)
    await update_contract(
        db,
        contract.id,
        {"total_amount": Decimal("99999.99"), "contract_date": date(2025, 4, 1)},
        users["manager"].id,
    )
    [entry] = await list_entries(db, "contract", contract.id)
    assert entry.snapshot["totalAmount"] == "150000.00"
    assert entry.snapshot["contractDate"] == "2025-03-10"

    restored = await rollback_entity(
        db, contract_repo, contract.id, entry.id, users["manager"].id
    )
    assert restored.total_amount == Decimal("150000.00")
    assert restored.contract_date == date(2025, 3, 10)


async def test_contract_rollback_to_taken_number_conflicts(db, users, contract_data):
    contract = await create_contract(db, contract_data)
    await update_contract(
        db, contract.id, {"contract_number": "D-2025-002"}, users["manager"].id
    )
    [entry] = await list_entries(db, "contract", contract.id)
    # someone else takes the old number meanwhile
    await create_contract(db, {**contract_data, "contract_number": "D-2025-001"})
    cid, entry_id, actor = contract.id, entry.id, users["admin"].id

    with pytest.raises(ConflictError):
        await rollback_entity(db, contract_repo, cid, entry_id, actor)

    current = await contract_repo.get_or_404(db, cid)
    assert current.contract_number == "D-2025-002"
    assert [e.id for e in await list_entries(db, "contract", cid)] == [entry_id]


@pytest.fixture
def contract_data(users):
    return {
        "contract_number": "D-2025-001",
        "contract_date": date(2025, 3, 10),
        "manager_id": users["manager"].id,
        "customer_name": "Olga Petrova",
        "total_amount": Decimal("150000.00"),
    }
