# tests/test_contracts_api.py

import uuid

import pytest


@pytest.fixture
async def contract(client, users, headers_for, contract_payload):
    resp = await client.post(
        "/api/contracts", json=contract_payload, headers=headers_for(users["manager"])
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_create_applies_defaults(contract):
    assert contract["status"] == "DRAFT"
    assert contract["discount"] == "0.00"
    assert contract["totalAmount"] == "150000.00"
    assert contract["advanceAmount"] == "50000.00"
    assert contract["manager"]["email"] == "manager@example.com"


async def test_duplicate_number_conflicts(
    client, users, headers_for, contract_payload, contract
):
    headers = headers_for(users["manager"])
    resp = await client.post("/api/contracts", json=contract_payload, headers=headers)
    assert resp.status_code == 409
    assert "D-2025-001" in resp.json()["error"]["message"]

    second = await client.post(
        "/api/contracts",
        json={**contract_payload, "contractNumber": "D-2025-002"},
        headers=headers,
    )
    resp = await client.patch(
        f"/api/contracts/{second.json()['id']}",
        json={"contractNumber": "D-2025-001"},
        headers=headers,
    )
    assert resp.status_code == 409


async def test_amounts_must_not_be_negative(client, users, headers_for, contract_payload):
    resp = await client.post(
        "/api/contracts",
        json={**contract_payload, "totalAmount": "-1"},
        headers=headers_for(users["manager"]),
    )
    assert resp.status_code == 422


async def test_null_total_rejected_on_patch(client, users, headers_for, contract):
    resp = await client.patch(
        f"/api/contracts/{contract['id']}",
        json={"totalAmount": None},
        headers=headers_for(users["manager"]),
    )
    assert resp.status_code == 422


async def test_unknown_office_rejected(client, users, headers_for, contract):
    resp = await client.patch(
        f"/api/contracts/{contract['id']}",
        json={"officeId": str(uuid.uuid4())},
        headers=headers_for(users["manager"]),
    )
    assert resp.status_code == 422


async def test_patch_history_uses_string_money_and_iso_dates(
    client, users, headers_for, contract
):
    headers = headers_for(users["manager"])
    url = f"/api/contracts/{contract['id']}"
    resp = await client.patch(
        url,
        json={
            "totalAmount": "175000.5",
            "installationDate": "2025-05-20",
            "status": "ACTIVE",
        },
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["totalAmount"] == "175000.50"

    [entry] = (await client.get(f"{url}/history", headers=headers)).json()
    assert entry["changedFields"] == ["status", "installationDate", "totalAmount"]
    assert entry["snapshot"]["totalAmount"] == "150000.00"
    assert entry["snapshot"]["contractDate"] == "2025-03-10"
    assert entry["snapshot"]["installationDate"] is None
    assert entry["snapshot"]["status"] == "DRAFT"

    resp = await client.post(f"{url}/rollback/{entry['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["totalAmount"] == "150000.00"
    assert resp.json()["installationDate"] is None
    assert resp.json()["status"] == "DRAFT"


async def test_list_search_and_status(client, users, headers_for, contract_payload):
    headers = headers_for(users["manager"])
    for number, name in (("D-1", "Olga"), ("D-2", "Ivan"), ("K-3", "Petr")):
        await client.post(
            "/api/contracts",
            json={**contract_payload, "contractNumber": number, "customerName": name},
            headers=headers,
        )

    body = (await client.get("/api/contracts?search=D-", headers=headers)).json()
    assert body["total"] == 2
    assert {c["contractNumber"] for c in body["data"]} == {"D-1", "D-2"}

    body = (await client.get("/api/contracts?status=DRAFT", headers=headers)).json()
    assert body["total"] == 3
    body = (await client.get("/api/contracts?status=ACTIVE", headers=headers)).json()
    assert body["total"] == 0


async def test_rollback_of_contract_with_measurement_entry_is_404(
    client, users, headers_for, measurement_payload, contract
):
    headers = headers_for(users["manager"])
    m = (
        await client.post("/api/measurements", json=measurement_payload, headers=headers)
    ).json()
    await client.patch(
        f"/api/measurements/{m['id']}", json={"status": "ASSIGNED"}, headers=headers
    )
    [m_entry] = (
        await client.get(f"/api/measurements/{m['id']}/history", headers=headers)
    ).json()

    resp = await client.post(
        f"/api/contracts/{contract['id']}/rollback/{m_entry['id']}", headers=headers
    )
    assert resp.status_code == 404
