# tests/test_e2e_rollback.py

import os
import time

import httpx
import pytest

BASE_URL = os.getenv("E2E_BASE_URL", "http://localhost:8000")


async def login(client, email, password):
    """
    Log in against the running server, returns bearer headers.
    """
    resp = await client.post(
        f"{BASE_URL}/api/auth/login", json={"email": email, "password": password}
    )
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['accessToken']}"}


@pytest.mark.e2e
@pytest.mark.skipif(
    not os.getenv("RUN_E2E_TESTS"), reason="E2E tests skipped unless RUN_E2E_TESTS=1"
)
async def test_measurement_history_and_rollback_against_live_server():
    """
    Full e2e test (needs an admin created with scripts/create_admin.py):
    - Log in as admin.
    - Create a measurement, move it NEW -> ASSIGNED -> IN_PROGRESS.
    - Roll back to the NEW snapshot.
    - History shows ROLLBACK on top of the two UPDATE entries.
    """
    email = os.environ["E2E_ADMIN_EMAIL"]
    password = os.environ["E2E_ADMIN_PASSWORD"]

    async with httpx.AsyncClient() as client:
        headers = await login(client, email, password)
        me = (await client.get(f"{BASE_URL}/me", headers=headers)).json()

        ts = str(int(time.time() * 1000))
        resp = await client.post(
            f"{BASE_URL}/api/measurements",
            json={
                "managerId": me["id"],
                "receptionDate": "2025-06-01",
                "customerName": f"E2E customer {ts}",
                "customerPhone": ts,
            },
            headers=headers,
        )
        assert resp.status_code == 201
        url = f"{BASE_URL}/api/measurements/{resp.json()['id']}"

        for status in ("ASSIGNED", "IN_PROGRESS"):
            resp = await client.patch(url, json={"status": status}, headers=headers)
            assert resp.status_code == 200

        history = (await client.get(f"{url}/history", headers=headers)).json()
        assert [h["snapshot"]["status"] for h in history] == ["ASSIGNED", "NEW"]

        resp = await client.post(f"{url}/rollback/{history[-1]['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "NEW"

        history = (await client.get(f"{url}/history", headers=headers)).json()
        assert [h["action"] for h in history] == ["ROLLBACK", "UPDATE", "UPDATE"]

        resp = await client.delete(url, headers=headers)
        assert resp.status_code == 204
