"""Request helpers shared by the API tests."""

import httpx

PASSWORD = "Password123"


async def register(
    client: httpx.AsyncClient,
    name: str = "Ann",
    email: str = "ann@x.com",
    password: str = PASSWORD,
) -> tuple[str, dict]:
    response = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    data = response.json()["data"]
    return data["token"], data["user"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def create_task(client: httpx.AsyncClient, token: str, **fields) -> dict:
    fields.setdefault("title", "Task")
    response = await client.post("/api/tasks", json=fields, headers=bearer(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def list_tasks(client: httpx.AsyncClient, token: str, **params) -> dict:
    response = await client.get("/api/tasks", params=params, headers=bearer(token))
    assert response.status_code == 200, response.text
    return response.json()
