"""
Async HTTP client for the Taskboard API.

The bearer token lives in an injected `TokenStore` rather than in hidden
module state, so callers decide where it is kept (memory, keyring, file) and
several independent sessions can coexist in one process.
"""

from typing import Any, Protocol

import httpx

from app.utils.logger import setup_logger

logger = setup_logger("client")

DEFAULT_BASE_URL = "http://localhost:5000"


class TokenStore(Protocol):
    def get(self) -> str | None: ...

    def set(self, token: str) -> None: ...

    def clear(self) -> None: ...


class MemoryTokenStore:
    """Keeps the token for the lifetime of the object."""

    def __init__(self, token: str | None = None):
        self._token = token

    def get(self) -> str | None:
        return self._token

    def set(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class ApiClientError(Exception):
    """Raised for every non-2xx response; carries the error envelope."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


class TaskboardClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token_store: TokenStore | None = None,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token_store = token_store if token_store is not None else MemoryTokenStore()
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "TaskboardClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        headers = kwargs.pop("headers", {})
        token = self.token_store.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        response = await self._client.request(method, path, headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {"success": False, "message": response.text or response.reason_phrase}

        if response.status_code == 401:
            # Drop a token the server rejected
            self.token_store.clear()

        if response.is_error:
            logger.debug(f"{method} {path} -> {response.status_code}")
            raise ApiClientError(
                response.status_code,
                body.get("message") or response.reason_phrase,
                body.get("errors"),
            )
        return body

    # ===== Auth =====

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST",
            "/api/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        self.token_store.set(body["data"]["token"])
        return body["data"]["user"]

    async def login(self, email: str, password: str) -> dict[str, Any]:
        body = await self._request(
            "POST", "/api/auth/login", json={"email": email, "password": password}
        )
        self.token_store.set(body["data"]["token"])
        return body["data"]["user"]

    async def logout(self) -> None:
        try:
            await self._request("POST", "/api/auth/logout")
        finally:
            self.token_store.clear()

    async def me(self) -> dict[str, Any]:
        return (await self._request("GET", "/api/auth/me"))["data"]

    # ===== Users =====

    async def update_profile(self, **fields) -> dict[str, Any]:
        return (await self._request("PUT", "/api/users/profile", json=fields))["data"]

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self._request(
            "PUT",
            "/api/users/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # ===== Tasks =====

    async def list_tasks(self, **filters) -> dict[str, Any]:
        """Return the raw envelope so callers see both `data` and `pagination`."""
        params = {
            key: (str(value).lower() if isinstance(value, bool) else value)
            for key, value in filters.items()
            if value is not None
        }
        return await self._request("GET", "/api/tasks", params=params)

    async def get_task(self, task_id: str) -> dict[str, Any]:
        return (await self._request("GET", f"/api/tasks/{task_id}"))["data"]

    async def create_task(self, title: str, **fields) -> dict[str, Any]:
        payload = {"title": title, **fields}
        return (await self._request("POST", "/api/tasks", json=payload))["data"]

    async def update_task(self, task_id: str, **fields) -> dict[str, Any]:
        return (await self._request("PUT", f"/api/tasks/{task_id}", json=fields))[
            "data"
        ]

    async def delete_task(self, task_id: str) -> bool:
        body = await self._request("DELETE", f"/api/tasks/{task_id}")
        return body["success"]

    async def toggle_archive(self, task_id: str) -> dict[str, Any]:
        return (await self._request("PATCH", f"/api/tasks/{task_id}/archive"))["data"]

    async def bulk_update(
        self, task_ids: list[str], updates: dict[str, Any]
    ) -> dict[str, int]:
        body = await self._request(
            "PATCH",
            "/api/tasks/bulk",
            json={"taskIds": task_ids, "updates": updates},
        )
        return body["data"]

    async def task_stats(self, tz: str | None = None) -> dict[str, Any]:
        params = {"tz": tz} if tz else None
        return (await self._request("GET", "/api/tasks/stats/overview", params=params))[
            "data"
        ]

    async def mark_complete(self, task_id: str) -> dict[str, Any]:
        return await self.update_task(task_id, status="completed")

    async def mark_in_progress(self, task_id: str) -> dict[str, Any]:
        return await self.update_task(task_id, status="in-progress")

    async def mark_pending(self, task_id: str) -> dict[str, Any]:
        return await self.update_task(task_id, status="pending")
