import httpx
import pytest
import pytest_asyncio

from app.client import ApiClientError, MemoryTokenStore, TaskboardClient

from .helpers import PASSWORD


@pytest_asyncio.fixture
async def api(app):
    store = MemoryTokenStore()
    async with TaskboardClient(
        "http://test", store, transport=httpx.ASGITransport(app=app)
    ) as client:
        yield client


@pytest.mark.asyncio
async def test_register_stores_token(api):
    user = await api.register("Ann", "ann@x.com", PASSWORD)
    assert user["email"] == "ann@x.com"
    assert api.token_store.get()

    me = await api.me()
    assert me["id"] == user["id"]


@pytest.mark.asyncio
async def test_logout_clears_token(api):
    await api.register("Ann", "ann@x.com", PASSWORD)
    await api.logout()
    assert api.token_store.get() is None

    with pytest.raises(ApiClientError) as exc_info:
        await api.me()
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_rejected_token_is_cleared(api):
    api.token_store.set("garbage")
    with pytest.raises(ApiClientError) as exc_info:
        await api.list_tasks()
    assert exc_info.value.status_code == 401
    assert api.token_store.get() is None


@pytest.mark.asyncio
async def test_task_round_trip_through_client(api):
    await api.register("Ann", "ann@x.com", PASSWORD)

    task = await api.create_task("Write docs", tags=["docs"])
    assert task["status"] == "pending"

    task = await api.mark_in_progress(task["id"])
    assert task["status"] == "in-progress"
    task = await api.mark_complete(task["id"])
    assert task["completedAt"] is not None
    task = await api.mark_pending(task["id"])
    assert task["completedAt"] is None

    archived = await api.toggle_archive(task["id"])
    assert archived["isArchived"] is True

    listing = await api.list_tasks()
    assert listing["data"] == []
    listing = await api.list_tasks(includeArchived=True, search=None)
    assert [t["id"] for t in listing["data"]] == [task["id"]]
    assert listing["pagination"]["totalRecords"] == 1

    assert await api.delete_task(task["id"]) is True
    with pytest.raises(ApiClientError) as exc_info:
        await api.get_task(task["id"])
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Task not found"


@pytest.mark.asyncio
async def test_validation_errors_are_exposed(api):
    await api.register("Ann", "ann@x.com", PASSWORD)
    with pytest.raises(ApiClientError) as exc_info:
        await api.create_task("", status="bogus")
    error = exc_info.value
    assert error.status_code == 422
    assert {e["field"] for e in error.errors} == {"title", "status"}


@pytest.mark.asyncio
async def test_bulk_update_and_stats(api):
    await api.register("Ann", "ann@x.com", PASSWORD)
    ids = [(await api.create_task(f"t{i}"))["id"] for i in range(3)]

    result = await api.bulk_update(ids[:2], {"priority": "urgent"})
    assert result == {"matched": 2, "modified": 2}

    stats = await api.task_stats(tz="UTC")
    assert stats["total"] == 3
    assert stats["byPriority"]["urgent"] == 2


@pytest.mark.asyncio
async def test_profile_and_password_through_client(api):
    await api.register("Ann", "ann@x.com", PASSWORD)
    profile = await api.update_profile(name="Annie")
    assert profile["name"] == "Annie"

    await api.change_password(PASSWORD, "NewPass456")
    await api.logout()
    user = await api.login("ann@x.com", "NewPass456")
    assert user["name"] == "Annie"


@pytest.mark.asyncio
async def test_sessions_do_not_share_tokens(app):
    transport = httpx.ASGITransport(app=app)
    async with TaskboardClient("http://test", transport=transport) as first:
        async with TaskboardClient("http://test", transport=transport) as second:
            await first.register("Ann", "ann@x.com", PASSWORD)
            assert second.token_store.get() is None
