import pytest

from .helpers import bearer, create_task, list_tasks


async def _seed(client, token, count: int, **fields) -> list[dict]:
    return [
        await create_task(client, token, title=f"Task {i:02d}", **fields)
        for i in range(count)
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("count,expected_pages", [(23, 5), (20, 4), (0, 0)])
async def test_pagination_covers_every_task_once(client, ann, count, expected_pages):
    token, _ = ann
    created = await _seed(client, token, count)

    seen = []
    first = await list_tasks(client, token, limit=5)
    assert first["pagination"]["total"] == expected_pages
    assert first["pagination"]["totalRecords"] == count

    for page in range(1, expected_pages + 1):
        body = await list_tasks(client, token, page=page, limit=5)
        assert body["pagination"]["current"] == page
        assert body["pagination"]["count"] == len(body["data"])
        seen.extend(task["id"] for task in body["data"])

    assert len(seen) == len(set(seen)) == count
    assert set(seen) == {task["id"] for task in created}


@pytest.mark.asyncio
async def test_last_partial_page_and_page_past_the_end(client, ann):
    token, _ = ann
    await _seed(client, token, 23)

    body = await list_tasks(client, token, page=5, limit=5)
    assert len(body["data"]) == 3

    body = await list_tasks(client, token, page=6, limit=5)
    assert body["data"] == []
    assert body["pagination"]["count"] == 0
    assert body["pagination"]["totalRecords"] == 23


@pytest.mark.asyncio
async def test_default_order_is_newest_first(client, ann):
    token, _ = ann
    created = await _seed(client, token, 3)

    body = await list_tasks(client, token)
    assert [t["id"] for t in body["data"]] == [t["id"] for t in reversed(created)]


@pytest.mark.asyncio
async def test_sort_by_title_ascending(client, ann):
    token, _ = ann
    for title in ("banana", "Cherry", "apple"):
        await create_task(client, token, title=title)

    body = await list_tasks(client, token, sortBy="title", sortOrder="asc")
    titles = [t["title"] for t in body["data"]]
    assert titles == sorted(titles)


@pytest.mark.asyncio
async def test_sort_ties_are_stable_across_pages(client, ann):
    token, _ = ann
    await _seed(client, token, 12, priority="high")

    seen = []
    for page in (1, 2, 3):
        body = await list_tasks(
            client, token, sortBy="priority", sortOrder="asc", page=page, limit=5
        )
        seen.extend(t["id"] for t in body["data"])
    assert len(seen) == len(set(seen)) == 12


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params,field",
    [
        ({"sortBy": "ownerId"}, "sortBy"),
        ({"sortOrder": "sideways"}, "sortOrder"),
        ({"status": "bogus"}, "status"),
        ({"priority": "critical"}, "priority"),
        ({"page": 0}, "page"),
        ({"page": 10**19}, "page"),
        ({"limit": 0}, "limit"),
        ({"limit": 101}, "limit"),
    ],
)
async def test_invalid_list_params_are_rejected(client, ann, params, field):
    response = await client.get("/api/tasks", params=params, headers=bearer(ann[0]))
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == field


@pytest.mark.asyncio
async def test_filters_by_status_priority_and_category(client, ann):
    token, _ = ann
    await create_task(client, token, title="a", status="completed", category="Work")
    await create_task(client, token, title="b", priority="high", category="homework")
    await create_task(client, token, title="c", category="personal")

    body = await list_tasks(client, token, status="completed")
    assert [t["title"] for t in body["data"]] == ["a"]

    body = await list_tasks(client, token, priority="high")
    assert [t["title"] for t in body["data"]] == ["b"]

    body = await list_tasks(client, token, category="WORK", sortBy="title", sortOrder="asc")
    assert [t["title"] for t in body["data"]] == ["a", "b"]


@pytest.mark.asyncio
async def test_search_matches_title_description_and_tags(client, ann):
    token, _ = ann
    await create_task(client, token, title="Buy MILK")
    await create_task(client, token, title="Errand", description="get milk too")
    await create_task(client, token, title="Shop", tags=["Milkshake"])
    await create_task(client, token, title="Unrelated", tags=["bread"])

    body = await list_tasks(client, token, search="milk", sortBy="title", sortOrder="asc")
    assert [t["title"] for t in body["data"]] == ["Buy MILK", "Errand", "Shop"]
    assert body["pagination"]["totalRecords"] == 3


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(client, ann):
    token, _ = ann
    await create_task(client, token, title="Reach 100% coverage")
    await create_task(client, token, title="Reach 100 users")
    await create_task(client, token, title="snake_case rename")
    await create_task(client, token, title="snakeXcase")

    body = await list_tasks(client, token, search="100%")
    assert [t["title"] for t in body["data"]] == ["Reach 100% coverage"]

    body = await list_tasks(client, token, search="snake_case")
    assert [t["title"] for t in body["data"]] == ["snake_case rename"]


@pytest.mark.asyncio
async def test_archived_tasks_hidden_unless_requested(client, ann):
    token, _ = ann
    kept = await create_task(client, token, title="Active")
    archived = await create_task(client, token, title="Old")
    await client.patch(f"/api/tasks/{archived['id']}/archive", headers=bearer(token))

    body = await list_tasks(client, token)
    assert [t["id"] for t in body["data"]] == [kept["id"]]

    body = await list_tasks(client, token, includeArchived="true")
    assert {t["id"] for t in body["data"]} == {kept["id"], archived["id"]}


@pytest.mark.asyncio
async def test_filters_combine_with_pagination_totals(client, ann):
    token, _ = ann
    await _seed(client, token, 7, category="work")
    await _seed(client, token, 4, category="home")

    body = await list_tasks(client, token, category="work", limit=3, page=3)
    assert body["pagination"] == {
        "current": 3,
        "total": 3,
        "count": 1,
        "totalRecords": 7,
    }


@pytest.mark.asyncio
async def test_largest_page_number_is_empty_not_an_error(client, ann):
    from app.schemas import MAX_PAGE_NUMBER

    token, _ = ann
    await _seed(client, token, 2)

    body = await list_tasks(client, token, page=MAX_PAGE_NUMBER, limit=100)
    assert body["data"] == []
    assert body["pagination"]["totalRecords"] == 2
