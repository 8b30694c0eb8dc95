"""Search API Tests

Tests for GET /search: query validation, visibility of results and relevance
ordering within each result group.
"""

import pytest

from tests.factories import create_folder, create_list, create_task, headers_for


@pytest.fixture
def shared_list(family):
    return create_list(family["family"]["id"], family["adult"]["id"], name="Chores", visibility="FAMILY")


# =============================================================================
# Validation
# =============================================================================

class TestSearchValidation:
    """Authentication and query checks"""

    @pytest.mark.asyncio
    async def test_requires_member(self, test_client):
        response = await test_client.get("/search", params={"q": "milk"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unauthenticated_short_query_is_401(self, test_client):
        response = await test_client.get("/search", params={"q": "a"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "a"}, {"q": "  a  "}])
    async def test_short_query_rejected(self, test_client, family, params):
        response = await test_client.get("/search", params=params, headers=headers_for(family["adult"]))
        assert response.status_code == 400
        assert response.json()["detail"] == "Query must be at least 2 characters long"

    @pytest.mark.asyncio
    async def test_limit_above_maximum_rejected(self, test_client, family):
        response = await test_client.get(
            "/search", params={"q": "milk", "limit": 101}, headers=headers_for(family["adult"])
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_type_rejected(self, test_client, family):
        response = await test_client.get(
            "/search", params={"q": "milk", "type": "members"}, headers=headers_for(family["adult"])
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_query_is_trimmed(self, test_client, family):
        response = await test_client.get(
            "/search", params={"q": "  milk  "}, headers=headers_for(family["adult"])
        )
        assert response.status_code == 200
        assert response.json() == {"query": "milk", "tasks": [], "lists": [], "folders": [], "total": 0}


# =============================================================================
# Relevance
# =============================================================================

class TestSearchRelevance:
    """Scores and ordering of results"""

    @pytest.mark.asyncio
    async def test_task_scores(self, test_client, family, shared_list):
        fam_id = family["family"]["id"]
        owner = family["adult"]["id"]
        for title in ["contains exact match somewhere", "exact match starts here", "exact match"]:
            create_task(fam_id, shared_list["id"], owner, title=title, description="some description")

        response = await test_client.get(
            "/search", params={"q": "exact match", "type": "tasks"}, headers=headers_for(family["adult"])
        )
        assert response.status_code == 200
        tasks = response.json()["tasks"]
        assert [(t["title"], t["relevance_score"]) for t in tasks] == [
            ("exact match", 110),
            ("exact match starts here", 90),
            ("contains exact match somewhere", 70),
        ]
        assert all(t["type"] == "task" for t in tasks)
        assert tasks[0]["list"]["name"] == "Chores"

    @pytest.mark.asyncio
    async def test_ties_put_open_tasks_first(self, test_client, family, shared_list):
        fam_id = family["family"]["id"]
        owner = family["adult"]["id"]
        create_task(fam_id, shared_list["id"], owner, title="milk", completed=True, created_at="2024-03-01T00:00:00")
        create_task(fam_id, shared_list["id"], owner, title="milk", created_at="2024-01-01T00:00:00")
        create_task(fam_id, shared_list["id"], owner, title="milk", created_at="2024-02-01T00:00:00")

        response = await test_client.get(
            "/search", params={"q": "milk", "type": "tasks"}, headers=headers_for(family["adult"])
        )
        tasks = response.json()["tasks"]
        assert [(t["completed"], t["created_at"]) for t in tasks] == [
            (False, "2024-02-01T00:00:00"),
            (False, "2024-01-01T00:00:00"),
            (True, "2024-03-01T00:00:00"),
        ]

    @pytest.mark.asyncio
    async def test_tag_match_found_with_base_score(self, test_client, family, shared_list):
        create_task(
            family["family"]["id"], shared_list["id"], family["adult"]["id"],
            title="Call plumber", tags=["urgent"]
        )
        response = await test_client.get(
            "/search", params={"q": "urgent", "type": "tasks"}, headers=headers_for(family["adult"])
        )
        tasks = response.json()["tasks"]
        assert [(t["title"], t["relevance_score"]) for t in tasks] == [("Call plumber", 10)]

    @pytest.mark.asyncio
    async def test_lists_ranked_by_name(self, test_client, family):
        fam_id = family["family"]["id"]
        owner = family["adult"]["id"]
        create_list(fam_id, owner, name="Weekly groceries", updated_at="2024-03-01T00:00:00")
        create_list(fam_id, owner, name="Groceries", updated_at="2024-01-01T00:00:00")
        create_list(fam_id, owner, name="Market", description="groceries overflow", updated_at="2024-02-01T00:00:00")

        response = await test_client.get(
            "/search", params={"q": "groceries", "type": "lists"}, headers=headers_for(family["adult"])
        )
        data = response.json()
        assert [(lst["name"], lst["relevance_score"]) for lst in data["lists"]] == [
            ("Groceries", 110),
            ("Weekly groceries", 70),
            ("Market", 30),
        ]
        assert data["tasks"] == [] and data["folders"] == []
        assert data["total"] == 3


# =============================================================================
# Visibility
# =============================================================================

class TestSearchVisibility:
    """Results only include what the caller may see"""

    @pytest.mark.asyncio
    async def test_child_does_not_see_adult_content(self, test_client, family):
        fam_id = family["family"]["id"]
        admin = family["admin"]["id"]
        family_budget = create_list(fam_id, admin, name="Budget ideas", visibility="FAMILY")
        adult_budget = create_list(fam_id, admin, name="Budget", visibility="ADULT")
        create_folder(fam_id, admin, name="Budget archive", visibility="ADULT")
        create_task(fam_id, adult_budget["id"], admin, title="Budget review")
        create_task(fam_id, family_budget["id"], admin, title="Pocket money budget")

        response = await test_client.get("/search", params={"q": "budget"}, headers=headers_for(family["child"]))
        data = response.json()
        assert [lst["name"] for lst in data["lists"]] == ["Budget ideas"]
        assert [t["title"] for t in data["tasks"]] == ["Pocket money budget"]
        assert data["folders"] == []
        assert data["total"] == 2

        response = await test_client.get("/search", params={"q": "budget"}, headers=headers_for(family["adult"]))
        data = response.json()
        assert {lst["name"] for lst in data["lists"]} == {"Budget ideas", "Budget"}
        assert {t["title"] for t in data["tasks"]} == {"Budget review", "Pocket money budget"}
        assert [f["name"] for f in data["folders"]] == ["Budget archive"]
        assert data["total"] == 5

    @pytest.mark.asyncio
    async def test_private_items_only_for_owner(self, test_client, family):
        fam_id = family["family"]["id"]
        create_list(fam_id, family["child"]["id"], name="Birthday wishes", visibility="PRIVATE")

        response = await test_client.get("/search", params={"q": "birthday"}, headers=headers_for(family["admin"]))
        assert response.json()["lists"] == []

        response = await test_client.get("/search", params={"q": "birthday"}, headers=headers_for(family["child"]))
        assert [lst["name"] for lst in response.json()["lists"]] == ["Birthday wishes"]

    @pytest.mark.asyncio
    async def test_other_family_excluded(self, test_client, family, other_family):
        create_list(other_family["family"]["id"], other_family["admin"]["id"], name="Holiday plans")
        response = await test_client.get("/search", params={"q": "holiday"}, headers=headers_for(family["admin"]))
        assert response.json()["total"] == 0


# =============================================================================
# Limits
# =============================================================================

class TestSearchLimit:
    """Per-group result limit"""

    @pytest.mark.asyncio
    async def test_limit_applies_per_group(self, test_client, family, shared_list):
        fam_id = family["family"]["id"]
        owner = family["adult"]["id"]
        for i in range(5):
            create_list(fam_id, owner, name=f"Garden {i}")
            create_task(fam_id, shared_list["id"], owner, title=f"Garden job {i}")

        response = await test_client.get(
            "/search", params={"q": "garden", "limit": 2}, headers=headers_for(family["adult"])
        )
        data = response.json()
        assert len(data["lists"]) == 2
        assert len(data["tasks"]) == 2
        assert data["total"] == 4
