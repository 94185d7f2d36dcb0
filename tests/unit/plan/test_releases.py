"""Tests for Plan release operations."""

import pytest

from mcp_devops_plan.exceptions import EditFailed
from tests.utils.assertions import sent_requests
from tests.utils.factories import ResponseFactory, query_responses


class TestReleasesMixin:
    """Test class for ReleasesMixin."""

    def test_get_releases(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = query_responses(
            {"rows": [{"displayName": "R1", "values": ["5", "R1", "First", "2024-06-30"]}]},
            {"rows": []},
        )

        assert plan_fetcher.get_releases("App") == [
            {"dbid": "5", "Name": "R1", "Description": "First", "ReleaseDate": "2024-06-30"}
        ]

    def test_create_release_stages_each_field(self, plan_fetcher):
        """Test one Edit request per field, in order, before a single Commit."""
        plan_fetcher.session.request.side_effect = [
            ResponseFactory.ok({"dbId": "6"}),
            ResponseFactory.ok({}),
            ResponseFactory.ok({}),
            ResponseFactory.ok({}),
            ResponseFactory.ok({"dbId": "6"}),
        ]

        result = plan_fetcher.create_or_update_release(
            "App",
            fields=[
                ("Name", "R2", None),
                ("ReleaseDate", "2024-09-30", "DATE_TIME"),
                ("Sprints", "Sprint1, Sprint2", "REFERENCE_LIST"),
            ],
        )

        calls = sent_requests(plan_fetcher.session.request)
        assert [c[0] for c in calls] == ["POST", "PATCH", "PATCH", "PATCH", "PATCH"]
        assert calls[0][3] == {"fields": []}
        assert calls[1][3]["fields"] == [{"name": "Name", "value": "R2"}]
        assert calls[2][3]["fields"] == [
            {"name": "ReleaseDate", "value": "2024-09-30 00:00:00"}
        ]
        assert calls[3][3]["fields"] == [
            {"name": "Sprints", "valueAsList": ["Sprint1", "Sprint2"]}
        ]
        assert calls[4][2]["operation"] == "Commit"
        assert [f["name"] for f in calls[4][3]["fields"]] == [
            "Name",
            "ReleaseDate",
            "Sprints",
        ]
        assert result.dbid == "6"

    def test_edit_failure_is_terminal(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = [
            ResponseFactory.ok({}),
            ResponseFactory.error(400, "bad date"),
        ]

        with pytest.raises(EditFailed, match="bad date"):
            plan_fetcher.create_or_update_release(
                "App",
                release_dbid="6",
                fields=[("Name", "R2", None), ("ReleaseDate", "nope", "DATE_TIME")],
            )
        assert plan_fetcher.session.request.call_count == 2

    def test_create_requires_name(self, plan_fetcher):
        with pytest.raises(ValueError, match="'Name' is required"):
            plan_fetcher.create_or_update_release(
                "App", fields=[("Description", "x", None)]
            )

    def test_requires_fields(self, plan_fetcher):
        with pytest.raises(ValueError, match="At least one field"):
            plan_fetcher.create_or_update_release("App", release_dbid="6", fields=[])
