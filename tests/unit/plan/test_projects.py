"""Tests for Plan application, project and component operations."""

import pytest

from mcp_devops_plan.exceptions import MCPDevOpsPlanError
from tests.utils.assertions import sent_requests
from tests.utils.factories import QueryRowFactory, ResponseFactory, query_responses


class TestProjectsMixin:
    """Test class for ProjectsMixin."""

    def test_get_applications(self, plan_fetcher):
        plan_fetcher.session.request.return_value = ResponseFactory.ok(
            [{"dbId": "16777224", "name": "App", "description": "ignored"}]
        )

        applications = plan_fetcher.get_applications()

        assert applications == [{"id": "16777224", "applicationName": "App"}]
        method, url, _, _ = sent_requests(plan_fetcher.session.request)[0]
        assert method == "GET"
        assert url.endswith("/ccmweb/rest/repos/ts-1/databases")

    def test_get_applications_unexpected_shape(self, plan_fetcher):
        plan_fetcher.session.request.return_value = ResponseFactory.ok({"error": "x"})

        with pytest.raises(MCPDevOpsPlanError, match="Failed to retrieve applications"):
            plan_fetcher.get_applications()

    def test_get_projects(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = query_responses(
            QueryRowFactory.page("Alpha", "Beta"), {"rows": []}
        )

        assert plan_fetcher.get_projects("App") == ["Alpha", "Beta"]

        query_def = plan_fetcher.session.request.call_args_list[0].kwargs["json"]["queryDef"]
        assert query_def["primaryEntityDefName"] == "Project"
        assert [f["fieldPathName"] for f in query_def["queryFieldDefs"]] == [
            "dbid",
            "Name",
            "DescriptionPT",
        ]

    def test_get_components_empty(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = query_responses({"rows": []})

        assert plan_fetcher.get_components("App", "Proj") == []

        payload = plan_fetcher.session.request.call_args_list[0].kwargs["json"]
        assert payload["queryDef"]["primaryEntityDefName"] == "Component"
        assert payload["resultSetOptions"] == {
            "convertToLocalTime": False,
            "maxResultSetRows": 10000,
            "pageSize": 10000,
        }

    def test_get_work_item_types_for_project(self, plan_fetcher):
        """Test that only the matching project's types are returned."""
        plan_fetcher.session.request.side_effect = query_responses(
            {
                "rows": [
                    QueryRowFactory.create("Proj", ["2", "Proj", "Epic\nStory\n Task \n"]),
                    QueryRowFactory.create("Other", ["1", "Other", "Defect"]),
                ]
            },
            {"rows": []},
        )

        assert plan_fetcher.get_work_item_types("App", "Proj") == ["Epic", "Story", "Task"]

    def test_get_work_item_types_unknown_project(self, plan_fetcher):
        """Test that types of all projects are merged when none matches."""
        plan_fetcher.session.request.side_effect = query_responses(
            {
                "rows": [
                    QueryRowFactory.create("A", ["2", "A", "Epic\nStory"]),
                    QueryRowFactory.create("B", ["1", "B", "Story\nDefect"]),
                ]
            },
            {"rows": []},
        )

        assert plan_fetcher.get_work_item_types("App", "Nope") == ["Epic", "Story", "Defect"]
