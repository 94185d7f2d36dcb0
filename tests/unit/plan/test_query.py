"""Tests for the Plan query protocol."""

import pytest

from mcp_devops_plan.exceptions import MCPDevOpsPlanAuthenticationError, QueryError
from mcp_devops_plan.models.plan import FieldFilter, FilterNode
from mcp_devops_plan.plan.query import build_query
from tests.utils.assertions import sent_requests
from tests.utils.factories import QueryRowFactory, ResponseFactory, query_responses

QUERY_URL = "https://plan.example.com/plan/ccmweb/rest/repos/ts-1/databases/App/query"


class TestBuildQuery:
    """Test class for build_query."""

    def test_payload_shape(self):
        query_def = build_query(
            "WorkItem",
            [("dbid", "SORT_DESC"), "Title"],
            FilterNode(field_filters=[FieldFilter("Project", ["P1"])]),
            stateDriven=True,
        )

        assert query_def.to_api_dict() == {
            "primaryEntityDefName": "WorkItem",
            "stateDriven": True,
            "queryFieldDefs": [
                {"fieldPathName": "dbid", "isShown": True, "sortType": "SORT_DESC"},
                {"fieldPathName": "Title", "isShown": True},
            ],
            "filterNode": {
                "boolOp": "BOOL_OP_AND",
                "fieldFilters": [
                    {"fieldPath": "Project", "compOp": "COMP_OP_EQ", "values": ["P1"]}
                ],
                "childFilterNodes": [],
            },
        }


class TestQueryMixin:
    """Test class for QueryMixin.query."""

    def test_submits_then_reads_pages(self, plan_fetcher):
        """Test the two-phase protocol and full pagination."""
        plan_fetcher.session.request.side_effect = query_responses(
            QueryRowFactory.page("A", "B"),
            QueryRowFactory.page("C"),
            {"rows": []},
        )

        result = plan_fetcher.query("App", build_query("Project", ["Name"]))

        assert result.display_names() == ["A", "B", "C"]
        assert result.pages_fetched == 3
        calls = sent_requests(plan_fetcher.session.request)
        assert calls[0][0] == "POST"
        assert calls[0][1] == QUERY_URL
        assert calls[0][3]["resultSetOptions"] == {"pageSize": 2}
        assert calls[1][:3] == ("GET", f"{QUERY_URL}/rs-1", {"pageNumber": "1"})
        assert calls[2][:3] == ("GET", f"{QUERY_URL}/rs-1", {"pageNumber": "2"})

    def test_short_page_does_not_end_the_read(self, plan_fetcher):
        """Test that a server capping the page size below the request is read fully."""
        plan_fetcher.session.request.side_effect = query_responses(
            QueryRowFactory.page("A", "B"),
            QueryRowFactory.page("C", "D"),
            QueryRowFactory.page("E"),
            {"rows": []},
        )

        result = plan_fetcher.query(
            "App",
            build_query("Component", ["Name"]),
            result_set_options={"pageSize": 10000},
        )

        assert result.display_names() == ["A", "B", "C", "D", "E"]
        assert result.pages_fetched == 4

    def test_stops_on_empty_page(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = query_responses(
            QueryRowFactory.page("A", "B"),
            {"rows": []},
        )

        result = plan_fetcher.query("App", build_query("Project", ["Name"]))

        assert result.display_names() == ["A", "B"]
        assert plan_fetcher.session.request.call_count == 3

    def test_stops_at_max_pages(self, plan_fetcher):
        """Test that the page limit bounds a result set that never ends."""
        full_page = QueryRowFactory.page("A", "B")
        plan_fetcher.session.request.side_effect = query_responses(*[full_page] * 5)

        result = plan_fetcher.query("App", build_query("Project", ["Name"]))

        assert len(result.rows) == 10
        assert result.pages_fetched == plan_fetcher.config.query_max_pages

    def test_zero_rows_is_not_an_error(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = query_responses({"rows": []})

        result = plan_fetcher.query("App", build_query("Component", ["Name"]))

        assert result.is_empty
        assert result.display_names() == []

    def test_explicit_page_size_is_kept(self, plan_fetcher):
        plan_fetcher.session.request.side_effect = query_responses({"rows": []})

        plan_fetcher.query(
            "App", build_query("Component", ["Name"]), result_set_options={"pageSize": 10000}
        )

        payload = plan_fetcher.session.request.call_args_list[0].kwargs["json"]
        assert payload["resultSetOptions"] == {"pageSize": 10000}

    def test_missing_result_set_id(self, plan_fetcher):
        """Test that the raw response is part of the error."""
        plan_fetcher.session.request.return_value = ResponseFactory.create(
            400, {"message": "bad field"}
        )

        with pytest.raises(QueryError) as exc_info:
            plan_fetcher.query("App", build_query("Project", ["Nope"]))

        assert "Failed to retrieve result set ID" in str(exc_info.value)
        assert "bad field" in str(exc_info.value)

    def test_submit_unauthorized(self, plan_fetcher):
        plan_fetcher.session.request.return_value = ResponseFactory.error(401)

        with pytest.raises(MCPDevOpsPlanAuthenticationError):
            plan_fetcher.query("App", build_query("Project", ["Name"]))
