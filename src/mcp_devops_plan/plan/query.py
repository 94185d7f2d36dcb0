"""Module for Plan entity query operations."""

import logging
from typing import Any

from ..exceptions import MCPDevOpsPlanAuthenticationError, QueryError
from ..models.plan import FilterNode, QueryDefinition, QueryField, QueryResult
from .client import PlanClient
from .constants import QUERY_PATH, RESULT_SET_PATH

logger = logging.getLogger("mcp-devops-plan.plan.query")


def build_query(
    primary_entity: str,
    fields: list[str | tuple[str, str | None]],
    filter_node: FilterNode | None = None,
    **extra: Any,
) -> QueryDefinition:
    """Build a QueryDefinition from field paths or ``(path, sortType)`` pairs."""
    query_fields = []
    for entry in fields:
        if isinstance(entry, tuple):
            path, sort_type = entry
            query_fields.append(QueryField(path, sort_type=sort_type))
        else:
            query_fields.append(QueryField(entry))
    return QueryDefinition(
        primary_entity=primary_entity,
        fields=query_fields,
        filter_node=filter_node or FilterNode(),
        extra=extra,
    )


class QueryMixin(PlanClient):
    """Mixin for the two-phase Plan query protocol.

    A query definition is submitted first and answered with a result set id;
    the rows are then read page by page from that result set.
    """

    def query(
        self,
        application: str,
        query_def: QueryDefinition,
        result_set_options: dict[str, Any] | None = None,
    ) -> QueryResult:
        """Run a query and collect the rows of every page.

        Pages are read until one comes back empty or the configured page limit
        is reached. A short page does not end the read: the server may cap the
        page size below the requested one.

        Args:
            application: Name of the Plan application (database)
            query_def: The query to submit
            result_set_options: Options for the server-side result set. The
                configured page size is used when ``pageSize`` is absent.

        Returns:
            QueryResult holding the rows; an empty result is not an error

        Raises:
            QueryError: If the server does not return a result set id
        """
        options = dict(result_set_options or {})
        options.setdefault("pageSize", self.config.query_page_size)

        result_set_id = self._submit_query(application, query_def, options)

        rows: list[dict[str, Any]] = []
        pages_fetched = 0
        for page_number in range(1, self.config.query_max_pages + 1):
            page_rows = self._fetch_page(application, result_set_id, page_number)
            pages_fetched += 1
            if not page_rows:
                break
            rows.extend(page_rows)
        else:
            logger.warning(
                f"Stopped reading result set {result_set_id} after "
                f"{self.config.query_max_pages} pages; results may be incomplete"
            )

        logger.debug(
            f"Query on {query_def.primary_entity} in '{application}' returned "
            f"{len(rows)} rows over {pages_fetched} page(s)"
        )
        return QueryResult(
            rows=rows,
            field_paths=query_def.field_paths,
            result_set_id=result_set_id,
            pages_fetched=pages_fetched,
        )

    def _submit_query(
        self,
        application: str,
        query_def: QueryDefinition,
        result_set_options: dict[str, Any],
    ) -> str:
        payload = {
            "queryDef": query_def.to_api_dict(),
            "resultSetOptions": result_set_options,
        }
        response = self._send(
            "POST",
            self._path(QUERY_PATH, application=application),
            json_body=payload,
        )
        if response.status_code in (401, 403):
            raise MCPDevOpsPlanAuthenticationError(
                f"Authentication failed for Plan API ({response.status_code}). "
                "Token may be expired or invalid. Please verify credentials."
            )

        try:
            data = response.json() if response.content else None
        except ValueError:
            data = None

        result_set_id = data.get("result_set_id") if isinstance(data, dict) else None
        if not result_set_id:
            logger.error(
                f"No result set id for {query_def.primary_entity} query in "
                f"'{application}' (status {response.status_code})"
            )
            raise QueryError(
                "Failed to retrieve result set ID",
                data if data is not None else response.text,
            )
        return str(result_set_id)

    def _fetch_page(
        self, application: str, result_set_id: str, page_number: int
    ) -> list[dict[str, Any]]:
        data = self._request(
            "GET",
            self._path(
                RESULT_SET_PATH, application=application, result_set_id=result_set_id
            ),
            params={"pageNumber": str(page_number)},
        )
        if isinstance(data, dict):
            return data.get("rows") or []
        if isinstance(data, list):
            return data
        return []
