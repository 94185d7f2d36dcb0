"""Module for Plan application and project operations."""

import logging
from typing import Any

from ..exceptions import MCPDevOpsPlanError
from ..models.plan import EntityType, QueryResult
from .constants import (
    COMPONENT_QUERY_FIELDS,
    COMPONENT_RESULT_SET_OPTIONS,
    DATABASES_PATH,
    PROJECT_QUERY_FIELDS,
    WORK_ITEM_TYPE_LIST_INDEX,
    WORK_ITEM_TYPE_QUERY_FIELDS,
)
from .query import QueryMixin, build_query

logger = logging.getLogger("mcp-devops-plan.plan.projects")


class ProjectsMixin(QueryMixin):
    """Mixin for Plan applications, projects, components and work item types."""

    def get_applications(self) -> list[dict[str, Any]]:
        """Get all applications (databases) of the teamspace.

        Returns:
            List of ``{"id": ..., "applicationName": ...}`` dictionaries

        Raises:
            MCPDevOpsPlanError: If the response is not a list of applications
        """
        data = self._request("GET", self._path(DATABASES_PATH))
        if not isinstance(data, list):
            raise MCPDevOpsPlanError("Failed to retrieve applications")
        return [{"id": app.get("dbId"), "applicationName": app.get("name")} for app in data]

    def get_projects(self, application: str) -> list[str]:
        """Get the display names of all projects in an application."""
        result = self.query(
            application, build_query(EntityType.PROJECT.value, PROJECT_QUERY_FIELDS)
        )
        return result.display_names()

    def get_components(self, application: str, project_id: str) -> list[str]:
        """Get the display names of the components of an application.

        No components is a valid answer and yields an empty list.
        """
        result = self.query(
            application,
            build_query(EntityType.COMPONENT.value, COMPONENT_QUERY_FIELDS),
            result_set_options=COMPONENT_RESULT_SET_OPTIONS,
        )
        logger.debug(
            f"Found {len(result.rows)} components in '{application}' "
            f"(requested for project '{project_id}')"
        )
        return result.display_names()

    def get_work_item_types(self, application: str, project_id: str) -> list[str]:
        """Get the work item types available in a project.

        Each project carries its types as a newline separated list. When a
        project matches ``project_id`` by name or dbid only its types are
        returned; otherwise the types of every project are merged.
        """
        result = self.query(
            application,
            build_query(EntityType.PROJECT.value, WORK_ITEM_TYPE_QUERY_FIELDS),
        )
        rows = _rows_for_project(result, project_id)

        types: list[str] = []
        for row in rows:
            row_values = row.get("values") or []
            if len(row_values) <= WORK_ITEM_TYPE_LIST_INDEX:
                continue
            type_list = row_values[WORK_ITEM_TYPE_LIST_INDEX] or ""
            for work_item_type in type_list.split("\n"):
                work_item_type = work_item_type.strip()
                if work_item_type and work_item_type not in types:
                    types.append(work_item_type)
        return types


def _rows_for_project(result: QueryResult, project_id: str) -> list[dict[str, Any]]:
    matching = [
        row
        for row in result.rows
        if project_id in (row.get("values") or [])[:2]
        or row.get("displayName") == project_id
    ]
    return matching or result.rows
