"""Module for Plan sprint operations."""

import logging
from typing import Any

from ..models.plan import EntityType, MutationResult
from .constants import SPRINT_FIELD_TYPES, SPRINT_QUERY_FIELDS
from .fields import build_typed_fields
from .query import QueryMixin, build_query
from .records import RecordsMixin

logger = logging.getLogger("mcp-devops-plan.plan.sprints")

SPRINT = EntityType.SPRINT.value


class SprintsMixin(RecordsMixin, QueryMixin):
    """Mixin for Plan sprint operations."""

    def get_sprints(self, application: str) -> list[dict[str, Any]]:
        """Get all sprints of an application as ``dbid``/``Name``/date records."""
        result = self.query(application, build_query(SPRINT, SPRINT_QUERY_FIELDS))
        return result.as_records()

    def create_or_update_sprint(
        self,
        application: str,
        sprint_dbid: str | None = None,
        name: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> MutationResult:
        """Create a sprint, or update the sprint ``sprint_dbid``.

        Only the values that are given are sent. Dates are plain
        ``YYYY-MM-DD`` strings; the time of day is added on encoding.

        Raises:
            ValueError: If a new sprint has no name, or an update changes nothing
            EditFailed, CommitFailed: On the failing protocol step
        """
        if sprint_dbid is None and not name:
            raise ValueError("Sprint name is required when creating a sprint.")

        fields = build_typed_fields(
            SPRINT,
            {"Name": name, "StartDate": start_date, "EndDate": end_date},
            SPRINT_FIELD_TYPES,
        )
        if not fields:
            raise ValueError(
                "At least one of name, startDate or endDate is required to update a sprint."
            )

        result = self.mutate(application, SPRINT, sprint_dbid, fields)
        verb = "Created" if result.created else "Updated"
        logger.info(f"{verb} sprint {result.dbid} in '{application}'")
        return result
