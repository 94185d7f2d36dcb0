"""Module for Plan release operations."""

import logging
from collections.abc import Sequence
from typing import Any

from ..models.plan import EntityType, FieldType, MutationResult
from .constants import RELEASE_QUERY_FIELDS, REQUIRED_FIELDS
from .fields import build_record_fields
from .query import QueryMixin, build_query
from .records import RecordsMixin

logger = logging.getLogger("mcp-devops-plan.plan.releases")

RELEASE = EntityType.RELEASE.value


class ReleasesMixin(RecordsMixin, QueryMixin):
    """Mixin for Plan release operations."""

    def get_releases(self, application: str) -> list[dict[str, Any]]:
        """Get all releases of an application."""
        result = self.query(application, build_query(RELEASE, RELEASE_QUERY_FIELDS))
        return result.as_records()

    def create_or_update_release(
        self,
        application: str,
        release_dbid: str | None = None,
        fields: Sequence[tuple[str, Any, FieldType | str | None]] = (),
    ) -> MutationResult:
        """Create a release, or update the release ``release_dbid``.

        Every field is staged by its own Edit request, in the given order,
        before a single Commit carrying all of them.

        Args:
            application: Name of the Plan application
            release_dbid: Release to update, or None to create one
            fields: ``(name, value, type)`` triples; ``type`` may be None

        Raises:
            ValueError: If no fields are given, or a new release has no name
            EditFailed, CommitFailed: On the failing protocol step
        """
        if not fields:
            raise ValueError("At least one field is required for a release.")

        required_field = REQUIRED_FIELDS[RELEASE]
        if release_dbid is None and not any(
            name == required_field and value for name, value, _ in fields
        ):
            raise ValueError(
                f"Field '{required_field}' is required when creating a release."
            )

        descriptors = build_record_fields(RELEASE, fields)
        result = self.mutate(
            application,
            RELEASE,
            release_dbid,
            descriptors,
            stage_fields_separately=True,
        )
        verb = "Created" if result.created else "Updated"
        logger.info(f"{verb} release {result.dbid} in '{application}'")
        return result
