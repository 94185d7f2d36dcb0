"""Module for Plan work item operations."""

import logging
import time
from collections.abc import Sequence
from typing import Any

from ..exceptions import (
    ActionRejected,
    CommitFailed,
    InvalidStateTransition,
    MCPDevOpsPlanError,
)
from ..models.plan import (
    EntityType,
    FieldFilter,
    FilterNode,
    FieldType,
    MutationResult,
    StateTransition,
)
from .constants import (
    ACTION_MODIFY,
    CHANGE_STATE_ACTION_TYPE,
    CURRENT_USER,
    OPERATION_COMMIT,
    RECORDS_PATH,
    WORK_ITEM_FIELD_TYPES,
    WORK_ITEM_QUERY_FIELDS,
    WORK_ITEM_QUERY_OPTIONS,
    WORK_ITEM_RESULT_SET_OPTIONS,
)
from .fields import build_record_fields, build_typed_fields
from .query import QueryMixin, build_query
from .records import RecordsMixin

logger = logging.getLogger("mcp-devops-plan.plan.work_items")

WORK_ITEM = EntityType.WORK_ITEM.value

# Statuses the server uses to refuse a state change from the current state
INVALID_TRANSITION_STATUSES = (400, 422)


class WorkItemsMixin(RecordsMixin, QueryMixin):
    """Mixin for Plan work item operations."""

    def create_work_item(
        self,
        application: str,
        project_id: str,
        title: str,
        description: str,
        work_item_type: str,
        component: str | None = None,
    ) -> dict[str, Any]:
        """Create a work item with a single Commit request.

        Args:
            application: Name of the Plan application
            project_id: Project the work item belongs to
            title: Title of the work item
            description: Description of the work item
            work_item_type: One of the project's work item types
            component: Optional component name

        Returns:
            Dictionary with the new ``dbId`` and the ``viewURL`` of the work item

        Raises:
            CommitFailed: If the server refuses the work item
            MCPDevOpsPlanError: If the server answers without a view URL
        """
        values: dict[str, Any] = {}
        if component is not None:
            values["Component"] = component
        values.update(
            {
                "Project": project_id,
                "record_type": WORK_ITEM,
                "Title": title,
                "Description": description,
                "WIType": work_item_type,
            }
        )
        fields = build_typed_fields(WORK_ITEM, values, WORK_ITEM_FIELD_TYPES)

        response = self._send(
            "POST",
            self._path(RECORDS_PATH, application=application, entity_type=WORK_ITEM),
            params={"operation": OPERATION_COMMIT, "useDbid": "false"},
            json_body={"fields": [f.to_commit_dict() for f in fields]},
        )
        if not response.ok:
            logger.error(
                f"Creating work item in '{application}' failed with status "
                f"{response.status_code}"
            )
            raise CommitFailed(response.status_code, response.text)

        data = self._parse_json(response, strict=False) or {}
        view_url = data.get("viewURL") if isinstance(data, dict) else None
        if not view_url:
            raise MCPDevOpsPlanError("Failed to create work item")

        logger.info(f"Created work item {data.get('dbId')} in '{application}'")
        return {
            "dbId": data.get("dbId"),
            "viewURL": f"{self.config.server_url}/#{view_url}",
        }

    def get_work_items(
        self,
        application: str,
        project_id: str,
        work_item_type: str | None = None,
        owner: str | None = None,
    ) -> list[dict[str, Any]]:
        """Get the work items of a project.

        Args:
            application: Name of the Plan application
            project_id: Project whose work items are listed
            work_item_type: Only list work items of this type
            owner: Any non-empty value lists only the work items owned by
                the authenticated user. The value itself is not sent; the
                filter always uses the ``[CURRENT_USER]`` macro.

        Returns:
            Work items as dictionaries keyed by field path, ``dbid`` first
        """
        field_filters = [FieldFilter("Project", [project_id])]
        if owner:
            field_filters.append(FieldFilter("Owner", [CURRENT_USER]))
        if work_item_type:
            field_filters.append(FieldFilter("WIType", [work_item_type]))

        query_def = build_query(
            WORK_ITEM,
            WORK_ITEM_QUERY_FIELDS,
            FilterNode(field_filters=field_filters),
            **WORK_ITEM_QUERY_OPTIONS,
        )
        result = self.query(
            application, query_def, result_set_options=WORK_ITEM_RESULT_SET_OPTIONS
        )
        return result.as_records()

    def update_work_item(
        self,
        application: str,
        dbid: str,
        fields: Sequence[tuple[str, Any, FieldType | str | None]],
    ) -> MutationResult:
        """Update fields of a work item: Modify action, Edit, then Commit.

        Args:
            application: Name of the Plan application
            dbid: dbid of the work item
            fields: ``(name, value, type)`` triples; ``type`` may be None

        Raises:
            ValueError: If no fields are given
            ActionRejected, EditFailed, CommitFailed: On the failing step
        """
        if not fields:
            raise ValueError("At least one field is required to update a work item.")

        descriptors = build_record_fields(WORK_ITEM, fields)
        return self.mutate(
            application, WORK_ITEM, dbid, descriptors, action_name=ACTION_MODIFY
        )

    def delete_work_item(self, application: str, dbid: str) -> None:
        """Delete a work item.

        Raises:
            ActionRejected: If the server refuses the deletion
        """
        self.delete_record(application, WORK_ITEM, dbid)
        logger.info(f"Deleted work item {dbid} in '{application}'")

    def get_state_transitions(
        self, application: str
    ) -> tuple[dict[str, list[StateTransition]], Any]:
        """Build the work item state transition matrix.

        Returns:
            Tuple of (source state -> transitions, raw server response).
            The matrix is empty when the response is not a list.
        """
        data = self.get_record_type(application, WORK_ITEM)
        transitions: dict[str, list[StateTransition]] = {}
        if not isinstance(data, list):
            return transitions, data

        for work_item in data:
            for action in work_item.get("actions") or []:
                if action.get("actionType") != CHANGE_STATE_ACTION_TYPE:
                    continue
                transition = StateTransition(
                    action=action.get("name"),
                    to_state=action.get("actionDestStateName"),
                )
                for source_state in action.get("actionSourceStateNames") or []:
                    known = transitions.setdefault(source_state, [])
                    if transition not in known:
                        known.append(transition)
        return transitions, data

    def wait_for_state_propagation(self) -> None:
        """Wait for the server to apply a state-change action before committing.

        The server applies the action asynchronously and offers no readiness
        signal, so this is a fixed, non-cancellable wait of
        ``config.state_change_delay`` seconds. It blocks the calling thread;
        async callers run the state change in a worker thread.
        """
        delay = self.config.state_change_delay
        if delay > 0:
            time.sleep(delay)

    def change_work_item_state(
        self, application: str, dbid: str, target_state: str
    ) -> dict[str, Any]:
        """Move a work item to another state.

        Reads the work item, invokes the ``target_state`` action with an empty
        body, waits for the action to propagate, then commits with no fields.

        Args:
            application: Name of the Plan application
            dbid: dbid of the work item
            target_state: Name of the state-change action (e.g. 'Resolve')

        Returns:
            The committed work item as returned by the server

        Raises:
            InvalidStateTransition: If the action or commit is refused with 400/422
            ActionRejected, CommitFailed: On other failures of those steps
        """
        current = self.get_record(application, WORK_ITEM, dbid)
        if isinstance(current, dict):
            logger.debug(
                f"Work item {dbid} before state change: {current.get('displayName', '')}"
            )

        try:
            action_data = self.run_action(application, WORK_ITEM, dbid, target_state)
            self.wait_for_state_propagation()
            committed = self.commit_record(
                application,
                WORK_ITEM,
                dbid,
                [],
                body_dbid=action_data.get("dbId"),
            )
        except (ActionRejected, CommitFailed) as e:
            if e.status_code in INVALID_TRANSITION_STATUSES:
                raise InvalidStateTransition(dbid, target_state, e) from e
            raise

        logger.info(f"Work item {dbid} moved with action '{target_state}'")
        return committed
