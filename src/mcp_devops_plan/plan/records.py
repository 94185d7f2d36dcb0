"""Module for Plan record mutations.

Plan records are changed through a staged protocol::

    [create draft] -> [action] -> Edit -> Commit

* create draft: ``POST records/{type}?operation=Edit`` with no fields, used
  when a Sprint or Release is created; answers with the new ``dbId``.
* action: ``PATCH ...?actionName=<name>&operation=Edit`` with an empty body,
  required before fields of an existing work item can change (``Modify``)
  and for state changes (``Resolve``, ``Close``, ...).
* Edit: ``PATCH ...?operation=Edit`` staging the minimal field shapes.
* Commit: ``PATCH ...?operation=Commit`` with every field in full metadata
  shape; the server rejects commits missing metadata keys.

Each step must succeed before the next one runs; there are no retries.
"""

import logging
from collections.abc import Sequence
from typing import Any

from ..exceptions import ActionRejected, CommitFailed, EditFailed
from ..models.plan import FieldDescriptor, MutationResult
from .client import PlanClient
from .constants import (
    ACTION_DELETE,
    OPERATION_COMMIT,
    OPERATION_EDIT,
    RECORD_PATH,
    RECORDS_PATH,
)

logger = logging.getLogger("mcp-devops-plan.plan.records")


class RecordsMixin(PlanClient):
    """Mixin for Plan record reads and the Edit/Commit write protocol."""

    def _record_path(self, application: str, entity_type: str, dbid: str) -> str:
        return self._path(
            RECORD_PATH, application=application, entity_type=entity_type, dbid=dbid
        )

    def get_record(self, application: str, entity_type: str, dbid: str) -> Any:
        """Get a record by dbid.

        Raises:
            PlanAPIError: If the record cannot be read
        """
        return self._request(
            "GET",
            self._record_path(application, entity_type, dbid),
            params={"useDbid": "true"},
        )

    def get_record_type(self, application: str, entity_type: str) -> Any:
        """Get the records endpoint of a type, which lists its actions."""
        return self._request(
            "GET",
            self._path(RECORDS_PATH, application=application, entity_type=entity_type),
            headers={"Accept": "application/json, text/plain, */*"},
        )

    def create_draft(self, application: str, entity_type: str) -> str:
        """Allocate a new record in Edit state and return its dbId.

        Raises:
            EditFailed: If the server refuses the draft or returns no dbId
        """
        response = self._send(
            "POST",
            self._path(RECORDS_PATH, application=application, entity_type=entity_type),
            params={"operation": OPERATION_EDIT},
            json_body={"fields": []},
        )
        if not response.ok:
            logger.error(
                f"Creating {entity_type} draft in '{application}' failed with "
                f"status {response.status_code}"
            )
            raise EditFailed(response.status_code, response.text)

        data = self._parse_json(response, strict=False)
        dbid = data.get("dbId") if isinstance(data, dict) else None
        if not dbid:
            raise EditFailed(
                response.status_code,
                response.text,
                f"Edit request for new {entity_type} returned no dbId: {response.text}",
            )
        logger.debug(f"Allocated {entity_type} draft {dbid} in '{application}'")
        return str(dbid)

    def run_action(
        self, application: str, entity_type: str, dbid: str, action_name: str
    ) -> dict[str, Any]:
        """Invoke a named action on a record, putting it into Edit state.

        Raises:
            ActionRejected: If the server refuses the action
        """
        response = self._send(
            "PATCH",
            self._record_path(application, entity_type, dbid),
            params={
                "actionName": action_name,
                "operation": OPERATION_EDIT,
                "useDbid": "true",
            },
            json_body={},
        )
        if not response.ok:
            logger.error(
                f"Action '{action_name}' on {entity_type} {dbid} failed with "
                f"status {response.status_code}"
            )
            raise ActionRejected(response.status_code, response.text)

        logger.debug(f"Action '{action_name}' accepted for {entity_type} {dbid}")
        data = self._parse_json(response, strict=False)
        return data if isinstance(data, dict) else {}

    def edit_record(
        self,
        application: str,
        entity_type: str,
        dbid: str,
        fields: Sequence[FieldDescriptor],
    ) -> dict[str, Any]:
        """Stage field values on a record in Edit state.

        Raises:
            EditFailed: If the server refuses the staged values
        """
        response = self._send(
            "PATCH",
            self._record_path(application, entity_type, dbid),
            params={"operation": OPERATION_EDIT, "useDbid": "true"},
            json_body={"dbId": dbid, "fields": [f.to_edit_dict() for f in fields]},
        )
        if not response.ok:
            logger.error(
                f"Edit of {entity_type} {dbid} failed with status {response.status_code}"
            )
            raise EditFailed(response.status_code, response.text)

        data = self._parse_json(response, strict=False)
        return data if isinstance(data, dict) else {}

    def commit_record(
        self,
        application: str,
        entity_type: str,
        dbid: str,
        fields: Sequence[FieldDescriptor],
        body_dbid: str | None = None,
    ) -> dict[str, Any]:
        """Commit a record in Edit state.

        Args:
            application: Name of the Plan application
            entity_type: Record type (e.g. 'WorkItem')
            dbid: dbid addressing the record
            fields: Fields to commit, sent in full metadata shape
            body_dbid: dbId echoed in the body when it differs from ``dbid``

        Returns:
            The committed record as returned by the server

        Raises:
            CommitFailed: If the server refuses the commit
        """
        response = self._send(
            "PATCH",
            self._record_path(application, entity_type, dbid),
            params={"operation": OPERATION_COMMIT, "useDbid": "true"},
            json_body={
                "dbId": body_dbid or dbid,
                "fields": [f.to_commit_dict() for f in fields],
            },
        )
        if not response.ok:
            logger.error(
                f"Commit of {entity_type} {dbid} failed with status {response.status_code}"
            )
            raise CommitFailed(response.status_code, response.text)

        logger.debug(f"Committed {entity_type} {dbid}")
        data = self._parse_json(response, strict=False)
        return data if isinstance(data, dict) else {}

    def mutate(
        self,
        application: str,
        entity_type: str,
        dbid: str | None,
        fields: Sequence[FieldDescriptor],
        action_name: str | None = None,
        stage_fields_separately: bool = False,
    ) -> MutationResult:
        """Create or update a record through the Edit/Commit protocol.

        Args:
            application: Name of the Plan application
            entity_type: Record type ('WorkItem', 'Sprint', 'Release', ...)
            dbid: Record to update, or None to create a new one
            fields: Field values to set
            action_name: Action invoked before editing (e.g. 'Modify')
            stage_fields_separately: Send one Edit request per field, in order

        Returns:
            MutationResult with the record's dbid and committed representation

        Raises:
            EditFailed, ActionRejected, CommitFailed: On the failing step
        """
        created = False
        if dbid is None:
            dbid = self.create_draft(application, entity_type)
            created = True

        if action_name:
            self.run_action(application, entity_type, dbid, action_name)

        if stage_fields_separately:
            for field_descriptor in fields:
                self.edit_record(application, entity_type, dbid, [field_descriptor])
        else:
            self.edit_record(application, entity_type, dbid, fields)

        record = self.commit_record(application, entity_type, dbid, fields)
        return MutationResult(
            dbid=str(record.get("dbId") or dbid),
            entity_type=entity_type,
            created=created,
            record=record,
        )

    def delete_record(self, application: str, entity_type: str, dbid: str) -> None:
        """Delete a record through its Delete action.

        Raises:
            ActionRejected: If the server refuses the deletion
        """
        response = self._send(
            "DELETE",
            self._record_path(application, entity_type, dbid),
            params={"actionName": ACTION_DELETE, "useDbid": "true"},
        )
        if not response.ok:
            logger.error(
                f"Deleting {entity_type} {dbid} failed with status {response.status_code}"
            )
            raise ActionRejected(response.status_code, response.text)

