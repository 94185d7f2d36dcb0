"""Data models for the Plan REST API."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Field types of the Plan record schema."""

    SHORT_STRING = "SHORT_STRING"
    MULTILINE_STRING = "MULTILINE_STRING"
    DATE_TIME = "DATE_TIME"
    REFERENCE_LIST = "REFERENCE_LIST"
    REFERENCE = "REFERENCE"
    DBID = "DBID"
    RECORDTYPE = "RECORDTYPE"
    INT = "INT"


class Requiredness(str, Enum):
    MANDATORY = "MANDATORY"
    OPTIONAL = "OPTIONAL"
    READONLY = "READONLY"


def _parse_requiredness(raw: str | None) -> "Requiredness":
    try:
        return Requiredness(raw) if raw else Requiredness.OPTIONAL
    except ValueError:
        return Requiredness.OPTIONAL


class EntityType(str, Enum):
    """Record types addressed by the adapter."""

    WORK_ITEM = "WorkItem"
    SPRINT = "Sprint"
    RELEASE = "Release"
    PROJECT = "Project"
    COMPONENT = "Component"


@dataclass
class FieldDescriptor:
    """A single field of a Plan record.

    The Edit step only needs ``name`` and ``value`` (or ``value_as_list`` for
    list-valued fields); the Commit step requires every metadata key.
    """

    name: str
    value: str = ""
    value_as_list: list[str] = field(default_factory=list)
    type: FieldType | None = None
    value_status: str = "HAS_VALUE"
    validation_status: str = "_KNOWN_VALID"
    requiredness: Requiredness = Requiredness.OPTIONAL
    requiredness_for_user: Requiredness = Requiredness.OPTIONAL
    message_text: str = ""
    max_length: int = 0

    @property
    def is_list_valued(self) -> bool:
        return self.type == FieldType.REFERENCE_LIST

    def to_edit_dict(self) -> dict[str, Any]:
        """Minimal shape sent during the Edit step."""
        if self.is_list_valued:
            return {"name": self.name, "valueAsList": list(self.value_as_list)}
        return {"name": self.name, "value": self.value}

    def to_commit_dict(self) -> dict[str, Any]:
        """Full metadata shape sent during the Commit step."""
        return {
            "name": self.name,
            "value": self.value,
            "valueStatus": self.value_status,
            "validationStatus": self.validation_status,
            "requiredness": self.requiredness.value,
            "requirednessForUser": self.requiredness_for_user.value,
            "type": (self.type or FieldType.SHORT_STRING).value,
            "valueAsList": list(self.value_as_list),
            "messageText": self.message_text,
            "maxLength": self.max_length,
        }

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "FieldDescriptor":
        """Create a FieldDescriptor from a field object returned by the server."""
        raw_type = data.get("type")
        try:
            field_type = FieldType(raw_type) if raw_type else None
        except ValueError:
            field_type = None
        return cls(
            name=data.get("name", ""),
            value=data.get("value") or "",
            value_as_list=list(data.get("valueAsList") or []),
            type=field_type,
            value_status=data.get("valueStatus", "HAS_VALUE"),
            validation_status=data.get("validationStatus", "_KNOWN_VALID"),
            requiredness=_parse_requiredness(data.get("requiredness")),
            requiredness_for_user=_parse_requiredness(data.get("requirednessForUser")),
            message_text=data.get("messageText") or "",
            max_length=data.get("maxLength") or 0,
        )


@dataclass
class QueryField:
    """A projected column of a query."""

    field_path_name: str
    is_shown: bool = True
    sort_type: str | None = None
    sort_order: int | None = None

    def to_api_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "fieldPathName": self.field_path_name,
            "isShown": self.is_shown,
        }
        if self.sort_type:
            result["sortType"] = self.sort_type
        if self.sort_order is not None:
            result["sortOrder"] = self.sort_order
        return result


@dataclass
class FieldFilter:
    """Leaf of a query filter tree."""

    field_path: str
    values: list[str]
    comp_op: str = "COMP_OP_EQ"

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "fieldPath": self.field_path,
            "compOp": self.comp_op,
            "values": list(self.values),
        }


@dataclass
class FilterNode:
    """Boolean node of a query filter tree."""

    bool_op: str = "BOOL_OP_AND"
    field_filters: list[FieldFilter] = field(default_factory=list)
    child_filter_nodes: list["FilterNode"] = field(default_factory=list)

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "boolOp": self.bool_op,
            "fieldFilters": [f.to_api_dict() for f in self.field_filters],
            "childFilterNodes": [n.to_api_dict() for n in self.child_filter_nodes],
        }


@dataclass
class QueryDefinition:
    """Query submitted to a Plan application's query endpoint."""

    primary_entity: str
    fields: list[QueryField]
    filter_node: FilterNode = field(default_factory=FilterNode)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def field_paths(self) -> list[str]:
        return [f.field_path_name for f in self.fields]

    def to_api_dict(self) -> dict[str, Any]:
        return {
            "primaryEntityDefName": self.primary_entity,
            **self.extra,
            "queryFieldDefs": [f.to_api_dict() for f in self.fields],
            "filterNode": self.filter_node.to_api_dict(),
        }


@dataclass
class QueryResult:
    """Rows collected from every page of a result set.

    An empty ``rows`` list is a valid outcome, not an error.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    field_paths: list[str] = field(default_factory=list)
    result_set_id: str | None = None
    pages_fetched: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def display_names(self) -> list[str]:
        return [row.get("displayName") for row in self.rows]

    def column(self, index: int) -> list[Any]:
        """Values of the ``index``-th projected field for every row."""
        values = []
        for row in self.rows:
            row_values = row.get("values") or []
            values.append(row_values[index] if index < len(row_values) else None)
        return values

    def as_records(self) -> list[dict[str, Any]]:
        """Rows keyed by field path, in projection order.

        A field path projected twice keeps its first value.
        """
        records = []
        for row in self.rows:
            row_values = row.get("values") or []
            record: dict[str, Any] = {}
            for path, value in zip(self.field_paths, row_values):
                record.setdefault(path, value)
            records.append(record)
        return records


@dataclass
class StateTransition:
    """A ``_CHANGE_STATE`` action available from a source state."""

    action: str
    to_state: str

    def to_simplified_dict(self) -> dict[str, str]:
        return {"action": self.action, "toState": self.to_state}


@dataclass
class MutationResult:
    """Outcome of a completed Edit/Commit sequence."""

    dbid: str
    entity_type: str
    created: bool = False
    record: dict[str, Any] = field(default_factory=dict)

    def to_simplified_dict(self) -> dict[str, Any]:
        return {
            "dbId": self.dbid,
            "entityType": self.entity_type,
            "created": self.created,
            "record": self.record,
        }
