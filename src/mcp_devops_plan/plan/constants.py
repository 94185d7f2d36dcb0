"""Constants for Plan operations."""

from ..models.plan import FieldType

# Seconds to wait between a state-change action and its commit. The server
# propagates the action asynchronously and exposes no readiness signal.
DEFAULT_STATE_CHANGE_DELAY = 1.0

DEFAULT_QUERY_PAGE_SIZE = 300
DEFAULT_QUERY_MAX_PAGES = 100

# Server macro resolved to the authenticated user
CURRENT_USER = "[CURRENT_USER]"

# Endpoint templates, relative to ``{server_url}/ccmweb/rest``
SESSION_BOOTSTRAP_PATH = "/analytics/serverurl"
DATABASES_PATH = "/repos/{teamspace}/databases"
QUERY_PATH = "/repos/{teamspace}/databases/{application}/query"
RESULT_SET_PATH = "/repos/{teamspace}/databases/{application}/query/{result_set_id}"
RECORDS_PATH = "/repos/{teamspace}/databases/{application}/records/{entity_type}"
RECORD_PATH = "/repos/{teamspace}/databases/{application}/records/{entity_type}/{dbid}"

# Record operations
OPERATION_EDIT = "Edit"
OPERATION_COMMIT = "Commit"

ACTION_MODIFY = "Modify"
ACTION_DELETE = "Delete"
CHANGE_STATE_ACTION_TYPE = "_CHANGE_STATE"

# maxLength the server expects per field type in Commit payloads
FIELD_MAX_LENGTHS = {
    FieldType.SHORT_STRING: 254,
    FieldType.MULTILINE_STRING: 0,
    FieldType.DATE_TIME: 0,
    FieldType.REFERENCE_LIST: 0,
    FieldType.REFERENCE: 0,
    FieldType.DBID: 0,
    FieldType.RECORDTYPE: 30,
    FieldType.INT: 0,
}
DEFAULT_MAX_LENGTH = 254

DATE_TIME_SUFFIX = " 00:00:00"

# Fields that must be present when the record is created
REQUIRED_FIELDS = {
    "WorkItem": "Title",
    "Sprint": "Name",
    "Release": "Name",
}

# Query projections
PROJECT_QUERY_FIELDS = [("dbid", "SORT_DESC"), ("Name", None), ("DescriptionPT", None)]
WORK_ITEM_TYPE_QUERY_FIELDS = [("dbid", "SORT_DESC"), ("Name", None), ("WITypeList", None)]
WORK_ITEM_TYPE_LIST_INDEX = 2
COMPONENT_QUERY_FIELDS = ["Name", "dbid", "record_type"]
COMPONENT_RESULT_SET_OPTIONS = {
    "convertToLocalTime": False,
    "maxResultSetRows": 10000,
    "pageSize": 10000,
}
WORK_ITEM_QUERY_FIELDS = [
    "dbid",
    "State",
    "id",
    "Title",
    "Owner.fullname",
    "Owner",
    "Priority",
    "Parent.Title",
    "Parent",
    "Parent.record_type",
    "Tags",
    "WIType",
]
WORK_ITEM_QUERY_OPTIONS = {
    "stateDriven": True,
    "showWipLimits": True,
    "backlogStateName": "Backlog",
    "laneQueryDef": {
        "pageCounterQueryField": "State",
        "pageCounterQueryFieldPath": "State",
        "wipLimitFilterQueryField": "Project",
    },
}
WORK_ITEM_RESULT_SET_OPTIONS = {"pageSize": 300, "convertToLocalTime": True}
SPRINT_QUERY_FIELDS = ["dbid", "Name", "StartDate", "EndDate"]
RELEASE_QUERY_FIELDS = ["dbid", "Name", "Description", "ReleaseDate"]

# Work item fields and their schema types
WORK_ITEM_FIELD_TYPES = {
    "Component": FieldType.REFERENCE,
    "Project": FieldType.REFERENCE,
    "record_type": FieldType.RECORDTYPE,
    "Title": FieldType.SHORT_STRING,
    "Description": FieldType.MULTILINE_STRING,
    "WIType": FieldType.SHORT_STRING,
}
SPRINT_FIELD_TYPES = {
    "Name": FieldType.SHORT_STRING,
    "StartDate": FieldType.DATE_TIME,
    "EndDate": FieldType.DATE_TIME,
}
