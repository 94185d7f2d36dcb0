class MCPDevOpsPlanError(Exception):
    """Base exception for MCP DevOps Plan errors."""

    pass


class MCPDevOpsPlanAuthenticationError(MCPDevOpsPlanError):
    """Raised when Plan API authentication fails (401/403)."""

    pass


class TransportError(MCPDevOpsPlanError):
    """Raised when a request to the Plan server fails at the network level."""

    pass


class SessionAcquisitionError(MCPDevOpsPlanError):
    """Raised when no session cookie can be obtained from the Plan server."""

    pass


class QueryError(MCPDevOpsPlanError):
    """Raised when the Plan server does not return a result set id for a query."""

    def __init__(self, message: str, response: object = None) -> None:
        self.response = response
        if response is not None:
            message = f"{message}. Response: {response}"
        super().__init__(message)


class PlanAPIError(MCPDevOpsPlanError):
    """Raised when the Plan server answers a request with a non-2xx status."""

    step = "request"

    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        if message is None:
            message = f"{self.step.capitalize()} failed with status {status_code}: {body}"
        super().__init__(message)


class ActionRejected(PlanAPIError):
    """Raised when a named action (Modify, Resolve, ...) is refused by the server."""

    step = "action request"


class EditFailed(PlanAPIError):
    """Raised when the Edit step of a record mutation fails."""

    step = "edit request"


class CommitFailed(PlanAPIError):
    """Raised when the Commit step of a record mutation fails."""

    step = "commit request"


class InvalidStateTransition(MCPDevOpsPlanError):
    """Raised when the server rejects a state change with 400 or 422."""

    def __init__(self, dbid: str, target_state: str, cause: PlanAPIError) -> None:
        self.dbid = dbid
        self.target_state = target_state
        self.cause = cause
        super().__init__(
            f"The transition from current state to '{target_state}' may not be "
            f"valid for work item {dbid}. Error: {cause}"
        )
