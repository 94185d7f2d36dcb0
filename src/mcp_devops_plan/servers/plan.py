"""IBM DevOps Plan FastMCP server instance and tool definitions.

Every tool answers with a single text item. Failures are rendered as
``Error <verb>ing <noun>: <message>`` so the client always gets a
well-formed tool result.
"""

import asyncio
import json
import logging
from typing import Annotated, Any

from fastmcp import Context, FastMCP
from pydantic import BaseModel, Field

from mcp_devops_plan.exceptions import InvalidStateTransition
from mcp_devops_plan.models.plan import StateTransition
from mcp_devops_plan.servers.dependencies import get_plan_fetcher
from mcp_devops_plan.utils.decorators import (
    check_write_access,
    convert_empty_defaults_to_none,
)

logger = logging.getLogger("mcp-devops-plan.servers.plan")

plan_mcp = FastMCP(
    name="DevOps Plan MCP Service",
    instructions="Provides tools for interacting with IBM DevOps Plan work items, sprints and releases.",
)


class PlanFieldInput(BaseModel):
    """A field value to set on a Plan record."""

    name: str = Field(description="Field name (e.g., 'Title', 'Priority', 'ReleaseDate')")
    value: str = Field(description="Field value. REFERENCE_LIST values are comma-separated.")
    type: str | None = Field(
        default=None,
        description=(
            "Optional field type: SHORT_STRING, MULTILINE_STRING, DATE_TIME, "
            "REFERENCE_LIST, REFERENCE, DBID, RECORDTYPE or INT"
        ),
    )


def _to_json(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def _field_triples(fields: list[PlanFieldInput]) -> list[tuple[str, str, str | None]]:
    return [(f.name, f.value, f.type) for f in fields]


def _format_transition_matrix(
    transitions: dict[str, list[StateTransition]], raw: Any
) -> str:
    formatted = "State Transition Matrix:\n\n"
    if not isinstance(raw, list):
        formatted += "Unexpected response format. Raw data:\n"
        formatted += json.dumps(raw, indent=2, ensure_ascii=False)
    elif transitions:
        for from_state, state_transitions in transitions.items():
            formatted += f'From "{from_state}":\n'
            for transition in state_transitions:
                formatted += (
                    f'  - Action: "{transition.action}" -> To: "{transition.to_state}"\n'
                )
            formatted += "\n"
    else:
        formatted += "No state transitions found in the work items.\n"
    return f"{formatted}\n\nRaw data: {_to_json(raw)}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Applications", "readOnlyHint": True},
)
async def get_applications(ctx: Context) -> str:
    """
    Retrieves all applications from the Plan system.

    Args:
        ctx: The FastMCP context.

    Returns:
        Text listing each application's id and name.
    """
    try:
        plan = await get_plan_fetcher(ctx)
        applications = plan.get_applications()
        return f"Applications retrieved: {_to_json(applications)}"
    except Exception as e:
        logger.exception("Error retrieving applications:")
        return f"Error retrieving applications: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Available Projects", "readOnlyHint": True},
)
async def get_available_projects(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
) -> str:
    """Get the list of projects in Plan for a given application."""
    try:
        plan = await get_plan_fetcher(ctx)
        projects = plan.get_projects(application)
        return f"Projects retrieved: {_to_json(projects)}"
    except Exception as e:
        logger.exception(f"Error retrieving projects for '{application}':")
        return f"Error retrieving projects: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Available Components", "readOnlyHint": True},
)
async def get_available_components(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
    projectId: Annotated[str, Field(description="ID of the project")],  # noqa: N803
) -> str:
    """Get the list of components for a project in Plan for a given application."""
    try:
        plan = await get_plan_fetcher(ctx)
        components = plan.get_components(application, projectId)
        return f"Components retrieved: {_to_json(components)}"
    except Exception as e:
        logger.exception(f"Error retrieving components for '{application}':")
        return f"Error retrieving components: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Sprints", "readOnlyHint": True},
)
async def get_sprints(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
) -> str:
    """Get the sprints of an application with their dbid, name and dates."""
    try:
        plan = await get_plan_fetcher(ctx)
        sprints = plan.get_sprints(application)
        return f"Sprints retrieved: {_to_json(sprints)}"
    except Exception as e:
        logger.exception(f"Error retrieving sprints for '{application}':")
        return f"Error retrieving sprints: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Releases", "readOnlyHint": True},
)
async def get_releases(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
) -> str:
    """Get the releases of an application."""
    try:
        plan = await get_plan_fetcher(ctx)
        releases = plan.get_releases(application)
        return f"Releases retrieved: {_to_json(releases)}"
    except Exception as e:
        logger.exception(f"Error retrieving releases for '{application}':")
        return f"Error retrieving releases: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Available Work Item Types", "readOnlyHint": True},
)
async def get_available_workitem_types(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
    projectId: Annotated[str, Field(description="ID of the project")],  # noqa: N803
) -> str:
    """Get the list of work item types available in a project."""
    try:
        plan = await get_plan_fetcher(ctx)
        work_item_types = plan.get_work_item_types(application, projectId)
        return f"Available work item types: {_to_json(work_item_types)}"
    except Exception as e:
        logger.exception(f"Error retrieving work item types for '{application}':")
        return f"Error retrieving work item types: {e}"


@plan_mcp.tool(
    tags={"plan", "write"},
    annotations={"title": "Create Work Item", "readOnlyHint": False},
)
@check_write_access
@convert_empty_defaults_to_none
async def create_work_item(
    ctx: Context,
    title: Annotated[str, Field(description="Title of the work item")],
    description: Annotated[str, Field(description="Description of the work item")],
    workItemType: Annotated[  # noqa: N803
        str, Field(description="Type of the work item (e.g., 'Epic', 'Story', 'Task')")
    ],
    application: Annotated[str, Field(description="Name of the application")],
    projectId: Annotated[str, Field(description="ID of the project")],  # noqa: N803
    component: Annotated[
        str | None, Field(description="Optional component of the work item")
    ] = None,
) -> str:
    """
    Creates a new work item in Plan.

    Args:
        ctx: The FastMCP context.
        title: Title of the work item.
        description: Description of the work item.
        workItemType: Type of the work item.
        application: Name of the application.
        projectId: ID of the project.
        component: Optional component name.

    Returns:
        Text with the new work item's dbId and its URL.
    """
    try:
        plan = await get_plan_fetcher(ctx)
        created = plan.create_work_item(
            application,
            projectId,
            title,
            description,
            workItemType,
            component=component,
        )
        return (
            f"Work item created successfully. dbId: {created['dbId']}. "
            f"View it at: {created['viewURL']}"
        )
    except Exception as e:
        logger.exception(f"Error creating work item in '{application}':")
        return f"Error creating work item: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Work Items", "readOnlyHint": True},
)
@convert_empty_defaults_to_none
async def get_work_items(
    ctx: Context,
    applicationName: Annotated[str, Field(description="Name of the application")],  # noqa: N803
    projectId: Annotated[str, Field(description="ID of the project")],  # noqa: N803
    workitemType: Annotated[  # noqa: N803
        str | None, Field(description="Optional type of work items to list")
    ] = None,
    owner: Annotated[
        str | None,
        Field(
            description=(
                "Optional. Any non-empty value (e.g. 'true') lists only the work "
                "items owned by the authenticated user."
            )
        ),
    ] = None,
) -> str:
    """Get the work items of a project, optionally filtered by type and owner."""
    try:
        plan = await get_plan_fetcher(ctx)
        work_items = plan.get_work_items(
            applicationName, projectId, work_item_type=workitemType, owner=owner
        )
        return f"Work items retrieved: {_to_json(work_items)}"
    except Exception as e:
        logger.exception(f"Error retrieving work items for '{applicationName}':")
        return f"Error retrieving work items: {e}"


@plan_mcp.tool(
    tags={"plan", "write"},
    annotations={"title": "Update Work Item", "readOnlyHint": False},
)
@check_write_access
async def update_work_item(
    ctx: Context,
    dbid: Annotated[str, Field(description="dbid of the work item")],
    application: Annotated[str, Field(description="Name of the application")],
    fields: Annotated[
        list[PlanFieldInput],
        Field(description="Fields to set, each as {name, value, type?}"),
    ],
) -> str:
    """
    Updates fields of an existing work item.

    The work item is opened with the Modify action, the fields are staged
    and then committed.
    """
    try:
        plan = await get_plan_fetcher(ctx)
        result = plan.update_work_item(application, dbid, _field_triples(fields))
        return f"Work item updated successfully: {_to_json(result.to_simplified_dict())}"
    except Exception as e:
        logger.exception(f"Error updating work item {dbid}:")
        return f"Error updating work item: {e}"


@plan_mcp.tool(
    tags={"plan", "write"},
    annotations={"title": "Delete Work Item", "destructiveHint": True},
)
@check_write_access
async def delete_work_item(
    ctx: Context,
    dbid: Annotated[str, Field(description="dbid of the work item")],
    application: Annotated[str, Field(description="Name of the application")],
) -> str:
    """Deletes a work item in Plan."""
    try:
        plan = await get_plan_fetcher(ctx)
        plan.delete_work_item(application, dbid)
        return f"Work item {dbid} deleted successfully"
    except Exception as e:
        logger.exception(f"Error deleting work item {dbid}:")
        return f"Error deleting work item: {e}"


@plan_mcp.tool(
    tags={"plan", "read"},
    annotations={"title": "Get Available States", "readOnlyHint": True},
)
async def get_available_states(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
) -> str:
    """
    Gets the state transition matrix of work items.

    Lists, for each source state, the actions that can be taken and the
    state each action leads to.
    """
    try:
        plan = await get_plan_fetcher(ctx)
        transitions, raw = plan.get_state_transitions(application)
        return _format_transition_matrix(transitions, raw)
    except Exception as e:
        logger.exception(f"Error retrieving state transitions for '{application}':")
        return f"Error retrieving state transition matrix: {e}"


@plan_mcp.tool(
    tags={"plan", "write"},
    annotations={"title": "Change Work Item State", "readOnlyHint": False},
)
@check_write_access
async def change_work_item_state(
    ctx: Context,
    dbid: Annotated[str, Field(description="dbid of the work item")],
    application: Annotated[str, Field(description="Name of the application")],
    targetState: Annotated[  # noqa: N803
        str,
        Field(description="Action leading to the target state (e.g., 'Resolve', 'Close')"),
    ],
) -> str:
    """
    Changes the state of a work item.

    Use get_available_states to find the actions valid from the current state.
    """
    try:
        plan = await get_plan_fetcher(ctx)
        # The wait between action and commit blocks, so keep it off the event loop
        await asyncio.to_thread(
            plan.change_work_item_state, application, dbid, targetState
        )
        return (
            f"Work item {dbid} state successfully changed to '{targetState}'. "
            "Both movement and commit operations completed successfully."
        )
    except InvalidStateTransition as e:
        logger.warning(f"Rejected state change of work item {dbid}: {e}")
        return f"State transition error: {e}"
    except Exception as e:
        logger.exception(f"Error changing state of work item {dbid}:")
        return f"Error changing work item state: {e}"


@plan_mcp.tool(
    tags={"plan", "write"},
    annotations={"title": "Create or Update Sprint", "readOnlyHint": False},
)
@check_write_access
@convert_empty_defaults_to_none
async def create_or_update_sprint(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
    sprintDbid: Annotated[  # noqa: N803
        str | None, Field(description="dbid of the sprint to update; omit to create one")
    ] = None,
    name: Annotated[
        str | None, Field(description="Sprint name (required when creating)")
    ] = None,
    startDate: Annotated[  # noqa: N803
        str | None, Field(description="Start date (YYYY-MM-DD)")
    ] = None,
    endDate: Annotated[  # noqa: N803
        str | None, Field(description="End date (YYYY-MM-DD)")
    ] = None,
) -> str:
    """Creates a new sprint, or updates an existing one when sprintDbid is given."""
    try:
        plan = await get_plan_fetcher(ctx)
        result = plan.create_or_update_sprint(
            application,
            sprint_dbid=sprintDbid,
            name=name,
            start_date=startDate,
            end_date=endDate,
        )
        verb = "created" if result.created else "updated"
        return f"Sprint {verb} successfully: {_to_json(result.to_simplified_dict())}"
    except Exception as e:
        logger.exception(f"Error saving sprint in '{application}':")
        verb = "updating" if sprintDbid else "creating"
        return f"Error {verb} sprint: {e}"


@plan_mcp.tool(
    tags={"plan", "write"},
    annotations={"title": "Create or Update Release", "readOnlyHint": False},
)
@check_write_access
@convert_empty_defaults_to_none
async def create_or_update_release(
    ctx: Context,
    application: Annotated[str, Field(description="Name of the application")],
    fields: Annotated[
        list[PlanFieldInput],
        Field(description="Fields to set, each as {name, value, type?}. 'Name' is required on create."),
    ],
    releaseDbid: Annotated[  # noqa: N803
        str | None, Field(description="dbid of the release to update; omit to create one")
    ] = None,
) -> str:
    """
    Creates a new release, or updates an existing one when releaseDbid is given.

    Each field is staged on its own before a single commit.
    """
    try:
        plan = await get_plan_fetcher(ctx)
        result = plan.create_or_update_release(
            application, release_dbid=releaseDbid, fields=_field_triples(fields)
        )
        verb = "created" if result.created else "updated"
        return f"Release {verb} successfully: {_to_json(result.to_simplified_dict())}"
    except Exception as e:
        logger.exception(f"Error saving release in '{application}':")
        verb = "updating" if releaseDbid else "creating"
        return f"Error {verb} release: {e}"
