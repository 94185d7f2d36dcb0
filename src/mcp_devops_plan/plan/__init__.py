"""Plan API module for mcp_devops_plan.

This module provides the IBM DevOps Plan REST API client implementations.
"""

from .client import PlanClient
from .config import PlanConfig
from .projects import ProjectsMixin
from .releases import ReleasesMixin
from .session import SessionStore
from .sprints import SprintsMixin
from .work_items import WorkItemsMixin


class PlanFetcher(ProjectsMixin, WorkItemsMixin, SprintsMixin, ReleasesMixin):
    """
    The main Plan client class providing access to all Plan operations.

    This class inherits from multiple mixins that provide specific functionality:
    - ProjectsMixin: Applications, projects, components and work item types
    - WorkItemsMixin: Work item CRUD and state changes
    - SprintsMixin: Sprint listing and create/update
    - ReleasesMixin: Release listing and create/update
    """

    pass


__all__ = ["PlanFetcher", "PlanConfig", "PlanClient", "SessionStore"]
