from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from mcp_devops_plan.plan.session import SessionStore

if TYPE_CHECKING:
    from mcp_devops_plan.plan.config import PlanConfig


@dataclass(frozen=True)
class MainAppContext:
    """Context holding the base config, the shared session slot and server settings."""

    plan_config: PlanConfig | None = None
    session_store: SessionStore = field(default_factory=SessionStore)
    read_only: bool = False
