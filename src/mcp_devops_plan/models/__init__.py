"""Data models for MCP DevOps Plan."""

from .plan import (
    EntityType,
    FieldDescriptor,
    FieldFilter,
    FieldType,
    FilterNode,
    MutationResult,
    QueryDefinition,
    QueryField,
    QueryResult,
    Requiredness,
    StateTransition,
)

__all__ = [
    "EntityType",
    "FieldDescriptor",
    "FieldFilter",
    "FieldType",
    "FilterNode",
    "MutationResult",
    "QueryDefinition",
    "QueryField",
    "QueryResult",
    "Requiredness",
    "StateTransition",
]
