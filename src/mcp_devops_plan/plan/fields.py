"""Builders for Plan field descriptors.

Each field type has its own encoder turning the caller's raw string into the
``value`` / ``valueAsList`` pair the server expects:

==================  ==============================  ==========================
Type                value                           valueAsList
==================  ==============================  ==========================
SHORT_STRING        raw string                      ``[value]``
MULTILINE_STRING    raw string                      ``[value]``
DATE_TIME           ``"<date> 00:00:00"``           ``[value]``
REFERENCE_LIST      comma-split items joined by LF  comma-split items, trimmed
anything else       raw string                      ``[value]``
==================  ==============================  ==========================
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..models.plan import FieldDescriptor, FieldType, Requiredness
from .constants import (
    DATE_TIME_SUFFIX,
    DEFAULT_MAX_LENGTH,
    FIELD_MAX_LENGTHS,
    REQUIRED_FIELDS,
)

FieldEncoder = Callable[[str], tuple[str, list[str]]]


def _encode_plain(raw: str) -> tuple[str, list[str]]:
    return raw, [raw]


def _encode_date_time(raw: str) -> tuple[str, list[str]]:
    value = f"{raw}{DATE_TIME_SUFFIX}"
    return value, [value]


def _encode_reference_list(raw: str) -> tuple[str, list[str]]:
    items = [item.strip() for item in raw.split(",")]
    return "\n".join(items), items


FIELD_ENCODERS: dict[FieldType, FieldEncoder] = {
    FieldType.SHORT_STRING: _encode_plain,
    FieldType.MULTILINE_STRING: _encode_plain,
    FieldType.DATE_TIME: _encode_date_time,
    FieldType.REFERENCE_LIST: _encode_reference_list,
    FieldType.REFERENCE: _encode_plain,
    FieldType.DBID: _encode_plain,
    FieldType.RECORDTYPE: _encode_plain,
    FieldType.INT: _encode_plain,
}


def coerce_field_type(raw: FieldType | str | None) -> FieldType | None:
    """Turn a user supplied type name into a FieldType.

    Raises:
        ValueError: If the name is not a known field type
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, FieldType):
        return raw
    try:
        return FieldType(raw.strip().upper())
    except ValueError:
        allowed = ", ".join(t.value for t in FieldType)
        raise ValueError(
            f"Unknown field type '{raw}'. Expected one of: {allowed}"
        ) from None


def build_field(
    name: str,
    value: Any,
    field_type: FieldType | str | None = None,
    required: bool = False,
) -> FieldDescriptor:
    """Build a field descriptor carrying every metadata key.

    Args:
        name: Field name in the record schema (e.g. 'Title')
        value: Raw value as supplied by the caller
        field_type: Schema type; unspecified types are encoded as plain strings
        required: Whether this is the record's designated required field

    Returns:
        FieldDescriptor usable for both the Edit and the Commit step
    """
    resolved_type = coerce_field_type(field_type)
    raw = "" if value is None else str(value)
    encoder = FIELD_ENCODERS.get(resolved_type, _encode_plain)
    encoded_value, value_as_list = encoder(raw)
    requiredness = Requiredness.MANDATORY if required else Requiredness.OPTIONAL
    max_length = FIELD_MAX_LENGTHS.get(resolved_type, DEFAULT_MAX_LENGTH)
    return FieldDescriptor(
        name=name,
        value=encoded_value,
        value_as_list=value_as_list,
        type=resolved_type,
        requiredness=requiredness,
        requiredness_for_user=requiredness,
        max_length=max_length,
    )


def decode_field_value(descriptor: FieldDescriptor) -> str:
    """Recover the caller's raw input from an encoded descriptor."""
    if descriptor.type == FieldType.DATE_TIME and descriptor.value.endswith(
        DATE_TIME_SUFFIX
    ):
        return descriptor.value[: -len(DATE_TIME_SUFFIX)]
    if descriptor.type == FieldType.REFERENCE_LIST:
        return ", ".join(descriptor.value_as_list)
    return descriptor.value


def build_record_fields(
    entity_type: str,
    values: Iterable[tuple[str, Any, FieldType | str | None]],
) -> list[FieldDescriptor]:
    """Build descriptors for a record, marking its designated required field."""
    required_field = REQUIRED_FIELDS.get(entity_type)
    return [
        build_field(name, value, field_type, required=(name == required_field))
        for name, value, field_type in values
    ]


def build_typed_fields(
    entity_type: str,
    values: Mapping[str, Any],
    field_types: Mapping[str, FieldType],
) -> list[FieldDescriptor]:
    """Build descriptors for the non-None entries of ``values`` using known schema types."""
    return build_record_fields(
        entity_type,
        [
            (name, value, field_types.get(name))
            for name, value in values.items()
            if value is not None
        ],
    )
