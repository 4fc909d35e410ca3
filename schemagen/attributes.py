"""Parse `name[:type[:modifier]]` attribute tokens.

Handles:
- Omitted type (defaults to string)
- `datetime` alias for naive_datetime
- Trailing `:unique` modifier on any attribute
- `array:<scalar>` element types (no nested arrays, no arrays of references)
- `references:<table>` foreign keys, their column name and storage type
- Index scheduling for unique columns and foreign keys
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from .errors import InvalidAttributeSpec
from .field_types import (
    COMPOSITE_TYPES,
    FieldType,
    migration_type,
    resolve_type_token,
    supported_type_names,
)
from .naming import camelize, module_segments, valid_plural_name

logger = logging.getLogger(__name__)

_UNIQUE_SUFFIX = ":unique"

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

# Foreign keys use the configured binary id type instead of the default
_BINARY_ID_STORAGE = "binary_id"


@dataclass(frozen=True)
class AttributeSpec:
    """One parsed attribute."""

    name: str
    type: FieldType
    unique: bool = False
    array_element_type: FieldType | None = None
    reference_target: str | None = None

    def __post_init__(self) -> None:
        if self.type is FieldType.ARRAY:
            ok = self.array_element_type is not None and self.reference_target is None
        elif self.type is FieldType.REFERENCES:
            ok = self.reference_target is not None and self.array_element_type is None
        else:
            ok = self.array_element_type is None and self.reference_target is None
        if not ok:
            raise ValueError(f"inconsistent attribute {self.name!r} of type {self.type.value}")

    @property
    def is_reference(self) -> bool:
        return self.type is FieldType.REFERENCES

    @property
    def column(self) -> str:
        """Database column backing this attribute."""
        if self.is_reference:
            return foreign_key_column(self.name)
        return self.name


@dataclass(frozen=True)
class Association:
    """A resolved `references` attribute."""

    name: str
    column: str
    module: str
    table: str
    storage_type: str


@dataclass(frozen=True)
class Index:
    table: str
    column: str
    unique: bool = False


def foreign_key_column(name: str) -> str:
    """`user` and `user_id` both map to the `user_id` column."""
    return name if name.endswith("_id") else f"{name}_id"


def _association_name(name: str) -> str:
    return name[:-3] if name.endswith("_id") else name


def _drop_unique(token: str) -> tuple[str, bool]:
    if token.endswith(_UNIQUE_SUFFIX):
        return token[: -len(_UNIQUE_SUFFIX)], True
    return token, False


def _unknown_type(token: str, type_token: str) -> InvalidAttributeSpec:
    return InvalidAttributeSpec(
        token,
        f"Unknown type `{type_token}` given to generator in `{token}`. "
        f"The supported types are: {', '.join(supported_type_names())}",
    )


def _parse_array(token: str, name: str, rest: str | None) -> FieldType:
    if not rest:
        raise InvalidAttributeSpec(
            token,
            f"Generators expect the type of the array to be given to {name}:array.\n"
            "For example:\n\n"
            "    schemagen gen.schema Post posts settings:array:string",
        )
    head = rest.split(":", 1)[0]
    element = resolve_type_token(head)
    if element in COMPOSITE_TYPES:
        raise InvalidAttributeSpec(
            token,
            f"Arrays of {element.value} are not supported in `{token}`, "
            "the array element must be a scalar type",
        )
    if element is None:
        raise _unknown_type(token, head)
    if head != rest:
        raise InvalidAttributeSpec(token, f"Unexpected trailing segments in `{token}`")
    return element


def _parse_reference(token: str, name: str, rest: str | None) -> str:
    if not rest:
        raise InvalidAttributeSpec(
            token,
            f"Generators expect the table to be given to {name}:references.\n"
            "For example:\n\n"
            "    schemagen gen.schema Comment comments body:text post_id:references:posts",
        )
    if not valid_plural_name(rest):
        raise InvalidAttributeSpec(
            token,
            f"Expected the referenced table in `{token}`, {rest!r}, "
            "to be all lowercase using snake_case convention",
        )
    return rest


def parse_attribute(token: str) -> AttributeSpec:
    """Parse a single `name[:type[:modifier]]` token."""
    body, unique = _drop_unique(token)
    parts = body.split(":", 2)
    name = parts[0]

    if not name:
        raise InvalidAttributeSpec(token, f"Missing attribute name in `{token}`")
    if not _NAME_RE.fullmatch(name):
        raise InvalidAttributeSpec(
            token,
            f"Expected the attribute name in `{token}`, {name!r}, "
            "to be all lowercase using snake_case convention",
        )

    if len(parts) == 1:
        return AttributeSpec(name=name, type=FieldType.STRING, unique=unique)

    type_token = parts[1]
    rest = parts[2] if len(parts) == 3 else None
    field_type = resolve_type_token(type_token)
    if field_type is None:
        raise _unknown_type(token, type_token)

    if field_type is FieldType.ARRAY:
        element = _parse_array(token, name, rest)
        return AttributeSpec(name=name, type=field_type, unique=unique, array_element_type=element)

    if field_type is FieldType.REFERENCES:
        target = _parse_reference(token, name, rest)
        return AttributeSpec(name=name, type=field_type, unique=unique, reference_target=target)

    if rest is not None:
        raise InvalidAttributeSpec(
            token,
            f"Unexpected segment `{rest}` after type `{type_token}` in `{token}`. "
            "Only `unique` may follow a scalar type",
        )
    return AttributeSpec(name=name, type=field_type, unique=unique)


def parse_attributes(tokens: Iterable[str]) -> tuple[AttributeSpec, ...]:
    """Parse tokens in order, rejecting duplicate names and columns."""
    attrs: list[AttributeSpec] = []
    seen: dict[str, str] = {}
    for token in tokens:
        attr = parse_attribute(token)
        for key in (attr.name, attr.column):
            if key in seen:
                raise InvalidAttributeSpec(
                    token,
                    f"Attribute `{key}` in `{token}` is already defined by `{seen[key]}`",
                )
        seen[attr.name] = token
        seen[attr.column] = token
        logger.debug("parsed %s -> %s", token, attr)
        attrs.append(attr)
    return tuple(attrs)


def resolve_reference(attr: AttributeSpec, schema_module: str, binary_id: bool) -> Association:
    """Resolve a references attribute against the schema it belongs to."""
    if not attr.is_reference:
        raise ValueError(f"{attr.name!r} is not a references attribute")
    name = _association_name(attr.name)
    # Associated schema lives next to this one: MyApp.Blog.Post -> MyApp.Blog.User
    siblings = module_segments(schema_module)[:-1]
    module = ".".join(siblings + [camelize(name)])
    storage = _BINARY_ID_STORAGE if binary_id else migration_type(FieldType.REFERENCES)
    return Association(
        name=name,
        column=attr.column,
        module=module,
        table=attr.reference_target,
        storage_type=storage,
    )


def build_indexes(
    table: str,
    attributes: Sequence[AttributeSpec],
    associations: Sequence[Association],
) -> tuple[Index, ...]:
    """Unique indexes first, then foreign keys; first entry per column wins."""
    candidates = [(a.column, True) for a in attributes if a.unique]
    candidates += [(assoc.column, False) for assoc in associations]

    indexes: list[Index] = []
    seen: set[str] = set()
    for column, unique in candidates:
        if column in seen:
            continue
        seen.add(column)
        indexes.append(Index(table=table, column=column, unique=unique))
    return tuple(indexes)
