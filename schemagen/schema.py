"""Validate generator arguments and assemble the schema descriptor.

Pipeline: validate args -> parse attributes -> resolve references ->
derive names and defaults -> SchemaDescriptor. Any failure raises a
GeneratorError and no descriptor is returned. Nothing here touches the
filesystem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from .attributes import (
    AttributeSpec,
    Association,
    Index,
    build_indexes,
    parse_attributes,
    resolve_reference,
)
from .config import GeneratorConfig
from .errors import InvalidArguments
from .field_types import (
    NO_DEFAULT,
    FieldType,
    default_value,
    migration_type,
    schema_type,
)
from .naming import (
    camelize,
    humanize,
    module_segments,
    underscore,
    valid_module_name,
    valid_plural_name,
)

logger = logging.getLogger(__name__)

# Column option fragments appended in the templates
_SCHEMA_DEFAULTS: dict[FieldType, str] = {
    FieldType.BOOLEAN: ", default: false",
}
_MIGRATION_DEFAULTS: dict[FieldType, str] = {
    FieldType.BOOLEAN: ", default: false, null: false",
}


@dataclass(frozen=True)
class SchemaDescriptor:
    """Everything the templates need to know about one generated schema."""

    module_path: str
    module: str
    alias: str
    repo: str
    file: str
    context_app: str
    plural_name: str
    singular_name: str
    human_singular: str
    human_plural: str
    table_name: str
    attributes: tuple[AttributeSpec, ...]
    associations: tuple[Association, ...]
    uniques: tuple[str, ...]
    indexes: tuple[Index, ...]
    defaults: Mapping[str, Any]
    schema_defaults: Mapping[str, str]
    migration_defaults: Mapping[str, str]
    use_binary_id: bool
    generate_migration: bool
    embedded: bool
    sample_id: Any
    web_namespace: str | None
    web_path: str | None
    route_helper: str

    @property
    def fields(self) -> tuple[AttributeSpec, ...]:
        """Attributes that are plain schema fields (no foreign keys)."""
        return tuple(a for a in self.attributes if not a.is_reference)

    @property
    def types(self) -> dict[str, str | tuple[str, str]]:
        """Ecto schema type per field, in attribute order.

        Arrays map to ("array", <element type>).
        """
        types: dict[str, str | tuple[str, str]] = {}
        for attr in self.fields:
            if attr.type is FieldType.ARRAY:
                types[attr.name] = (schema_type(attr.type), schema_type(attr.array_element_type))
            else:
                types[attr.name] = schema_type(attr.type)
        return types


def validate_args(tokens: Sequence[str]) -> tuple[str, str, list[str]]:
    """Check the module and plural positionals; return (module, plural, attrs)."""
    if len(tokens) < 2:
        raise InvalidArguments("Invalid arguments")

    module_path, plural, *attrs = tokens
    if not valid_module_name(module_path):
        raise InvalidArguments(
            f"Expected the schema argument, {module_path!r}, to be a valid module name"
        )
    if not valid_plural_name(plural):
        raise InvalidArguments(
            f"Expected the plural argument, {plural!r}, "
            "to be all lowercase using snake_case convention"
        )
    return module_path, plural, attrs


def _check_mappings(attributes: Sequence[AttributeSpec]) -> None:
    # Every consumption site must know every type before anything renders
    for attr in attributes:
        for field_type in (attr.type, attr.array_element_type):
            if field_type is None:
                continue
            default_value(field_type)
            schema_type(field_type)
            migration_type(field_type)


def _defaults(attributes: Sequence[AttributeSpec]) -> dict[str, Any]:
    defaults: dict[str, Any] = {}
    for attr in attributes:
        value = default_value(attr.type)
        if value is NO_DEFAULT:
            continue
        defaults[attr.name] = value
    return defaults


def _route_helper(web_path: str | None, singular: str) -> str:
    if web_path:
        return f"{web_path.replace('/', '_')}_{singular}"
    return singular


def build_schema(
    module_path: str,
    plural: str,
    attribute_tokens: Sequence[str],
    config: GeneratorConfig,
    *,
    migration: bool | None = None,
    binary_id: bool | None = None,
    table: str | None = None,
    web: str | None = None,
    embedded: bool = False,
) -> SchemaDescriptor:
    """Build a SchemaDescriptor; None flags fall back to config defaults."""
    validate_args([module_path, plural])
    if table is not None and (not table or not valid_plural_name(table)):
        raise InvalidArguments(
            f"Expected the table option, {table!r}, "
            "to be all lowercase using snake_case convention"
        )

    use_binary_id = config.binary_id if binary_id is None else binary_id
    generate_migration = config.migration if migration is None else migration

    attributes = parse_attributes(attribute_tokens)
    _check_mappings(attributes)

    module = f"{config.base}.{module_path}"
    table_name = table if table is not None else plural
    associations = tuple(
        resolve_reference(a, module, use_binary_id) for a in attributes if a.is_reference
    )
    uniques = tuple(a.column for a in attributes if a.unique)

    # Singular comes from the module name, never from inflecting the plural
    singular = underscore(module_segments(module_path)[-1])
    web_path = underscore(web) if web else None

    fields = [a for a in attributes if not a.is_reference]
    schema = SchemaDescriptor(
        module_path=module_path,
        module=module,
        alias=module_segments(module)[-1],
        repo=config.repo,
        file=f"lib/{config.otp_app}/{underscore(module_path)}.ex",
        context_app=config.otp_app,
        plural_name=plural,
        singular_name=singular,
        human_singular=humanize(singular),
        human_plural=humanize(plural),
        table_name=table_name,
        attributes=attributes,
        associations=associations,
        uniques=uniques,
        indexes=build_indexes(table_name, attributes, associations),
        defaults=MappingProxyType(_defaults(attributes)),
        schema_defaults=MappingProxyType({a.name: _SCHEMA_DEFAULTS.get(a.type, "") for a in fields}),
        migration_defaults=MappingProxyType({a.name: _MIGRATION_DEFAULTS.get(a.type, "") for a in fields}),
        use_binary_id=use_binary_id,
        generate_migration=generate_migration,
        embedded=embedded,
        sample_id=config.sample_binary_id if use_binary_id else -1,
        web_namespace=camelize(web) if web else None,
        web_path=web_path,
        route_helper=_route_helper(web_path, singular),
    )
    logger.debug(
        "built schema %s (table=%s, %d attributes, migration=%s, binary_id=%s)",
        schema.module, schema.table_name, len(attributes), generate_migration, use_binary_id,
    )
    return schema


def build(tokens: Sequence[str], config: GeneratorConfig, **options: Any) -> SchemaDescriptor:
    """Validate raw positional tokens and build the descriptor."""
    module_path, plural, attrs = validate_args(tokens)
    return build_schema(module_path, plural, attrs, config, **options)
