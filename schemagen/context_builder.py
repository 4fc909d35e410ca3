"""Build Jinja2 template context from a SchemaDescriptor.

Renders the Elixir fragments (atoms, Ecto types, index statements)
so the templates stay free of type logic.
"""

from __future__ import annotations

import re
from typing import Any

from .attributes import AttributeSpec, Index
from .field_types import FieldType, migration_type, schema_type
from .naming import camelize
from .schema import SchemaDescriptor

_PLAIN_ATOM_RE = re.compile(r"^[a-z_][a-zA-Z0-9_]*[?!]?$")

# Foreign key field type in the schema, by migration storage type
_FOREIGN_KEY_SCHEMA_TYPES: dict[str, str] = {
    "integer": ":id",
    "binary_id": ":binary_id",
}


def atom(name: str) -> str:
    """Render an Elixir atom literal."""
    if _PLAIN_ATOM_RE.fullmatch(name):
        return f":{name}"
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f':"{escaped}"'


def _type_literal(type_name: str) -> str:
    # Module types such as Ecto.UUID are not atoms
    if type_name[:1].isupper():
        return type_name
    return atom(type_name)


def ecto_schema_type(attr: AttributeSpec) -> str:
    """Field type as written in `field :name, <type>`."""
    if attr.type is FieldType.ARRAY:
        inner = _type_literal(schema_type(attr.array_element_type))
        return f"{{:array, {inner}}}"
    return _type_literal(schema_type(attr.type))


def ecto_migration_type(attr: AttributeSpec) -> str:
    """Column type as written in `add :name, <type>`."""
    if attr.type is FieldType.ARRAY:
        inner = _type_literal(migration_type(attr.array_element_type))
        return f"{{:array, {inner}}}"
    return _type_literal(migration_type(attr.type))


def render_index(index: Index) -> str:
    """Migration statement creating the index."""
    kind = "unique_index" if index.unique else "index"
    return f"create {kind}({atom(index.table)}, [{atom(index.column)}])"


def migration_module(schema: SchemaDescriptor) -> str:
    return f"{schema.repo}.Migrations.Create{camelize(schema.table_name)}"


def build_context(schema: SchemaDescriptor) -> dict[str, Any]:
    """Build the template context for schema.ex.j2 and migration.exs.j2."""
    fields = [
        {
            "name": atom(attr.name),
            "type": ecto_schema_type(attr),
            "options": schema.schema_defaults[attr.name],
        }
        for attr in schema.fields
    ]
    assocs = [
        {
            "column": atom(assoc.column),
            "type": _FOREIGN_KEY_SCHEMA_TYPES[assoc.storage_type],
        }
        for assoc in schema.associations
    ]
    columns = [
        {
            "name": atom(attr.name),
            "type": ecto_migration_type(attr),
            "options": schema.migration_defaults[attr.name],
        }
        for attr in schema.fields
    ]
    references = [
        {
            "column": atom(assoc.column),
            "table": atom(assoc.table),
            "binary_id": assoc.storage_type == "binary_id",
        }
        for assoc in schema.associations
    ]

    return {
        "module": schema.module,
        "repo": schema.repo,
        "table": schema.table_name,
        "table_atom": atom(schema.table_name),
        "embedded": schema.embedded,
        "binary_id": schema.use_binary_id,
        "singular": schema.singular_name,
        "fields": fields,
        "assocs": assocs,
        "cast_fields": ", ".join(atom(a.name) for a in schema.fields),
        "uniques": [atom(u) for u in schema.uniques],
        "migration_module": migration_module(schema),
        "columns": columns,
        "references": references,
        "indexes": [render_index(i) for i in schema.indexes],
    }
