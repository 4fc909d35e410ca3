"""Render templates and write generated files into a Phoenix project.

Takes a SchemaDescriptor, builds the template context and produces
lib/<app>/<path>.ex plus, when enabled, a timestamped migration under
priv/repo/migrations/.
"""

from __future__ import annotations

import datetime
import logging
import re
from pathlib import Path
from typing import Callable

import jinja2

from .context_builder import build_context
from .errors import ModuleNameTaken
from .naming import underscore
from .schema import SchemaDescriptor

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"
MIGRATIONS_DIR = "priv/repo/migrations"


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


def timestamp(now: datetime.datetime | None = None) -> str:
    """UTC timestamp used as the migration file prefix."""
    now = now or datetime.datetime.now(datetime.timezone.utc)
    return now.strftime("%Y%m%d%H%M%S")


def migration_file(schema: SchemaDescriptor, ts: str) -> str:
    """Blog.Post -> priv/repo/migrations/<ts>_create_blog_post.exs"""
    name = underscore(schema.module_path).replace("/", "_")
    return f"{MIGRATIONS_DIR}/{ts}_create_{name}.exs"


def files_to_be_generated(schema: SchemaDescriptor, ts: str) -> list[tuple[str, str]]:
    """(template, relative target path) pairs for this schema."""
    files = [("schema.ex.j2", schema.file)]
    if schema.generate_migration and not schema.embedded:
        files.append(("migration.exs.j2", migration_file(schema, ts)))
    return files


def check_module_name_availability(schema: SchemaDescriptor, root: Path) -> None:
    """Raise ModuleNameTaken if another file under lib/ defines the module."""
    lib_dir = root / "lib"
    if not lib_dir.is_dir():
        return
    pattern = re.compile(rf"^\s*defmodule\s+{re.escape(schema.module)}\s+do\b", re.M)
    target = (root / schema.file).resolve()
    for path in sorted(lib_dir.rglob("*.ex")):
        if path.resolve() == target:
            continue
        if pattern.search(path.read_text(encoding="utf-8", errors="replace")):
            logger.debug("%s already defined in %s", schema.module, path)
            raise ModuleNameTaken(schema.module)


def _ask(question: str) -> bool:
    answer = input(f"{question} [Yn] ").strip().lower()
    return answer in ("", "y", "yes")


def prompt_for_conflicts(
    files: list[tuple[str, str]],
    root: Path,
    confirm: Callable[[str], bool] = _ask,
) -> bool:
    """Ask before overwriting existing files; False means abort."""
    existing = [target for _, target in files if (root / target).exists()]
    if not existing:
        return True

    print("The following files conflict with new files to be generated:\n")
    for target in existing:
        print(f"  * {target}")
    print()
    return confirm("Proceed with interactive overwrite?")


def generate(schema: SchemaDescriptor, root: Path, ts: str | None = None) -> list[Path]:
    """Render every template for the schema and write it under root."""
    env = _environment()
    context = build_context(schema)
    ts = ts or timestamp()

    written: list[Path] = []
    for template_name, target in files_to_be_generated(schema, ts):
        output = env.get_template(template_name).render(**context)
        output_path = root / target
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output, encoding="utf-8")
        print(f"* creating {target}")
        written.append(output_path)
    return written


def print_shell_instructions(schema: SchemaDescriptor) -> None:
    if schema.generate_migration and not schema.embedded:
        print(
            "\nRemember to update your repository by running migrations:\n\n"
            "    $ mix ecto.migrate\n"
        )
