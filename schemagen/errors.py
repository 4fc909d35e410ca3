"""Errors raised while building a schema or writing generated files.

Every error is terminal for the current invocation. The CLI catches
GeneratorError, prints the message and exits non-zero.
"""

from __future__ import annotations

USAGE = """\
schemagen gen.schema and gen.embedded expect both a module
name and the plural of the generated resource followed by
any number of attributes:

    schemagen gen.schema Blog.Post blog_posts title:string
"""


class GeneratorError(Exception):
    """Base class for all generator failures."""


class InvalidArguments(GeneratorError):
    """Positional arguments are missing or malformed."""

    def __init__(self, message: str) -> None:
        self.reason = message
        super().__init__(f"{message}\n\n{USAGE}")


class InvalidAttributeSpec(GeneratorError):
    """An attribute token could not be parsed."""

    def __init__(self, token: str, message: str) -> None:
        self.token = token
        super().__init__(message)


class UnsupportedType(GeneratorError):
    """A known type has no mapping at some consumption site."""

    def __init__(self, type_name: str, site: str) -> None:
        self.type_name = type_name
        self.site = site
        super().__init__(f"Type `{type_name}` has no {site} mapping")


class ModuleNameTaken(GeneratorError):
    """The target module is already defined in the project."""

    def __init__(self, module: str) -> None:
        self.module = module
        super().__init__(f"Module name {module} is already taken, please choose another name")


class ConfigError(GeneratorError):
    """Project configuration could not be determined."""
