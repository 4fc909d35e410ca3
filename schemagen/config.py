"""Load generator defaults for a Phoenix project.

Sources, later ones winning:
  mix.exs             app: :my_app
  config/config.exs   config :my_app, :generators, migration: true, binary_id: false
  environment         SCHEMAGEN_OTP_APP, SCHEMAGEN_MIGRATION, SCHEMAGEN_BINARY_ID
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from .errors import ConfigError
from .naming import camelize

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_BINARY_ID = "11111111-1111-1111-1111-111111111111"

_APP_RE = re.compile(r"\bapp:\s*:(\w+)")
_GENERATORS_RE = re.compile(r"config\s+:\w+,\s*:generators,(?P<body>.*?)(?=\n\s*\n|\n\s*config\b|\n\s*import\b|\Z)", re.S)
# Newer projects: config :my_app, ecto_repos: [...], generators: [binary_id: true]
_GENERATORS_KW_RE = re.compile(r"\bgenerators:\s*\[(?P<body>[^\]]*)\]")
_BOOL_OPTION_RE = r"\b{}:\s*(true|false)\b"
_SAMPLE_ID_RE = re.compile(r'\bsample_binary_id:\s*"([^"]*)"')
_REPO_RE = re.compile(r"\brepo:\s*([A-Z][\w.]*)")

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class GeneratorConfig:
    """Process-wide generator defaults, passed explicitly to the builder."""

    otp_app: str
    base: str = ""
    repo: str = ""
    migration: bool = True
    binary_id: bool = False
    sample_binary_id: str = DEFAULT_SAMPLE_BINARY_ID

    def __post_init__(self) -> None:
        if not self.base:
            object.__setattr__(self, "base", camelize(self.otp_app))
        if not self.repo:
            object.__setattr__(self, "repo", f"{self.base}.Repo")


def _env_bool(env: Mapping[str, str], key: str) -> bool | None:
    raw = env.get(key)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


def _read_project_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read {path}: {e}") from e


def read_app_name(project_root: Path) -> str | None:
    """Extract the OTP app name from mix.exs."""
    mix_file = project_root / "mix.exs"
    if not mix_file.is_file():
        return None
    match = _APP_RE.search(_read_project_file(mix_file))
    return match.group(1) if match else None


def read_generator_options(project_root: Path) -> dict[str, Any]:
    """Extract the `:generators` keyword list from config/config.exs."""
    config_file = project_root / "config" / "config.exs"
    if not config_file.is_file():
        return {}
    text = _read_project_file(config_file)
    match = _GENERATORS_RE.search(text) or _GENERATORS_KW_RE.search(text)
    if not match:
        return {}

    body = match.group("body")
    options: dict[str, Any] = {}
    for key in ("migration", "binary_id"):
        found = re.search(_BOOL_OPTION_RE.format(key), body)
        if found:
            options[key] = found.group(1) == "true"
    sample = _SAMPLE_ID_RE.search(body)
    if sample:
        options["sample_binary_id"] = sample.group(1)
    repo = _REPO_RE.search(body)
    if repo:
        options["repo"] = repo.group(1)
    return options


def load_config(project_root: Path | None = None, env: Mapping[str, str] | None = None) -> GeneratorConfig:
    """Build the generator config for the project at project_root."""
    root = project_root or Path.cwd()
    env = os.environ if env is None else env

    otp_app = env.get("SCHEMAGEN_OTP_APP") or read_app_name(root)
    if not otp_app:
        raise ConfigError(
            f"Could not determine the application name: no `app:` entry in {root / 'mix.exs'}. "
            "Run schemagen inside a Mix project or set SCHEMAGEN_OTP_APP"
        )

    options = read_generator_options(root)
    for key, env_key in (("migration", "SCHEMAGEN_MIGRATION"), ("binary_id", "SCHEMAGEN_BINARY_ID")):
        value = _env_bool(env, env_key)
        if value is not None:
            options[key] = value

    logger.debug("generator config for %s: %s", otp_app, options)
    return GeneratorConfig(otp_app=otp_app, **options)
