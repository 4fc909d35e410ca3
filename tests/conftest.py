"""Shared fixtures for generator tests.

`config` mirrors a Phoenix app called :phoenix so module names come out
as Phoenix.Blog.Post. `project` is a throwaway Mix project directory.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from schemagen.config import GeneratorConfig

MIX_EXS = """\
defmodule Phoenix.MixProject do
  use Mix.Project

  def project do
    [
      app: :phoenix,
      version: "0.1.0",
      elixir: "~> 1.14"
    ]
  end
end
"""


@pytest.fixture
def config() -> GeneratorConfig:
    return GeneratorConfig(otp_app="phoenix")


@pytest.fixture
def binary_config() -> GeneratorConfig:
    return GeneratorConfig(otp_app="phoenix", binary_id=True)


@pytest.fixture
def project(tmp_path: Path, monkeypatch) -> Path:
    """Minimal Mix project; generator env overrides are cleared."""
    (tmp_path / "mix.exs").write_text(MIX_EXS)
    for key in ("SCHEMAGEN_OTP_APP", "SCHEMAGEN_MIGRATION", "SCHEMAGEN_BINARY_ID"):
        monkeypatch.delenv(key, raising=False)
    return tmp_path
