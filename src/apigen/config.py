"""Generator configuration.

Settings come from an optional YAML file with a top-level `apigen` key::

    apigen:
      binding: form
      module: myservice.handlers

Command line options override values read from the file.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from apigen.errors import ConfigError

# Build-time constants of the generated auth check, not configurable per run.
AUTH_HEADER = "X-Auth"
AUTH_TOKEN = "100500"

CONFIG_SECTION = "apigen"


class GeneratorConfig(BaseModel):
    """Options of one generator run."""

    model_config = ConfigDict(extra="forbid")

    binding: Literal["query", "form"] = "query"
    module: str | None = None  # import name of the source module


def load_config(path: Path | None = None, **overrides) -> GeneratorConfig:
    """Load a config file (if any) and apply non-None overrides on top of it."""
    data: dict = {}
    if path is not None:
        data = _read_section(path)
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return GeneratorConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e.errors()[0]['msg']}", str(path or "<options>")) from e


def _read_section(path: Path) -> dict:
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"YAMLError: {e}", str(path)) from e
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ConfigError("configuration must be a mapping", str(path))
    section = doc.get(CONFIG_SECTION, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"{CONFIG_SECTION!r} section must be a mapping", str(path))
    return dict(section)
