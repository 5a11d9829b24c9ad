"""Infrastructure: command configuration file loading.

Reads a TOML, YAML or JSON document, validates it against the pydantic
schema below and converts it into the immutable
:class:`~cmdtree.core.models.CommandNode` tree consumed by the core.

Every decode or validation failure is re-raised as
:class:`~cmdtree.exceptions.ConfigFileError` with the underlying cause
included in the message.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from cmdtree.core.models import ArgumentSpec, CommandNode
from cmdtree.exceptions import ConfigFileError


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class ArgumentConfig(BaseModel):
    """One entry of a command's ``args`` list."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    required: bool | None = None
    long: str | None = None
    short: str | None = None
    value_name: str | None = None
    aliases: list[str] | None = None
    default_value: str | None = None
    env: str | None = None
    help: str | None = None
    long_help: str | None = None
    requires: str | None = None
    group: str | None = None
    last: bool | None = None

    def to_spec(self) -> ArgumentSpec:
        return ArgumentSpec(
            id=self.id,
            required=self.required,
            long=self.long,
            short=self.short,
            value_name=self.value_name,
            aliases=tuple(self.aliases or ()),
            default_value=self.default_value,
            env=self.env,
            help=self.help,
            long_help=self.long_help,
            requires=self.requires,
            group=self.group,
            last=self.last,
        )


class CommandConfig(BaseModel):
    """A command document; ``subcommands`` nest documents of the same shape."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str | None = None
    about: str | None = None
    version: str | None = None
    args: list[ArgumentConfig] | None = None
    subcommands: dict[str, CommandConfig] | None = None
    run: str | None = None

    def to_node(self) -> CommandNode:
        return CommandNode(
            name=self.name,
            about=self.about,
            version=self.version,
            arguments=tuple(arg.to_spec() for arg in self.args or ()),
            subcommands={
                key: child.to_node() for key, child in (self.subcommands or {}).items()
            },
            run=self.run,
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load(path: str | Path) -> CommandNode:
    """Load the configuration file at *path* as a :class:`CommandNode`.

    The format is chosen by file extension: ``.toml``, ``.yaml`` /
    ``.yml`` or ``.json``.

    Raises
    ------
    ConfigFileError
        When the file cannot be read, decoded, or does not match the
        schema.
    """
    config_path = Path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigFileError(
            f"Failed to load config file {config_path}: {exc.strerror or exc}",
            hint="Check the --config path.",
        ) from exc

    payload = parse_document(text, config_path.suffix)
    return validate_document(payload, source=str(config_path))


def parse_document(text: str, suffix: str) -> Any:
    """Decode *text* according to the file extension *suffix*."""
    try:
        match suffix.lower():
            case ".toml":
                return tomllib.loads(text)
            case ".yaml" | ".yml":
                return yaml.safe_load(text)
            case ".json":
                return json.loads(text)
            case other:
                raise ConfigFileError(
                    f"Unsupported config format '{other or '(no extension)'}'.",
                    hint="Use a .toml, .yaml, .yml or .json file.",
                )
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigFileError(f"Failed to parse config file: {exc}") from exc


def validate_document(payload: Any, *, source: str = "config") -> CommandNode:
    """Validate a decoded document and convert it to a :class:`CommandNode`."""
    if payload is None:
        raise ConfigFileError(f"Config file {source} is empty.")
    if not isinstance(payload, dict):
        raise ConfigFileError(
            f"Config file {source} must contain a table at the top level, "
            f"got {type(payload).__name__}.",
        )
    try:
        config = CommandConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigFileError(
            f"Config file {source} does not match the expected schema:\n{exc}",
        ) from exc
    return config.to_node()
