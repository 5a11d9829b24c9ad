"""Tests for configuration loading (infra/config_file.py).

Coverage:
* TOML, YAML and JSON documents.
* Conversion to the immutable CommandNode tree.
* Read, decode and schema errors mapped to ConfigFileError.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from cmdtree.core.models import ArgumentSpec, CommandNode
from cmdtree.exceptions import ConfigError, ConfigFileError
from cmdtree.infra.config_file import load, parse_document, validate_document

TOML_CONFIG = """\
name = "ops"
about = "Operations helpers"
version = "1.0.0"
args = [{ id = "verbose", long = "verbose", short = "v" }]

[subcommands.deploy]
about = "Deploy a service"
run = "echo deploy"
args = [
    { id = "service", required = true },
    { id = "target", long = "target", aliases = ["to"], default_value = "staging", env = "OPS_TARGET" },
]

[subcommands.db.subcommands.backup]
name = "dump"
run = "pg_dump"
"""


# ---------------------------------------------------------------------------
# Successful loads
# ---------------------------------------------------------------------------

class TestLoadToml:
    def test_root_fields(self, write_config) -> None:
        node = load(write_config(TOML_CONFIG))

        assert node.name == "ops"
        assert node.about == "Operations helpers"
        assert node.version == "1.0.0"
        assert node.run is None
        assert node.arguments == (ArgumentSpec(id="verbose", long="verbose", short="v"),)

    def test_subcommands_in_document_order(self, write_config) -> None:
        node = load(write_config(TOML_CONFIG))
        assert list(node.subcommands) == ["deploy", "db"]

    def test_argument_fields(self, write_config) -> None:
        deploy = load(write_config(TOML_CONFIG)).subcommands["deploy"]

        service, target = deploy.arguments
        assert service == ArgumentSpec(id="service", required=True)
        assert target.aliases == ("to",)
        assert target.default_value == "staging"
        assert target.env == "OPS_TARGET"
        assert deploy.run == "echo deploy"

    def test_nested_subcommand_keeps_explicit_name(self, write_config) -> None:
        backup = load(write_config(TOML_CONFIG)).subcommands["db"].subcommands["backup"]
        assert backup.name == "dump"
        assert backup.run == "pg_dump"

    def test_all_fields_optional_except_id(self, write_config) -> None:
        assert load(write_config('run = "true"\n')) == CommandNode(run="true")

    def test_accepts_path_string(self, write_config) -> None:
        assert load(str(write_config('name = "x"\n'))).name == "x"


class TestLoadOtherFormats:
    def test_yaml(self, write_config) -> None:
        path = write_config(
            """\
            name: ops
            subcommands:
              example:
                run: echo test
                args:
                  - id: rest
                    last: true
            """,
            suffix=".yaml",
        )
        node = load(path)
        assert node.subcommands["example"].run == "echo test"
        assert node.subcommands["example"].arguments == (ArgumentSpec(id="rest", last=True),)

    def test_yml_extension(self, write_config) -> None:
        assert load(write_config("name: ops\n", suffix=".yml")).name == "ops"

    def test_json(self, write_config) -> None:
        path = write_config('{"name": "ops", "args": [{"id": "a"}]}', suffix=".json")
        assert load(path).arguments == (ArgumentSpec(id="a"),)

    def test_extension_is_case_insensitive(self, write_config) -> None:
        assert load(write_config('name = "x"\n', suffix=".TOML")).name == "x"


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestLoadErrors:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigFileError, match="Failed to load config file") as exc_info:
            load(tmp_path / "missing.toml")
        assert isinstance(exc_info.value.__cause__, OSError)
        assert exc_info.value.hint is not None

    def test_unsupported_extension(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="Unsupported config format '.ini'"):
            load(write_config("name = x", suffix=".ini"))

    def test_invalid_toml(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="Failed to parse config file"):
            load(write_config("name = \n"))

    def test_invalid_yaml(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="Failed to parse"):
            load(write_config("name: [unclosed\n", suffix=".yaml"))

    def test_invalid_json(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="Failed to parse"):
            load(write_config("{", suffix=".json"))

    def test_empty_yaml(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="is empty"):
            load(write_config("", suffix=".yaml"))

    def test_top_level_must_be_table(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="must contain a table"):
            load(write_config("- a\n- b\n", suffix=".yaml"))

    def test_missing_argument_id(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="expected schema") as exc_info:
            load(write_config('args = [{ long = "x" }]\n'))
        assert "id" in str(exc_info.value)

    def test_unknown_field_rejected(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="commands"):
            load(write_config('[commands.x]\nrun = "true"\n'))

    def test_wrong_type(self, write_config) -> None:
        with pytest.raises(ConfigFileError):
            load(write_config("args = [{ id = \"a\", default_value = 3 }]\n"))

    def test_nested_schema_error(self, write_config) -> None:
        with pytest.raises(ConfigFileError, match="subcommands"):
            load(write_config('[subcommands.x]\nrun = 1\n'))

    def test_is_a_config_error(self) -> None:
        assert issubclass(ConfigFileError, ConfigError)


# ---------------------------------------------------------------------------
# Lower-level helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_parse_document_toml(self) -> None:
        assert parse_document('name = "x"', ".toml") == {"name": "x"}

    def test_validate_document_source_in_message(self) -> None:
        with pytest.raises(ConfigFileError, match="my.toml"):
            validate_document({"args": "nope"}, source="my.toml")
