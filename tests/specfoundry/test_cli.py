"""Tests for specfoundry.cli."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from specfoundry.cli import app, import_target
from specfoundry_common.errors import ConfigurationError, EndpointDiscoveryError

TARGET = "tests.specfoundry.sample_app:app"

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("SPECFOUNDRY_OUTPUT__FORMAT", "SPECFOUNDRY_GENERATION__API_VERSION"):
        monkeypatch.delenv(name, raising=False)


def _problem(output: str) -> dict[str, object]:
    for line in output.splitlines():
        if line.startswith("{") and '"type"' in line and '"instance"' in line:
            return json.loads(line)
    msg = f"No Problem Details payload in output: {output!r}"
    raise AssertionError(msg)


class TestImportTarget:
    """Tests for import_target."""

    def test_imports_attribute(self) -> None:
        """``module:attribute`` resolves to the attribute."""
        assert import_target("json:dumps") is json.dumps

    @pytest.mark.parametrize("target", ["json", "json:", ":dumps"])
    def test_malformed(self, target: str) -> None:
        """Targets without both parts are configuration errors."""
        with pytest.raises(ConfigurationError):
            import_target(target)

    @pytest.mark.parametrize("target", ["no_such_module_xyz:app", "json:no_such_attribute"])
    def test_unimportable(self, target: str) -> None:
        """Import failures are discovery errors."""
        with pytest.raises(EndpointDiscoveryError):
            import_target(target)


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_json_to_file(self, tmp_path: Path) -> None:
        """The document is written to the output path."""
        output = tmp_path / "out" / "swagger.json"
        result = runner.invoke(
            app, ["generate", TARGET, "--output", str(output), "--api-version", "3.1"]
        )

        assert result.exit_code == 0, result.output
        document = json.loads(output.read_text(encoding="utf-8"))
        assert document["apiVersion"] == "3.1"
        assert document["swaggerVersion"] == "1.2"
        assert "Order" in document["definitions"]
        assert f"Wrote {output}" in result.output

    def test_yaml_to_file(self, tmp_path: Path) -> None:
        """``--format yaml`` switches the encoder."""
        output = tmp_path / "swagger.yaml"
        result = runner.invoke(
            app, ["generate", TARGET, "--format", "yaml", "--output", str(output)]
        )

        assert result.exit_code == 0, result.output
        document = yaml.safe_load(output.read_text(encoding="utf-8"))
        assert document["basePath"] == "/"
        assert [api["path"] for api in document["apis"]] == ["/orders/{order_id}", "/products"]

    def test_environment_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Environment settings apply when no option overrides them."""
        monkeypatch.setenv("SPECFOUNDRY_GENERATION__API_VERSION", "9.9")
        output = tmp_path / "swagger.json"
        result = runner.invoke(app, ["generate", TARGET, "--output", str(output)])

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text(encoding="utf-8"))["apiVersion"] == "9.9"

    def test_invalid_format_exits_2(self) -> None:
        """Settings validation failures are configuration errors."""
        result = runner.invoke(app, ["generate", TARGET, "--format", "xml"])

        assert result.exit_code == 2
        problem = _problem(result.output)
        assert problem["code"] == "configuration-error"

    def test_malformed_target_exits_2(self) -> None:
        """A target without an attribute is a configuration error."""
        result = runner.invoke(app, ["generate", "tests.specfoundry.sample_app"])

        assert result.exit_code == 2
        assert _problem(result.output)["code"] == "configuration-error"

    def test_non_fastapi_target_exits_1(self) -> None:
        """Objects that are not FastAPI apps fail discovery."""
        result = runner.invoke(app, ["generate", "tests.specfoundry.sample_app:not_an_app"])

        assert result.exit_code == 1
        problem = _problem(result.output)
        assert problem["code"] == "endpoint-discovery-failed"
        assert str(problem["instance"]).startswith("urn:specfoundry:cli:generate:")

    def test_target_raising_on_import_exits_1(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Errors raised by the target module itself become runtime problems."""
        (tmp_path / "exploding_service.py").write_text(
            'raise RuntimeError("database unavailable")\n', encoding="utf-8"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        result = runner.invoke(app, ["generate", "exploding_service:app"])

        assert result.exit_code == 1
        problem = _problem(result.output)
        assert problem["code"] == "runtime-error"
        assert problem["status"] == 500
        assert problem["detail"] == "database unavailable"
        assert problem["extensions"]["exception_type"] == "RuntimeError"

    def test_no_arguments_shows_help(self) -> None:
        """Invoking without a command prints usage."""
        result = runner.invoke(app, [])
        assert "generate" in result.output
