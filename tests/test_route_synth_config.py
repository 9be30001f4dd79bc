from __future__ import annotations

import json
from pathlib import Path

import pytest

from config.route_synth_config import (
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_ROOT_NAMESPACE,
    DEFAULT_ROUTE_FILE,
    ConfigurationError,
    RouteSynthConfig,
    load_route_synth_config,
    parse_output_format,
    resolve_route_synth_config,
)
from shared.route_models import OutputFormat


def test_load_route_synth_config_defaults(tmp_path: Path) -> None:
    path = tmp_path / "route_synth.json"
    config = load_route_synth_config(path)
    assert config.root_namespace == DEFAULT_ROOT_NAMESPACE
    assert config.output_format is DEFAULT_OUTPUT_FORMAT
    assert config.route_file == DEFAULT_ROUTE_FILE
    assert not path.exists()


def test_load_route_synth_config_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "route_synth.json"
    path.write_text("{bad", encoding="utf-8")
    with pytest.raises(RuntimeError):
        load_route_synth_config(path)


def test_load_route_synth_config_invalid_types(tmp_path: Path) -> None:
    path = tmp_path / "route_synth.json"
    path.write_text(json.dumps(["oops"]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_route_synth_config(path)

    path.write_text(json.dumps({"root_namespace": 42}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_route_synth_config(path)

    path.write_text(json.dumps({"output_format": ["json"]}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_route_synth_config(path)

    path.write_text(json.dumps({"route_file": ""}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_route_synth_config(path)


def test_load_route_synth_config_malformed_values(tmp_path: Path) -> None:
    path = tmp_path / "route_synth.json"
    path.write_text(json.dumps({"root_namespace": "app.1controllers"}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_route_synth_config(path)

    path.write_text(json.dumps({"output_format": "yaml"}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_route_synth_config(path)


def test_load_route_synth_config_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "route_synth.json"
    config = RouteSynthConfig(
        root_namespace="App\\Http\\Controllers\\",
        output_format=OutputFormat.JSON,
        route_file=Path("routes/web.py"),
    )
    path.write_text(json.dumps(config.to_dict()), encoding="utf-8")
    assert load_route_synth_config(path) == config


def test_resolve_route_synth_config_env_overrides(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "route_synth.json"
    path.write_text(json.dumps(RouteSynthConfig().to_dict()), encoding="utf-8")

    monkeypatch.setenv("ROUTESYNTH_ROOT_NAMESPACE", "project.web.controllers")
    monkeypatch.setenv("ROUTESYNTH_OUTPUT_FORMAT", "TEXT")
    monkeypatch.setenv("ROUTESYNTH_ROUTE_FILE", "project/routes.py")

    resolved = resolve_route_synth_config(path)
    assert resolved.root_namespace == "project.web.controllers"
    assert resolved.output_format is OutputFormat.TEXT
    assert resolved.route_file == Path("project/routes.py")


def test_resolve_route_synth_config_env_invalid_format(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "route_synth.json"
    monkeypatch.setenv("ROUTESYNTH_OUTPUT_FORMAT", "xml")
    with pytest.raises(ConfigurationError):
        resolve_route_synth_config(path)


def test_resolve_route_synth_config_env_invalid_root(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "route_synth.json"
    monkeypatch.setenv("ROUTESYNTH_ROOT_NAMESPACE", "app controllers")
    with pytest.raises(ConfigurationError):
        resolve_route_synth_config(path)


def test_parse_output_format_is_case_insensitive() -> None:
    assert parse_output_format(" AIOHTTP ") is OutputFormat.AIOHTTP
