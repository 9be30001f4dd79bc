from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path

from shared.route_models import OutputFormat

DEFAULT_ROOT_NAMESPACE = "app.controllers"
DEFAULT_OUTPUT_FORMAT = OutputFormat.AIOHTTP
DEFAULT_ROUTE_FILE = Path("app/routes.py")
DEFAULT_PATH = Path("config/route_synth.json")

NAMESPACE_SEPARATORS = "\\./"
_NAMESPACE_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class RouteSynthConfig:
    root_namespace: str = DEFAULT_ROOT_NAMESPACE
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    route_file: Path = DEFAULT_ROUTE_FILE

    def __post_init__(self) -> None:
        validate_root_namespace(self.root_namespace)

    def to_dict(self) -> dict[str, object]:
        return {
            "root_namespace": self.root_namespace,
            "output_format": self.output_format.value,
            "route_file": self.route_file.as_posix(),
        }


def validate_root_namespace(value: str) -> str:
    if not isinstance(value, str) or not value.strip(NAMESPACE_SEPARATORS).strip():
        raise ConfigurationError("root_namespace должен быть непустой строкой.")
    segments = re.split(r"[\\./]", value.strip(NAMESPACE_SEPARATORS))
    for segment in segments:
        if not _NAMESPACE_SEGMENT.match(segment):
            raise ConfigurationError(f"Некорректный root_namespace: {value!r}")
    return value


def parse_output_format(value: str) -> OutputFormat:
    try:
        return OutputFormat(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(item.value for item in OutputFormat)
        raise ConfigurationError(
            f"output_format должен быть одним из: {allowed}."
        ) from exc


def load_route_synth_config(path: Path = DEFAULT_PATH) -> RouteSynthConfig:
    if not path.exists():
        return RouteSynthConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise RuntimeError(f"Ошибка чтения {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} должен содержать объект.")
    root_namespace = data.get("root_namespace", DEFAULT_ROOT_NAMESPACE)
    output_format = data.get("output_format", DEFAULT_OUTPUT_FORMAT.value)
    route_file = data.get("route_file", DEFAULT_ROUTE_FILE.as_posix())
    if not isinstance(root_namespace, str):
        raise ValueError("route_synth.root_namespace должен быть строкой.")
    if not isinstance(output_format, str):
        raise ValueError("route_synth.output_format должен быть строкой.")
    if not isinstance(route_file, str) or not route_file.strip():
        raise ValueError("route_synth.route_file должен быть непустой строкой.")
    return RouteSynthConfig(
        root_namespace=root_namespace.strip(),
        output_format=parse_output_format(output_format),
        route_file=Path(route_file.strip()),
    )


def resolve_route_synth_config(path: Path = DEFAULT_PATH) -> RouteSynthConfig:
    config = load_route_synth_config(path)
    root_raw = os.getenv("ROUTESYNTH_ROOT_NAMESPACE")
    format_raw = os.getenv("ROUTESYNTH_OUTPUT_FORMAT")
    route_file_raw = os.getenv("ROUTESYNTH_ROUTE_FILE")

    root_namespace = config.root_namespace
    if isinstance(root_raw, str) and root_raw.strip():
        root_namespace = root_raw.strip()

    output_format = config.output_format
    if isinstance(format_raw, str) and format_raw.strip():
        output_format = parse_output_format(format_raw)

    route_file = config.route_file
    if isinstance(route_file_raw, str) and route_file_raw.strip():
        route_file = Path(route_file_raw.strip())

    return RouteSynthConfig(
        root_namespace=root_namespace,
        output_format=output_format,
        route_file=route_file,
    )
