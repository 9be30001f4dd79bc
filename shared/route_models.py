from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]

MethodIndex = dict[str, frozenset[str]]


class OutputFormat(str, Enum):
    AIOHTTP = "aiohttp"
    TEXT = "text"
    JSON = "json"


class DiagnosticKind(str, Enum):
    UNRESOLVABLE_CONTROLLER = "unresolvable_controller"
    REFLECTION_ERROR = "reflection_error"
    ROUTE_NAME_COLLISION = "route_name_collision"


@dataclass(frozen=True)
class ControllerDescriptor:
    """Снимок контроллера: только собственные публичные методы.

    `identity` (`module.qualname`) уникален для класса и служит ключом индекса
    маршрутов; `fully_qualified_name` (пакет + qualname) задаёт только префиксы.
    """

    fully_qualified_name: str
    short_name: str
    identity: str
    description: str = ""
    methods: tuple[str, ...] = ()


@dataclass(frozen=True)
class MethodParameter:
    name: str
    optional: bool = False
    is_class_type: bool = False


@dataclass(frozen=True)
class RegisteredRoute:
    path: str
    action_label: str
    name: str | None = None
    controller_name: str | None = None
    http_method: str | None = None

    @property
    def method_name(self) -> str | None:
        if "@" not in self.action_label:
            return None
        method = self.action_label.split("@", 1)[1]
        return method or None


@dataclass(frozen=True)
class CandidateRoute:
    http_verb: str
    url_path: str
    route_name: str
    action_label: str

    @property
    def method_name(self) -> str:
        return self.action_label.split("@", 1)[1]

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "method": self.http_verb.upper(),
            "path": self.url_path,
            "name": self.route_name,
            "action": self.action_label,
        }


@dataclass(frozen=True)
class ControllerGroup:
    controller_name: str
    namespace_fragment: str
    path_prefix: str
    routes: tuple[CandidateRoute, ...]

    def absolute_path(self, route: CandidateRoute) -> str:
        prefix = f"/{self.path_prefix}" if self.path_prefix else ""
        return prefix + route.url_path

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "controller": self.controller_name,
            "namespace": self.namespace_fragment,
            "prefix": self.path_prefix,
            "routes": [route.to_dict() for route in self.routes],
        }


@dataclass(frozen=True)
class PrefixResolution:
    namespace_fragment: str
    path_prefix: str
    route_name_prefix: str


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    controller: str | None = None
    method: str | None = None
    entries: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "controller": self.controller,
            "method": self.method,
            "entries": list(self.entries),
        }


@dataclass(frozen=True)
class SynthesisResult:
    groups: tuple[ControllerGroup, ...] = ()
    text: str = ""
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def route_count(self) -> int:
        return sum(len(group.routes) for group in self.groups)

    @property
    def ok(self) -> bool:
        return not self.diagnostics
