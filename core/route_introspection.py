from __future__ import annotations

import datetime
import decimal
import enum
import importlib
import inspect
import sys
import types
import typing
import uuid
from typing import Protocol, runtime_checkable

from shared.route_models import ControllerDescriptor, MethodParameter

SCALAR_TYPES: frozenset[type] = frozenset(
    {
        str,
        int,
        float,
        bool,
        bytes,
        decimal.Decimal,
        uuid.UUID,
        datetime.date,
        datetime.datetime,
        datetime.time,
    }
)
_UNBOUND_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class ReflectionError(RuntimeError):
    pass


class UnresolvableControllerError(RuntimeError):
    def __init__(self, identifier: str, reason: str) -> None:
        super().__init__(f"Не удалось загрузить контроллер {identifier!r}: {reason}")
        self.identifier = identifier
        self.reason = reason


@runtime_checkable
class TypeIntrospector(Protocol):
    def declared_public_methods(self, controller: type) -> list[str]: ...

    def parameters(self, controller: type, method_name: str) -> list[MethodParameter]: ...


def resolve_controller(identifier: str) -> type:
    """Загружает класс контроллера по `pkg.module:Class` или `pkg.module.Class`."""
    raw = identifier.strip()
    if not raw:
        raise UnresolvableControllerError(identifier, "пустой идентификатор")
    if ":" in raw:
        module_name, _, attr_path = raw.partition(":")
    else:
        module_name, _, attr_path = raw.rpartition(".")
    if not module_name or not attr_path:
        raise UnresolvableControllerError(identifier, "ожидается 'module:Class' или 'module.Class'")
    try:
        target: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise UnresolvableControllerError(identifier, f"ошибка импорта: {exc}") from exc
    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise UnresolvableControllerError(identifier, f"{part!r} не найден") from exc
    if not inspect.isclass(target):
        raise UnresolvableControllerError(identifier, "это не класс")
    return target


def controller_namespace(controller: type) -> str:
    module_name = controller.__module__
    module = sys.modules.get(module_name)
    if module is not None and hasattr(module, "__path__"):
        return module_name
    package, _, _ = module_name.rpartition(".")
    return package


def controller_qualified_name(controller: type) -> str:
    namespace = controller_namespace(controller)
    if not namespace:
        return controller.__qualname__
    return f"{namespace}.{controller.__qualname__}"


def controller_identity(controller: type) -> str:
    """Уникальный ключ класса: модуль + qualname."""
    return f"{controller.__module__}.{controller.__qualname__}"


def introspect_controller(
    controller: type, introspector: TypeIntrospector | None = None
) -> ControllerDescriptor:
    if not inspect.isclass(controller):
        raise ReflectionError(f"Ожидался класс, получен {type(controller).__name__}")
    resolved = introspector or PythonTypeIntrospector()
    return ControllerDescriptor(
        fully_qualified_name=controller_qualified_name(controller),
        short_name=controller.__name__,
        identity=controller_identity(controller),
        description=inspect.getdoc(controller) or "",
        methods=tuple(resolved.declared_public_methods(controller)),
    )


class PythonTypeIntrospector:
    """Читает методы и параметры контроллера через `inspect`."""

    def declared_public_methods(self, controller: type) -> list[str]:
        if not inspect.isclass(controller):
            raise ReflectionError(f"Ожидался класс, получен {type(controller).__name__}")
        methods: list[str] = []
        for name, member in vars(controller).items():
            if name.startswith("_"):
                continue
            if _unwrap_method(member) is None:
                continue
            methods.append(name)
        return methods

    def parameters(self, controller: type, method_name: str) -> list[MethodParameter]:
        member = vars(controller).get(method_name)
        func = _unwrap_method(member)
        if func is None:
            raise ReflectionError(f"{controller.__name__}.{method_name} не объявлен в классе")
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError) as exc:
            raise ReflectionError(
                f"Не удалось прочитать сигнатуру {controller.__name__}.{method_name}: {exc}"
            ) from exc
        hints = _safe_type_hints(func)
        params = list(signature.parameters.values())
        if not isinstance(member, staticmethod) and params:
            params = params[1:]
        result: list[MethodParameter] = []
        for param in params:
            if param.kind in _UNBOUND_KINDS:
                continue
            annotation = hints.get(param.name, param.annotation)
            result.append(
                MethodParameter(
                    name=param.name,
                    optional=param.default is not inspect.Parameter.empty,
                    is_class_type=is_class_annotation(annotation),
                )
            )
        return result


def is_class_annotation(annotation: object) -> bool:
    if annotation is inspect.Parameter.empty or isinstance(annotation, str):
        return False
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return bool(members) and all(is_class_annotation(arg) for arg in members)
    if origin is not None:
        return False
    if not inspect.isclass(annotation):
        return False
    if annotation in SCALAR_TYPES or issubclass(annotation, enum.Enum):
        return False
    return True


def _unwrap_method(member: object) -> typing.Callable[..., object] | None:
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    if inspect.isfunction(member):
        return member
    return None


def _safe_type_hints(func: typing.Callable[..., object]) -> dict[str, object]:
    try:
        return typing.get_type_hints(func)
    except Exception:  # noqa: BLE001
        return {}
