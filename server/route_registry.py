from __future__ import annotations

import inspect
import json
import logging
from pathlib import Path

from aiohttp import hdrs, web
from aiohttp.web_urldispatcher import PrefixedSubAppResource

from core.route_introspection import controller_identity
from shared.route_models import RegisteredRoute

logger = logging.getLogger("RouteSynth.Registry")


def read_app_routes(app: web.Application) -> list[RegisteredRoute]:
    """Снимок зарегистрированных маршрутов aiohttp-приложения, включая subapp.

    Ресурсы subapp уже несут префикс монтирования в `canonical`.
    """
    routes: list[RegisteredRoute] = []
    for resource in app.router.resources():
        if isinstance(resource, PrefixedSubAppResource):
            info = resource.get_info()
            subapp = info.get("app")
            if isinstance(subapp, web.Application):
                routes.extend(read_app_routes(subapp))
            continue
        for route in resource:
            if route.method == hdrs.METH_HEAD:
                continue
            routes.append(_to_registered(route))
    return routes


def _to_registered(route: web.AbstractRoute) -> RegisteredRoute:
    resource = route.resource
    path = resource.canonical if resource is not None else ""
    name = resource.name if resource is not None else None
    controller, method = _handler_owner(route.handler)
    if controller is None or method is None:
        handler_name = getattr(route.handler, "__qualname__", repr(route.handler))
        return RegisteredRoute(
            path=path,
            action_label=handler_name,
            name=name,
            controller_name=None,
            http_method=route.method,
        )
    return RegisteredRoute(
        path=path,
        action_label=f"{controller}@{method}",
        name=name,
        controller_name=controller,
        http_method=route.method,
    )


def _handler_owner(handler: object) -> tuple[str | None, str | None]:
    owner = getattr(handler, "__self__", None)
    method = getattr(handler, "__name__", None)
    if owner is not None and method is not None:
        if isinstance(owner, web.AbstractResource):
            return None, None
        owner_type = owner if inspect.isclass(owner) else type(owner)
        return controller_identity(owner_type), method

    qualname = getattr(handler, "__qualname__", "")
    if "." not in qualname or "<locals>" in qualname:
        return None, None
    module = inspect.getmodule(handler)
    if module is None:
        return None, None
    *owner_path, method = qualname.split(".")
    target: object = module
    for part in owner_path:
        target = getattr(target, part, None)
        if target is None:
            return None, None
    if not inspect.isclass(target):
        return None, None
    return controller_identity(target), method


def load_route_inventory(path: Path) -> list[RegisteredRoute]:
    if not path.exists():
        raise FileNotFoundError(f"Инвентарь маршрутов не найден: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Ошибка чтения инвентаря маршрутов {path}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("routes")
    if not isinstance(data, list):
        raise ValueError("Инвентарь маршрутов должен быть списком или объектом с ключом 'routes'.")
    routes: list[RegisteredRoute] = []
    for raw in data:
        if not isinstance(raw, dict):
            raise ValueError("Запись инвентаря должна быть объектом.")
        routes.append(_parse_inventory_entry(raw))
    logger.info("inventory_loaded", extra={"path": str(path), "routes": len(routes)})
    return routes


def _parse_inventory_entry(raw: dict[str, object]) -> RegisteredRoute:
    path = raw.get("path")
    action = raw.get("action")
    if not isinstance(path, str):
        raise ValueError("path должен быть строкой.")
    if not isinstance(action, str) or not action:
        raise ValueError("action должен быть непустой строкой.")
    controller = raw.get("controller")
    if controller is None and "@" in action:
        controller = action.split("@", 1)[0]
    if controller is not None and not _is_qualified(controller):
        raise ValueError(
            f"controller должен быть полным именем 'module.Class', получено {controller!r}."
        )
    return RegisteredRoute(
        path=path,
        action_label=action,
        name=_optional_str(raw, "name"),
        controller_name=controller if isinstance(controller, str) and controller else None,
        http_method=_optional_str(raw, "method"),
    )


def _is_qualified(controller: object) -> bool:
    if not isinstance(controller, str):
        return False
    module, _, name = controller.rpartition(".")
    return bool(module) and bool(name)


def _optional_str(raw: dict[str, object], key: str) -> str | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{key} должен быть строкой.")
    return value or None


def dump_route_inventory(routes: list[RegisteredRoute]) -> str:
    payload = {
        "routes": [
            {
                "name": route.name,
                "path": route.path,
                "controller": route.controller_name,
                "action": route.action_label,
                "method": route.http_method,
            }
            for route in routes
        ]
    }
    return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
