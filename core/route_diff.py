from __future__ import annotations

from collections.abc import Iterable

from shared.route_models import ControllerDescriptor, MethodIndex, RegisteredRoute


def build_method_index(routes: Iterable[RegisteredRoute]) -> MethodIndex:
    grouped: dict[str, set[str]] = {}
    for route in routes:
        if not route.controller_name:
            continue
        method = route.method_name
        if method is None:
            continue
        grouped.setdefault(route.controller_name, set()).add(method)
    return {controller: frozenset(methods) for controller, methods in grouped.items()}


def registered_route_names(routes: Iterable[RegisteredRoute]) -> frozenset[str]:
    return frozenset(route.name for route in routes if route.name)


def diff_missing_methods(descriptor: ControllerDescriptor, index: MethodIndex) -> list[str]:
    routed = index.get(descriptor.identity, frozenset())
    missing: list[str] = []
    for method in descriptor.methods:
        if method in routed or method in missing:
            continue
        missing.append(method)
    return missing
