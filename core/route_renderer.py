from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence

from core.route_prefixes import controller_slug
from shared.route_models import CandidateRoute, ControllerGroup, OutputFormat

_OPTIONAL_SEGMENT = re.compile(r"/\{([A-Za-z_][A-Za-z0-9_]*)\?\}")
_NON_IDENTIFIER = re.compile(r"[^a-z0-9_]+")


def render_method(
    verb: str,
    remainder: str,
    parameter_suffix: str,
    route_name_prefix: str,
    short_name: str,
    method_name: str,
) -> CandidateRoute:
    """Собирает один маршрут из уже вычисленных частей.

    Имя маршрута строится из полного имени метода (вместе с глаголом), а путь
    из остатка после глагола.
    """
    route_name = f"{route_name_prefix}{controller_slug(short_name)}.{method_name.lower()}"
    return CandidateRoute(
        http_verb=verb.lower(),
        url_path="/" + remainder.lower() + parameter_suffix,
        route_name=route_name,
        action_label=f"{short_name}@{method_name}",
    )


def render_group(
    controller_name: str,
    namespace_fragment: str,
    path_prefix: str,
    candidates: Sequence[CandidateRoute],
) -> ControllerGroup | None:
    if not candidates:
        return None
    return ControllerGroup(
        controller_name=controller_name,
        namespace_fragment=namespace_fragment,
        path_prefix=path_prefix,
        routes=tuple(candidates),
    )


def expand_optional_segments(url_path: str) -> list[str]:
    """`/search/{term}/{page?}` -> [`/search/{term}`, `/search/{term}/{page}`].

    Раскрывается только хвост из необязательных сегментов; необязательный
    сегмент перед обязательным регистрируется как обязательный.
    """
    tail_start = len(url_path)
    trailing: list[str] = []
    for match in reversed(list(_OPTIONAL_SEGMENT.finditer(url_path))):
        if match.end() != tail_start:
            break
        trailing.insert(0, match.group(1))
        tail_start = match.start()
    built = _OPTIONAL_SEGMENT.sub(r"/{\1}", url_path[:tail_start])
    variants = [built]
    for name in trailing:
        built += "/{" + name + "}"
        variants.append(built)
    return variants


def register_function_names(
    groups: Sequence[ControllerGroup], reserved: Iterable[str] = ()
) -> list[str]:
    """Имена функций регистрации, уникальные в прогоне и среди `reserved`.

    Занятое имя получает числовой суффикс.
    """
    taken = set(reserved)
    names: list[str] = []
    for group in groups:
        stem = _NON_IDENTIFIER.sub("_", group.path_prefix.lower()).strip("_") or "root"
        name = f"register_{stem}_routes"
        counter = 2
        while name in taken:
            name = f"register_{stem}_routes_{counter}"
            counter += 1
        taken.add(name)
        names.append(name)
    return names


def render_aiohttp_group(group: ControllerGroup, function_name: str) -> str:
    header = f"# {group.controller_name}"
    if group.namespace_fragment:
        header += f" (namespace: {group.namespace_fragment})"
    lines = [
        header,
        f"def {function_name}(app, controller) -> None:",
        f'    prefix = "/{group.path_prefix}"',
    ]
    for route in group.routes:
        variants = expand_optional_segments(route.url_path)
        for variant in variants[:-1]:
            lines.append(
                f'    app.router.add_{route.http_verb}(prefix + "{variant}", '
                f"controller.{route.method_name})"
            )
        lines.append(
            f'    app.router.add_{route.http_verb}(prefix + "{variants[-1]}", '
            f'controller.{route.method_name}, name="{route.route_name}")'
            f"  # {route.action_label}"
        )
    return "\n".join(lines) + "\n"


def render_text_group(group: ControllerGroup) -> str:
    header = f"[{group.path_prefix}]"
    if group.namespace_fragment:
        header += f" namespace={group.namespace_fragment}"
    lines = [header]
    for route in group.routes:
        lines.append(
            f"  {route.http_verb.upper():<7}{group.absolute_path(route)}"
            f"  {route.route_name}  {route.action_label}"
        )
    return "\n".join(lines) + "\n"


def render_json(groups: Sequence[ControllerGroup]) -> str:
    return json.dumps([group.to_dict() for group in groups], ensure_ascii=False, indent=2) + "\n"


def render_groups(
    groups: Sequence[ControllerGroup],
    output_format: OutputFormat,
    reserved_functions: Iterable[str] = (),
) -> str:
    if not groups:
        return ""
    if output_format is OutputFormat.JSON:
        return render_json(groups)
    if output_format is OutputFormat.AIOHTTP:
        names = register_function_names(groups, reserved_functions)
        blocks = [render_aiohttp_group(group, name) for group, name in zip(groups, names)]
    else:
        blocks = [render_text_group(group) for group in groups]
    return "\n" + "\n\n".join(blocks)
