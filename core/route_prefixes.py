from __future__ import annotations

import re

from config.route_synth_config import NAMESPACE_SEPARATORS, ConfigurationError
from shared.route_models import PrefixResolution

CONTROLLER_SUFFIX = "Controller"
_SEPARATOR_RUN = re.compile(r"[\\./]+")


def controller_slug(short_name: str) -> str:
    """`UserController` -> `user`. Голое `Controller` остаётся `controller`."""
    if not short_name:
        raise ConfigurationError("Имя контроллера не может быть пустым.")
    base = short_name
    if base.endswith(CONTROLLER_SUFFIX) and base != CONTROLLER_SUFFIX:
        base = base[: -len(CONTROLLER_SUFFIX)]
    return base.lower()


def relative_namespace(fully_qualified_name: str, short_name: str, root_namespace: str) -> str:
    relative = fully_qualified_name
    root = root_namespace.rstrip(NAMESPACE_SEPARATORS)
    if relative == root:
        relative = ""
    elif relative.startswith(root) and relative[len(root) : len(root) + 1] in (
        "\\",
        ".",
        "/",
    ):
        relative = relative[len(root) :]
    if relative.endswith(short_name):
        relative = relative[: -len(short_name)]
    return relative.strip(NAMESPACE_SEPARATORS)


def resolve_prefixes(
    fully_qualified_name: str, short_name: str, root_namespace: str
) -> PrefixResolution:
    slug = controller_slug(short_name)
    relative = relative_namespace(fully_qualified_name, short_name, root_namespace)
    if not relative:
        return PrefixResolution(namespace_fragment="", path_prefix=slug, route_name_prefix="")
    lowered = relative.lower()
    return PrefixResolution(
        namespace_fragment=relative,
        path_prefix=_SEPARATOR_RUN.sub("/", lowered) + "/" + slug,
        route_name_prefix=_SEPARATOR_RUN.sub(".", lowered) + ".",
    )
