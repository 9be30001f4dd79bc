from __future__ import annotations

import re
from collections.abc import Iterable

from shared.route_models import MethodParameter

HTTP_VERBS = ("get", "post", "put", "delete")
DEFAULT_VERB = "get"
_VERB_PREFIX = re.compile(r"^(get|post|put|delete)(?=[A-Z])")


def parse_method_name(method_name: str) -> tuple[str, str]:
    """`postSave` -> ("post", "Save"); без префикса глагола -> ("get", имя)."""
    match = _VERB_PREFIX.match(method_name)
    if match is None:
        return DEFAULT_VERB, method_name
    verb = match.group(1)
    return verb.lower(), method_name[len(verb) :]


def build_parameter_suffix(parameters: Iterable[MethodParameter]) -> str:
    fragments: list[str] = []
    for param in parameters:
        if param.is_class_type:
            continue
        marker = "?" if param.optional else ""
        fragments.append(f"/{{{param.name}{marker}}}")
    return "".join(fragments)
