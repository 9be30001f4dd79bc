from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from config.route_synth_config import RouteSynthConfig, validate_root_namespace
from core.route_diff import build_method_index, diff_missing_methods, registered_route_names
from core.route_introspection import (
    PythonTypeIntrospector,
    ReflectionError,
    TypeIntrospector,
    UnresolvableControllerError,
    introspect_controller,
    resolve_controller,
)
from core.route_naming import build_parameter_suffix, parse_method_name
from core.route_prefixes import resolve_prefixes
from core.route_renderer import render_group, render_groups, render_method
from shared.route_models import (
    CandidateRoute,
    ControllerDescriptor,
    ControllerGroup,
    Diagnostic,
    DiagnosticKind,
    MethodIndex,
    PrefixResolution,
    RegisteredRoute,
    SynthesisResult,
)

ControllerRef = str | type

logger = logging.getLogger("RouteSynth.Synthesizer")


@dataclass(frozen=True)
class _ControllerPlan:
    descriptor: ControllerDescriptor
    prefixes: PrefixResolution
    candidates: tuple[CandidateRoute, ...]


class RouteSynthesizer:
    """Предлагает недостающие маршруты для набора контроллеров.

    Каждый контроллер обрабатывается независимо; ошибки отдельного контроллера
    или метода попадают в диагностику и не прерывают прогон. Прогон прерывает
    только `ConfigurationError`.
    """

    def __init__(
        self,
        config: RouteSynthConfig | None = None,
        introspector: TypeIntrospector | None = None,
    ) -> None:
        self._config = config or RouteSynthConfig()
        validate_root_namespace(self._config.root_namespace)
        self._introspector = introspector or PythonTypeIntrospector()

    @property
    def config(self) -> RouteSynthConfig:
        return self._config

    def synthesize(
        self,
        controllers: Iterable[ControllerRef],
        registry: Sequence[RegisteredRoute] = (),
        reserved_functions: Iterable[str] = (),
    ) -> SynthesisResult:
        """`reserved_functions` - имена, уже занятые в файле маршрутов."""
        index = build_method_index(registry)
        diagnostics: list[Diagnostic] = []
        plans: list[_ControllerPlan] = []
        for ref in controllers:
            plan = self._plan_controller(ref, index, diagnostics)
            if plan is not None:
                plans.append(plan)

        rejected = self._reject_collisions(plans, registry, diagnostics)
        groups: list[ControllerGroup] = []
        for plan in plans:
            kept = [route for route in plan.candidates if route.route_name not in rejected]
            group = render_group(
                plan.descriptor.identity,
                plan.prefixes.namespace_fragment,
                plan.prefixes.path_prefix,
                kept,
            )
            if group is not None:
                groups.append(group)

        text = render_groups(groups, self._config.output_format, reserved_functions)
        logger.info(
            "routes_synthesized",
            extra={
                "controllers": len(plans),
                "groups": len(groups),
                "routes": sum(len(group.routes) for group in groups),
                "diagnostics": len(diagnostics),
            },
        )
        return SynthesisResult(
            groups=tuple(groups),
            text=text,
            diagnostics=tuple(diagnostics),
        )

    def _plan_controller(
        self,
        ref: ControllerRef,
        index: MethodIndex,
        diagnostics: list[Diagnostic],
    ) -> _ControllerPlan | None:
        label = ref if isinstance(ref, str) else getattr(ref, "__qualname__", repr(ref))
        try:
            controller = resolve_controller(ref) if isinstance(ref, str) else ref
            descriptor = introspect_controller(controller, self._introspector)
        except (UnresolvableControllerError, ReflectionError) as exc:
            logger.warning("controller_skipped", extra={"controller": label, "error": str(exc)})
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.UNRESOLVABLE_CONTROLLER,
                    message=str(exc),
                    controller=label,
                )
            )
            return None

        prefixes = resolve_prefixes(
            descriptor.fully_qualified_name,
            descriptor.short_name,
            self._config.root_namespace,
        )
        candidates: list[CandidateRoute] = []
        for method_name in diff_missing_methods(descriptor, index):
            try:
                parameters = self._introspector.parameters(controller, method_name)
            except ReflectionError as exc:
                logger.warning(
                    "method_skipped",
                    extra={"controller": descriptor.identity, "method": method_name},
                )
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.REFLECTION_ERROR,
                        message=str(exc),
                        controller=descriptor.identity,
                        method=method_name,
                    )
                )
                continue
            verb, remainder = parse_method_name(method_name)
            candidates.append(
                render_method(
                    verb,
                    remainder,
                    build_parameter_suffix(parameters),
                    prefixes.route_name_prefix,
                    descriptor.short_name,
                    method_name,
                )
            )
        return _ControllerPlan(
            descriptor=descriptor,
            prefixes=prefixes,
            candidates=tuple(candidates),
        )

    def _reject_collisions(
        self,
        plans: Sequence[_ControllerPlan],
        registry: Sequence[RegisteredRoute],
        diagnostics: list[Diagnostic],
    ) -> set[str]:
        existing = registered_route_names(registry)
        claimants: dict[str, list[str]] = {}
        for plan in plans:
            for route in plan.candidates:
                entry = f"{plan.descriptor.identity}@{route.method_name}"
                claimants.setdefault(route.route_name, []).append(entry)

        rejected: set[str] = set()
        for name, entries in claimants.items():
            offenders = list(entries)
            if name in existing:
                offenders.extend(
                    f"registered:{route.action_label}" for route in registry if route.name == name
                )
            elif len(entries) < 2:
                continue
            rejected.add(name)
            logger.warning(
                "route_name_collision",
                extra={"route_name": name, "entries": offenders},
            )
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.ROUTE_NAME_COLLISION,
                    message=f"Имя маршрута {name!r} уже занято",
                    entries=tuple(offenders),
                )
            )
        return rejected
