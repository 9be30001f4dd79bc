from __future__ import annotations

import argparse
import asyncio
import dataclasses
import importlib
import inspect
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from aiohttp import web

from config.route_synth_config import (
    DEFAULT_PATH,
    ConfigurationError,
    parse_output_format,
    resolve_route_synth_config,
    validate_root_namespace,
)
from core.route_synthesizer import RouteSynthesizer
from server.route_registry import load_route_inventory, read_app_routes
from shared.route_models import RegisteredRoute
from tools.routes_file_emitter import append_routes, defined_functions
from tools.synthesis_journal import DEFAULT_JOURNAL_PATH, SynthesisJournal

logger = logging.getLogger("RouteSynth.CLI")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="routesynth",
        description="Propose route registrations for controller methods that have no route yet",
    )
    parser.add_argument(
        "--controller",
        action="append",
        default=[],
        help="Controller class as 'package.module:Class' (repeatable)",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--app", help="aiohttp application factory as 'package.module:factory'")
    source.add_argument("--inventory", type=Path, help="JSON route inventory")
    parser.add_argument("--config", type=Path, default=DEFAULT_PATH)
    parser.add_argument("--format", dest="output_format")
    parser.add_argument("--root-namespace")
    parser.add_argument("--write", action="store_true", help="Append output to the route file")
    parser.add_argument("--journal", type=Path)
    parser.add_argument(
        "--history",
        type=int,
        metavar="N",
        help="Print the last N runs from the journal and exit",
    )
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)
    if args.history is None and not args.controller:
        parser.error("нужен хотя бы один --controller")
    return args


def load_app(factory_ref: str) -> web.Application:
    module_name, _, attr = factory_ref.partition(":")
    if not module_name or not attr:
        raise ValueError("--app должен иметь вид 'package.module:factory'.")
    module = importlib.import_module(module_name)
    target = getattr(module, attr)
    app = target() if callable(target) and not isinstance(target, web.Application) else target
    if inspect.isawaitable(app):
        app = asyncio.run(_await_app(app))
    if not isinstance(app, web.Application):
        raise TypeError(f"{factory_ref} не вернул aiohttp Application.")
    return app


async def _await_app(pending: object) -> object:
    return await pending  # type: ignore[misc]


def _load_registry(args: argparse.Namespace) -> list[RegisteredRoute]:
    if args.app:
        return read_app_routes(load_app(args.app))
    if args.inventory:
        return load_route_inventory(args.inventory)
    return []


def _print_history(journal_path: Path, limit: int) -> int:
    for record in SynthesisJournal(journal_path).read_recent(limit):
        print(record.summary())
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if args.history is not None:
        return _print_history(args.journal or DEFAULT_JOURNAL_PATH, args.history)
    try:
        config = resolve_route_synth_config(args.config)
        if args.output_format:
            config = dataclasses.replace(
                config, output_format=parse_output_format(args.output_format)
            )
        if args.root_namespace:
            config = dataclasses.replace(
                config, root_namespace=validate_root_namespace(args.root_namespace)
            )
        synthesizer = RouteSynthesizer(config)
        registry = _load_registry(args)
        logger.info("registry_loaded", extra={"routes": len(registry)})
        reserved = defined_functions(config.route_file) if args.write else frozenset()
        result = synthesizer.synthesize(args.controller, registry, reserved)
    except ConfigurationError as exc:
        print(f"Ошибка конфигурации: {exc}", file=sys.stderr)
        return 2

    sys.stdout.write(result.text)
    written = False
    if args.write:
        written = append_routes(config.route_file, result.text)
    if args.journal:
        SynthesisJournal(args.journal).log(list(args.controller), result, written=written)
    for diagnostic in result.diagnostics:
        print(f"{diagnostic.kind.value}: {diagnostic.message}", file=sys.stderr)
        for entry in diagnostic.entries:
            print(f"  - {entry}", file=sys.stderr)
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
