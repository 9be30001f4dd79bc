#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.route_cli import load_app  # noqa: E402
from server.route_registry import dump_route_inventory, read_app_routes  # noqa: E402


def main() -> int:
    parser = argparse.ArgumentParser(description="Export aiohttp route inventory as JSON")
    parser.add_argument("app", help="aiohttp application factory as 'package.module:factory'")
    parser.add_argument("--output", type=Path)
    args = parser.parse_args()

    routes = read_app_routes(load_app(args.app))
    payload = dump_route_inventory(routes)
    if args.output is None:
        sys.stdout.write(payload)
        return 0
    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(payload, encoding="utf-8")
    print(f"Записано маршрутов: {len(routes)} -> {args.output}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
