from __future__ import annotations

import logging
import re
from pathlib import Path

logger = logging.getLogger("RouteSynth.Emitter")

_FUNCTION_DEF = re.compile(r"^(?:async\s+)?def\s+([A-Za-z_][A-Za-z0-9_]*)\s*\(", re.MULTILINE)


def defined_functions(route_file: Path) -> frozenset[str]:
    """Имена функций верхнего уровня, уже объявленных в файле маршрутов."""
    if not route_file.is_file():
        return frozenset()
    return frozenset(_FUNCTION_DEF.findall(route_file.read_text(encoding="utf-8")))


def append_routes(route_file: Path, text: str) -> bool:
    """Дописывает сгенерированные маршруты в конец существующего файла.

    Файл не создаётся: если его нет, ничего не пишется и возвращается False.
    """
    if not text:
        return False
    if not route_file.is_file():
        logger.warning("route_file_missing", extra={"route_file": str(route_file)})
        return False
    with route_file.open("a", encoding="utf-8") as handle:
        handle.write(text)
    logger.info("routes_appended", extra={"route_file": str(route_file), "bytes": len(text)})
    return True
