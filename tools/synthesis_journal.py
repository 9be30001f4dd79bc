from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path

from shared.route_models import JSONValue, SynthesisResult

DEFAULT_JOURNAL_PATH = Path("logs/route_synth.log")

logger = logging.getLogger("RouteSynth.Journal")


@dataclass(frozen=True)
class JournalRecord:
    timestamp: str
    controllers: list[str]
    route_names: list[str]
    written: bool
    diagnostics: list[dict[str, JSONValue]]

    @property
    def routes(self) -> int:
        return len(self.route_names)

    @classmethod
    def from_dict(cls, data: dict[str, JSONValue]) -> JournalRecord:
        controllers = data.get("controllers")
        route_names = data.get("route_names")
        diagnostics = data.get("diagnostics")
        return cls(
            timestamp=str(data.get("timestamp") or ""),
            controllers=[str(item) for item in controllers] if isinstance(controllers, list) else [],
            route_names=[str(item) for item in route_names] if isinstance(route_names, list) else [],
            written=bool(data.get("written")),
            diagnostics=[item for item in diagnostics if isinstance(item, dict)]
            if isinstance(diagnostics, list)
            else [],
        )

    def summary(self) -> str:
        state = "записано" if self.written else "не записано"
        return (
            f"{self.timestamp}  контроллеров: {len(self.controllers)}  "
            f"маршрутов: {self.routes}  диагностик: {len(self.diagnostics)}  {state}"
        )


class SynthesisJournal:
    """Журнал прогонов генератора маршрутов: одна JSON-строка на прогон."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_JOURNAL_PATH

    def log(self, controllers: list[str], result: SynthesisResult, written: bool = False) -> None:
        record = JournalRecord(
            timestamp=time.strftime("%Y-%m-%d %H:%M:%S"),
            controllers=list(controllers),
            route_names=[route.route_name for group in result.groups for route in group.routes],
            written=written,
            diagnostics=[item.to_dict() for item in result.diagnostics],
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(record), ensure_ascii=False) + "\n")

    def read_recent(self, limit: int = 20) -> list[JournalRecord]:
        """Последние `limit` прогонов; битые строки пропускаются."""
        if limit <= 0 or not self.path.exists():
            return []
        records: list[JournalRecord] = []
        for line in self.path.read_text(encoding="utf-8").splitlines()[-limit:]:
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("journal_line_skipped", extra={"path": str(self.path)})
                continue
            if isinstance(data, dict):
                records.append(JournalRecord.from_dict(data))
        return records
