from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping


@dataclass
class TelemetryService:
    """Append-only JSONL sink for match events."""

    path: Path
    enabled: bool = True

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.log_many([(event_type, payload)])

    def log_many(self, records: Iterable[tuple[str, Mapping[str, object]]]) -> None:
        if not self.enabled:
            return
        lines: list[str] = []
        ts = datetime.now(tz=timezone.utc).isoformat()
        for event_type, payload in records:
            rec = {"ts": ts, "type": event_type, "payload": dict(payload)}
            lines.append(json.dumps(rec, ensure_ascii=False, default=str))
        if not lines:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    def read_all(self) -> list[dict[str, object]]:
        if not self.path.exists():
            return []
        out: list[dict[str, object]] = []
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    out.append(json.loads(line))
        return out
