from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Iterable

from platformdirs import user_data_dir

APP_NAME = "pyorange"


def events_dir(root: Path | None = None) -> Path:
    d = (root or Path(user_data_dir(APP_NAME))) / "events"
    d.mkdir(parents=True, exist_ok=True)
    return d


def new_session_id() -> str:
    return time.strftime("%Y%m%d-%H%M%S") + "-" + uuid.uuid4().hex[:6]


@dataclass
class LogRecord:
    ts: float
    type: str
    data: dict[str, Any]


@dataclass
class EventStore:
    """Append-only jsonl telemetry log for one chat session.

    Records metadata only (tool names, timings, sizes); file contents and
    command output are never written here.
    """

    session_id: str
    path: Path
    enabled: bool = True
    closed: bool = False

    @staticmethod
    def open(session_id: str | None = None, *, root: Path | None = None, enabled: bool = True) -> "EventStore":
        sid = session_id or new_session_id()
        path = events_dir(root) / f"{sid}.jsonl" if enabled else Path()
        return EventStore(session_id=sid, path=path, enabled=enabled)

    def append(self, event_type: str, data: dict[str, Any]) -> None:
        if not self.enabled or self.closed:
            return
        rec = LogRecord(ts=time.time(), type=event_type, data=data)
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(asdict(rec), ensure_ascii=False, default=str) + "\n")
        except OSError:
            # Telemetry must never break a chat turn.
            self.enabled = False

    def close(self) -> None:
        self.closed = True

    def iter_records(self) -> Iterable[LogRecord]:
        if not self.enabled or not self.path.exists():
            return []
        out: list[LogRecord] = []
        for line in self.path.read_text(encoding="utf-8", errors="replace").splitlines():
            if not line.strip():
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError:
                continue
            out.append(LogRecord(ts=float(obj.get("ts", 0.0)), type=str(obj.get("type")), data=obj.get("data") or {}))
        return out
