"""Tests for event dispatch and the jsonl telemetry log."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyorange.events.dispatcher import EventDispatcher
from pyorange.events.store import EventStore
from pyorange.events.types import ErrorEvent, EventType, UserSent
from tests.fixtures.fakes import Recorder, text_turn, tool_turn


class TestDispatcher:
    async def test_no_handler(self) -> None:
        assert await EventDispatcher().emit(UserSent("hi")) is False

    async def test_string_keys(self) -> None:
        d = EventDispatcher()
        rec = Recorder()
        d.on({"userSent": rec})
        assert d.has_handler(EventType.USER_SENT)
        assert await d.emit(UserSent("hi")) is True
        assert rec.events == [UserSent("hi")]

    async def test_async_handler_awaited(self) -> None:
        d = EventDispatcher()
        seen: list[str] = []

        async def handler(event: ErrorEvent) -> None:
            seen.append(event.error)

        d.on({EventType.ERROR: handler})
        await d.emit(ErrorEvent("bad"))
        assert seen == ["bad"]

    def test_unknown_key(self) -> None:
        with pytest.raises(ValueError):
            EventDispatcher().on({"bogus": print})


class TestEventStore:
    def test_append_and_read(self, tmp_path: Path) -> None:
        store = EventStore.open("s1", root=tmp_path)
        store.append("tool.call", {"tool": "fs_read"})
        store.append("tool.result", {"tool": "fs_read", "is_error": False})
        assert store.path == tmp_path / "events" / "s1.jsonl"
        records = list(store.iter_records())
        assert [r.type for r in records] == ["tool.call", "tool.result"]
        assert records[0].data == {"tool": "fs_read"}

    def test_closed_store_ignores_appends(self, tmp_path: Path) -> None:
        store = EventStore.open("s2", root=tmp_path)
        store.close()
        store.append("x", {})
        assert list(store.iter_records()) == []

    def test_disabled(self, tmp_path: Path) -> None:
        store = EventStore.open("s3", root=tmp_path, enabled=False)
        store.append("x", {})
        assert not (tmp_path / "events" / "s3.jsonl").exists()

    async def test_runtime_logs_metadata(self, tmp_path: Path, make_runtime) -> None:
        store = EventStore.open("s4", root=tmp_path)
        rt = make_runtime([tool_turn("execute_bash", {"command": "echo secret"}), text_turn("done")], events=store)
        await rt.run("go")
        types = [r.type for r in store.iter_records()]
        assert "tool.call" in types
        assert "tool.result" in types
        assert "secret" not in store.path.read_text()
