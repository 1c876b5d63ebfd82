"""Tests for fs_write."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyorange.events.types import FileNewContent, FileUpdateContent
from pyorange.tools.base import ToolContext
from pyorange.tools.builtin_tools.file_read import FsReadTool
from pyorange.tools.builtin_tools.file_write import FsWriteTool
from tests.fixtures.fakes import Recorder


async def write(ctx: ToolContext | None = None, **params) -> str:
    return await FsWriteTool().execute(params, ctx)


@pytest.fixture
def abc(tmp_path: Path) -> Path:
    p = tmp_path / "abc.txt"
    p.write_text("a\nb\nc\n", encoding="utf-8")
    return p


class TestCreate:
    async def test_create_then_full_read(self, tmp_path: Path) -> None:
        p = tmp_path / "new" / "dir" / "file.txt"
        out = await write(command="create", path=str(p), file_text="hello\nworld")
        assert out == f"File created successfully: {p}"
        assert await FsReadTool().execute({"path": str(p), "mode": "Full"}) == "hello\nworld"

    async def test_create_overwrites(self, abc: Path) -> None:
        await write(command="create", path=str(abc), file_text="")
        assert abc.read_text() == ""

    async def test_create_requires_file_text(self, tmp_path: Path) -> None:
        out = await write(command="create", path=str(tmp_path / "x"))
        assert out == "Error: file_text parameter is required for create command"
        assert not (tmp_path / "x").exists()

    async def test_create_publishes_new_content(self, tmp_path: Path) -> None:
        rec = Recorder()
        p = tmp_path / "n.txt"
        await write(ToolContext(notify=rec), command="create", path=str(p), file_text="body")
        assert rec.events == [FileNewContent(path=str(p), text="body")]


class TestStrReplace:
    async def test_replaces_first_occurrence(self, tmp_path: Path) -> None:
        p = tmp_path / "r.txt"
        p.write_text("foo foo\n", encoding="utf-8")
        out = await write(command="str_replace", path=str(p), old_str="foo", new_str="bar")
        assert out == f"File modified successfully: {p}"
        assert p.read_text() == "bar foo\n"

    async def test_not_found_leaves_file_untouched(self, abc: Path) -> None:
        out = await write(command="str_replace", path=str(abc), old_str="zzz", new_str="y")
        assert out == f"Error: The string to replace was not found in {abc}"
        assert abc.read_text() == "a\nb\nc\n"

    async def test_empty_new_str_deletes(self, abc: Path) -> None:
        await write(command="str_replace", path=str(abc), old_str="b\n", new_str="")
        assert abc.read_text() == "a\nc\n"

    async def test_requires_both_strings(self, abc: Path) -> None:
        out = await write(command="str_replace", path=str(abc), old_str="a")
        assert out == "Error: new_str parameter is required for str_replace command"
        out = await write(command="str_replace", path=str(abc))
        assert out == "Error: old_str and new_str parameters are required for str_replace command"

    async def test_crlf_line_endings_preserved(self, tmp_path: Path) -> None:
        p = tmp_path / "dos.txt"
        p.write_bytes(b"one\r\ntwo\r\nthree\r\n")
        await write(command="str_replace", path=str(p), old_str="two", new_str="TWO")
        assert p.read_bytes() == b"one\r\nTWO\r\nthree\r\n"

    async def test_old_str_may_span_crlf(self, tmp_path: Path) -> None:
        p = tmp_path / "dos.txt"
        p.write_bytes(b"one\r\ntwo\r\n")
        out = await write(command="str_replace", path=str(p), old_str="one\r\ntwo", new_str="both")
        assert out == f"File modified successfully: {p}"
        assert p.read_bytes() == b"both\r\n"

    async def test_empty_old_str_rejected(self, tmp_path: Path) -> None:
        p = tmp_path / "abc.txt"
        p.write_text("abc\n", encoding="utf-8")
        out = await write(command="str_replace", path=str(p), old_str="", new_str="X")
        assert out == "Error: old_str must not be empty for str_replace command"
        assert p.read_text() == "abc\n"

    async def test_publishes_update(self, abc: Path) -> None:
        rec = Recorder()
        await write(ToolContext(notify=rec), command="str_replace", path=str(abc), old_str="b", new_str="B")
        assert rec.events == [FileUpdateContent(path=str(abc), old_str="a\nb\nc\n", new_str="a\nB\nc\n")]

    async def test_missing_file(self, tmp_path: Path) -> None:
        out = await write(command="str_replace", path=str(tmp_path / "none.txt"), old_str="a", new_str="b")
        assert out.startswith("Error: Could not read file")


class TestInsert:
    async def test_insert_at_top(self, abc: Path) -> None:
        out = await write(command="insert", path=str(abc), insert_line=0, new_str="X")
        assert out == f"Content inserted successfully at line 0 in {abc}"
        assert abc.read_text() == "X\na\nb\nc\n"

    async def test_insert_after_line(self, abc: Path) -> None:
        await write(command="insert", path=str(abc), insert_line=2, new_str="X")
        assert abc.read_text() == "a\nb\nX\nc\n"

    async def test_insert_at_end(self, abc: Path) -> None:
        await write(command="insert", path=str(abc), insert_line=3, new_str="X")
        assert abc.read_text() == "a\nb\nc\nX\n"

    async def test_out_of_range(self, abc: Path) -> None:
        out = await write(command="insert", path=str(abc), insert_line=4, new_str="X")
        assert out.startswith("Error: Insert line 4 is out of range")
        assert abc.read_text() == "a\nb\nc\n"

    async def test_negative_rejected(self, abc: Path) -> None:
        out = await write(command="insert", path=str(abc), insert_line=-1, new_str="X")
        assert out.startswith("Error:")

    async def test_insert_line_must_be_int(self, abc: Path) -> None:
        out = await write(command="insert", path=str(abc), insert_line="2", new_str="X")
        assert out.startswith("Error: insert_line must be an integer")

    async def test_no_trailing_newline_preserved(self, tmp_path: Path) -> None:
        p = tmp_path / "n.txt"
        p.write_text("a\nb", encoding="utf-8")
        await write(command="insert", path=str(p), insert_line=1, new_str="X")
        assert p.read_text() == "a\nX\nb"


class TestAppend:
    async def test_adds_separator_when_missing(self, tmp_path: Path) -> None:
        p = tmp_path / "a.txt"
        p.write_text("a", encoding="utf-8")
        out = await write(command="append", path=str(p), new_str="b")
        assert out == f"Content appended successfully to {p}"
        assert p.read_text() == "a\nb"

    async def test_no_separator_after_newline(self, tmp_path: Path) -> None:
        p = tmp_path / "a.txt"
        p.write_text("a\n", encoding="utf-8")
        await write(command="append", path=str(p), new_str="b")
        assert p.read_text() == "a\nb"

    async def test_empty_file(self, tmp_path: Path) -> None:
        p = tmp_path / "a.txt"
        p.write_text("", encoding="utf-8")
        await write(command="append", path=str(p), new_str="b")
        assert p.read_text() == "b"

    async def test_missing_file_is_created(self, tmp_path: Path) -> None:
        p = tmp_path / "deep" / "a.txt"
        rec = Recorder()
        out = await write(ToolContext(notify=rec), command="append", path=str(p), new_str="b")
        assert out == f"File created and content appended: {p}"
        assert p.read_text() == "b"
        assert rec.of(FileNewContent) == [FileNewContent(path=str(p), text="b")]


class TestPreflight:
    async def test_unsupported_command(self, tmp_path: Path) -> None:
        out = await write(command="delete", path=str(tmp_path / "x"))
        assert out == "Error: Unsupported command delete"

    async def test_tilde_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        await write(command="create", path="~/t.txt", file_text="hi")
        assert (tmp_path / "t.txt").read_text() == "hi"
