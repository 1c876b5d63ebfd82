"""Tests for the human confirmation gate."""

from __future__ import annotations

import asyncio

import pytest

from pyorange.tools.builtin_tools.bash_tool import BashTool
from pyorange.tools.builtin_tools.file_write import FsWriteTool
from pyorange.tools.permissions import ConfirmationGate, GateState, UnknownConfirmationError, is_affirmative


@pytest.mark.parametrize("answer", ["y", "Y"])
def test_affirmative_answers(answer: str) -> None:
    assert is_affirmative(answer)


@pytest.mark.parametrize("answer", ["", "n", "yes", " y", "y ", "ok", None])
def test_everything_else_denies(answer) -> None:
    assert not is_affirmative(answer)


class TestNeedsHuman:
    def test_destructive_bash_needs_human(self) -> None:
        assert ConfirmationGate().needs_human(BashTool(), {"command": "sudo reboot"})

    def test_benign_bash_does_not(self) -> None:
        assert not ConfirmationGate().needs_human(BashTool(), {"command": "ls"})

    def test_accept_all_skips(self) -> None:
        assert not ConfirmationGate(accept_all=True).needs_human(BashTool(), {"command": "sudo reboot"})

    def test_file_writes_never_gated(self) -> None:
        assert not ConfirmationGate().needs_human(FsWriteTool(), {"command": "create", "path": "/etc/hosts"})


class TestGate:
    async def test_approve(self) -> None:
        gate = ConfirmationGate()
        pending = gate.open("t1", "execute_bash", {"command": "sudo ls"})
        assert pending.state is GateState.AWAITING_HUMAN
        assert gate.resolve("t1", True) is GateState.APPROVED
        assert await gate.wait("t1") is True
        assert gate.pending == []

    async def test_deny(self) -> None:
        gate = ConfirmationGate()
        gate.open("t1", "execute_bash", {})
        assert gate.resolve("t1", False) is GateState.DENIED
        assert await gate.wait("t1") is False

    async def test_wait_suspends_until_resolved(self) -> None:
        gate = ConfirmationGate()
        gate.open("t1", "execute_bash", {})
        waiter = asyncio.create_task(gate.wait("t1"))
        await asyncio.sleep(0)
        assert not waiter.done()
        gate.resolve("t1", True)
        assert await waiter is True

    async def test_independent_ids(self) -> None:
        gate = ConfirmationGate()
        gate.open("a", "execute_bash", {})
        gate.open("b", "execute_bash", {})
        gate.resolve("b", False)
        assert await gate.wait("b") is False
        assert [p.tool_use_id for p in gate.pending] == ["a"]

    async def test_duplicate_open(self) -> None:
        gate = ConfirmationGate()
        gate.open("t1", "execute_bash", {})
        with pytest.raises(ValueError):
            gate.open("t1", "execute_bash", {})

    async def test_unknown_id(self) -> None:
        gate = ConfirmationGate()
        with pytest.raises(UnknownConfirmationError):
            gate.resolve("ghost", True)
        with pytest.raises(UnknownConfirmationError):
            await gate.wait("ghost")

    async def test_cancel(self) -> None:
        gate = ConfirmationGate()
        pending = gate.open("t1", "execute_bash", {})
        gate.cancel("t1")
        assert pending.future.cancelled()
        assert gate.pending == []
        gate.cancel("t1")
