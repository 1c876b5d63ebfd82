"""Shared test fixtures for pyorange."""

from __future__ import annotations

import io
from typing import Any

import pytest
from rich.console import Console

from pyorange.runner import AgentRuntime
from pyorange.session.models import AssistantTurn
from pyorange.tools.builtin import build_registry
from pyorange.tools.permissions import ConfirmationGate
from tests.fixtures.fakes import FakeProvider


@pytest.fixture
def make_runtime():
    """Factory fixture for an AgentRuntime over the builtin tools and a FakeProvider."""

    def _make(turns: list[AssistantTurn | Exception], *, accept_all: bool = False, **kwargs: Any) -> AgentRuntime:
        kwargs.setdefault("retry_delay", 0)
        return AgentRuntime(FakeProvider(turns), build_registry(), ConfirmationGate(accept_all=accept_all), **kwargs)

    return _make


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), force_terminal=False, width=120, highlight=False)
