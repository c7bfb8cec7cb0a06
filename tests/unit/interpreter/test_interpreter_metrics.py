"""Tests for interpreter Prometheus metrics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from prometheus_client import CollectorRegistry

from src.interpreter import CommandInterpreter
from src.interpreter.metrics import InterpreterSLI
from src.shared.errors import PortUnavailableError

if TYPE_CHECKING:
    from tests.conftest import Board


def _commands(registry: CollectorRegistry, intent: str, outcome: str) -> float | None:
    return registry.get_sample_value(
        "interpreter_commands_total",
        {"intent": intent, "outcome": outcome},
    )


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metered(board: Board, registry: CollectorRegistry) -> CommandInterpreter:
    return CommandInterpreter(board.store, sli=InterpreterSLI(registry=registry))


@pytest.mark.unit
class TestInterpreterSLI:
    def test_record_increments_labelled_counter(self, registry: CollectorRegistry) -> None:
        sli = InterpreterSLI(registry=registry)
        sli.record("MOVE", "success")
        sli.record("MOVE", "success")
        assert _commands(registry, "MOVE", "success") == 2.0

    def test_timer_observes_on_exception(self, registry: CollectorRegistry) -> None:
        sli = InterpreterSLI(registry=registry)
        with pytest.raises(ValueError, match="boom"), sli.timer():
            raise ValueError("boom")
        assert registry.get_sample_value("interpreter_command_duration_seconds_count") == 1.0

    def test_separate_registries_do_not_collide(self) -> None:
        InterpreterSLI(registry=CollectorRegistry())
        InterpreterSLI(registry=CollectorRegistry())


@pytest.mark.unit
class TestProcessMetrics:
    async def test_success_counted(
        self,
        metered: CommandInterpreter,
        registry: CollectorRegistry,
    ) -> None:
        await metered.process("help")

        assert _commands(registry, "HELP", "success") == 1.0
        assert registry.get_sample_value("interpreter_command_duration_seconds_count") == 1.0

    async def test_failure_counted(
        self,
        metered: CommandInterpreter,
        registry: CollectorRegistry,
    ) -> None:
        await metered.process("xyzzy")
        assert _commands(registry, "UNKNOWN", "failure") == 1.0

    async def test_error_counted(
        self,
        board: Board,
        metered: CommandInterpreter,
        registry: CollectorRegistry,
    ) -> None:
        board.store.fail_on["create_task"] = PortUnavailableError("task_store")

        await metered.process("Create task Ship it in To Do")

        assert _commands(registry, "CREATE", "error") == 1.0
        assert _commands(registry, "CREATE", "success") is None
