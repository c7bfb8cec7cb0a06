"""Tests for create, move, delete and priority commands."""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

import pytest

from src.interpreter import CommandInterpreter
from src.interpreter.results import ActionTag, FailureReason
from src.shared.types import ActivityAction, Priority
from tests.fakes import RecordingTaskStore

if TYPE_CHECKING:
    from src.shared.types import Task, TaskQuery
    from tests.conftest import Board


class _VanishingStore(RecordingTaskStore):
    """Tasks disappear right after the catalog read sees them."""

    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        tasks = await super().list_tasks(query)
        for task in tasks:
            self._tasks.pop(task.id, None)
        return tasks


@pytest.mark.unit
class TestCreate:
    async def test_called_title_in_named_column(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Create task called Fix bug in To Do")

        assert result.success
        assert result.action == ActionTag.CREATE
        assert result.message == '✅ Created task "Fix bug" in "To Do" column (Website).'
        created = result.data["task"]
        assert created["title"] == "Fix bug"
        assert created["column_id"] == str(board.columns["todo"].id)
        assert created["priority"] == "medium"
        assert board.store.call_names().count("log_activity") == 1

    async def test_quoted_title_in_project_defaults_to_first_column(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Create task 'Ship v2' in Mobile App")

        assert result.success
        assert result.data["task"]["column_id"] == str(board.columns["backlog"].id)

    async def test_priority_and_label_outside_title(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process(
            "Create a new Bug task called Audit logs with high priority"
        )

        assert result.success
        task = result.data["task"]
        assert task["title"] == "Audit logs"
        assert task["priority"] == "high"
        assert task["labels"] == ["Bug"]
        assert task["column_name"] == "To Do"
        activity = await board.store.list_activity(UUID(task["id"]))
        assert {e.action for e in activity} == {
            ActivityAction.CREATED,
            ActivityAction.LABEL_ADDED,
        }

    async def test_new_task_goes_last(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Create task called Polish in To Do")
        assert result.data["task"]["position"] == 3000

    async def test_missing_title(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Create task")

        assert not result.success
        assert result.reason == FailureReason.MISSING_ARGUMENT
        assert "Use quotes for the title" in result.message
        assert board.store.writes() == []

    async def test_board_without_columns(self) -> None:
        store = RecordingTaskStore()
        await store.create_project("Empty")

        result = await CommandInterpreter(store).process("Create task called Anything")

        assert result.reason == FailureReason.NO_STRUCTURAL_TARGET
        assert store.writes() == []


@pytest.mark.unit
class TestMove:
    async def test_move_named_task(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Move Design homepage to Done")

        assert result.success
        assert result.action == ActionTag.MOVE
        assert result.message == '✅ Moved "Design homepage" from "In Progress" to "Done".'
        moved = await board.current("Design homepage")
        assert moved.column_id == board.columns["done"].id
        assert moved.position == 4000
        activity = await board.store.list_activity(moved.id)
        assert activity[0].details == 'Moved from "In Progress" to "Done"'

    async def test_nonexistent_task(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Move nonexistent task to Done")

        assert not result.success
        assert result.reason == FailureReason.NO_TARGET
        assert board.store.writes() == []

    async def test_destination_with_to_in_its_name(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        await interpreter.process("Move Design homepage to To Do")
        moved = await board.current("Design homepage")
        assert moved.column_id == board.columns["todo"].id

    async def test_already_in_target(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Move Fix login bug to To Do")

        assert result.success
        assert result.data["task_count"] == 0
        assert "already in" in result.message
        assert board.store.writes() == []

    async def test_bulk_move_between_columns(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Move all tasks in To Do to In Progress")

        assert result.success
        assert result.data["task_count"] == 2
        assert result.message == '✅ Moved 2 task(s) in "To Do" column to "In Progress".'
        for title in ("Fix login bug", "Write docs"):
            task = await board.current(title)
            assert task.column_id == board.columns["progress"].id
        positions = sorted(
            [(await board.current(t)).position for t in ("Fix login bug", "Write docs")]
        )
        assert positions == [2000, 3000]

    async def test_bulk_move_keeps_same_named_columns_of_other_projects(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        mobile = board.projects["mobile"]
        mobile_todo = await board.store.create_column(mobile.id, "To Do")
        mobile_done = await board.store.create_column(mobile.id, "Done")
        queued = await board.store.create_task(mobile_todo.id, "Dark mode")
        shipped = await board.store.create_task(mobile_done.id, "App icon")
        board.store.calls.clear()

        result = await interpreter.process("Move all tasks in To Do to Done")

        assert result.success
        assert result.data["task_count"] == 1
        assert result.data["column_id"] == str(mobile_done.id)
        assert board.store.writes() == ["move_task"]
        tasks = {t.id: t for t in await board.store.list_tasks()}
        assert tasks[queued.id].column_id == mobile_done.id
        assert tasks[shipped.id].column_id == mobile_done.id
        for title in ("Fix login bug", "Write docs"):
            assert (await board.current(title)).column_id == board.columns["todo"].id

    async def test_bulk_move_from_uniquely_named_column_crosses_projects(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Move all tasks in Backlog to Done")

        assert result.success
        assert result.data["task_count"] == 2
        for title in ("Push notifications", "Crash report"):
            assert (await board.current(title)).column_id == board.columns["done"].id

    async def test_bulk_move_without_destination(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Move all tasks")

        assert not result.success
        assert board.store.writes() == []

    async def test_mark_done(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Mark Design homepage as done")

        assert result.success
        moved = await board.current("Design homepage")
        assert moved.column_id == board.columns["done"].id

    async def test_finish_task(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Finish task Write docs")

        assert result.success
        moved = await board.current("Write docs")
        assert moved.column_id == board.columns["done"].id

    async def test_move_without_destination(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Move Write docs somewhere")

        assert result.reason == FailureReason.MISSING_ARGUMENT
        assert board.store.writes() == []


@pytest.mark.unit
class TestDelete:
    async def test_bulk_delete_needs_confirmation(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Delete all tasks in Done")

        assert not result.success
        assert result.reason == FailureReason.AMBIGUOUS_BULK_DESTRUCTIVE
        assert result.data == {"task_count": 3}
        assert "delete_task" not in board.store.call_names()
        assert len(await board.store.list_tasks()) == 8

    async def test_confirmed_bulk_delete(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Delete all tasks in Done", confirm=True)

        assert result.success
        assert result.action == ActionTag.DELETE
        assert result.data == {"deleted_count": 3}
        remaining = {t.title for t in await board.store.list_tasks()}
        assert remaining.isdisjoint({"Setup CI", "Release notes", "Deploy staging"})

    async def test_several_named_tasks_also_gated(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Delete Fix login bug and Write docs")

        assert result.reason == FailureReason.AMBIGUOUS_BULK_DESTRUCTIVE
        assert board.store.writes() == []

    async def test_single_delete_logs_activity(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        task_id = board.tasks["Write docs"].id

        result = await interpreter.process("Delete task Write docs")

        assert result.success
        assert result.data == {"deleted_count": 1}
        names = board.store.call_names()
        assert names.index("delete_task") < names.index("log_activity")
        activity = await board.store.list_activity(task_id)
        assert activity[0].action == ActivityAction.DELETED

    async def test_task_gone_before_delete(self) -> None:
        store = _VanishingStore()
        project = await store.create_project("Website")
        column = await store.create_column(project.id, "To Do")
        task = await store.create_task(column.id, "Write docs")

        result = await CommandInterpreter(store).process("Delete task Write docs")

        assert not result.success
        assert result.reason == FailureReason.NO_TARGET
        assert store.call_names().count("delete_task") == 1
        assert await store.list_activity(task.id) == []

    async def test_nothing_to_delete(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Delete task Nothing here")

        assert result.reason == FailureReason.NO_TARGET
        assert board.store.writes() == []


@pytest.mark.unit
class TestPriority:
    async def test_set_priority_on_named_task(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Set priority high for Write docs")

        assert result.success
        assert result.action == ActionTag.UPDATE
        assert result.data == {"priority": "high", "task_count": 1}
        task = await board.current("Write docs")
        assert task.priority == Priority.HIGH
        activity = await board.store.list_activity(task.id)
        assert activity[0].action == ActivityAction.PRIORITY_CHANGED
        assert activity[0].details == 'Priority changed from "low" to "high"'

    async def test_bulk_priority(self, board: Board, interpreter: CommandInterpreter) -> None:
        result = await interpreter.process("Change all tasks in Done to low priority")

        assert result.data["task_count"] == 3
        for title in ("Setup CI", "Release notes", "Deploy staging"):
            assert (await board.current(title)).priority == Priority.LOW

    async def test_update_without_details(
        self,
        board: Board,
        interpreter: CommandInterpreter,
    ) -> None:
        result = await interpreter.process("Update Write docs")

        assert result.reason == FailureReason.MISSING_ARGUMENT
        assert board.store.writes() == []
