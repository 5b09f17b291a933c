# tests/test_commands.py

from __future__ import annotations

from lifetrack.cli.commands import CommandRegistry, registry
from lifetrack.core.state import AppState
from lifetrack.tasks.task_scheduler import TEST_REMINDER_ID


def run(state: AppState, line: str) -> str:
    out = registry.handle(state, line)
    assert out is not None
    return out


def test_command_registry_routes_2_and_3_params(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/b y", emit=lambda _: None) == "h3"
    assert called == {"h2": 1, "h3": 1}


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_add_list_done_flow(state: AppState) -> None:
    assert run(state, '/add "Buy milk" due=tomorrow time=09:00 priority=high category=Shopping').startswith(
        "Added: Buy milk"
    )
    run(state, "/add Stretch")

    listing = run(state, "/list active")
    assert "Buy milk" in listing and "Stretch" in listing
    assert state.last_view[0].title == "Buy milk"  # high priority first
    assert len(state.scheduler.pending()) == 1

    assert run(state, "/done 1") == "Completed: Buy milk"
    assert state.scheduler.pending() == []
    assert "Buy milk" in run(state, "/list completed")


def test_delete_restore_purge_flow(state: AppState) -> None:
    run(state, "/add Old chore")
    run(state, "/list")
    assert "Moved 1 task(s)" in run(state, "/delete 1")
    assert run(state, "/list").endswith("no tasks.")

    run(state, "/list deleted")
    assert run(state, "/restore 1") == "Restored: Old chore"

    run(state, "/delete 1")
    run(state, "/list deleted")
    assert run(state, "/purge 1") == "Permanently deleted."
    assert len(state.task_store) == 0


def test_purge_requires_deleted_task(state: AppState) -> None:
    run(state, "/add Keep me")
    run(state, "/list")
    assert "Only deleted tasks" in run(state, "/purge 1")


def test_edit_and_bad_input(state: AppState) -> None:
    run(state, "/add Report")
    run(state, "/list")
    assert run(state, "/edit 1 priority=low notes=draft") == f"Updated: Report  #{state.last_view[0].id[:8]}"
    assert state.task_store.tasks[0].notes == "draft"
    assert run(state, "/edit 1 priority=urgent").startswith("Error:")
    assert run(state, "/edit 9 title=x") == "No task matches '9'."


def test_categories_and_lead(state: AppState) -> None:
    run(state, "/categories add Gym")
    assert "already exists" in run(state, "/categories add Gym")
    assert "Gym (custom)" in run(state, "/categories")

    assert "60 minutes" in run(state, "/lead")
    assert "set to 15 min" in run(state, "/lead 15")
    assert state.database.get_lead_minutes() == 15.0


def test_lead_rejects_non_finite_and_survives_huge_values(state: AppState) -> None:
    run(state, "/add Ancient due=0001-01-01")
    run(state, "/add Trip due=+3")

    assert run(state, "/lead inf").startswith("Error:")
    assert run(state, "/lead 0").startswith("Error:")
    assert state.database.get_lead_minutes() is None

    assert "(0 reminder(s) scheduled)" in run(state, "/lead 5000000000")
    assert state.scheduler.pending() == []


def test_delete_same_task_by_position_and_id_counts_once(state: AppState) -> None:
    run(state, "/add Laundry")
    run(state, "/list")
    task_id = state.last_view[0].id

    assert "Moved 1 task(s)" in run(state, f"/delete 1 {task_id[:8]}")


def test_testreminder_registers_sample_reminder(state: AppState) -> None:
    state.scheduler.request_permission()
    reply = run(state, "/testreminder")

    assert reply.startswith("Test reminder will fire at")
    assert [r.task_id for r in state.scheduler.pending()] == [TEST_REMINDER_ID]
    assert all(t.id != TEST_REMINDER_ID for t in state.task_store.tasks)


def test_out_of_range_relative_due_is_a_user_error(state: AppState) -> None:
    assert run(state, "/add Someday due=+99999999").startswith("Error:")
    assert run(state, "/add Someday in=999999999999").startswith("Error:")
    assert len(state.task_store) == 0
