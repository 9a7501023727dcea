"""Tests for the built-in notifier plugin."""

from __future__ import annotations

from structlog.testing import capture_logs

from timekeep.plugins.builtins.notifier import NotifierPlugin
from timekeep.plugins.manager import PluginManager


def _dispatch(hook_name: str, **payload: object) -> list[dict]:
    pm = PluginManager()
    pm.register_plugin(NotifierPlugin(), name="notifier")
    with capture_logs() as logs:
        pm.dispatch(hook_name, **payload)
    return logs


class TestNotifierPlugin:
    def test_post_execute(self) -> None:
        logs = _dispatch("post_execute", command_id="ADD_ENTRY-1-00000000", kind="ADD_ENTRY")
        assert len(logs) == 1
        assert logs[0]["event"] == "command.applied"
        assert logs[0]["log_level"] == "info"
        assert logs[0]["kind"] == "ADD_ENTRY"
        assert logs[0]["command_id"] == "ADD_ENTRY-1-00000000"

    def test_post_undo_reports_redoable(self) -> None:
        logs = _dispatch("post_undo", command_id="X-1-00000000", kind="X", redoable=False)
        assert logs[0]["event"] == "command.undone"
        assert logs[0]["redoable"] is False

    def test_effect_failed_is_warning(self) -> None:
        logs = _dispatch(
            "effect_failed", operation="undo", command_id="X-1-00000000", kind="X", error="boom"
        )
        assert logs[0]["log_level"] == "warning"
        assert logs[0]["error"] == "boom"

    def test_history_changed_is_debug(self) -> None:
        logs = _dispatch("history_changed", can_undo=True, can_redo=False, history={})
        assert logs[0]["log_level"] == "debug"

    def test_eviction(self) -> None:
        logs = _dispatch("history_evicted", command_id="X-1-00000000", kind="X", capacity=50)
        assert logs[0]["event"] == "history.evicted"
        assert logs[0]["capacity"] == 50
