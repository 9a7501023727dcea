"""Tests for PluginManager — discovery, registration, and hook dispatch."""

from __future__ import annotations

import logging

import pluggy
import pytest

from timekeep.plugins.builtins.notifier import NotifierPlugin
from timekeep.plugins.manager import PluginManager

hookimpl = pluggy.HookimplMarker("timekeep")


class _DummyPlugin:
    """Minimal plugin for registration tests."""

    def __init__(self) -> None:
        self.cleared: list[int] = []

    @hookimpl
    def post_clear(self, dropped: int) -> None:
        self.cleared.append(dropped)


class _FailingPlugin:
    @hookimpl
    def post_clear(self, dropped: int) -> None:
        raise RuntimeError("plugin bug")


class TestPluginManager:
    def test_register_plugin(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin(), name="dummy")
        assert "dummy" in pm.list_plugin_names()

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_DummyPlugin())
        assert "_DummyPlugin" in pm.list_plugin_names()

    def test_unregister_plugin(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin, name="dummy")
        pm.unregister(plugin)
        assert "dummy" not in pm.list_plugin_names()
        assert plugin not in pm.get_plugins()

    def test_is_loaded_false_before_discover(self) -> None:
        assert PluginManager().is_loaded is False

    def test_discover_loads_notifier_entry_point(self) -> None:
        """The notifier entry point ships with the package (editable install)."""
        pm = PluginManager()
        names = pm.discover_and_load()
        assert pm.is_loaded is True
        assert "notifier" in names
        assert all(not isinstance(p, type) for p in pm.get_plugins())

    def test_discover_skips_already_registered_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(NotifierPlugin(), name="notifier")
        pm.discover_and_load()
        assert pm.list_plugin_names().count("notifier") == 1

    @pytest.mark.parametrize(
        "hook_name",
        [
            "post_execute",
            "post_undo",
            "post_redo",
            "post_clear",
            "history_evicted",
            "history_changed",
            "effect_failed",
        ],
    )
    def test_all_hookspecs_registered(self, hook_name: str) -> None:
        assert hasattr(PluginManager().hook, hook_name)


class TestDispatch:
    def test_dispatch_calls_plugins(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register_plugin(plugin)
        assert pm.dispatch("post_clear", dropped=3) is True
        assert plugin.cleared == [3]

    def test_failing_plugin_is_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        pm = PluginManager()
        pm.register_plugin(_FailingPlugin())
        with caplog.at_level(logging.WARNING, logger="timekeep.plugins.manager"):
            assert pm.dispatch("post_clear", dropped=1) is False
        assert "post_clear failed" in caplog.text

    def test_unknown_hook(self) -> None:
        assert PluginManager().dispatch("no_such_hook") is True
