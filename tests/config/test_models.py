"""Tests for config models — defaults and sparse overrides."""

import pytest
from pydantic import ValidationError

from timekeep.config.models import HistoryConfig, KeybindingConfig, StoreConfig, TimekeepConfig


class TestTimekeepConfig:
    def test_full_defaults(self) -> None:
        cfg = TimekeepConfig()
        assert cfg.history.capacity == 50
        assert cfg.history.symmetric_undo is False
        assert cfg.history.busy_policy == "queue"
        assert cfg.keybindings.undo == ["ctrl+z"]
        assert cfg.keybindings.redo == ["ctrl+y", "cmd+shift+z"]
        assert cfg.keybindings.allow_in_inputs is False
        assert cfg.store.db_name == "timekeep.db"

    def test_sparse_section(self) -> None:
        cfg = TimekeepConfig.model_validate({"history": {"capacity": 3}})
        assert cfg.history.capacity == 3
        assert cfg.history.busy_policy == "queue"

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            StoreConfig().db_name = "other.db"  # type: ignore[misc]


class TestHistoryConfig:
    def test_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            HistoryConfig(capacity=0)

    def test_unknown_busy_policy(self) -> None:
        with pytest.raises(ValidationError):
            HistoryConfig(busy_policy="drop")  # type: ignore[arg-type]


class TestKeybindingConfig:
    def test_lists_are_independent(self) -> None:
        a, b = KeybindingConfig(), KeybindingConfig()
        assert a.undo is not b.undo
