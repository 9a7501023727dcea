"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, timekeep.toml only contains
overrides. A fresh install needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from timekeep.domain.history import DEFAULT_CAPACITY

# --- timekeep.toml sections ---


class HistoryConfig(BaseModel):
    """[history] section."""

    model_config = {"frozen": True}

    capacity: int = Field(default=DEFAULT_CAPACITY, ge=1)
    # false: only the first of several consecutive undos is redoable
    symmetric_undo: bool = False
    busy_policy: Literal["queue", "reject"] = "queue"


class KeybindingConfig(BaseModel):
    """[keybindings] section."""

    model_config = {"frozen": True}

    undo: list[str] = Field(default_factory=lambda: ["ctrl+z"])
    redo: list[str] = Field(default_factory=lambda: ["ctrl+y", "cmd+shift+z"])
    allow_in_inputs: bool = False


class StoreConfig(BaseModel):
    """[store] section."""

    model_config = {"frozen": True}

    db_name: str = "timekeep.db"


class TimekeepConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    history: HistoryConfig = Field(default_factory=HistoryConfig)
    keybindings: KeybindingConfig = Field(default_factory=KeybindingConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
