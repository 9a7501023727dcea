"""Shortcut chords and key-event matching rules.

Chords are written as ``+``-joined tokens with the key last, e.g.
``"ctrl+z"`` or ``"cmd+shift+z"``.

Matching rules:
- Ctrl and Cmd are interchangeable: a binding that needs either one is
  satisfied by either, and a binding that needs neither rejects both.
- Shift and Alt must match exactly.
- Keys compare case-insensitively.
"""

from __future__ import annotations

from pydantic import BaseModel

_MODIFIER_ALIASES: dict[str, str] = {
    "ctrl": "ctrl",
    "control": "ctrl",
    "cmd": "cmd",
    "meta": "cmd",
    "super": "cmd",
    "shift": "shift",
    "alt": "alt",
    "option": "alt",
}


class KeyEvent(BaseModel):
    """A key press as delivered by the host UI.

    Attributes:
        in_text_input: Focus is inside a free-text editing control, where
            the control's native undo must not be shadowed.
    """

    model_config = {"frozen": True}

    key: str
    ctrl: bool = False
    cmd: bool = False
    shift: bool = False
    alt: bool = False
    in_text_input: bool = False


class Shortcut(BaseModel):
    """A parsed chord."""

    model_config = {"frozen": True}

    key: str
    ctrl: bool = False
    cmd: bool = False
    shift: bool = False
    alt: bool = False

    @property
    def needs_ctrl_or_cmd(self) -> bool:
        return self.ctrl or self.cmd

    def matches(self, event: KeyEvent) -> bool:
        if self.key != event.key.lower():
            return False
        if self.needs_ctrl_or_cmd != (event.ctrl or event.cmd):
            return False
        return self.shift == event.shift and self.alt == event.alt

    def chord(self) -> str:
        parts = [name for name in ("ctrl", "cmd", "shift", "alt") if getattr(self, name)]
        return "+".join([*parts, self.key])


def parse_chord(chord: str) -> Shortcut:
    """Parse ``"ctrl+shift+z"`` into a :class:`Shortcut`.

    Raises:
        ValueError: On an empty chord, an unknown modifier, or a chord
            with no key.
    """
    tokens = [t.strip().lower() for t in chord.split("+")]
    if not tokens or not tokens[-1]:
        msg = f"Invalid chord: {chord!r}"
        raise ValueError(msg)

    *modifiers, key = tokens
    if key in _MODIFIER_ALIASES:
        msg = f"Chord {chord!r} has no key (ends with a modifier)"
        raise ValueError(msg)

    flags: dict[str, bool] = {}
    for token in modifiers:
        name = _MODIFIER_ALIASES.get(token)
        if name is None:
            msg = f"Unknown modifier {token!r} in chord {chord!r}"
            raise ValueError(msg)
        flags[name] = True
    return Shortcut(key=key, **flags)


def event_from_chord(chord: str, *, in_text_input: bool = False) -> KeyEvent:
    """Build the KeyEvent a user pressing *chord* would produce."""
    shortcut = parse_chord(chord)
    return KeyEvent(
        key=shortcut.key,
        ctrl=shortcut.ctrl,
        cmd=shortcut.cmd,
        shift=shortcut.shift,
        alt=shortcut.alt,
        in_text_input=in_text_input,
    )
