"""ID generation contracts.

Two ID families:
- Command IDs: ``{kind}-{epoch ms}-{8 hex chars}``, opaque and unique per
  submission. Used only for diagnostics and hook payloads.
- Entity IDs: ``{prefix}{12 hex chars}``, allocated *before* the creating
  command runs so that re-running ``execute`` on redo writes the same row.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import re
import secrets
import time

ENTITY_PREFIXES: dict[str, str] = {
    "project": "prj_",
    "time_entry": "ent_",
}

ID_PATTERNS: dict[str, re.Pattern[str]] = {
    "project": re.compile(r"^prj_[0-9a-f]{12}$"),
    "time_entry": re.compile(r"^ent_[0-9a-f]{12}$"),
    "command": re.compile(r"^[A-Z_]+-\d+-[0-9a-f]{8}$"),
}


def generate_command_id(kind: str) -> str:
    """Return a fresh opaque command ID, e.g. ``ADD_ENTRY-1760692800000-1a2b3c4d``."""
    return f"{kind}-{int(time.time() * 1000)}-{secrets.token_hex(4)}"


def allocate_entity_id(entity: str) -> str:
    """Pre-allocate an ID for a new *entity* (``"project"`` or ``"time_entry"``).

    Raises:
        ValueError: If *entity* has no registered prefix.
    """
    prefix = ENTITY_PREFIXES.get(entity)
    if prefix is None:
        msg = f"Unknown entity type: {entity!r}. Expected one of {sorted(ENTITY_PREFIXES)}"
        raise ValueError(msg)
    return f"{prefix}{secrets.token_hex(6)}"


def validate_id(value: str, id_type: str) -> bool:
    """Check whether *value* matches the expected pattern for *id_type*."""
    pattern = ID_PATTERNS.get(id_type)
    if pattern is None:
        return False
    return pattern.match(value) is not None
