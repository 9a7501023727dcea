"""Tests for ServiceResult formatting."""

from __future__ import annotations

import json

from timekeep.output.formatters import format_result
from timekeep.services.result import ServiceError, ServiceResult


class TestFormatResult:
    def test_human_success(self) -> None:
        result = ServiceResult(
            ok=True, op="add_entry", data={"id": "ent_000000000001", "fields": ["task"]}
        )
        text = format_result(result)
        assert text.splitlines()[0] == "OK: add_entry"
        assert "  id: ent_000000000001" in text
        assert '  fields: ["task"]' in text

    def test_human_quiet_drops_data(self) -> None:
        result = ServiceResult(ok=True, op="undo", data={"changed": True})
        assert format_result(result, quiet=True) == "OK: undo"

    def test_human_error(self) -> None:
        result = ServiceResult(
            ok=False, op="redo", error=ServiceError(code="EFFECT_FAILED", message="disk full")
        )
        assert format_result(result) == "ERROR: redo - disk full"

    def test_json(self) -> None:
        result = ServiceResult(ok=True, op="clear", data={"dropped": 2}, warnings=["w"])
        payload = json.loads(format_result(result, json_output=True))
        assert payload["op"] == "clear"
        assert payload["data"] == {"dropped": 2}
        assert payload["warnings"] == ["w"]
