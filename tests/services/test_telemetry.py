"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time

import anyio
import pytest

from timekeep.services.result import ServiceResult
from timekeep.services.telemetry import (
    Span,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="test").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="test")
        time.sleep(0.005)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.annotate("kind", "ADD_ENTRY")
        child.end()
        root.end()
        d = root.to_dict()
        assert d["name"] == "root"
        assert d["children"][0]["annotations"] == {"kind": "ADD_ENTRY"}


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("x") as span:
            assert span is None

    def test_no_root_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("x") as span:
            assert span is None


@traced
def _sync_op() -> ServiceResult:
    with trace_span("inner"):
        pass
    return ServiceResult(ok=True, op="sync")


@traced
async def _async_op() -> ServiceResult:
    with trace_span("coordinator.execute"):
        await anyio.sleep(0)
    return ServiceResult(ok=True, op="async", meta={"can_undo": True})


@traced
async def _async_fail() -> ServiceResult:
    raise RuntimeError("boom")


class TestTraced:
    def test_disabled_leaves_meta(self) -> None:
        assert _sync_op().meta is None
        assert anyio.run(_async_op).meta == {"can_undo": True}

    def test_sync_injects_span(self) -> None:
        enable_telemetry()
        result = _sync_op()
        tree = result.meta["telemetry"]
        assert tree["name"].endswith("_sync_op")
        assert tree["children"][0]["name"] == "inner"

    def test_async_injects_span_and_keeps_meta(self) -> None:
        enable_telemetry()
        result = anyio.run(_async_op)
        assert result.meta["can_undo"] is True
        assert result.meta["telemetry"]["children"][0]["name"] == "coordinator.execute"
        assert get_current_span() is None

    def test_async_exception_propagates(self) -> None:
        enable_telemetry()
        with pytest.raises(RuntimeError, match="boom"):
            anyio.run(_async_fail)
        assert get_current_span() is None
