"""Tests for tinydocs.observability.profiler — build stage timing."""

from __future__ import annotations

import io
import sys
import time
from unittest.mock import patch

from tinydocs.observability.events import BuildProfile, now_ns
from tinydocs.observability.log import EventLog
from tinydocs.observability.profiler import STAGES, BuildProfiler, compute_aggregate_stats


def _profile(total_ms: float) -> BuildProfile:
    return BuildProfile(
        trigger_path="", pages=1, statics=0,
        discover_ms=1.0, documents_ms=2.0, sitemap_ms=0.0,
        templates_ms=3.0, statics_ms=0.0, total_ms=total_ms,
        timestamp_ns=now_ns(),
    )


class TestBuildProfiler:
    """Tests for the build profiler."""

    def test_begin_and_finish_emits_event(self) -> None:
        log = EventLog()
        profiler = BuildProfiler(log)

        profiler.begin("docs/page.md")
        profiler.start("documents")
        profiler.stop("documents")
        profile = profiler.finish(pages=2, statics=1)

        assert isinstance(profile, BuildProfile)
        assert profile.trigger_path == "docs/page.md"
        assert profile.pages == 2
        assert profile.statics == 1
        assert profile.total_ms > 0
        assert len(log) == 1

    def test_stage_timing(self) -> None:
        profiler = BuildProfiler()
        profiler.begin()
        profiler.start("templates")
        time.sleep(0.01)
        profiler.stop("templates")
        profile = profiler.finish(pages=0, statics=0)
        assert profile.templates_ms >= 5
        assert profile.discover_ms == 0.0

    def test_without_log(self) -> None:
        profiler = BuildProfiler()
        profiler.begin()
        assert profiler.finish(pages=0, statics=0).pages == 0

    def test_verbose_prints_summary(self) -> None:
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            profiler = BuildProfiler(verbose=True)
            profiler.begin()
            profiler.finish(pages=1, statics=0)
        output = buf.getvalue()
        assert "1 page built" in output
        for stage in STAGES:
            assert stage in output

    def test_quiet_by_default(self) -> None:
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            profiler = BuildProfiler()
            profiler.begin()
            profiler.finish(pages=1, statics=0)
        assert buf.getvalue() == ""


class TestAggregateStats:
    """compute_aggregate_stats — percentiles over recent builds."""

    def test_empty(self) -> None:
        assert compute_aggregate_stats(EventLog()) == {"count": 0}

    def test_percentiles(self) -> None:
        log = EventLog()
        for ms in range(1, 101):
            log.append(_profile(float(ms)))
        stats = compute_aggregate_stats(log)
        assert stats["count"] == 100
        assert stats["total_ms"]["min"] == 1.0
        assert stats["total_ms"]["max"] == 100.0
        assert stats["total_ms"]["p50"] == 51.0
        assert stats["avg_by_stage_ms"]["templates"] == 3.0

    def test_limit(self) -> None:
        log = EventLog()
        for ms in range(10):
            log.append(_profile(float(ms)))
        assert compute_aggregate_stats(log, limit=3)["count"] == 3
