"""Build profiler — per-stage timing for every build.

Each build gets its own ``BuildProfiler``.  Stages may overlap (static
reads run alongside document rendering), so every stage has its own timer
and ``total_ms`` is measured separately.

Thread Safety:
    A profiler belongs to one build and is driven from the event loop
    only.  Aggregate queries go through the locked ``EventLog``.

"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tinydocs.observability.events import BuildProfile, now_ns

if TYPE_CHECKING:
    from tinydocs.observability.log import EventLog

STAGES = ("discover", "documents", "sitemap", "templates", "statics")


@dataclass(slots=True)
class _Timer:
    name: str
    _start: float = 0.0
    elapsed_ms: float = 0.0

    def start(self) -> None:
        self._start = time.perf_counter()

    def stop(self) -> None:
        if self._start > 0:
            self.elapsed_ms = (time.perf_counter() - self._start) * 1000
            self._start = 0.0


class BuildProfiler:
    """Records stage timings for one build and emits a ``BuildProfile``.

    Usage::

        profiler = BuildProfiler(event_log)
        profiler.begin("docs/guide.md")
        profiler.start("discover")
        # ... walk ...
        profiler.stop("discover")
        profiler.finish(pages=12, statics=3)

    """

    __slots__ = ("_log", "_t0", "_timers", "_trigger_path", "_verbose")

    def __init__(self, log: EventLog | None = None, *, verbose: bool = False) -> None:
        self._log = log
        self._verbose = verbose
        self._trigger_path = ""
        self._t0 = 0.0
        self._timers = {name: _Timer(name=name) for name in STAGES}

    def begin(self, trigger_path: str = "") -> None:
        self._trigger_path = trigger_path
        self._t0 = time.perf_counter()
        for timer in self._timers.values():
            timer.elapsed_ms = 0.0

    def start(self, stage: str) -> None:
        self._timers[stage].start()

    def stop(self, stage: str) -> None:
        self._timers[stage].stop()

    def finish(self, *, pages: int, statics: int) -> BuildProfile:
        """Close the build and append its ``BuildProfile`` to the log."""
        total_ms = (time.perf_counter() - self._t0) * 1000 if self._t0 > 0 else 0.0
        t = self._timers
        profile = BuildProfile(
            trigger_path=self._trigger_path,
            pages=pages,
            statics=statics,
            discover_ms=t["discover"].elapsed_ms,
            documents_ms=t["documents"].elapsed_ms,
            sitemap_ms=t["sitemap"].elapsed_ms,
            templates_ms=t["templates"].elapsed_ms,
            statics_ms=t["statics"].elapsed_ms,
            total_ms=total_ms,
            timestamp_ns=now_ns(),
        )
        if self._log is not None:
            self._log.append(profile)
        if self._verbose:
            _print_summary(profile)
        return profile


def _print_summary(p: BuildProfile) -> None:
    pages = "page" if p.pages == 1 else "pages"
    stages = ", ".join(
        f"{name}: {getattr(p, f'{name}_ms'):.0f}ms" for name in STAGES
    )
    print(f"  [{p.total_ms:.0f}ms] {p.pages} {pages} built ({stages})", file=sys.stderr)


def compute_aggregate_stats(log: EventLog, *, limit: int = 100) -> dict[str, Any]:
    """Latency percentiles and per-stage averages over recent builds."""
    profiles = log.query(event_type=BuildProfile, limit=limit)
    if not profiles:
        return {"count": 0}

    totals = sorted(p.total_ms for p in profiles)
    count = len(totals)

    def percentile(pct: float) -> float:
        return totals[min(int(count * pct / 100), count - 1)]

    return {
        "count": count,
        "total_ms": {
            "p50": round(percentile(50), 1),
            "p95": round(percentile(95), 1),
            "p99": round(percentile(99), 1),
            "min": round(totals[0], 1),
            "max": round(totals[-1], 1),
        },
        "avg_by_stage_ms": {
            name: round(sum(getattr(p, f"{name}_ms") for p in profiles) / count, 1)
            for name in STAGES
        },
    }
