"""Build and preview observability.

Collects events from:
- **Pounce**: Connection lifecycle of the preview server
- **Build**: Per-file work, stage timings, completed and failed builds
- **Preview**: Snapshot installs and reload broadcasts

All events are frozen dataclasses with nanosecond timestamps.  The preview
server exposes a summary at ``/__tinydocs/stats``.

Quick Start:
    >>> from tinydocs.observability import StackCollector, EventLog
    >>> collector = StackCollector(EventLog())
    >>> # Pass collector to the orchestrator and to Pounce as lifecycle_collector

"""

from tinydocs.observability.collector import StackCollector
from tinydocs.observability.events import (
    BuildCompleted,
    BuildFailed,
    BuildProfile,
    FileProcessed,
    ReloadBroadcast,
    SnapshotInstalled,
    StackEvent,
    now_ns,
)
from tinydocs.observability.log import EventLog
from tinydocs.observability.profiler import BuildProfiler, compute_aggregate_stats

__all__ = [
    "BuildCompleted",
    "BuildFailed",
    "BuildProfile",
    "BuildProfiler",
    "EventLog",
    "FileProcessed",
    "ReloadBroadcast",
    "SnapshotInstalled",
    "StackCollector",
    "StackEvent",
    "compute_aggregate_stats",
    "now_ns",
]
