"""Event model for build and preview observability.

Defines event types for the build pipeline and the live-preview engine.
Pounce lifecycle events are stored alongside them unchanged.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Build pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileProcessed:
    """One source file went through the build.

    Attributes:
        kind: What was done with the file.
        source: Relative path of the source file.
        target: URL path it was published at.
        duration_ms: Time taken in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    kind: Literal["document", "template", "static"]
    source: str
    target: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildCompleted:
    """A full build finished successfully.

    Attributes:
        pages: Number of rendered pages.
        statics: Number of static files.
        duration_ms: Wall-clock build time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    pages: int
    statics: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildFailed:
    """A build was aborted.

    Attributes:
        path: Relative path of the file that failed (may be empty).
        message: Error message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    message: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildProfile:
    """Per-stage timing of one build.

    Attributes:
        trigger_path: File that triggered the build (empty for startup builds).
        pages: Number of rendered pages.
        statics: Number of static files.
        discover_ms: Time spent walking the docs directory.
        documents_ms: Time spent rendering Markdown.
        sitemap_ms: Time spent building the navigation tree.
        templates_ms: Time spent rendering page templates.
        statics_ms: Time spent reading static files (overlaps other stages).
        total_ms: Wall-clock build time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger_path: str
    pages: int
    statics: int
    discover_ms: float
    documents_ms: float
    sitemap_ms: float
    templates_ms: float
    statics_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Preview events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SnapshotInstalled:
    """A new asset snapshot replaced the served one.

    Attributes:
        generation: Monotonic snapshot number.
        entries: Number of URL paths in the snapshot.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    generation: int
    entries: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """Connected browsers were told to reload (or shown an error).

    Attributes:
        event: SSE event name that was published.
        clients_notified: Number of subscribers that received it.
        trigger_path: File that triggered the rebuild.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    event: str
    clients_notified: int
    trigger_path: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    FileProcessed
    | BuildCompleted
    | BuildFailed
    | BuildProfile
    | SnapshotInstalled
    | ReloadBroadcast
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
