"""Stack collector — one sink for server, build, and preview events.

Implements Pounce's ``LifecycleCollector`` protocol so it can be handed to
the preview server, and offers typed ``record_*`` helpers for the build
orchestrator and the rebuild pipeline.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked.

"""

from __future__ import annotations

from typing import Any, Literal

from tinydocs.observability.events import (
    BuildCompleted,
    BuildFailed,
    FileProcessed,
    ReloadBroadcast,
    SnapshotInstalled,
    now_ns,
)
from tinydocs.observability.log import EventLog


class StackCollector:
    """Records events into an ``EventLog``.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Pounce LifecycleCollector protocol -----

    def record(self, event: Any) -> None:
        """Record a Pounce connection lifecycle event as-is."""
        self._log.append(event)

    # ----- Build events -----

    def record_file(
        self,
        kind: Literal["document", "template", "static"],
        source: str,
        target: str,
        *,
        duration_ms: float = 0.0,
    ) -> None:
        self._log.append(
            FileProcessed(
                kind=kind,
                source=source,
                target=target,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_build(self, *, pages: int, statics: int, duration_ms: float) -> None:
        self._log.append(
            BuildCompleted(
                pages=pages,
                statics=statics,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_build_failure(self, path: str, message: str) -> None:
        self._log.append(BuildFailed(path=path, message=message, timestamp_ns=now_ns()))

    # ----- Preview events -----

    def record_install(self, generation: int, entries: int) -> None:
        self._log.append(
            SnapshotInstalled(generation=generation, entries=entries, timestamp_ns=now_ns())
        )

    def record_reload(
        self,
        event: str,
        clients_notified: int,
        *,
        trigger_path: str = "",
    ) -> None:
        self._log.append(
            ReloadBroadcast(
                event=event,
                clients_notified=clients_notified,
                trigger_path=trigger_path,
                timestamp_ns=now_ns(),
            )
        )
