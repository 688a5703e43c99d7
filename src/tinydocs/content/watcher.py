"""File watcher — turns bursts of filesystem events into rebuild signals.

Two halves joined by a bounded ``asyncio.Queue``:

- ``ChangeWatcher`` (producer) runs watchfiles in a background thread and
  hands each create/modify/delete event to the event loop.
- ``Debouncer`` (consumer) waits for a quiet interval with no new events
  and then emits one ``RebuildSignal`` for the whole burst.

The debouncer only needs a queue, so it can be driven by an in-memory
event source in tests.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

from tinydocs._errors import WatchError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_QUIET_MS = 250
DEFAULT_QUEUE_SIZE = 256

type ChangeKind = Literal["created", "modified", "deleted"]
type DebounceState = Literal["idle", "debouncing"]


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A file change detected by the watcher.

    Attributes:
        path: Absolute path to the changed file.
        kind: Type of filesystem change.

    """

    path: Path
    kind: ChangeKind


@dataclass(frozen=True, slots=True)
class RebuildSignal:
    """One burst of changes that needs a rebuild.

    Attributes:
        events: Every event of the burst, in arrival order.

    """

    events: tuple[ChangeEvent, ...]

    @property
    def paths(self) -> tuple[Path, ...]:
        """Distinct changed paths, in first-seen order."""
        return tuple(dict.fromkeys(e.path for e in self.events))

    @property
    def trigger_path(self) -> str:
        """The first changed path, for log lines."""
        return str(self.events[0].path) if self.events else ""


# Mapping from watchfiles Change enum to our kind literals.
_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}


def decode_change(raw: object) -> ChangeEvent | None:
    """Turn one raw watchfiles ``(Change, path)`` pair into a ``ChangeEvent``.

    Returns ``None`` (after logging) for anything that cannot be decoded
    or is not a create/modify/delete.
    """
    try:
        change_type, path_str = raw  # type: ignore[misc]
        kind = _CHANGE_KIND_MAP[Change(change_type)]
        return ChangeEvent(path=Path(os.fsdecode(path_str)), kind=kind)
    except (TypeError, ValueError, KeyError) as exc:
        logger.warning("Skipping undecodable file event %r: %s", raw, exc)
        return None


class ChangeWatcher:
    """Watches directories and feeds ``ChangeEvent`` objects into a queue.

    Args:
        paths: Directories to watch recursively.  The first one must exist.
        queue: Bounded queue shared with the ``Debouncer``.

    """

    def __init__(self, paths: Sequence[Path], queue: asyncio.Queue[ChangeEvent | None]) -> None:
        self._paths = tuple(paths)
        self._queue = queue
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def check(self) -> None:
        """Raise ``WatchError`` unless the primary directory can be watched."""
        primary = self._paths[0] if self._paths else None
        if primary is None or not primary.is_dir():
            msg = f"Cannot watch {primary}: not a directory"
            raise WatchError(msg)
        if not os.access(primary, os.R_OK | os.X_OK):
            msg = f"Cannot watch {primary}: permission denied"
            raise WatchError(msg)

    def start(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Start watching in a background thread.

        Raises:
            WatchError: If the primary directory is missing or unreadable.

        """
        if self.is_running:
            return
        self.check()

        self._loop = loop or asyncio.get_running_loop()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="tinydocs-watcher",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def feed(self, raw_changes: Iterable[object]) -> int:
        """Decode a batch of raw changes and offer them to the queue.

        Runs on the watcher thread.  Returns the number of events handed over.
        """
        count = 0
        for raw in raw_changes:
            event = decode_change(raw)
            if event is None:
                continue
            if self._loop is None:
                self._offer(event)
            else:
                self._loop.call_soon_threadsafe(self._offer, event)
            count += 1
        return count

    def _offer(self, event: ChangeEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            # A rebuild is already pending; this event would fold into it.
            logger.debug("Change queue full, dropping event for %s", event.path)

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles and push events to the queue."""
        from watchfiles import watch

        watch_paths = [p for p in self._paths if p.is_dir()]
        try:
            # Debouncing happens in ``Debouncer``; keep watchfiles' grouping short.
            for raw_changes in watch(
                *watch_paths,
                stop_event=self._stop_event,
                debounce=50,
                step=10,
                raise_interrupt=False,
            ):
                self.feed(raw_changes)
        except Exception:
            logger.exception("File watcher stopped unexpectedly")


class Debouncer:
    """Collapses bursts of change events into single rebuild signals.

    State machine: ``idle`` until the first event, ``debouncing`` while
    events keep arriving less than *quiet_ms* apart, then one signal is
    emitted and the state returns to ``idle``.  A ``None`` on the queue
    flushes any pending burst and ends iteration.

    Args:
        queue: Queue filled by a ``ChangeWatcher`` (or a test).
        quiet_ms: Quiet interval that ends a burst.

    """

    def __init__(
        self,
        queue: asyncio.Queue[ChangeEvent | None],
        *,
        quiet_ms: int = DEFAULT_QUIET_MS,
    ) -> None:
        self._queue = queue
        self._quiet = quiet_ms / 1000
        self._state: DebounceState = "idle"

    @property
    def state(self) -> DebounceState:
        return self._state

    async def signals(self) -> AsyncIterator[RebuildSignal]:
        """Yield one ``RebuildSignal`` per burst of events."""
        while True:
            self._state = "idle"
            first = await self._queue.get()
            if first is None:
                return

            self._state = "debouncing"
            burst = [first]
            closed = False
            while True:
                try:
                    event = await asyncio.wait_for(self._queue.get(), timeout=self._quiet)
                except TimeoutError:
                    break
                if event is None:
                    closed = True
                    break
                burst.append(event)

            self._state = "idle"
            yield RebuildSignal(events=tuple(burst))
            if closed:
                return


def make_change_queue(maxsize: int = DEFAULT_QUEUE_SIZE) -> asyncio.Queue[ChangeEvent | None]:
    """The bounded queue connecting a ``ChangeWatcher`` to a ``Debouncer``."""
    return asyncio.Queue(maxsize=maxsize)
