"""Rebuild pipeline — connects the watcher to the asset store and browsers.

Flow for every rebuild signal:
    1. Run a full build with the ``BuildOrchestrator``.
    2. Install the result in the ``AssetStore`` (one atomic swap).
    3. Only then tell connected browsers to reload.

A failed build leaves the installed snapshot untouched and sends a
``tinydocs:error`` event instead, so open tabs keep showing the last good
site with an error toast on top.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING

from tinydocs._errors import BuildError
from tinydocs.reactive.broadcaster import ERROR_EVENT, RELOAD_EVENT
from tinydocs.reactive.hmr import format_error_event

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from tinydocs.content.watcher import RebuildSignal
    from tinydocs.observability.collector import StackCollector
    from tinydocs.orchestrator import BuildOrchestrator, BuildResult
    from tinydocs.reactive.broadcaster import ReloadBroadcaster
    from tinydocs.reactive.store import AssetStore, Snapshot

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return time.strftime("%H:%M:%S")


class RebuildPipeline:
    """Rebuilds the site on demand and publishes the result.

    Builds run one at a time: ``run`` awaits each rebuild before taking the
    next signal, and signals that arrive meanwhile collapse in the debouncer.

    Args:
        orchestrator: Builds the site.
        store: Receives each successful build.
        broadcaster: Notifies connected browsers.
        collector: Optional observability sink.

    """

    def __init__(
        self,
        orchestrator: BuildOrchestrator,
        store: AssetStore,
        broadcaster: ReloadBroadcaster,
        *,
        collector: StackCollector | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._store = store
        self._broadcaster = broadcaster
        self._collector = collector
        self._rebuilds = 0
        self._failures = 0

    @property
    def rebuild_count(self) -> int:
        """Number of successful rebuilds since startup (excluding the first build)."""
        return self._rebuilds

    @property
    def failure_count(self) -> int:
        return self._failures

    async def initial_build(self) -> BuildResult:
        """Build and install the site once, before the server starts.

        Returns the build result; the snapshot is installed as a side effect.

        Raises:
            BuildError: The first build has no previous snapshot to fall back on.

        """
        result = await self._orchestrator.build()
        snapshot = self._store.install(result.to_snapshot_entries())
        if self._collector is not None:
            self._collector.record_install(snapshot.generation, len(snapshot))
        return result

    async def rebuild(self, trigger_path: str = "") -> Snapshot | None:
        """Rebuild, install, and broadcast.  Returns ``None`` if the build failed.

        Never raises: a failure of any kind keeps the installed snapshot and
        is reported to open tabs as a ``tinydocs:error`` event.
        """
        try:
            result = await self._orchestrator.build(trigger_path=trigger_path)
        except Exception as exc:
            self._failures += 1
            logger.error(
                "[%s] Rebuild failed: %s", _timestamp(), exc,
                exc_info=not isinstance(exc, BuildError),
            )
            notified = self._broadcaster.publish(ERROR_EVENT, format_error_event(exc))
            if self._collector is not None:
                self._collector.record_reload(ERROR_EVENT, notified, trigger_path=trigger_path)
            return None

        snapshot = self._store.install(result.to_snapshot_entries())
        notified = self._broadcaster.publish(RELOAD_EVENT, RELOAD_EVENT)
        self._rebuilds += 1

        if self._collector is not None:
            self._collector.record_install(snapshot.generation, len(snapshot))
            self._collector.record_reload(RELOAD_EVENT, notified, trigger_path=trigger_path)

        pages = "page" if len(result.pages) == 1 else "pages"
        clients = "client" if notified == 1 else "clients"
        print(
            f"  [{_timestamp()}] Rebuilt {len(result.pages)} {pages} "
            f"in {result.duration_ms:.0f}ms, reloaded {notified} {clients}",
            file=sys.stderr,
        )
        return snapshot

    async def run(self, signals: AsyncIterator[RebuildSignal]) -> None:
        """Consume rebuild signals until the source is exhausted or cancelled."""
        async for signal in signals:
            logger.debug(
                "Rebuild triggered by %d change(s) to %d file(s)",
                len(signal.events),
                len(signal.paths),
            )
            await self.rebuild(signal.trigger_path)
