"""Asset store — the in-memory site served by the preview server.

The store holds exactly one immutable ``Snapshot``.  A finished build is
frozen into a new snapshot and published with a single reference swap, so
a request either sees the whole previous build or the whole new one.

Thread Safety:
    Readers take no lock: they read ``self._current`` once and work on
    that snapshot.  Writers serialize on a lock only to number generations.

"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tinydocs._types import Asset


@dataclass(frozen=True, slots=True)
class Snapshot:
    """An immutable URL path to asset mapping produced by one build.

    Attributes:
        assets: Read-only mapping of URL path to page or static file.
        generation: Monotonic install counter (``0`` for the empty store).

    """

    assets: Mapping[str, Asset]
    generation: int

    def get(self, url_path: str) -> Asset | None:
        return self.assets.get(url_path)

    def __len__(self) -> int:
        return len(self.assets)

    def __contains__(self, url_path: object) -> bool:
        return url_path in self.assets


_EMPTY = Snapshot(assets=MappingProxyType({}), generation=0)


class AssetStore:
    """Concurrently readable, atomically replaceable asset mapping."""

    __slots__ = ("_current", "_lock")

    def __init__(self) -> None:
        self._current = _EMPTY
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._current.generation

    def snapshot(self) -> Snapshot:
        """The currently installed snapshot, for consistent multi-key reads."""
        return self._current

    def get(self, url_path: str) -> Asset | None:
        """Look up *url_path* in the current snapshot.  Never waits on a build."""
        return self._current.get(url_path)

    def install(self, entries: Mapping[str, Asset]) -> Snapshot:
        """Replace the served assets with *entries* and return the new snapshot.

        *entries* is copied and frozen before it becomes visible.
        """
        frozen = MappingProxyType(dict(entries))
        with self._lock:
            snapshot = Snapshot(assets=frozen, generation=self._current.generation + 1)
            self._current = snapshot
        return snapshot
