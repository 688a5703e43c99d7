"""Preview routing — serve the in-memory site through Chirp.

``PreviewDispatcher`` resolves a request path against the ``AssetStore``
and is independent of any web framework.  ``ContentRouter`` mounts it on a
Chirp app as a catch-all route next to the SSE reload stream and the stats
endpoint.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

# Request is imported at runtime: Chirp evaluates handler annotations.
from chirp import EventStream, Request, Response

from tinydocs.content.document import RenderedPage
from tinydocs.reactive.hmr import EVENTS_ENDPOINT, inject_reload_script

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chirp import App, SSEEvent

    from tinydocs.observability.collector import StackCollector
    from tinydocs.reactive.broadcaster import ReloadBroadcaster
    from tinydocs.reactive.store import AssetStore

SSE_ENDPOINT = EVENTS_ENDPOINT
STATS_ENDPOINT = "/__tinydocs/stats"

_NO_CACHE = ("cache-control", "no-cache")


@dataclass(frozen=True, slots=True)
class PreviewResponse:
    """A framework-neutral response produced by the dispatcher."""

    status: int
    body: bytes
    content_type: str
    headers: tuple[tuple[str, str], ...] = ()


def resolve(request_path: str) -> str:
    """Map a request path to a store key.

    ``/`` maps to the site root (``""``); ``/guide/`` and ``/guide`` both
    map to ``guide``.
    """
    return request_path.strip("/")


class PreviewDispatcher:
    """Answers preview requests from the current asset snapshot.

    Args:
        store: The asset store holding the latest successful build.
        inject_reload: Add the live reload script to HTML pages.

    """

    __slots__ = ("_inject_reload", "_store")

    def __init__(self, store: AssetStore, *, inject_reload: bool = True) -> None:
        self._store = store
        self._inject_reload = inject_reload

    def dispatch(self, request_path: str) -> PreviewResponse:
        """Return the asset at *request_path*, or a 404 naming the path."""
        key = resolve(request_path)
        asset = self._store.get(key)

        if asset is None:
            return PreviewResponse(
                status=404,
                body=f"{request_path} not found".encode(),
                content_type="text/plain; charset=utf-8",
            )

        if isinstance(asset, RenderedPage):
            body = asset.html
            if self._inject_reload:
                body = inject_reload_script(body)
            # The injected script changes the length; let the server recompute it.
            return PreviewResponse(
                status=200,
                body=body,
                content_type=asset.media_type,
                headers=(_NO_CACHE,),
            )

        return PreviewResponse(
            status=200,
            body=asset.content,
            content_type=asset.media_type,
            headers=(_NO_CACHE,),
        )


def reload_events(broadcaster: ReloadBroadcaster) -> AsyncIterator[SSEEvent]:
    """Subscribe one preview client and stream its events.

    The subscription is registered immediately, so events published before
    the first read are not lost.  Closing the stream unsubscribes.
    """
    sub = broadcaster.subscribe()

    async def generate() -> AsyncIterator[SSEEvent]:
        try:
            async for event in broadcaster.client_generator(sub):
                yield event
        finally:
            broadcaster.unsubscribe(sub)

    return generate()


def to_chirp(response: PreviewResponse) -> Response:
    """Convert a dispatcher response into a Chirp ``Response``."""
    headers = tuple((k, v) for k, v in response.headers if k.lower() != "content-length")
    return Response(
        body=response.body,
        status=response.status,
        content_type=response.content_type,
        headers=headers,
    )


class ContentRouter:
    """Registers the preview routes on a Chirp app.

    Args:
        app: Chirp App to register routes on (must not yet be frozen).
        dispatcher: Dispatcher answering page and static requests.

    """

    def __init__(self, app: App, dispatcher: PreviewDispatcher) -> None:
        self._app = app
        self._dispatcher = dispatcher

    def register_pages(self) -> None:
        """Register ``/`` and a catch-all route that serve from the asset store."""
        dispatcher = self._dispatcher

        async def page_handler(request: Request) -> Response:
            return to_chirp(dispatcher.dispatch(request.path))

        page_handler.__name__ = "tinydocs_page"
        page_handler.__qualname__ = "ContentRouter.tinydocs_page"

        self._app.route("/", name="tinydocs:root")(page_handler)
        self._app.route("/{path:path}", name="tinydocs:page")(page_handler)

    def register_sse_endpoint(self, broadcaster: ReloadBroadcaster) -> None:
        """Register the ``/__tinydocs/events`` SSE stream.

        Each connection subscribes to the broadcaster and is removed again
        when the client disconnects.
        """

        async def sse_handler(request: Request) -> Any:
            return EventStream(reload_events(broadcaster))

        sse_handler.__name__ = "tinydocs_sse"
        sse_handler.__qualname__ = "ContentRouter.tinydocs_sse"

        self._app.route(SSE_ENDPOINT, name="tinydocs:events")(sse_handler)

    def register_stats_endpoint(self, collector: StackCollector) -> None:
        """Register the ``/__tinydocs/stats`` JSON endpoint."""

        async def stats_handler(request: Request) -> Response:
            from tinydocs.observability.profiler import compute_aggregate_stats

            payload = json.dumps(
                {
                    "builds": compute_aggregate_stats(collector.log),
                    "event_log": collector.log.stats(),
                },
                indent=2,
            )
            return Response(body=payload, status=200, content_type="application/json")

        stats_handler.__name__ = "tinydocs_stats"
        stats_handler.__qualname__ = "ContentRouter.tinydocs_stats"

        self._app.route(STATS_ENDPOINT, name="tinydocs:stats")(stats_handler)
