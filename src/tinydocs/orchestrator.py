"""Build orchestrator — one full build of the docs directory.

Pipeline:
    1. Discover every source file (once).
    2. Render all documents concurrently.
    3. Barrier, then derive URL paths, reject collisions, build the sitemap.
    4. Barrier, then render every page template concurrently.
    5. Read all static files concurrently, overlapping steps 2 to 4.

Per-file work runs on worker threads (``asyncio.to_thread``) bounded by a
semaphore.  A failing file never cancels its siblings; their results are
discarded and the build raises ``BuildError`` naming the failing path.
Nothing is returned (and so nothing is installed or written) unless every
file succeeded.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tinydocs._errors import BuildError, ReadError, TinydocsError
from tinydocs.content.discovery import discover, read_static
from tinydocs.content.document import (
    DocumentRenderer,
    RenderedPage,
    output_file_for,
    url_path_for,
)
from tinydocs.content.navigation import build_sitemap
from tinydocs.observability.profiler import BuildProfiler

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from tinydocs._types import Asset
    from tinydocs.config import SiteConfig
    from tinydocs.content.discovery import SourceEntry, StaticAssetEntry
    from tinydocs.content.document import RenderedDocument
    from tinydocs.content.navigation import SitemapNode
    from tinydocs.observability.collector import StackCollector
    from tinydocs.theme.renderer import TemplateRenderer


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Everything one successful build produced.

    Attributes:
        pages: Rendered pages ordered by URL path.
        statics: Static files ordered by URL path.
        sitemap: Navigation tree embedded in every page.
        duration_ms: Wall-clock build time.

    """

    pages: tuple[RenderedPage, ...]
    statics: tuple[StaticAssetEntry, ...]
    sitemap: SitemapNode
    duration_ms: float

    def to_snapshot_entries(self) -> dict[str, Asset]:
        """Map every URL path to its asset, ready for ``AssetStore.install``."""
        entries: dict[str, Asset] = {p.url_path: p for p in self.pages}
        entries.update((s.url_path, s) for s in self.statics)
        return entries


@dataclass(frozen=True, slots=True)
class _DocumentOutput:
    entry: SourceEntry
    url_path: str
    rendered: RenderedDocument


class BuildOrchestrator:
    """Runs full builds for one site configuration.

    Args:
        config: Site configuration.
        renderer: Page template renderer.  Built from the theme fallback
            chain when omitted.
        document_renderer: Markdown renderer.  A fresh one when omitted.
        collector: Optional event collector for per-file and per-stage events.
        verbose: Print a per-stage timing line after every build.

    """

    __slots__ = ("_collector", "_config", "_documents", "_renderer", "_verbose")

    def __init__(
        self,
        config: SiteConfig,
        *,
        renderer: TemplateRenderer | None = None,
        document_renderer: DocumentRenderer | None = None,
        collector: StackCollector | None = None,
        verbose: bool = False,
    ) -> None:
        if renderer is None:
            from tinydocs.theme import get_template_dirs
            from tinydocs.theme.renderer import TemplateRenderer

            renderer = TemplateRenderer(get_template_dirs(config))
        self._config = config
        self._renderer = renderer
        self._documents = document_renderer or DocumentRenderer()
        self._collector = collector
        self._verbose = verbose

    @property
    def config(self) -> SiteConfig:
        return self._config

    def build_sync(self, *, trigger_path: str = "") -> BuildResult:
        """Run :meth:`build` on a fresh event loop."""
        return asyncio.run(self.build(trigger_path=trigger_path))

    async def build(self, *, trigger_path: str = "") -> BuildResult:
        """Run one full build.

        Raises:
            BuildError: If discovery or any single file fails, or two
                sources publish the same URL path.

        """
        # Templates may have changed since the last build.
        self._renderer.reload()
        log = self._collector.log if self._collector is not None else None
        profiler = BuildProfiler(log, verbose=self._verbose)
        profiler.begin(trigger_path)
        limit = asyncio.Semaphore(max(1, self._config.workers))
        t0 = time.perf_counter()

        try:
            profiler.start("discover")
            entries = await asyncio.to_thread(
                discover, self._config.docs_path, follow_links=self._config.follow_links
            )
            profiler.stop("discover")

            documents = [e for e in entries if e.is_document]
            statics = [e for e in entries if not e.is_document]

            pages_outcome, statics_outcome = await asyncio.gather(
                self._build_pages(documents, limit, profiler),
                self._read_statics(statics, limit, profiler),
                return_exceptions=True,
            )
            for outcome in (pages_outcome, statics_outcome):
                if isinstance(outcome, BaseException):
                    raise outcome

            pages, sitemap = pages_outcome  # type: ignore[misc]
            static_assets: list[StaticAssetEntry] = statics_outcome  # type: ignore[assignment]
            _reject_static_collisions(pages, static_assets)
        except BuildError as exc:
            self._record_failure(exc)
            raise
        except TinydocsError as exc:
            error = _as_build_error(getattr(exc, "path", ""), exc)
            self._record_failure(error)
            raise error from exc

        result = BuildResult(
            pages=tuple(sorted(pages, key=lambda p: p.url_path)),
            statics=tuple(sorted(static_assets, key=lambda s: s.url_path)),
            sitemap=sitemap,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
        profiler.finish(pages=len(result.pages), statics=len(result.statics))
        if self._collector is not None:
            self._collector.record_build(
                pages=len(result.pages),
                statics=len(result.statics),
                duration_ms=result.duration_ms,
            )
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _build_pages(
        self,
        documents: Sequence[SourceEntry],
        limit: asyncio.Semaphore,
        profiler: BuildProfiler,
    ) -> tuple[list[RenderedPage], SitemapNode]:
        profiler.start("documents")
        outputs = await _run_all(documents, self._render_document, limit, lambda e: e.relative_path)
        profiler.stop("documents")

        # Barrier: the sitemap needs every URL path.
        profiler.start("sitemap")
        _reject_duplicate_urls(outputs)
        sitemap = build_sitemap(o.url_path for o in outputs)
        profiler.stop("sitemap")

        # Barrier: every template embeds the finished sitemap.
        profiler.start("templates")
        pages = await _run_all(
            outputs,
            lambda o: self._render_page(o, sitemap),
            limit,
            lambda o: o.entry.relative_path,
        )
        profiler.stop("templates")
        return pages, sitemap

    async def _read_statics(
        self,
        statics: Sequence[SourceEntry],
        limit: asyncio.Semaphore,
        profiler: BuildProfiler,
    ) -> list[StaticAssetEntry]:
        profiler.start("statics")
        assets = await _run_all(statics, self._read_static, limit, lambda e: e.relative_path)
        profiler.stop("statics")
        return assets

    # ------------------------------------------------------------------
    # Per-file work (worker threads)
    # ------------------------------------------------------------------

    def _render_document(self, entry: SourceEntry) -> _DocumentOutput:
        t0 = time.perf_counter()
        try:
            text = entry.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Failed to read document {entry.relative_path}: {exc}"
            raise ReadError(msg, entry.relative_path) from exc

        rendered = self._documents.render(text, source=entry.relative_path)
        url_path = url_path_for(entry.relative_path)
        self._record("document", entry.relative_path, url_path, t0)
        return _DocumentOutput(entry=entry, url_path=url_path, rendered=rendered)

    def _render_page(self, output: _DocumentOutput, sitemap: SitemapNode) -> RenderedPage:
        t0 = time.perf_counter()
        front_matter = output.rendered.front_matter
        html = self._renderer.render(
            content=output.rendered.html,
            config=self._config,
            sitemap=sitemap,
            current_path=output.url_path,
            front_matter=front_matter.as_context() if front_matter is not None else None,
        )
        self._record("template", output.entry.relative_path, output.url_path, t0)
        return RenderedPage(
            html=html,
            url_path=output.url_path,
            front_matter=front_matter,
            source=output.entry.relative_path,
        )

    def _read_static(self, entry: SourceEntry) -> StaticAssetEntry:
        t0 = time.perf_counter()
        asset = read_static(entry)
        self._record("static", entry.relative_path, asset.url_path, t0)
        return asset

    def _record_failure(self, error: BuildError) -> None:
        if self._collector is not None:
            self._collector.record_build_failure(error.path, str(error))

    def _record(self, kind: Any, source: str, target: str, t0: float) -> None:
        if self._collector is not None:
            self._collector.record_file(
                kind, source, target, duration_ms=(time.perf_counter() - t0) * 1000
            )


async def _run_all[T, R](
    items: Sequence[T],
    func: Callable[[T], R],
    limit: asyncio.Semaphore,
    path_of: Callable[[T], str],
) -> list[R]:
    """Run *func* over *items* on worker threads, at most ``limit`` at a time.

    Waits for every item before reporting.  The first failure in item
    order is raised as ``BuildError``.
    """

    async def _one(item: T) -> R:
        async with limit:
            return await asyncio.to_thread(func, item)

    results = await asyncio.gather(*(_one(item) for item in items), return_exceptions=True)
    for item, result in zip(items, results, strict=True):
        if isinstance(result, BuildError):
            raise result
        if isinstance(result, Exception):
            path = path_of(item)
            raise BuildError(f"Build failed at {path}: {result}", path) from result
        if isinstance(result, BaseException):
            raise result
    return results  # type: ignore[return-value]


def _as_build_error(path: str, exc: BaseException) -> BuildError:
    if isinstance(exc, BuildError):
        return exc
    path = getattr(exc, "path", "") or path
    where = f" at {path}" if path else ""
    return BuildError(f"Build failed{where}: {exc}", path)


def _reject_duplicate_urls(outputs: Sequence[_DocumentOutput]) -> None:
    seen: dict[str, str] = {}
    for output in outputs:
        other = seen.setdefault(output.url_path, output.entry.relative_path)
        if other != output.entry.relative_path:
            msg = (
                f"URL path {output.url_path or '/'!r} is produced by both "
                f"{other} and {output.entry.relative_path}"
            )
            raise BuildError(msg, output.entry.relative_path)


def _reject_static_collisions(
    pages: Sequence[RenderedPage],
    statics: Sequence[StaticAssetEntry],
) -> None:
    # A static clashes with a page on its URL path or on the page's output file.
    sources = {p.url_path: p.source for p in pages}
    sources.update((output_file_for(p.url_path), p.source) for p in pages)
    for asset in statics:
        if asset.url_path in sources:
            msg = (
                f"URL path {asset.url_path!r} is produced by both "
                f"{sources[asset.url_path]} and {asset.url_path}"
            )
            raise BuildError(msg, asset.url_path)
