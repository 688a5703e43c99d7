"""Tinydocs application — build, serve, and defaults.

The three public functions are the primary entry points.  ``build`` writes
the site to disk once; ``serve`` keeps it in memory, serves it through a
Chirp app on Pounce, and rebuilds whenever a watched file changes.
"""

import asyncio
import logging
import socket
import sys
import webbrowser
from pathlib import Path
from typing import TYPE_CHECKING

from tinydocs._errors import BindError
from tinydocs.config import SiteConfig
from tinydocs.config_loader import DEFAULT_CONFIG_FILENAME, dump_defaults, load_config

if TYPE_CHECKING:
    from chirp import App

    from tinydocs.content.watcher import ChangeWatcher
    from tinydocs.export.static import ExportResult
    from tinydocs.reactive.pipeline import RebuildPipeline

logger = logging.getLogger(__name__)


def _create_chirp_app(config: SiteConfig) -> App:
    """Create the Chirp App that serves the preview.

    Pages are rendered by the build, not by Chirp, so the app only needs a
    template directory to satisfy its configuration.
    """
    from chirp import App, AppConfig

    from tinydocs.theme import get_template_dirs

    app_config = AppConfig(
        template_dir=get_template_dirs(config)[-1],
        debug=False,
        host=config.host,
        port=config.port,
    )
    return App(config=app_config)


def _watch_paths(config: SiteConfig) -> list[Path]:
    """The docs directory, plus the user templates directory when present."""
    paths = [config.docs_path]
    if config.templates_path.is_dir():
        paths.append(config.templates_path)
    return paths


def _check_bindable(host: str, port: int) -> None:
    """Raise ``BindError`` if *host*:*port* is already taken."""
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        family, socktype, proto, _, addr = infos[0]
        with socket.socket(family, socktype, proto) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(addr)
    except OSError as exc:
        msg = f"Cannot bind {host}:{port}: {exc}"
        raise BindError(msg) from exc


def _start_watcher(
    config: SiteConfig,
    pipeline: RebuildPipeline,
    app: App,
    *,
    open_browser: bool = False,
) -> ChangeWatcher:
    """Wire the ChangeWatcher to the rebuild pipeline via Chirp lifecycle hooks.

    Flow:
        on_startup  -> start the watcher thread, spawn the debounce/rebuild task
        file change -> queue -> Debouncer -> pipeline.rebuild()
        on_shutdown -> cancel the task, stop the watcher thread

    Raises:
        WatchError: If the docs directory cannot be watched.  Checked here,
            before the server starts.

    """
    from tinydocs.content.watcher import ChangeWatcher, Debouncer, make_change_queue

    queue = make_change_queue()
    watcher = ChangeWatcher(_watch_paths(config), queue)
    watcher.check()
    logger.debug("Watching %s", ", ".join(str(p) for p in _watch_paths(config)))
    debouncer = Debouncer(queue, quiet_ms=config.quiet_ms)
    _task: asyncio.Task[None] | None = None

    @app.on_startup
    async def _start_rebuilds() -> None:
        nonlocal _task
        watcher.start(asyncio.get_running_loop())
        _task = asyncio.create_task(pipeline.run(debouncer.signals()))
        if open_browser:
            webbrowser.open(f"http://{config.address}/")

    @app.on_shutdown
    async def _stop_rebuilds() -> None:
        if _task is not None and not _task.done():
            _task.cancel()
        await asyncio.to_thread(watcher.stop)

    return watcher


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build(
    root: str | Path = ".",
    config_file: str | Path | None = None,
    *,
    verbose: bool = False,
    **overrides: object,
) -> ExportResult:
    """Build the site and write it to the output directory.

    The output directory is cleared first.  ``sitemap.xml`` is written when
    ``base_url`` is absolute.

    Args:
        root: Path to the site root directory.
        config_file: Config file to load instead of the default lookup.
        verbose: Print per-stage build timings.
        **overrides: Override SiteConfig fields.

    Raises:
        BuildError: If any file fails.  Nothing is written in that case.
        ExportError: If the output cannot be written.

    """
    from tinydocs.banner import print_banner
    from tinydocs.export.sitemap import write_sitemap
    from tinydocs.export.static import ExportResult, StaticExporter
    from tinydocs.orchestrator import BuildOrchestrator

    config = load_config(Path(root), _as_path(config_file), **overrides)
    result = BuildOrchestrator(config, verbose=verbose).build_sync()

    print_banner(
        config, len(result.pages), mode="build",
        static_count=len(result.statics), load_ms=result.duration_ms,
    )

    exported = StaticExporter(config.output_path).export(result)
    sitemap = write_sitemap(exported.pages, config)
    if sitemap is not None:
        exported = ExportResult(
            files=(*exported.files, sitemap),
            total_pages=exported.total_pages,
            total_assets=exported.total_assets,
            duration_ms=exported.duration_ms + sitemap.duration_ms,
            output_dir=exported.output_dir,
        )

    _print_export_summary(exported)
    return exported


def _print_export_summary(result: ExportResult) -> None:
    """Print export completion summary to stderr."""
    lines = [
        "",
        "─" * 41,
        f"  Exported {result.total_pages} page{'s' if result.total_pages != 1 else ''}",
    ]
    if result.total_assets > 0:
        lines.append(
            f"  Copied {result.total_assets} file{'s' if result.total_assets != 1 else ''}"
        )
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


def serve(
    root: str | Path = ".",
    config_file: str | Path | None = None,
    *,
    open_browser: bool = False,
    verbose: bool = False,
    **overrides: object,
) -> None:
    """Build the site in memory and serve it with live reload.

    The first build must succeed.  Later failed rebuilds keep serving the
    last good snapshot and show an error toast in open tabs.

    Args:
        root: Path to the site root directory.
        config_file: Config file to load instead of the default lookup.
        open_browser: Open the preview URL once the server is up.
        verbose: Print per-stage build timings.
        **overrides: Override SiteConfig fields.

    Raises:
        BuildError: If the first build fails.
        WatchError: If the docs directory cannot be watched.
        BindError: If the address is taken.

    """
    from tinydocs.banner import print_banner
    from tinydocs.content.router import ContentRouter, PreviewDispatcher
    from tinydocs.observability import EventLog, StackCollector
    from tinydocs.orchestrator import BuildOrchestrator
    from tinydocs.reactive.broadcaster import ReloadBroadcaster
    from tinydocs.reactive.pipeline import RebuildPipeline
    from tinydocs.reactive.store import AssetStore

    config = load_config(Path(root), _as_path(config_file), **overrides)

    collector = StackCollector(EventLog())
    store = AssetStore()
    broadcaster = ReloadBroadcaster()
    pipeline = RebuildPipeline(
        BuildOrchestrator(config, collector=collector, verbose=verbose),
        store,
        broadcaster,
        collector=collector,
    )

    result = asyncio.run(pipeline.initial_build())

    app = _create_chirp_app(config)
    router = ContentRouter(app, PreviewDispatcher(store))
    router.register_sse_endpoint(broadcaster)
    router.register_stats_endpoint(collector)
    router.register_pages()

    _start_watcher(config, pipeline, app, open_browser=open_browser)
    _check_bindable(config.host, config.port)

    print_banner(
        config, len(result.pages), mode="serve",
        static_count=len(result.statics), load_ms=result.duration_ms,
    )

    # Pounce connection events share the EventLog with build events.
    try:
        app.run(host=config.host, port=config.port, lifecycle_collector=collector)
    except OSError as exc:
        msg = f"Cannot bind {config.address}: {exc}"
        raise BindError(msg) from exc


def defaults(output_path: str | Path | None = None, *, force: bool = False) -> Path:
    """Write the default configuration file.

    Raises:
        ConfigError: If the file exists and *force* is False.

    """
    path = dump_defaults(Path(output_path or DEFAULT_CONFIG_FILENAME), force=force)
    print(f"  Wrote default configuration to {path}", file=sys.stderr)
    return path


def _as_path(value: str | Path | None) -> Path | None:
    return None if value is None else Path(value)
