"""Startup banner — mode-aware status output.

Detects ``NO_COLOR`` / ``TERM`` for safe fallback to plain text.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tinydocs.config import SiteConfig


# ---------------------------------------------------------------------------
# ANSI helpers; respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""

_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "serve": (_GREEN, "serve"),
}


def _mode_badge(mode: str) -> str:
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def preview_url(config: SiteConfig) -> str:
    return f"http://{config.address}/"


def format_banner(
    config: SiteConfig,
    page_count: int,
    mode: str,
    *,
    static_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> str:
    """Return the startup banner text (see :func:`print_banner`)."""
    from tinydocs import __version__

    lines: list[str] = [
        "",
        f"  {_BOLD}tinydocs{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}",
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    pages_label = "page" if page_count == 1 else "pages"
    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {page_count} {pages_label} built{timing}")
    if static_count > 0:
        files_label = "file" if static_count == 1 else "files"
        lines.append(f"  {_DIM}├─{_RESET} {static_count} static {files_label}")
    lines.append(f"  {_DIM}├─{_RESET} docs: {_DIM}{config.docs_path}{_RESET}")

    if mode == "build":
        lines.append(f"  {_DIM}└─{_RESET} output: {_DIM}{config.output_path}{_RESET}")
    else:
        from tinydocs.reactive.hmr import EVENTS_ENDPOINT

        lines.append(
            f"  {_DIM}└─{_RESET} {_GREEN}live{_RESET} reload on {_DIM}{EVENTS_ENDPOINT}{_RESET}"
        )
        lines.append("")
        lines.append(f"  {_clickable_url(preview_url(config))}")
        lines.append("")
        lines.append(f"  {_DIM}Watching for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")
    return "\n".join(lines)


def print_banner(
    config: SiteConfig,
    page_count: int,
    mode: str,
    *,
    static_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the startup banner to stderr.

    Args:
        config: Resolved SiteConfig.
        page_count: Number of pages in the first build.
        mode: ``"build"`` or ``"serve"``.
        static_count: Number of static files in the first build.
        load_ms: Duration of the first build in milliseconds.
        warnings: Optional list of warning messages to display.

    """
    print(
        format_banner(
            config, page_count, mode,
            static_count=static_count, load_ms=load_ms, warnings=warnings,
        ),
        file=sys.stderr,
    )
