"""Tinydocs configuration.

SiteConfig is the central configuration object, frozen after creation.
Templates receive it as ``config``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tinydocs.content.navigation import NavEntry


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Configuration for a tinydocs site.

    Attributes:
        root: Site root directory (contains the docs dir and config file).
              Always resolved to an absolute path on construction.
        title: Site title, rendered in the page ``<title>`` and header.
        description: Site description for the ``<meta>`` tag.
        icon_path: Favicon URL path, relative to the site root.
        base_url: Base URL of the deployed site.  ``sitemap.xml`` is only
            written when this is absolute (``https://...``).
        language: Value of the ``<html lang>`` attribute.
        docs_dir: Directory holding Markdown documents and static files.
        output_dir: Directory the built site is written to.
        follow_links: Follow symbolic links while walking ``docs_dir``.
        nav: Optional navigation override.  Items are a URL path string,
            a ``{title: url}`` external link, or a ``{title: [items]}`` section.
        templates_dir: Directory with a user ``page.html`` template.
        host: Bind address for the preview server.
        port: Bind port for the preview server.
        quiet_ms: Quiet interval that ends a burst of file changes.
        workers: Maximum number of files processed concurrently.

    """

    root: Path = field(default_factory=Path.cwd)
    title: str | None = None
    description: str | None = None
    icon_path: str | None = None
    base_url: str = "/"
    language: str = "en"
    docs_dir: str = "docs"
    output_dir: str = "public"
    follow_links: bool = False
    nav: list[Any] | None = None
    templates_dir: str = "templates"
    host: str = "127.0.0.1"
    port: int = 1809
    quiet_ms: int = 250
    workers: int = 32

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; keep root comparable with them.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def docs_path(self) -> Path:
        """Absolute path to the docs directory."""
        return self.root / self.docs_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to the output directory."""
        output = Path(self.output_dir)
        if output.is_absolute():
            return output
        return self.root / output

    @property
    def templates_path(self) -> Path:
        """Absolute path to the user templates directory."""
        return self.root / self.templates_dir

    @property
    def has_absolute_base_url(self) -> bool:
        """Whether ``base_url`` is a full URL (required for sitemap.xml)."""
        return self.base_url.startswith(("http://", "https://"))

    def url_for(self, url_path: str | None) -> str:
        """Return the link for a site-relative URL path, prefixed with ``base_url``.

        >>> SiteConfig(base_url="/docs/").url_for("guide/setup")
        '/docs/guide/setup/'

        """
        base = self.base_url if self.base_url.endswith("/") else self.base_url + "/"
        clean = (url_path or "").strip("/")
        return f"{base}{clean}/" if clean else base

    def walk_nav(self) -> Iterator[tuple[int, NavEntry]]:
        """Yield ``(depth, entry)`` for the ``nav`` override; nothing without one."""
        from tinydocs.content.navigation import walk_nav

        return walk_nav(self.nav or ())

    @property
    def address(self) -> str:
        """``host:port`` of the preview server."""
        return f"{self.host}:{self.port}"
