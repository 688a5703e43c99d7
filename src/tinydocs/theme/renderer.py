"""Page templating — wrap a rendered document in the site's page template.

Each ``TemplateRenderer`` owns its own Kida ``Environment``.  Nothing is
cached at module level, so two sites (or two tests) never share templates.

Thread Safety:
    Kida environments and compiled templates are safe for concurrent
    ``render()`` calls.  The orchestrator renders pages from worker threads.

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from kida import Environment, FileSystemLoader, Markup

from tinydocs._errors import TemplateError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from tinydocs.config import SiteConfig
    from tinydocs.content.navigation import SitemapNode

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = "page.html"

# Context keys owned by the renderer.  Front matter can never override them.
RESERVED_KEYS = frozenset({"config", "sitemap", "current_path", "content"})


class TemplateRenderer:
    """Renders final page HTML through a single page template.

    Args:
        template_dirs: Directories searched in order for the template.
        template_name: Name of the page template.

    """

    __slots__ = ("_env", "_template_dirs", "_template_name")

    def __init__(
        self,
        template_dirs: Sequence[Path],
        *,
        template_name: str = PAGE_TEMPLATE,
    ) -> None:
        self._template_dirs = tuple(str(d) for d in template_dirs)
        self._template_name = template_name
        self._env = self._new_environment()

    def _new_environment(self) -> Environment:
        return Environment(
            loader=FileSystemLoader(list(self._template_dirs)),
            autoescape=True,
            auto_reload=False,
        )

    def reload(self) -> None:
        """Drop every compiled template so the next render reads them from disk.

        Called at the start of each build, never while pages are rendering.
        """
        self._env = self._new_environment()

    def build_context(
        self,
        *,
        content: str,
        config: SiteConfig,
        sitemap: SitemapNode,
        current_path: str,
        front_matter: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Merge front matter with the reserved context keys.

        A front matter field named like a reserved key is dropped with a
        warning; the reserved value wins.

        """
        context: dict[str, Any] = {}
        for key, value in (front_matter or {}).items():
            if key in RESERVED_KEYS:
                logger.warning(
                    "Front matter key %r on page %r collides with a reserved "
                    "template variable and is ignored",
                    key,
                    current_path,
                )
                continue
            context[key] = value

        context.update(
            config=config,
            sitemap=sitemap,
            current_path=current_path,
            content=Markup(content),
        )
        return context

    def render(
        self,
        *,
        content: str,
        config: SiteConfig,
        sitemap: SitemapNode,
        current_path: str,
        front_matter: Mapping[str, Any] | None = None,
    ) -> bytes:
        """Render one page and return its UTF-8 bytes.

        Raises:
            TemplateError: If the template cannot be found, compiled, or rendered.

        """
        context = self.build_context(
            content=content,
            config=config,
            sitemap=sitemap,
            current_path=current_path,
            front_matter=front_matter,
        )
        try:
            template = self._env.get_template(self._template_name)
            html = template.render(**context)
        except Exception as exc:
            msg = f"Failed to render template {self._template_name!r} for {current_path!r}: {exc}"
            raise TemplateError(msg, current_path) from exc
        return html.encode("utf-8")
