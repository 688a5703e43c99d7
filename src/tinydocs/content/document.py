"""Document rendering — Markdown source to an HTML fragment.

Splits an optional YAML front matter block off the top of a document,
renders the body with Patitas (tables, strikethrough, and task lists
enabled), and anchors every heading with a predictable ``id``.

Thread Safety:
    ``DocumentRenderer`` holds one immutable Patitas ``Markdown`` instance
    and builds a fresh ``HtmlRenderer`` per call.  Safe to share between
    worker threads.

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

import yaml
from patitas import Markdown, create_default_registry, create_default_role_registry
from patitas.errors import PatitasError
from patitas.renderers.html import HtmlRenderer

from tinydocs._errors import FrontMatterError, RenderError
from tinydocs.content.discovery import DOCUMENT_SUFFIX, INDEX_FILENAME

logger = logging.getLogger(__name__)

_DELIMITER = "---"
_PLUGINS = ["table", "strikethrough", "task_lists"]


@dataclass(frozen=True, slots=True)
class FrontMatter:
    """Optional page metadata.  Unknown keys in the source block are ignored."""

    title: str | None = None
    description: str | None = None
    keywords: tuple[str, ...] | None = None

    def as_context(self) -> dict[str, Any]:
        """Return the fields that are set, keyed by name."""
        values = {
            "title": self.title,
            "description": self.description,
            "keywords": list(self.keywords) if self.keywords is not None else None,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True, slots=True)
class RenderedDocument:
    """The HTML fragment and metadata of one document."""

    html: str
    front_matter: FrontMatter | None


@dataclass(frozen=True, slots=True)
class RenderedPage:
    """A fully templated page ready to be served or written.

    Attributes:
        html: Final page bytes.
        url_path: Site-relative URL path (``""`` for the site root).
        front_matter: Metadata parsed from the source, if any.
        source: Relative path of the source document.

    """

    html: bytes
    url_path: str
    front_matter: FrontMatter | None
    source: str

    @property
    def media_type(self) -> str:
        return "text/html; charset=utf-8"


def url_path_for(relative_path: str) -> str:
    """Derive the URL path of a document from its relative path.

    ``index.md`` maps to its parent directory (``""`` at the root); any
    other document maps to its path without the ``.md`` extension.

    """
    path = PurePosixPath(relative_path)
    if path.name.lower() == INDEX_FILENAME:
        parent = path.parent.as_posix()
        return "" if parent == "." else parent
    if path.suffix.lower() == DOCUMENT_SUFFIX:
        path = path.with_suffix("")
    return path.as_posix()


def output_file_for(url_path: str) -> str:
    """Relative output file of a page under clean URLs.

    >>> output_file_for("guide/setup")
    'guide/setup/index.html'

    """
    clean = url_path.strip("/")
    return f"{clean}/index.html" if clean else "index.html"


def heading_anchor(text: str) -> str:
    """Anchor id for a heading: lower-cased, each non-alphanumeric char becomes ``-``.

    >>> heading_anchor("Getting Started!")
    'getting-started-'

    """
    return "".join(ch if ch.isalnum() else "-" for ch in text.lower())


def split_front_matter(text: str) -> tuple[FrontMatter | None, str]:
    """Split a leading ``---`` YAML block from *text*.

    Returns ``(None, text)`` when the document has no front matter block.

    Raises:
        FrontMatterError: If the block is unterminated, is not valid YAML,
            is not a mapping, or holds badly typed fields.

    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != _DELIMITER:
        return None, text

    for index, line in enumerate(lines[1:], start=1):
        if line.strip() == _DELIMITER:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            break
    else:
        msg = "Front matter is missing its closing '---' line"
        raise FrontMatterError(msg)

    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        msg = f"Front matter is not valid YAML: {exc}"
        raise FrontMatterError(msg) from exc

    if data is None:
        return FrontMatter(), body
    if not isinstance(data, dict):
        msg = f"Front matter must be a mapping, got {type(data).__name__}"
        raise FrontMatterError(msg)
    return _front_matter_from_mapping(data), body


def _front_matter_from_mapping(data: dict[Any, Any]) -> FrontMatter:
    title = data.get("title")
    description = data.get("description")
    keywords = data.get("keywords")

    if isinstance(keywords, str):
        keywords = [k.strip() for k in keywords.split(",") if k.strip()]
    if keywords is not None and not isinstance(keywords, list):
        msg = f"Front matter 'keywords' must be a list or string, got {type(keywords).__name__}"
        raise FrontMatterError(msg)

    return FrontMatter(
        title=str(title) if title is not None else None,
        description=str(description) if description is not None else None,
        keywords=tuple(str(k) for k in keywords) if keywords is not None else None,
    )


class DocumentRenderer:
    """Converts one document's raw text into an HTML fragment."""

    __slots__ = ("_directives", "_md", "_roles")

    def __init__(self) -> None:
        self._directives = create_default_registry()
        self._roles = create_default_role_registry()
        self._md = Markdown(
            plugins=list(_PLUGINS),
            directive_registry=self._directives,
            role_registry=self._roles,
        )

    def render(self, text: str, *, source: str = "") -> RenderedDocument:
        """Render *text*, extracting front matter when present.

        Malformed front matter is logged and the whole input is rendered
        as the body.

        Raises:
            RenderError: If the Markdown itself cannot be rendered.

        """
        try:
            front_matter, body = split_front_matter(text)
        except FrontMatterError as exc:
            logger.warning("Ignoring front matter in %s: %s", source or "<document>", exc)
            front_matter, body = None, text

        try:
            doc = self._md.parse(body, source_file=source or None)
            renderer = HtmlRenderer(
                body,
                directive_registry=self._directives,
                role_registry=self._roles,
                slugify=heading_anchor,
            )
            html = renderer.render(doc)
        except PatitasError as exc:
            msg = f"Failed to render {source or 'document'}: {exc}"
            raise RenderError(msg, source) from exc

        return RenderedDocument(html=html, front_matter=front_matter)
