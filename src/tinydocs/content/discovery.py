"""Content discovery — walk the docs directory and classify every file.

Each regular file becomes a ``SourceEntry`` whose identity is its POSIX
path relative to the docs root.  Markdown files are documents; everything
else is a static file served verbatim.
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from tinydocs._errors import DiscoveryError, ReadError

if TYPE_CHECKING:
    from tinydocs._types import SourceKind

DOCUMENT_SUFFIX = ".md"
INDEX_FILENAME = "index.md"
DEFAULT_MEDIA_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class SourceEntry:
    """A file found under the docs root.

    Attributes:
        path: Absolute filesystem path.
        relative_path: POSIX path relative to the docs root.  Unique per build.
        kind: ``"document"`` for Markdown, ``"static"`` otherwise.

    """

    path: Path
    relative_path: str
    kind: SourceKind

    @property
    def is_document(self) -> bool:
        return self.kind == "document"


@dataclass(frozen=True, slots=True)
class StaticAssetEntry:
    """A static file loaded into memory.

    Attributes:
        content: Raw file bytes.
        url_path: URL path, identical to the file's relative path.
        media_type: Guessed media type of the file.

    """

    content: bytes
    url_path: str
    media_type: str


def classify(relative_path: str) -> SourceKind:
    """Return the source kind for a relative path (by extension, case-insensitive)."""
    if PurePosixPath(relative_path).suffix.lower() == DOCUMENT_SUFFIX:
        return "document"
    return "static"


def guess_media_type(relative_path: str) -> str:
    media_type, _ = mimetypes.guess_type(relative_path, strict=False)
    return media_type or DEFAULT_MEDIA_TYPE


def discover(root: Path, *, follow_links: bool = False) -> tuple[SourceEntry, ...]:
    """Return every regular file under *root*, sorted by relative path.

    Directories never appear in the result.  Hidden files are not filtered.
    Without *follow_links*, symbolic links are skipped entirely.

    Raises:
        DiscoveryError: If *root* is missing or not a directory, a directory
            cannot be listed, or a symlink cycle is found while following links.

    """
    root = Path(root)
    if not root.exists():
        msg = f"Docs directory does not exist: {root}"
        raise DiscoveryError(msg, str(root))
    if not root.is_dir():
        msg = f"Docs path is not a directory: {root}"
        raise DiscoveryError(msg, str(root))

    def _on_error(exc: OSError) -> None:
        msg = f"Cannot list {exc.filename}: {exc.strerror or exc}"
        raise DiscoveryError(msg, str(exc.filename or root)) from exc

    entries: list[SourceEntry] = []

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error, followlinks=follow_links):
        current = Path(dirpath)
        if follow_links and _is_cycle(current, root):
            msg = f"Symlink cycle detected at {current}"
            raise DiscoveryError(msg, current.relative_to(root).as_posix())

        dirnames.sort()
        for name in sorted(filenames):
            path = current / name
            if path.is_symlink() and not follow_links:
                continue
            if not path.is_file():
                continue
            relative = path.relative_to(root).as_posix()
            entries.append(SourceEntry(path=path, relative_path=relative, kind=classify(relative)))

    entries.sort(key=lambda e: e.relative_path)
    return tuple(entries)


def _is_cycle(directory: Path, root: Path) -> bool:
    """Whether *directory* is the same directory as one of its ancestors under *root*."""
    if directory == root:
        return False
    stat = directory.stat()
    key = (stat.st_dev, stat.st_ino)
    for ancestor in directory.parents:
        ancestor_stat = ancestor.stat()
        if (ancestor_stat.st_dev, ancestor_stat.st_ino) == key:
            return True
        if ancestor == root:
            break
    return False


def read_static(entry: SourceEntry) -> StaticAssetEntry:
    """Load a static file into memory.

    Raises:
        ReadError: If the file cannot be read.

    """
    try:
        content = entry.path.read_bytes()
    except OSError as exc:
        msg = f"Failed to read static file {entry.relative_path}: {exc}"
        raise ReadError(msg, entry.relative_path) from exc
    return StaticAssetEntry(
        content=content,
        url_path=entry.relative_path,
        media_type=guess_media_type(entry.relative_path),
    )
