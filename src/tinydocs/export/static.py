"""Static export — write a finished build to the output directory.

Every page lands at ``<out>/<url_path>/index.html`` (the root page at
``<out>/index.html``) and every static file at ``<out>/<url_path>``, so
the directory can be served by any static host with clean URLs.
"""

from __future__ import annotations

import shutil
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from tinydocs._errors import ExportError
from tinydocs.content.document import output_file_for

if TYPE_CHECKING:
    from tinydocs.orchestrator import BuildResult


@dataclass(frozen=True, slots=True)
class ExportedFile:
    """Record of a single file written during export.

    Attributes:
        source_path: URL path the file is served at (``""`` for the root page).
        output_path: Absolute filesystem path to the written file.
        source_type: Category of the exported file.
        size_bytes: Size of the written file in bytes.
        duration_ms: Time taken to write this file.

    """

    source_path: str
    output_path: Path
    source_type: Literal["page", "static", "sitemap"]
    size_bytes: int
    duration_ms: float


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Aggregate result of a full static export.

    Attributes:
        files: All files written during export.
        total_pages: Number of HTML pages written.
        total_assets: Number of static files written.
        duration_ms: Total wall-clock time for the export.
        output_dir: Absolute path to the output directory.

    """

    files: tuple[ExportedFile, ...]
    total_pages: int
    total_assets: int
    duration_ms: float
    output_dir: Path

    @property
    def pages(self) -> tuple[ExportedFile, ...]:
        return tuple(f for f in self.files if f.source_type == "page")


class StaticExporter:
    """Writes a ``BuildResult`` to disk.

    Args:
        output_dir: Directory to (re)create.  Anything already in it is removed.

    """

    def __init__(self, output_dir: Path) -> None:
        self._output_dir = output_dir

    def export(self, result: BuildResult) -> ExportResult:
        """Clean the output directory and write every page and static file.

        Raises:
            ExportError: If the directory cannot be cleaned or a file cannot
                be written.  The error names the output path.

        """
        start = time.perf_counter()
        output_dir = self._output_dir

        self._clean_output(output_dir)

        files: list[ExportedFile] = []
        for page in result.pages:
            t0 = time.perf_counter()
            filepath = url_path_to_filepath(page.url_path, output_dir)
            size = self._write(filepath, page.html)
            files.append(ExportedFile(
                source_path=page.url_path,
                output_path=filepath,
                source_type="page",
                size_bytes=size,
                duration_ms=(time.perf_counter() - t0) * 1000,
            ))

        for static in result.statics:
            t0 = time.perf_counter()
            filepath = output_dir / static.url_path
            size = self._write(filepath, static.content)
            files.append(ExportedFile(
                source_path=static.url_path,
                output_path=filepath,
                source_type="static",
                size_bytes=size,
                duration_ms=(time.perf_counter() - t0) * 1000,
            ))

        elapsed = (time.perf_counter() - start) * 1000
        return ExportResult(
            files=tuple(files),
            total_pages=len(result.pages),
            total_assets=len(result.statics),
            duration_ms=elapsed,
            output_dir=output_dir,
        )

    @staticmethod
    def _clean_output(output_dir: Path) -> None:
        """Remove and recreate the output directory."""
        try:
            if output_dir.exists():
                shutil.rmtree(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"Cannot prepare output directory {output_dir}: {exc}"
            raise ExportError(msg, str(output_dir)) from exc

    @staticmethod
    def _write(filepath: Path, data: bytes) -> int:
        """Write *data*, creating parent directories.  Returns the byte count."""
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(data)
        except OSError as exc:
            msg = f"Cannot write {filepath}: {exc}"
            raise ExportError(msg, str(filepath)) from exc
        return len(data)


def url_path_to_filepath(url_path: str, output_dir: Path) -> Path:
    """Convert a page URL path to its output file.

    Clean URL convention:
        ``""``             -> ``output/index.html``
        ``guide``          -> ``output/guide/index.html``
        ``guide/setup``    -> ``output/guide/setup/index.html``

    """
    return output_dir / output_file_for(url_path)
