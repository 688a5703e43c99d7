"""Tinydocs error hierarchy.

All tinydocs-specific errors inherit from TinydocsError for easy catching.
File-level errors carry the offending path so build failures can name it.
"""


class TinydocsError(Exception):
    """Base error for all tinydocs operations."""


class ConfigError(TinydocsError):
    """Invalid or missing configuration."""


class _PathError(TinydocsError):
    """An error attached to a single source path."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class DiscoveryError(_PathError):
    """The docs directory could not be walked."""


class ReadError(_PathError):
    """A source file could not be read."""


class FrontMatterError(_PathError):
    """Front matter is malformed. Never fatal to a build."""


class RenderError(_PathError):
    """Markup or template rendering failed."""


class TemplateError(RenderError):
    """The page template is missing, malformed, or failed while rendering."""


class BuildError(_PathError):
    """A build was aborted. ``path`` names the source that caused it."""


class WatchError(TinydocsError):
    """The filesystem watcher could not be started."""


class BindError(TinydocsError):
    """The preview server could not bind its address."""


class ExportError(_PathError):
    """Error while writing the built site to disk."""
