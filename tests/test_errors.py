"""Tests for tinydocs._errors."""

from tinydocs._errors import (
    BindError,
    BuildError,
    ConfigError,
    DiscoveryError,
    ExportError,
    FrontMatterError,
    ReadError,
    RenderError,
    TemplateError,
    TinydocsError,
    WatchError,
)


class TestErrorHierarchy:
    """All tinydocs errors inherit from TinydocsError."""

    def test_tinydocs_error_is_exception(self) -> None:
        assert issubclass(TinydocsError, Exception)

    def test_template_error_is_render_error(self) -> None:
        assert issubclass(TemplateError, RenderError)

    def test_catch_all_tinydocs_errors(self) -> None:
        """All specific errors are catchable via TinydocsError."""
        for error_cls in (
            ConfigError, DiscoveryError, ReadError, FrontMatterError, RenderError,
            TemplateError, BuildError, WatchError, BindError, ExportError,
        ):
            try:
                raise error_cls("test")
            except TinydocsError:
                pass  # Expected — all caught by base class


class TestPathErrors:
    """File-level errors carry the offending path."""

    def test_build_error_path(self) -> None:
        err = BuildError("boom", "guide/setup.md")
        assert err.path == "guide/setup.md"
        assert str(err) == "boom"

    def test_path_defaults_to_empty(self) -> None:
        assert ReadError("nope").path == ""

    def test_export_error_path(self) -> None:
        assert ExportError("disk full", "/out/index.html").path == "/out/index.html"
