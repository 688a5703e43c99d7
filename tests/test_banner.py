"""Tests for tinydocs.banner — startup banner output."""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import patch

from tinydocs.banner import format_banner, print_banner, preview_url
from tinydocs.config import SiteConfig


class TestPrintBanner:
    """Tests for the startup banner."""

    def _capture_banner(self, **kwargs: object) -> str:
        """Call print_banner and capture stderr output."""
        buf = io.StringIO()
        with patch.object(sys, "stderr", buf):
            config = SiteConfig(root=Path("/tmp/test-site"))
            print_banner(config, page_count=5, **kwargs)  # type: ignore[arg-type]
        return buf.getvalue()

    def test_serve_mode_banner(self) -> None:
        output = self._capture_banner(mode="serve", load_ms=42.5)

        assert "tinydocs" in output
        assert "5 pages built" in output
        assert "42ms" in output
        assert "/__tinydocs/events" in output
        assert "http://127.0.0.1:1809/" in output
        assert "Watching for changes" in output

    def test_build_mode_banner(self) -> None:
        output = self._capture_banner(mode="build", load_ms=100.0)

        assert "5 pages built" in output
        assert "100ms" in output
        assert "output:" in output
        assert "Watching for changes" not in output

    def test_static_count(self) -> None:
        output = self._capture_banner(mode="build", static_count=1)
        assert "1 static file" in output

    def test_warnings(self) -> None:
        output = self._capture_banner(mode="build", warnings=["no index.md"])
        assert "no index.md" in output

    def test_single_page(self) -> None:
        config = SiteConfig(root=Path("/tmp/test-site"))
        assert "1 page built" in format_banner(config, 1, "build")


class TestPreviewUrl:
    def test_uses_address(self) -> None:
        assert preview_url(SiteConfig(host="0.0.0.0", port=9000)) == "http://0.0.0.0:9000/"
