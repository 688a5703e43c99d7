"""Tests for tinydocs._cli — argument parsing and command dispatch."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from tinydocs._cli import _build_parser, main
from tinydocs._errors import BuildError


class TestBuildParser:
    """_build_parser — CLI argument parsing."""

    def test_build_default_args(self) -> None:
        args = _build_parser().parse_args(["build"])
        assert args.command == "build"
        assert args.root == "."
        assert args.output is None
        assert args.base_url is None
        assert args.config is None
        assert args.verbose is False

    def test_build_all_flags(self) -> None:
        args = _build_parser().parse_args([
            "-c", "site.yaml", "-v",
            "build", "my-site/",
            "--output", "dist",
            "--base-url", "https://example.com",
        ])
        assert args.config == "site.yaml"
        assert args.verbose is True
        assert args.root == "my-site/"
        assert args.output == "dist"
        assert args.base_url == "https://example.com"

    def test_serve_default_args(self) -> None:
        args = _build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None
        assert args.open_browser is False

    def test_serve_flags(self) -> None:
        args = _build_parser().parse_args(["serve", "--port", "9000", "--open"])
        assert args.port == 9000
        assert args.open_browser is True

    def test_defaults_args(self) -> None:
        args = _build_parser().parse_args(["defaults", "--output-path", "x.yaml", "--force"])
        assert args.command == "defaults"
        assert args.output_path == "x.yaml"
        assert args.force is True

    def test_no_command_returns_none(self) -> None:
        assert _build_parser().parse_args([]).command is None


class TestMain:
    """main — dispatch and exit codes."""

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 0
        assert "usage" in capsys.readouterr().out

    def test_build_dispatch(self) -> None:
        with patch("tinydocs.app.build") as build:
            main(["build", "site", "--output", "dist"])
        build.assert_called_once()
        kwargs = build.call_args.kwargs
        assert kwargs["root"] == "site"
        assert kwargs["output_dir"] == "dist"
        assert kwargs["base_url"] is None

    def test_serve_dispatch(self) -> None:
        with patch("tinydocs.app.serve") as serve:
            main(["serve", "--port", "4000"])
        kwargs = serve.call_args.kwargs
        assert kwargs["port"] == 4000
        assert kwargs["open_browser"] is False

    def test_config_path_resolved(self) -> None:
        with patch("tinydocs.app.build") as build:
            main(["-c", "custom.yaml", "build"])
        assert build.call_args.kwargs["config_file"] == Path("custom.yaml").resolve()

    def test_error_exits_nonzero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("tinydocs.app.build", side_effect=BuildError("bad page", "a.md")):
            with pytest.raises(SystemExit) as excinfo:
                main(["build"])
        assert excinfo.value.code == 1
        assert "bad page" in capsys.readouterr().err

    def test_build_end_to_end(self, tmp_site: Path) -> None:
        main(["build", str(tmp_site)])
        assert (tmp_site / "public" / "index.html").is_file()
        assert (tmp_site / "public" / "guide" / "setup" / "index.html").is_file()

    def test_build_failure_end_to_end(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["build", str(tmp_path)])
        assert excinfo.value.code == 1
        assert not (tmp_path / "public").exists()

    def test_defaults_end_to_end(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        target = tmp_path / "tinydocs.yaml"
        main(["defaults", "--output-path", str(target)])
        assert target.is_file()

        with pytest.raises(SystemExit) as excinfo:
            main(["defaults", "--output-path", str(target)])
        assert excinfo.value.code == 1
        assert "Use --force to overwrite" in capsys.readouterr().err
