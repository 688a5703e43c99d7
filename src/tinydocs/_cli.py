"""Tinydocs CLI — tinydocs build / tinydocs serve / tinydocs defaults.

Entry point for the ``tinydocs`` command-line interface.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the tinydocs CLI."""
    parser = argparse.ArgumentParser(
        prog="tinydocs",
        description="Build and preview a Markdown documentation site.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "-c", "--config", default=None, help="Config file (default: tinydocs.yaml in root)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging and per-stage timings",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # tinydocs build
    build_parser = subparsers.add_parser("build", help="Write the site as static HTML files")
    build_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    build_parser.add_argument("--output", default=None, help="Output directory")
    build_parser.add_argument("--base-url", default=None, help="Base URL of the deployed site")

    # tinydocs serve
    serve_parser = subparsers.add_parser("serve", help="Preview the site with live reload")
    serve_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port")
    serve_parser.add_argument(
        "--open", action="store_true", dest="open_browser", help="Open the site in a browser",
    )

    # tinydocs defaults
    defaults_parser = subparsers.add_parser(
        "defaults", help="Write the default configuration file",
    )
    defaults_parser.add_argument(
        "--output-path", default=None, help="Where to write it (default: tinydocs.yaml)",
    )
    defaults_parser.add_argument(
        "--force", action="store_true", help="Overwrite an existing file",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from tinydocs import __version__

    return __version__


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="  %(levelname)s %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Exits with status 1 on any tinydocs error."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _configure_logging(args.verbose)

    from tinydocs._errors import TinydocsError
    from tinydocs.app import build, defaults, serve

    config_file = Path(args.config).resolve() if args.config else None

    try:
        if args.command == "build":
            build(
                root=args.root,
                config_file=config_file,
                verbose=args.verbose,
                output_dir=args.output,
                base_url=args.base_url,
            )
        elif args.command == "serve":
            serve(
                root=args.root,
                config_file=config_file,
                open_browser=args.open_browser,
                verbose=args.verbose,
                host=args.host,
                port=args.port,
            )
        elif args.command == "defaults":
            defaults(args.output_path, force=args.force)
    except TinydocsError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
