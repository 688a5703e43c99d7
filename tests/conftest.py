"""Shared test fixtures for tinydocs."""

from __future__ import annotations

from pathlib import Path

import pytest

from tinydocs.config import SiteConfig


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site for testing.

    Layout::

        docs/index.md
        docs/about.md
        docs/guide/index.md
        docs/guide/setup.md
        docs/assets/style.css

    """
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "index.md").write_text(
        "---\ntitle: Home\n---\n\n# Welcome\n\nThis is the home page.\n"
    )
    (docs / "about.md").write_text("# About\n\nAbout this site.\n")

    guide = docs / "guide"
    guide.mkdir()
    (guide / "index.md").write_text("# Guide\n\nStart here.\n")
    (guide / "setup.md").write_text(
        "---\ntitle: Setup\ndescription: Installing things\n---\n\n# Getting Started!\n"
    )

    assets = docs / "assets"
    assets.mkdir()
    (assets / "style.css").write_text("body { margin: 0; }\n")

    return tmp_path


@pytest.fixture
def site_config(tmp_site: Path) -> SiteConfig:
    return SiteConfig(root=tmp_site, title="Test Docs")


def write_template(root: Path, body: str) -> Path:
    """Write a user ``templates/page.html`` under *root* and return its path."""
    templates = root / "templates"
    templates.mkdir(parents=True, exist_ok=True)
    page = templates / "page.html"
    page.write_text(body)
    return page
