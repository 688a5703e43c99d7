"""Tinydocs theme loader — fallback chain for page templates.

User templates (``templates/``) take priority.  When a template is not found
in the user directory, Kida falls through to the bundled default theme.

Thread Safety:
    All returned values are read-only path lists.  Safe for free-threading.

"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tinydocs.config import SiteConfig


def _bundled_theme_path() -> Path:
    """Return the absolute path to the bundled default theme."""
    return Path(__file__).parent / "default"


def get_template_dirs(config: SiteConfig) -> list[Path]:
    """Return template directories in priority order.

    Returns:
        ``[user_templates_dir, bundled_default_templates]``

    The user directory is only included when it exists.

    """
    bundled = _bundled_theme_path() / "templates"
    user_dir = config.templates_path

    dirs: list[Path] = []
    if user_dir.is_dir() and user_dir != bundled:
        dirs.append(user_dir)
    dirs.append(bundled)
    return dirs
