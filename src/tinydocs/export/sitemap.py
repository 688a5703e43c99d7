"""Sitemap generation — produce sitemap.xml from exported pages.

Search engines need absolute URLs, so the sitemap is only written when
``base_url`` is a full ``http(s)://`` URL.
"""

from __future__ import annotations

import sys
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element, SubElement, tostring

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tinydocs.config import SiteConfig
    from tinydocs.export.static import ExportedFile

_SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


def generate_sitemap(pages: Sequence[ExportedFile], base_url: str) -> str:
    """Generate a sitemap.xml string from exported page records.

    Only ``page`` records are listed; static files are skipped.

    Args:
        pages: Exported file records.
        base_url: Absolute site URL (e.g., ``"https://example.com/docs/"``).

    Returns:
        Complete XML string suitable for writing to ``sitemap.xml``.

    """
    base = base_url.rstrip("/")
    now = datetime.now(UTC).strftime("%Y-%m-%d")

    urlset = Element("urlset")
    urlset.set("xmlns", _SITEMAP_NS)

    for page in pages:
        if page.source_type != "page":
            continue

        url_el = SubElement(urlset, "url")
        loc = SubElement(url_el, "loc")
        clean = page.source_path.strip("/")
        loc.text = f"{base}/{clean}/" if clean else f"{base}/"

        lastmod = SubElement(url_el, "lastmod")
        lastmod.text = now

    xml = tostring(urlset, encoding="unicode", xml_declaration=False)
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + xml + "\n"


def write_sitemap(
    pages: Sequence[ExportedFile],
    config: SiteConfig,
) -> ExportedFile | None:
    """Write sitemap.xml to the configured output directory.

    Returns *None* (with a notice on stderr) if ``base_url`` is not absolute.
    """
    from tinydocs.export.static import ExportedFile

    if not config.has_absolute_base_url:
        print(
            "  Sitemap skipped: set an absolute base_url to enable",
            file=sys.stderr,
        )
        return None

    t0 = time.perf_counter()
    data = generate_sitemap(pages, config.base_url).encode("utf-8")
    sitemap_path = config.output_path / "sitemap.xml"
    sitemap_path.write_bytes(data)

    return ExportedFile(
        source_path="sitemap.xml",
        output_path=sitemap_path,
        source_type="sitemap",
        size_bytes=len(data),
        duration_ms=(time.perf_counter() - t0) * 1000,
    )
