"""Tinydocs — a small Markdown documentation site builder with live preview.

Quick start::

    import tinydocs

    tinydocs.serve("my-docs/")

Three commands::

    tinydocs.build("my-docs/")       # Write the site to public/
    tinydocs.serve("my-docs/")       # Preview with live reload
    tinydocs.defaults()              # Write tinydocs.yaml with every default

Built on:

    pounce      ASGI server        (serves the preview)
    chirp       Web framework      (routes and SSE)
    kida        Template engine    (renders page.html)
    patitas     Markdown parser    (renders documents)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "SiteConfig",
    "__version__",
    "build",
    "defaults",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import tinydocs`` fast; the web stack loads only for ``serve``.
    """
    if name == "SiteConfig":
        from tinydocs.config import SiteConfig

        return SiteConfig

    if name == "build":
        from tinydocs.app import build

        return build

    if name == "serve":
        from tinydocs.app import serve

        return serve

    if name == "defaults":
        from tinydocs.app import defaults

        return defaults

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
