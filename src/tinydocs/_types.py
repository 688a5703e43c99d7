"""Shared type definitions for tinydocs."""

from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from tinydocs.content.document import RenderedPage
    from tinydocs.content.discovery import StaticAssetEntry

# Mode of operation
type TinydocsMode = Literal["build", "serve"]

# Kind of a discovered source file
type SourceKind = Literal["document", "static"]

# Site-relative URL path without leading or trailing slash ("" is the root)
type URLPath = str

# Anything the asset store can hold
type Asset = RenderedPage | StaticAssetEntry

# SSE client identifier
type ClientID = str
