"""Tests for tinydocs.reactive.hmr — reload script injection."""

from __future__ import annotations

import json

from tinydocs._errors import BuildError
from tinydocs.reactive.hmr import (
    EVENTS_ENDPOINT,
    RELOAD_SCRIPT,
    format_error_event,
    inject_reload_script,
)

_SCRIPT = RELOAD_SCRIPT.encode()


class TestReloadScript:
    """The client script itself."""

    def test_points_at_events_endpoint(self) -> None:
        assert EVENTS_ENDPOINT == "/__tinydocs/events"
        assert f"new EventSource('{EVENTS_ENDPOINT}')" in RELOAD_SCRIPT

    def test_listens_for_reload_and_error(self) -> None:
        assert "'reload'" in RELOAD_SCRIPT
        assert "'tinydocs:error'" in RELOAD_SCRIPT


class TestInjectReloadScript:
    """inject_reload_script — placement rules."""

    def test_before_closing_body(self) -> None:
        html = b"<html><body><p>x</p></body></html>"
        out = inject_reload_script(html)
        assert out == b"<html><body><p>x</p>" + _SCRIPT + b"</body></html>"

    def test_last_body_tag_wins(self) -> None:
        html = b"<body><pre>&lt;/body&gt;</pre></body><body></body>"
        out = inject_reload_script(html)
        assert out.endswith(_SCRIPT + b"</body>")

    def test_falls_back_to_closing_html(self) -> None:
        out = inject_reload_script(b"<html><p>x</p></html>")
        assert out == b"<html><p>x</p>" + _SCRIPT + b"</html>"

    def test_appends_when_no_markers(self) -> None:
        assert inject_reload_script(b"<p>x</p>") == b"<p>x</p>" + _SCRIPT

    def test_original_content_preserved(self) -> None:
        html = b"<html><body>hello</body></html>"
        assert inject_reload_script(html).replace(_SCRIPT, b"") == html


class TestFormatErrorEvent:
    """format_error_event — JSON payload for the error toast."""

    def test_payload(self) -> None:
        payload = json.loads(format_error_event(BuildError("bad page", "guide.md")))
        assert payload == {"type": "BuildError", "message": "bad page", "path": "guide.md"}

    def test_missing_path(self) -> None:
        payload = json.loads(format_error_event(BuildError("bad")))
        assert payload["path"] == ""
