"""Live reload client — the script injected into previewed HTML pages.

The script opens an ``EventSource`` on the preview server's events
endpoint, reloads the page on ``reload``, and shows a dismissible toast on
``tinydocs:error`` when a rebuild fails.  It is only ever added to
responses of the preview server, never to built files.
"""

from __future__ import annotations

import json

EVENTS_ENDPOINT = "/__tinydocs/events"

RELOAD_SCRIPT = """\
<script data-tinydocs-reload>
(function() {
  var src = new EventSource('%(endpoint)s');
  src.addEventListener('reload', function() {
    location.reload();
  });
  src.addEventListener('tinydocs:error', function(e) {
    try { showError(JSON.parse(e.data)); } catch (x) {}
  });
  function showError(d) {
    dismiss();
    var el = document.createElement('div');
    el.id = 'tinydocs-error-toast';
    el.style.cssText = 'position:fixed;bottom:1rem;right:1rem;max-width:480px;'
      + 'background:#2d1010;border:1px solid #e74c3c;border-radius:8px;'
      + 'padding:1rem 1.25rem;font-family:ui-monospace,monospace;font-size:0.85rem;'
      + 'color:#f0a0a0;z-index:99999;line-height:1.5;word-break:break-word';
    var title = document.createElement('strong');
    title.style.cssText = 'display:block;color:#e74c3c;margin-bottom:0.25rem';
    title.textContent = d.type || 'Build failed';
    var msg = document.createElement('div');
    msg.textContent = d.message || '';
    var loc = document.createElement('div');
    loc.style.cssText = 'margin-top:0.5rem;color:#9e9e9e;font-size:0.75rem';
    loc.textContent = d.path || '';
    var close = document.createElement('button');
    close.textContent = 'Dismiss';
    close.onclick = dismiss;
    el.appendChild(title);
    el.appendChild(msg);
    el.appendChild(loc);
    el.appendChild(close);
    document.body.appendChild(el);
  }
  function dismiss() {
    var old = document.getElementById('tinydocs-error-toast');
    if (old) old.remove();
  }
})();
</script>
""" % {"endpoint": EVENTS_ENDPOINT}

_SCRIPT_BYTES = RELOAD_SCRIPT.encode("utf-8")


def inject_reload_script(html: bytes) -> bytes:
    """Insert the reload script before ``</body>`` (or ``</html>``, or at the end)."""
    for marker in (b"</body>", b"</html>"):
        index = html.rfind(marker)
        if index != -1:
            return html[:index] + _SCRIPT_BYTES + html[index:]
    return html + _SCRIPT_BYTES


def format_error_event(exc: BaseException) -> str:
    """JSON payload for a ``tinydocs:error`` event describing a failed rebuild."""
    return json.dumps({
        "type": type(exc).__name__,
        "message": str(exc),
        "path": getattr(exc, "path", "") or "",
    })
