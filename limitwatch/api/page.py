"""Self-refreshing status page served at ``/``.

The markup is static apart from the interval selector.  The inline script
keeps a single ``setInterval`` handle and clears it before arming a new one
whenever the selection changes.
"""

from __future__ import annotations

from html import escape
from string import Template
from typing import Iterable

from limitwatch.intervals import interval_label

_PAGE = Template("""<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>$title</title>
    <style>
      :root {
        color-scheme: light dark;
        font-family: Inter, system-ui, -apple-system, "Segoe UI", Roboto, sans-serif;
      }
      body {
        margin: 0;
        min-height: 100vh;
        display: grid;
        place-items: center;
        background: #0f172a;
        color: #e2e8f0;
      }
      main {
        width: min(460px, 92vw);
        padding: 1.25rem;
        background: #111827;
        border: 1px solid #334155;
        border-radius: 14px;
      }
      h1 { margin: 0 0 1rem; font-size: 1.3rem; }
      .toolbar { display: flex; align-items: center; gap: 0.5rem; margin-bottom: 1rem; }
      label, dt { color: #94a3b8; }
      select {
        background: #0b1220;
        color: #e2e8f0;
        border: 1px solid #334155;
        border-radius: 8px;
        padding: 0.25rem 0.5rem;
      }
      dl { margin: 0; display: grid; grid-template-columns: 1fr auto; gap: 0.7rem 0.75rem; }
      dd { margin: 0; font-weight: 700; font-variant-numeric: tabular-nums; }
      .error { margin-top: 1rem; min-height: 1.3rem; color: #fda4af; }
    </style>
  </head>
  <body>
    <main>
      <h1>$title</h1>
      <div class="toolbar">
        <label for="refreshInterval">Refresh:</label>
        <select id="refreshInterval" aria-label="Refresh interval">
$options
        </select>
      </div>
      <dl>
        <dt>Rate Limit</dt><dd id="limit">&mdash;</dd>
        <dt>Remaining</dt><dd id="remaining">&mdash;</dd>
        <dt>Time Left</dt><dd id="reset">&mdash;</dd>
      </dl>
      <div id="error" class="error" role="status" aria-live="polite"></div>
    </main>
    <script>
      const DEFAULT_REFRESH_MS = $default_refresh_ms;
      const fields = {
        limit: document.getElementById("limit"),
        remaining: document.getElementById("remaining"),
        reset: document.getElementById("reset"),
      };
      const errorEl = document.getElementById("error");
      const intervalSelect = document.getElementById("refreshInterval");

      let timer = null;

      function formatDuration(seconds) {
        let total = Number(seconds);
        if (!Number.isFinite(total) || total < 0) total = 0;
        total = Math.round(total * 1000) / 1000;
        const h = Math.floor(total / 3600);
        const m = Math.floor((total % 3600) / 60);
        const parts = [];
        if (h) parts.push(h + "h");
        if (m || h) parts.push(m + "m");
        parts.push(Math.round((total % 60) * 1000) / 1000 + "s");
        return parts.join(" ");
      }

      async function refresh() {
        try {
          const res = await fetch("/api/limits", { cache: "no-store" });
          if (!res.ok) throw new Error("HTTP " + res.status);
          const data = await res.json();
          fields.limit.textContent = data.limit;
          fields.remaining.textContent = data.remaining;
          fields.reset.textContent = formatDuration(data.reset);
          errorEl.textContent = "";
        } catch (err) {
          errorEl.textContent = "Failed to load limits. " + err.message;
        }
      }

      function stop() {
        if (timer !== null) {
          clearInterval(timer);
          timer = null;
        }
      }

      function start(intervalMs) {
        stop();
        timer = setInterval(refresh, intervalMs);
      }

      intervalSelect.addEventListener("change", () => {
        start(Number(intervalSelect.value) || DEFAULT_REFRESH_MS);
      });

      refresh();
      start(Number(intervalSelect.value) || DEFAULT_REFRESH_MS);
    </script>
  </body>
</html>
""")


def _option(interval_ms: int, selected: bool) -> str:
    attr = " selected" if selected else ""
    return (
        f'          <option value="{interval_ms}"{attr}>'
        f"{escape(interval_label(interval_ms))}</option>"
    )


def render_page(
    intervals_ms: Iterable[int],
    default_ms: int,
    title: str = "Globalping API Rate Limits",
) -> str:
    """Render the status page with one ``<option>`` per interval.

    The default interval is added to the choices when it is not among them.
    """
    choices = sorted(set(intervals_ms) | {default_ms})
    options = "\n".join(_option(ms, ms == default_ms) for ms in choices)
    return _PAGE.substitute(
        title=escape(title),
        options=options,
        default_refresh_ms=int(default_ms),
    )
