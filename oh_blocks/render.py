"""HTML rendering for table view models.

Markup is produced with plain string building, as there is a single table
shape to render. Every piece of text is escaped exactly once here.
"""

from __future__ import annotations

from html import escape
from typing import Dict, List

from .models import PERMANENT, CacheableMetadata, TableRow, TableViewModel

# Cache-Control max-age sent for permanently cacheable output (one year).
PERMANENT_HTTP_MAX_AGE = 31536000


def _render_hours(row: TableRow) -> str:
    if isinstance(row.hours, list):
        items = "".join(f"<li>{escape(item)}</li>" for item in row.hours)
        return f'<div class="item-list"><ul>{items}</ul></div>'
    return escape(row.hours)


def render_table(table: TableViewModel) -> str:
    """Render ``table`` as an HTML ``<table>`` element."""
    columns = list(table.header)
    head = "".join(f"<th>{escape(table.header[c])}</th>" for c in columns)
    lines: List[str] = ["<table>", f"<thead><tr>{head}</tr></thead>", "<tbody>"]
    if table.rows:
        for row in table.rows:
            lines.append(f"<tr><td>{escape(row.day)}</td><td>{_render_hours(row)}</td></tr>")
    else:
        lines.append(f'<tr><td colspan="{len(columns)}" class="empty">{escape(table.empty)}</td></tr>')
    lines.extend(["</tbody>", "</table>"])
    return "\n".join(lines)


def render_page(table: TableViewModel, title: str) -> str:
    """Wrap the rendered table in a minimal standalone HTML page."""
    css = """
    :root { --fg: #1d2330; --rule: #d5d9e2; --muted: #5b6475; }
    body { margin: 24px; font-family: system-ui, -apple-system, Segoe UI, Roboto, Ubuntu, Arial; color: var(--fg); }
    h1 { font-size: 22px; font-weight: 650; margin: 0 0 14px; }
    table { border-collapse: collapse; min-width: 360px; }
    th, td { text-align: left; vertical-align: top; padding: 8px 12px; border-bottom: 1px solid var(--rule); }
    td ul { margin: 0; padding-left: 18px; }
    .empty { color: var(--muted); }
    """
    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{escape(title)}</title>
  <style>{css}</style>
</head>
<body>
  <h1>{escape(title)}</h1>
{render_table(table)}
</body>
</html>
"""


def cache_headers(metadata: CacheableMetadata) -> Dict[str, str]:
    """Map cache metadata onto HTTP response headers."""
    if metadata.max_age == PERMANENT:
        cache_control = f"public, max-age={PERMANENT_HTTP_MAX_AGE}"
    elif metadata.max_age == 0:
        cache_control = "no-cache"
    else:
        cache_control = f"public, max-age={metadata.max_age}"
    return {
        "Cache-Control": cache_control,
        "X-Cache-Tags": " ".join(metadata.get_cache_tags()),
        "X-Cache-Contexts": " ".join(metadata.get_cache_contexts()),
    }
