"""Output formatters — HTML waterfall from the bundled template, or JSON."""

import html
import json
from typing import Callable

from trace_waterfall.report import Report, ReportRow

PLACEHOLDERS = ("{end_at}", "{rows}")

ROW_TEMPLATE = """    <tr>
      <td><code>{connection_id}</code></td>
      <td><code>{request_id}</code></td>
      <td data-status-family="{status_family}"><span>{status}</span></td>
      <td>{method}</td>
      <td>{host}</td>
      <td>{path}</td>
      <td>{request_size}</td>
      <td>{response_size}</td>
      <td><div class="span" style="--start-at: {start_at}; --duration: {duration}"><span>{duration}ms</span></div></td>
    </tr>
"""


class TemplateError(Exception):
    """The HTML template cannot be used to render a report."""


def load_template(path: str) -> str:
    """Read a template and check it carries every placeholder."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            template = f.read()
    except OSError as e:
        raise TemplateError(f"Failed to read template {path}: {e}") from e

    missing = [p for p in PLACEHOLDERS if p not in template]
    if missing:
        raise TemplateError(f"Template {path} is missing placeholder(s): {', '.join(missing)}")
    return template


def _text(value) -> str:
    return html.escape("" if value is None else str(value))


def render_row(row: ReportRow) -> str:
    return ROW_TEMPLATE.format(
        connection_id=_text(row.connection_id),
        request_id=row.request_id,
        status_family=row.status_family,
        status=_text(row.status),
        method=_text(row.method),
        host=_text(row.host),
        path=_text(row.path),
        request_size=_text(row.request_size),
        response_size=_text(row.response_size),
        start_at=row.start_at,
        duration=row.duration,
    )


def render_html(report: Report, template: str) -> str:
    rows = "".join(render_row(row) for row in report.rows)
    # {rows} last so row content is never scanned for {end_at}
    return template.replace("{end_at}", str(report.end_at)).replace("{rows}", rows)


def render_json(report: Report) -> str:
    """JSON document with the timeline width and every row."""
    return json.dumps({
        "end_at": report.end_at,
        "rows": [
            {
                "connection_id": row.connection_id,
                "request_id": row.request_id,
                "status": row.status,
                "status_family": row.status_family,
                "method": row.method,
                "host": row.host,
                "path": row.path,
                "request_size": row.request_size,
                "response_size": row.response_size,
                "start_at": row.start_at,
                "duration": row.duration,
            }
            for row in report.rows
        ],
    }, indent=2) + "\n"


def get_formatter(output_format: str = "html", template: str | None = None) -> Callable[[Report], str]:
    """Factory that returns the right renderer for the output format."""
    if output_format == "json":
        return render_json
    if template is None:
        raise TemplateError("HTML output needs a template")
    return lambda report: render_html(report, template)
