"""Tests for trace_waterfall/formatter.py"""

import json
import os
import tempfile
import unittest

from trace_waterfall.config import DEFAULT_TEMPLATE
from trace_waterfall.formatter import (
    TemplateError,
    get_formatter,
    load_template,
    render_html,
    render_json,
    render_row,
)
from trace_waterfall.report import Report, ReportRow


def _row(**overrides) -> ReportRow:
    values = dict(
        connection_id="c1",
        request_id=1,
        status=200,
        status_family=2,
        method="GET",
        host="a.example",
        path="/x",
        request_size="12",
        response_size="34",
        start_at=5,
        duration=150,
    )
    values.update(overrides)
    return ReportRow(**values)


class TestRenderRow(unittest.TestCase):
    def test_fields_present(self):
        html = render_row(_row())
        self.assertIn("<td><code>c1</code></td>", html)
        self.assertIn("<td><code>1</code></td>", html)
        self.assertIn('data-status-family="2"><span>200</span>', html)
        self.assertIn("<td>a.example</td>", html)
        self.assertIn("<td>/x</td>", html)
        self.assertIn('style="--start-at: 5; --duration: 150"', html)
        self.assertIn("<span>150ms</span>", html)

    def test_missing_values_render_empty(self):
        html = render_row(_row(status=None, status_family=0, request_size=None, response_size=None))
        self.assertIn('data-status-family="0"><span></span>', html)
        self.assertNotIn("None", html)

    def test_values_are_escaped(self):
        html = render_row(_row(connection_id='<script>"x"</script>', path="/a?b=1&c=<2>"))
        self.assertNotIn("<script>", html)
        self.assertIn("&lt;script&gt;&quot;x&quot;&lt;/script&gt;", html)
        self.assertIn("/a?b=1&amp;c=&lt;2&gt;", html)


class TestRenderHtml(unittest.TestCase):
    def test_substitutes_placeholders(self):
        template = "<p>{end_at}</p><table>{rows}</table>"
        out = render_html(Report(end_at=150, rows=[_row(), _row(request_id=2)]), template)
        self.assertTrue(out.startswith("<p>150</p><table>    <tr>"))
        self.assertEqual(out.count("<tr>"), 2)
        self.assertNotIn("{rows}", out)
        self.assertNotIn("{end_at}", out)

    def test_row_content_not_substituted(self):
        template = "{end_at}|{rows}"
        out = render_html(Report(end_at=7, rows=[_row(path="/{end_at}")]), template)
        self.assertIn("/{end_at}", out)
        self.assertTrue(out.startswith("7|"))

    def test_empty_report(self):
        out = render_html(Report(), "{end_at}:{rows}.")
        self.assertEqual(out, "0:.")

    def test_bundled_template(self):
        template = load_template(DEFAULT_TEMPLATE)
        out = render_html(Report(end_at=42, rows=[_row()]), template)
        self.assertIn("--end-at: 42;", out)
        self.assertIn("<td><code>c1</code></td>", out)


class TestRenderJson(unittest.TestCase):
    def test_structure(self):
        parsed = json.loads(render_json(Report(end_at=150, rows=[_row(status=None)])))
        self.assertEqual(parsed["end_at"], 150)
        self.assertEqual(len(parsed["rows"]), 1)
        row = parsed["rows"][0]
        self.assertIsNone(row["status"])
        self.assertEqual(row["host"], "a.example")
        self.assertEqual(row["duration"], 150)

    def test_empty(self):
        self.assertEqual(json.loads(render_json(Report())), {"end_at": 0, "rows": []})


class TestLoadTemplate(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def _write(self, content):
        path = os.path.join(self.tmpdir, "t.html")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_valid(self):
        path = self._write("{end_at}{rows}")
        self.assertEqual(load_template(path), "{end_at}{rows}")

    def test_missing_placeholder(self):
        path = self._write("<html>{end_at}</html>")
        with self.assertRaises(TemplateError) as ctx:
            load_template(path)
        self.assertIn("{rows}", str(ctx.exception))

    def test_unreadable(self):
        with self.assertRaises(TemplateError):
            load_template(os.path.join(self.tmpdir, "missing.html"))


class TestGetFormatter(unittest.TestCase):
    def test_json(self):
        self.assertEqual(get_formatter("json"), render_json)

    def test_html_uses_template(self):
        fmt = get_formatter("html", "[{end_at}]{rows}")
        self.assertEqual(fmt(Report(end_at=3)), "[3]")

    def test_html_without_template(self):
        with self.assertRaises(TemplateError):
            get_formatter("html")


if __name__ == "__main__":
    unittest.main()
