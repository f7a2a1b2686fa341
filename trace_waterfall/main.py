"""trace-waterfall — render HTTP client trace logs as a request waterfall."""

import errno
import logging
import os
import sys
import tempfile
from argparse import ArgumentParser

from trace_waterfall.config import ConfigError, load_config, load_yaml_config
from trace_waterfall.formatter import TemplateError, get_formatter, load_template
from trace_waterfall.ingest import ingest
from trace_waterfall.parser import build_pattern
from trace_waterfall.reader import LogReadError, read_lines
from trace_waterfall.report import assemble_report

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    """Build the CLI argument parser."""
    parser = ArgumentParser(
        prog="trace-waterfall",
        description="Correlate HTTP client send events from a log into a timeline report.",
    )
    parser.add_argument("log_path", help="Log file to analyse")
    parser.add_argument("output_path", help="Report file to write")
    parser.add_argument(
        "--config",
        help="Path to a YAML config file overriding the line markers or template",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["html", "json"],
        help="Output format (default: html)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log skipped and malformed lines",
    )
    return parser


def configure_logging(level: str) -> None:
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [WATERFALL] %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(numeric_level)


def create_output(output_path: str) -> tuple[int, str]:
    """Create a temp file next to output_path. Returns (fd, temp_path)."""
    if os.path.isdir(output_path):
        raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), output_path)
    target_dir = os.path.dirname(os.path.abspath(output_path))
    try:
        return tempfile.mkstemp(dir=target_dir, suffix=".tmp")
    except OSError as e:
        raise OSError(e.errno, e.strerror, output_path) from e


def run(args) -> int:
    """Analyse the log and write the report. Returns the process exit code."""
    configure_logging("DEBUG" if args.verbose else "INFO")
    config = load_config(args, load_yaml_config(args.config))
    configure_logging(config.log_level)

    fd, tmp_path = create_output(args.output_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            template = load_template(config.template_path) if config.output_format == "html" else None
            formatter = get_formatter(config.output_format, template)

            lines = (line for _, line in read_lines(args.log_path))
            ingestor = ingest(lines, build_pattern(config))
            report = assemble_report(ingestor.store, ingestor.origin)
            f.write(formatter(report))
        os.replace(tmp_path, args.output_path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise

    connections = ingestor.store.connections()
    logger.info("%d connection(s): %s", len(connections), ", ".join(connections))
    for row in report.slowest(3):
        logger.info("Slow span %s/%d: %dms %s%s", row.connection_id, row.request_id,
                    row.duration, row.host, row.path)
    logger.info("Spans per status family: %s", report.status_counts())

    print(
        f"\nNumber of analysed log lines: {ingestor.stats.lines_analysed}\n"
        f"Number of matched lines: {ingestor.stats.lines_matched}\n"
        f"Number of spans: {len(report.rows)}\n"
        f"Output file: {args.output_path}\n"
        "Done!"
    )
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return run(args)
    except (ConfigError, TemplateError, LogReadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e.strerror or e}: {e.filename}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit(130)
