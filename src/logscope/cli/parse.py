"""CLI commands for parsing and analyzing log files."""

import json
import sys

import click

from logscope import engine
from logscope.detector import FormatDetectionError
from logscope.engine import LogParser
from logscope.formats import UnknownFormatError
from logscope.line_source import UnsupportedCompressionError
from logscope.models import AnalysisSummary
from logscope.records import ParseProgress, ParseResult


def _write_metrics(metrics_file: str):
    from prometheus_client import generate_latest

    with open(metrics_file, 'wb') as f:
        f.write(generate_latest())


def _progress_printer(path: str):
    def on_progress(progress: ParseProgress):
        click.echo(
            f'{path}: {progress.processed:,} lines ({progress.parsed:,} parsed, {progress.errors:,} errors)',
            err=True,
        )

    return on_progress


def _run(
    path: str, format_id: str | None, metrics_file: str | None, show_progress: bool
) -> tuple[ParseResult, AnalysisSummary]:
    """Parse and summarize a file, exiting with status 1 on fatal errors."""
    if metrics_file:
        engine.enable_metrics()

    parser = LogParser()
    on_progress = _progress_printer(path) if show_progress else None
    try:
        return parser.parse_and_summarize(path, format_id=format_id, on_progress=on_progress)
    except (FormatDetectionError, UnknownFormatError, UnsupportedCompressionError) as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(f'Error reading {path}: {e}', err=True)
        sys.exit(1)
    finally:
        if metrics_file:
            _write_metrics(metrics_file)


_common_options = [
    click.argument('path', type=click.Path(exists=True, dir_okay=False)),
    click.option('--format', '-f', 'format_id', default=None, help='Format id to use instead of detection'),
    click.option('--json', 'json_output', is_flag=True, help='Output in JSON format'),
    click.option('--no-color', is_flag=True, help='Disable colored output'),
    click.option('--progress', is_flag=True, help='Print progress to stderr while parsing'),
    click.option('--metrics-file', type=click.Path(dir_okay=False), default=None, help='Write Prometheus metrics here'),
]


def common_options(func):
    for option in reversed(_common_options):
        func = option(func)
    return func


@click.command('parse')
@common_options
@click.option('--entries/--no-entries', default=False, help='Include parsed records in JSON output')
def parse_command(
    path: str,
    format_id: str | None,
    json_output: bool,
    no_color: bool,
    progress: bool,
    metrics_file: str | None,
    entries: bool,
):
    """Parse a log file and report statistics, patterns and anomalies.

    \b
    Examples:
        logscope parse /var/log/syslog
        logscope parse access.log.gz --format nginx_access
        logscope parse app.log --json --entries > parsed.json
    """
    result, summary = _run(path, format_id, metrics_file, progress)

    if json_output:
        output = result.to_dict(include_entries=entries)
        output['summary'] = summary.model_dump()
        click.echo(json.dumps(output, indent=2, default=str))
        return

    colorize = not no_color and sys.stdout.isatty()
    click.echo(summary.to_cli(colorize=colorize))
    click.echo(f'\nParsed in {result.elapsed_seconds:.2f}s')


@click.command('analyze')
@common_options
def analyze_command(
    path: str,
    format_id: str | None,
    json_output: bool,
    no_color: bool,
    progress: bool,
    metrics_file: str | None,
):
    """Analyze a log file and print only the summary.

    \b
    Examples:
        logscope analyze /var/log/auth.log
        logscope analyze app.log --json
    """
    _, summary = _run(path, format_id, metrics_file, progress)

    if json_output:
        click.echo(json.dumps(summary.model_dump(), indent=2, default=str))
    else:
        colorize = not no_color and sys.stdout.isatty()
        click.echo(summary.to_cli(colorize=colorize))
