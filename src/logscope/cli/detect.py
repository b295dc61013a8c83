"""CLI command for format detection."""

import json
import sys

import click

from logscope.detector import FormatDetector
from logscope.line_source import UnsupportedCompressionError


@click.command('detect')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--sample-size', '-n', type=int, default=None, help='Non-blank lines to sample (default: 50)')
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
@click.option('--no-color', is_flag=True, help='Disable colored output')
def detect_command(path: str, sample_size: int | None, json_output: bool, no_color: bool):
    """Detect the log format of a file.

    \b
    Examples:
        logscope detect /var/log/nginx/access.log
        logscope detect app.log.gz --sample-size 200
        logscope detect app.log --json
    """
    detector = FormatDetector(sample_size=sample_size)
    try:
        result = detector.detect_file(path)
    except UnsupportedCompressionError as e:
        click.echo(f'Error: {e}', err=True)
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(result.model_dump(), indent=2))
    else:
        colorize = not no_color and sys.stdout.isatty()
        click.echo(result.to_cli(colorize=colorize))

    if result.best_match is None:
        sys.exit(1)
