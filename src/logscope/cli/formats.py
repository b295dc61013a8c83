"""CLI command listing supported log formats."""

import json

import click

from logscope.formats import list_formats


@click.command('formats')
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
@click.option('--samples', is_flag=True, help='Show a sample line for each format')
def formats_command(json_output: bool, samples: bool):
    """List the log formats logscope can detect and parse.

    Formats are listed in detection priority order: when two formats match a
    sample equally well, the one listed first wins.
    """
    formats = list_formats()

    if json_output:
        click.echo(json.dumps({'formats': formats}, indent=2))
        return

    for fmt in formats:
        click.echo(f'{fmt["id"]:<18} {fmt["category"]:<10} {fmt["name"]}')
        if samples and fmt['sample']:
            click.echo(f'{"":<18} {fmt["sample"]}')
