"""Main CLI entry point with command groups"""

import click

from logscope.__version__ import __version__
from logscope.cli.detect import detect_command
from logscope.cli.formats import formats_command
from logscope.cli.parse import analyze_command, parse_command
from logscope.utils import setup_logging


class DefaultCommandGroup(click.Group):
    """Custom Click Group that allows a default command"""

    def parse_args(self, ctx, args):
        # During shell completion, don't redirect to default command
        if ctx.resilient_parsing:
            return super().parse_args(ctx, args)

        # If --help or --version is requested, show group help/version
        if not args or args[0] in ('--help', '-h', '--version'):
            return super().parse_args(ctx, args)

        # Check if first arg is a known command
        if args[0] in self.commands:
            return super().parse_args(ctx, args)

        # Otherwise, treat as parse command (default)
        return super().parse_args(ctx, ['parse'] + args)


@click.group(cls=DefaultCommandGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name='logscope')
@click.pass_context
def cli(ctx):
    """
    logscope - Log format detection, parsing and analysis.

    \b
    Commands:
      logscope <path>            Parse and analyze a file (default command)
      logscope detect <path>     Detect the format of a file
      logscope analyze <path>    Print only the analysis summary
      logscope formats           List supported formats

    \b
    Examples:
      logscope /var/log/nginx/access.log
      logscope detect app.log.gz
      logscope parse app.log --format json_logs --json
      logscope formats --samples

    \b
    Environment:
      LOGSCOPE_LOG_LEVEL           Log level (default: WARNING)
      LOGSCOPE_SAMPLE_SIZE         Lines sampled for detection (default: 50)
      LOGSCOPE_PROGRESS_INTERVAL   Lines between progress reports (default: 1000)
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


# Register subcommands (parse is the default command)
cli.add_command(parse_command, name='parse')
cli.add_command(analyze_command, name='analyze')
cli.add_command(detect_command, name='detect')
cli.add_command(formats_command, name='formats')


def main():
    """Entry point for the CLI"""
    setup_logging()
    cli()


if __name__ == '__main__':
    main()
