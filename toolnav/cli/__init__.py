"""
Command-line interface for the tool directory.
"""
import logging

import click

from toolnav import __version__
from toolnav.cli.commands import database, web
from toolnav.cli.common import CLIContext, load_cli_settings


@click.group()
@click.version_option(__version__, prog_name="toolnav")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option(
    '--db-path',
    type=click.Path(),
    help='Path to database file (default: $TOOLNAV_DB_PATH or OS-specific location)'
)
@click.pass_context
def main(ctx, verbose, db_path):
    """toolnav - AI tool directory storage and migration."""
    settings = load_cli_settings()
    if db_path:
        settings.db_path = str(db_path)

    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    ctx.obj = CLIContext(settings, verbose=verbose)
    ctx.call_on_close(ctx.obj.close)


main.add_command(database.migrate)
main.add_command(database.analyze)
main.add_command(database.check)
main.add_command(database.rebuild_index)
main.add_command(database.search)
main.add_command(web.web)
