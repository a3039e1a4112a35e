"""
Database-related CLI commands.

Commands for migrating a seed file into the database, checking and
rebuilding the search index, and searching from the terminal.
"""
import traceback

import click

from toolnav.cli.common import db_option
from toolnav.core.db.constants import DEFAULT_BATCH_SIZE, DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT
from toolnav.core.db.schema import TABLES
from toolnav.core.errors import MigrationIntegrityError, ToolNavError
from toolnav.services.migration import MigrationPipeline
from toolnav.services.seed_analysis import analyze_seed


@click.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
@db_option
@click.option(
    '--batch-size',
    type=click.IntRange(min=1),
    default=DEFAULT_BATCH_SIZE,
    help='Tools per transaction'
)
@click.pass_context
def migrate(ctx, source, db_path, batch_size):
    """Recreate the database from a seed JSON file (deletes the existing file)."""
    if db_path:
        ctx.obj.db_path = db_path
    # The pipeline deletes and recreates the file
    ctx.obj.close()

    click.echo(f"Migrating {source} into {ctx.obj.db_path}...")

    def progress_callback(done, total):
        click.echo(f"Progress: {done}/{total} tools")

    pipeline = MigrationPipeline(
        source, ctx.obj.db_path, batch_size=batch_size, progress=progress_callback
    )
    try:
        report = pipeline.run()
    except MigrationIntegrityError as e:
        click.secho(f"Migration failed verification: {', '.join(e.failed_checks)}", fg='red', err=True)
        raise click.Abort()
    except ToolNavError as e:
        click.secho(f"Migration failed: {e}", fg='red', err=True)
        if ctx.obj.verbose:
            click.echo(traceback.format_exc(), err=True)
        raise click.Abort()

    click.echo(report.format())
    click.secho("\nMigration complete!", fg='green')


@click.command()
@click.argument('source', type=click.Path(exists=True, dir_okay=False))
def analyze(source):
    """Report statistics and integrity problems in a seed JSON file."""
    try:
        analysis = analyze_seed(source)
    except ToolNavError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        raise click.Abort()

    click.echo(analysis.format())
    if not analysis.ok:
        click.secho("\nFix these problems before migrating.", fg='yellow', err=True)
        raise click.Abort()
    click.secho("\nReady to migrate.", fg='green')


@click.command()
@db_option
@click.pass_context
def check(ctx, db_path):
    """Check tables, site configuration, and search index consistency."""
    if db_path:
        ctx.obj.db_path = db_path

    db = ctx.obj.get_db()
    problems = 0

    present = {
        row['name']
        for row in db.conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    }
    click.echo("Tables:")
    for table in TABLES:
        if table in present:
            count = db.conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
            click.echo(f"  {table}: {count} rows")
        else:
            click.secho(f"  {table}: missing", fg='red')
            problems += 1

    site = db.get_site_config()
    click.echo("\nSite configuration:")
    if site['site_name']:
        click.echo(f"  Name: {site['site_name']}")
        click.echo(f"  Keywords: {', '.join(site['keywords']) or '(none)'}")
    else:
        click.secho("  Site name is empty (run migrate first)", fg='yellow')
        problems += 1

    index = db.verify_search_index()
    click.echo("\nSearch index:")
    click.echo(f"  Active tools: {index['active_tools']}")
    click.echo(f"  Indexed: {index['indexed']}")
    if index['in_sync']:
        click.secho("  In sync", fg='green')
    else:
        click.secho("  Out of sync (run rebuild-index)", fg='red')
        problems += 1

    if problems:
        raise click.Abort()


@click.command('rebuild-index')
@db_option
@click.pass_context
def rebuild_index(ctx, db_path):
    """Rebuild the full-text search index from the tool tables."""
    if db_path:
        ctx.obj.db_path = db_path

    db = ctx.obj.get_db()
    try:
        count = db.rebuild_search_index()
        db.fts.optimize()
    except ToolNavError as e:
        click.secho(f"Error rebuilding index: {e}", fg='red', err=True)
        raise click.Abort()

    click.secho(f"Indexed {count} tools", fg='green')


@click.command()
@click.argument('query')
@click.option(
    '--limit',
    type=click.IntRange(1, MAX_SEARCH_LIMIT),
    default=DEFAULT_SEARCH_LIMIT,
    help='Maximum number of results'
)
@db_option
@click.pass_context
def search(ctx, query, limit, db_path):
    """Search tools by name, description, tags, and category."""
    if db_path:
        ctx.obj.db_path = db_path

    db = ctx.obj.get_db()
    results = db.search_tools(query, limit)

    if not results:
        click.echo(f"No tools found matching '{query}'")
        return

    click.secho(f"\nFound {len(results)} tools matching '{query}':\n", fg='green')
    for tool in results:
        click.echo(f"[{tool['legacy_id']}] {tool['name']} ({tool['category_name']})")
        if tool.get('url'):
            click.echo(f"    {tool['url']}")
        if tool.get('tags'):
            click.echo(f"    tags: {tool['tags']}")
