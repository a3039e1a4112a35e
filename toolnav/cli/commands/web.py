"""
Web API server command.

Starts the FastAPI app with uvicorn.
"""
import os

import click
import uvicorn


@click.command()
@click.option(
    '--host',
    default='127.0.0.1',
    help='Host to bind to (default: 127.0.0.1)'
)
@click.option(
    '--port',
    type=int,
    default=8000,
    help='Port to bind to (default: 8000)'
)
@click.option(
    '--reload',
    is_flag=True,
    help='Auto-reload on code changes'
)
@click.pass_context
def web(ctx, host, port, reload):
    """Serve the tool directory HTTP API."""
    # The app factory reads its settings from the environment, also under --reload
    os.environ['TOOLNAV_DB_PATH'] = str(ctx.obj.db_path)
    ctx.obj.close()

    click.echo(f"Starting toolnav API on http://{host}:{port}")
    click.echo(f"  Database: {ctx.obj.db_path}")
    if reload:
        click.echo("  Auto-reload: enabled (server restarts on code changes)")
    click.echo("\nPress Ctrl+C to stop\n")

    uvicorn.run(
        "toolnav.api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload
    )
