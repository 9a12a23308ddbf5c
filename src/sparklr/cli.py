"""CLI interface for the Sparklr SDK.

Commands:
    setup          - Store the session token and API settings
    post           - Show a post, optionally with comments and original
    notifications  - List notifications
    submit         - Submit a new text post
    status         - Show configuration status
"""

import asyncio
import sys
from pathlib import Path

import click
import httpx

from .config import (
    CONFIG_FILE,
    SparklrConfig,
    config_exists,
    load_config,
    save_config,
)
from .exceptions import SparklrError
from .logging_config import setup_logging


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--config", type=click.Path(), default=None, help="Config file path")
@click.pass_context
def main(ctx, verbose, config):
    """Sparklr: read posts and notifications from the terminal."""
    setup_logging(debug=verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else CONFIG_FILE


def _require_config(ctx) -> SparklrConfig:
    config_path = ctx.obj["config_path"]
    if not config_exists(config_path):
        click.echo("Error: No config found. Run 'sparklr setup' first.", err=True)
        sys.exit(1)
    return load_config(config_path)


def _run(coro):
    """Run an SDK coroutine, turning SDK and transport errors into exit 1."""
    try:
        return asyncio.run(coro)
    except SparklrError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except httpx.HTTPError as e:
        click.echo(f"Error: request failed: {e}", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def setup(ctx):
    """Store the Sparklr session token."""
    config_path = ctx.obj["config_path"]

    click.echo("Sparklr Setup")
    click.echo("=" * 40)
    click.echo("Log in to sparklr.me in your browser and copy the value")
    click.echo("of the 'D' cookie from DevTools -> Application -> Cookies.")
    click.echo()

    session = click.prompt("session", hide_input=True)
    base_url = click.prompt(
        "API base URL (Enter for default)", default="", show_default=False
    )

    save_config(
        SparklrConfig(session=session, base_url=base_url or None), config_path
    )
    click.echo(f"\nConfig saved to {config_path}")


@main.command()
@click.argument("post_id", type=int)
@click.option("--comments", is_flag=True, help="Also show comments")
@click.option("--original", is_flag=True, help="Also show the reposted original")
@click.pass_context
def post(ctx, post_id, comments, original):
    """Show the post POST_ID."""
    from .connection import Connection
    from .models import Post
    from .render import render_post

    config = _require_config(ctx)

    async def show() -> str:
        async with Connection.from_config(config) as conn:
            p = await Post.get_by_id(post_id, conn)
            post_comments = await p.get_comments(conn) if comments else None
            original_post = await p.get_original_post(conn) if original else None
            return render_post(p, comments=post_comments, original=original_post)

    click.echo(_run(show()))


@main.command()
@click.pass_context
def notifications(ctx):
    """List your notifications."""
    from .connection import Connection
    from .models import Notification
    from .render import render_notification

    config = _require_config(ctx)

    async def fetch():
        async with Connection.from_config(config) as conn:
            return await Notification.get_all(conn)

    items = _run(fetch())
    if not items:
        click.echo("No notifications.")
        return
    for item in items:
        click.echo(render_notification(item))


@main.command()
@click.argument("message")
@click.option("--network", default=None, help="Network to post to")
@click.pass_context
def submit(ctx, message, network):
    """Submit MESSAGE as a new post (max 500 characters)."""
    from .connection import Connection
    from .models import Post

    config = _require_config(ctx)

    async def send() -> bool:
        async with Connection.from_config(config) as conn:
            return await Post.submit(message, conn, network=network)

    if _run(send()):
        click.echo("Post submitted.")
    else:
        click.echo("Error: the server rejected the post.", err=True)
        sys.exit(1)


@main.command()
@click.pass_context
def status(ctx):
    """Show configuration status."""
    config_path = ctx.obj["config_path"]
    has_config = config_exists(config_path)

    click.echo("Sparklr Status")
    click.echo("=" * 40)
    click.echo(f"Config: {'Found' if has_config else 'Not configured'} ({config_path})")

    if not has_config:
        click.echo("\nRun 'sparklr setup' to get started.")
        return

    from .client import BASE_URL

    config = load_config(config_path)
    click.echo(f"API: {config.base_url or BASE_URL}")
    click.echo(f"Timeout: {config.timeout}s")
