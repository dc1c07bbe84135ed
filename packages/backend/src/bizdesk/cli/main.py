"""BizDesk CLI — development and operations helpers.

Usage:
    bizdesk seed-users                    # Test org + admin/manager/viewer
    bizdesk seed-users --password s3cret  # Same, one password for all three
    bizdesk list-users                    # Every identity in the database
    bizdesk list-users --json             # Same, as JSON
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
from typing import Optional

import click
from sqlalchemy import select

from bizdesk import __version__

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="bizdesk")
def main():
    """BizDesk — business-management backend tooling."""


# ---------------------------------------------------------------------------
# bizdesk seed-users
# ---------------------------------------------------------------------------


@main.command("seed-users")
@click.option("--password", "-p", help="Override every test user's password (min 6 chars)")
def seed_users(password: Optional[str]):
    """Create the test organization and admin/manager/viewer identities."""
    if password is not None and len(password) < 6:
        raise click.BadParameter("must be at least 6 characters", param_hint="--password")
    _run(_seed_users_impl(password))


async def _seed_users_impl(password: Optional[str]):
    from bizdesk.db.engine import async_session_factory, engine
    from bizdesk.services.seed import seed_test_users

    try:
        async with async_session_factory() as db:
            outcome = await seed_test_users(db, password=password)
    finally:
        await engine.dispose()

    for seed, created in outcome:
        if created:
            click.secho(f"Created {seed.role.value:8s} {seed.email}", fg="green")
        else:
            click.echo(f"Exists  {seed.role.value:8s} {seed.email}")

    click.echo()
    click.secho("Test credentials:", bold=True)
    for seed, _ in outcome:
        click.echo(f"  {seed.email} / {password or seed.password}")


# ---------------------------------------------------------------------------
# bizdesk list-users
# ---------------------------------------------------------------------------


@main.command("list-users")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
def list_users(as_json: bool):
    """List every identity with role, organization and status."""
    _run(_list_users_impl(as_json))


async def _list_users_impl(as_json: bool):
    from bizdesk.db.engine import async_session_factory, engine
    from bizdesk.db.models import User

    try:
        async with async_session_factory() as db:
            result = await db.execute(select(User).order_by(User.created_at))
            users = result.scalars().all()
    finally:
        await engine.dispose()

    rows = [
        {
            "id": str(u.id),
            "username": u.username,
            "email": u.email,
            "role": u.role,
            "permissions": list(u.permissions or []),
            "organization_id": str(u.organization_id) if u.organization_id else None,
            "active": u.active,
        }
        for u in users
    ]

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No users found.")
        return

    click.secho(f"Users ({len(rows)}):", bold=True)
    click.echo()
    _print_table(rows, [
        ("Username", "username", 16),
        ("Email", "email", 28),
        ("Role", "role", 10),
        ("Active", "active", 6),
        ("Permissions", "permissions", 40),
    ])


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
