"""
Overseer CLI - run admin commands against a world snapshot.

Usage:
    overseer roles                          List the role hierarchy
    overseer commands                       List commands and required roles
    overseer run SNAPSHOT COMMAND --role N  Dispatch one command
"""

import json
import sys

import click
import yaml

from overseer import __version__
from overseer.commands import get_all_commands
from overseer.config import AdminConfig
from overseer.context import AdminContext
from overseer.dispatcher import CommandDispatcher
from overseer.loader import SnapshotError, dump_snapshot, load_snapshot
from overseer.logging import configure_logging
from overseer.roles import AccountIdentity, Caller, role_label


def _parse_params(pairs: tuple[str, ...]) -> dict:
    """
    Turn key=value pairs into a params dict.

    Values stay strings (the command's params model coerces them) unless
    they look like JSON objects or lists, e.g. -p 'stats={"health": 40}'.
    """
    params = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="-p")
        if raw.startswith(("{", "[")):
            try:
                params[key.strip()] = json.loads(raw)
            except json.JSONDecodeError as e:
                raise click.BadParameter(f"{key}: invalid JSON ({e})", param_hint="-p")
            continue
        params[key.strip()] = raw
    return params


@click.group()
@click.version_option(version=__version__, prog_name="overseer")
@click.option("--log-level", default=None, help="Logging level (default: OVERSEER_LOG_LEVEL)")
@click.pass_context
def main(ctx: click.Context, log_level: str | None):
    """Overseer - admin command bridge for a live game world."""
    ctx.ensure_object(dict)
    config = AdminConfig.from_env()
    configure_logging(log_level or config.log_level)
    ctx.obj["config"] = config


@main.command()
def roles():
    """List roles from lowest to highest."""
    for role in AccountIdentity:
        click.echo(f"{int(role)}  {role_label(role)}")


@main.command()
def commands():
    """List registered commands with the role each requires."""
    for name, cls in sorted(get_all_commands().items()):
        kind = "write" if cls.mutating else "read"
        click.echo(f"{name:<20} {role_label(cls.required_role):<11} {kind:<5} {cls.description}")


@main.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.argument("command")
@click.option("--role", "-r", type=int, required=True, help="Caller role value (0-4)")
@click.option("--email", "-e", default="cli@localhost", help="Caller account email")
@click.option("--param", "-p", "params", multiple=True, help="Command parameter key=value")
@click.option("--save", is_flag=True, help="Write the snapshot back after a successful command")
@click.pass_context
def run(
    ctx: click.Context,
    snapshot: str,
    command: str,
    role: int,
    email: str,
    params: tuple[str, ...],
    save: bool,
):
    """Dispatch COMMAND against SNAPSHOT and print the outcome as JSON.

    Examples:
        overseer run world.yaml ban_account -r 3 -p email=a@x.com
        overseer run world.yaml level_up -r 3 -p name=Warden -p levels=2 --save
    """
    try:
        world_snapshot = load_snapshot(snapshot)
    except (OSError, SnapshotError, yaml.YAMLError) as e:
        click.echo(f"Error: could not load {snapshot}: {e}", err=True)
        sys.exit(2)

    admin_ctx = AdminContext(
        world=world_snapshot.world,
        records=world_snapshot.records,
        config=ctx.obj["config"],
    )
    outcome = CommandDispatcher(admin_ctx).dispatch(
        command, Caller(email=email, role=role), _parse_params(params)
    )
    click.echo(json.dumps(outcome.to_dict(), indent=2, default=str))

    if not outcome.ok:
        sys.exit(1)
    if save:
        dump_snapshot(world_snapshot, snapshot)
        click.echo(f"Saved {snapshot}", err=True)


if __name__ == "__main__":
    main()
