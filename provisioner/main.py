"""
Ansible Provisioner — CLI entrypoint.

Usage:
    python -m provisioner.main --help
    python -m provisioner.main render --part init
    python -m provisioner.main check --record
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from provisioner import __version__
from provisioner.core.observability.logging_config import setup_logging

FORCE_ENV_VAR = "PROVISIONER_FORCE"

EXIT_CHANGED = 3


def _env_force() -> bool:
    return os.environ.get(FORCE_ENV_VAR, "").strip().lower() in ("1", "true", "yes", "on")


@click.group()
@click.version_option(version=__version__, prog_name="provisioner")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to provisioner.yml (default: auto-detect).",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help=f"Force the run step to re-run (also via {FORCE_ENV_VAR}=1).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    force: bool,
) -> None:
    """Ansible Provisioner — compose idempotent remote Ansible runs."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["force"] = force or _env_force()

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("PROVISIONER_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("PROVISIONER_LOG_FILE"),
        log_file_level=os.environ.get("PROVISIONER_LOG_FILE_LEVEL"),
    )


def _build_provisioner(ctx: click.Context):
    """Load config and compose the provisioner, exiting 1 on config errors."""
    from provisioner.core.config.loader import ConfigError, load_config
    from provisioner.core.engine.provisioner import AnsibleProvisioner

    try:
        config = load_config(ctx.obj.get("config_path"))
        return AnsibleProvisioner(config.id, config, force=ctx.obj.get("force", False))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)
    except OSError as e:
        click.secho(f"❌ Cannot read role files: {e}", fg="red")
        sys.exit(1)


@cli.command()
@click.option(
    "--part",
    type=click.Choice(["init", "run", "playbook", "all"]),
    default="all",
    show_default=True,
    help="Which generated artifact to print.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON (secrets redacted).")
@click.option("--reveal", is_flag=True, help="Print secret content in plain text.")
@click.pass_context
def render(ctx: click.Context, part: str, as_json: bool, reveal: bool) -> None:
    """Print the generated init script, run script and playbook."""
    from provisioner.core.models.sensitive import redact
    from provisioner.core.models.sensitive import reveal as reveal_value

    provisioner = _build_provisioner(ctx)

    if as_json:
        click.echo(json.dumps(provisioner.to_dict(), indent=2, default=str))
        return

    show = reveal_value if reveal else redact
    sections = {
        "init": (provisioner.init_command.resource_id, provisioner.init_command.create),
        "run": (provisioner.run_command.resource_id, provisioner.run_command.create),
        "playbook": (provisioner.playbook_file, provisioner.playbook_yaml),
    }
    selected = sections if part == "all" else {part: sections[part]}

    for name, (label, text) in selected.items():
        if part == "all" and not ctx.obj.get("quiet"):
            click.secho(f"# ── {name}: {label}", fg="cyan", bold=True)
        text = show(text)
        click.echo(text, nl=not text.endswith("\n"))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def triggers(ctx: click.Context, as_json: bool) -> None:
    """Print the trigger tokens of the run step."""
    from provisioner.core.models.sensitive import redact

    provisioner = _build_provisioner(ctx)
    tokens = redact(provisioner.triggers)

    if as_json:
        click.echo(json.dumps(tokens, indent=2, default=str))
        return

    for index, token in enumerate(tokens):
        if not isinstance(token, str):
            token = json.dumps(token, separators=(",", ":"), default=str)
        click.echo(f"{index:>3}  {token}")


@cli.command("hash")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, file_okay=False))
def hash_cmd(paths: tuple[str, ...]) -> None:
    """Print the content hash of each directory."""
    from provisioner.core.services.hashing import directory_hash

    for path in paths:
        try:
            click.echo(f"{directory_hash(path)}  {path}")
        except OSError as e:
            click.secho(f"❌ {path}: {e}", fg="red")
            sys.exit(1)


@cli.command()
@click.pass_context
def files(ctx: click.Context) -> None:
    """List the remote files the clean step keeps."""
    provisioner = _build_provisioner(ctx)
    for entry in provisioner.keep_files():
        click.echo(f"{provisioner.remote_path}/{entry}")


@cli.command()
@click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Trigger state file (default: .state/triggers.json next to the config).",
)
@click.option("--record", is_flag=True, help="Record the current triggers.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, state_path: str | None, record: bool, as_json: bool) -> None:
    """Check whether the run step must re-run.

    Exits 0 when triggers are unchanged, 3 when a re-run is needed.
    """
    from provisioner.core.use_cases.check import check_triggers

    result = check_triggers(
        config_path=ctx.obj.get("config_path"),
        state_path=Path(state_path) if state_path else None,
        record=record,
        force=ctx.obj.get("force", False),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        click.secho(f"❌ {result.error}", fg="red")
    elif result.changed:
        click.secho(f"🔄 {result.resource_id} must re-run", fg="yellow", bold=True)
        click.echo(f"   Changed tokens: {', '.join(map(str, result.changed_positions))}")
    else:
        click.secho(f"✅ {result.resource_id} is up to date", fg="green", bold=True)

    if result.recorded and not as_json:
        click.echo(f"   Recorded to {result.state_path}")

    if result.error:
        sys.exit(1)
    if result.changed:
        sys.exit(EXIT_CHANGED)


if __name__ == "__main__":
    cli()
