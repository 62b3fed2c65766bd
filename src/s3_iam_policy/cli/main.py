"""CLI entry point for s3-iam-policy.

Invoked as::

    s3-iam-policy [OPTIONS] COMMAND [ARGS]...

or during development::

    python -m s3_iam_policy.cli.main

Commands
--------
- validate         Parse and validate a policy document
- show             Display the statements of a policy document
- check            Decide a single request against a policy document
- templates list   List the canned policies
- templates show   Print a canned policy
- version          Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from s3_iam_policy.config.config_loader import ConfigLoader, EngineConfig
from s3_iam_policy.errors import PolicyLoadError, PolicyValidationError
from s3_iam_policy.policies.parser import PolicyParser
from s3_iam_policy.policies.policy import DecisionType, Policy
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.policies.statement import Vote

console = Console()
err_console = Console(stderr=True)

_DECISION_STYLES: dict[DecisionType, str] = {
    DecisionType.ALLOWED: "[green]ALLOWED[/green]",
    DecisionType.EXPLICIT_DENY: "[red]EXPLICIT DENY[/red]",
    DecisionType.IMPLICIT_DENY: "[yellow]IMPLICIT DENY[/yellow]",
}

_VOTE_STYLES: dict[Vote, str] = {
    Vote.ALLOW: "[green]allow[/green]",
    Vote.DENY: "[red]deny[/red]",
    Vote.ABSTAIN: "[dim]abstain[/dim]",
}


def _try_load_policy(ctx: click.Context, policy_file: str) -> Policy | None:
    parser = PolicyParser(config=ctx.obj["config"])
    try:
        return parser.parse_file(Path(policy_file))
    except (PolicyLoadError, FileNotFoundError) as exc:
        err_console.print(f"[red]Invalid policy:[/red] {exc}")
        return None


def _load_policy(ctx: click.Context, policy_file: str) -> Policy:
    policy = _try_load_policy(ctx, policy_file)
    if policy is None:
        sys.exit(1)
    return policy


def _parse_attrs(pairs: tuple[str, ...]) -> dict[str, list[str]]:
    attrs: dict[str, list[str]] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--attr")
        attrs.setdefault(name, []).append(value)
    return attrs


# ---------------------------------------------------------------------------
# Root command group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="s3-iam-policy")
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(exists=True),
    help="Path to an engine configuration YAML file.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """S3 IAM policy CLI: validate documents and test authorization decisions."""
    loader = ConfigLoader()
    config: EngineConfig = loader.load(Path(config_path)) if config_path else loader.defaults()
    logging.basicConfig(level=config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from s3_iam_policy import __version__

    console.print(
        Panel(
            f"[bold]s3-iam-policy[/bold]  v[cyan]{__version__}[/cyan]\n"
            "IAM policy evaluation for S3-compatible object stores.",
            title="Version",
            border_style="blue",
        )
    )


# ---------------------------------------------------------------------------
# validate / show
# ---------------------------------------------------------------------------


@cli.command(name="validate")
@click.argument("policy_files", nargs=-1, type=click.Path(exists=True))
@click.option(
    "--bucket",
    "-b",
    "bucket_name",
    default=None,
    help="Validate as a bucket policy attached to this bucket.",
)
@click.pass_context
def validate_command(
    ctx: click.Context, policy_files: tuple[str, ...], bucket_name: str | None
) -> None:
    """Parse and validate POLICY_FILES (JSON, or YAML by suffix).

    Without arguments the ``policy_files`` listed in the engine config are
    validated.
    """
    config: EngineConfig = ctx.obj["config"]
    paths = [str(path) for path in config.policy_files] if not policy_files else list(policy_files)
    if not paths:
        raise click.UsageError("no policy files given and none configured in policy_files")

    failed = 0
    for path in paths:
        policy = _try_load_policy(ctx, path)
        if policy is None:
            failed += 1
            continue
        try:
            policy.validate(accepted_versions=config.accepted_versions, bucket_name=bucket_name)
        except PolicyValidationError as exc:
            err_console.print(f"[red]Invalid policy:[/red] [bold]{path}[/bold]: {exc}")
            failed += 1
            continue
        console.print(
            f"[green]Valid[/green] policy: [bold]{path}[/bold] "
            f"({len(policy.statements)} statement(s))"
        )
    if failed:
        sys.exit(1)


@cli.command(name="show")
@click.argument("policy_file", type=click.Path(exists=True))
@click.option("--json", "as_json", is_flag=True, help="Print the normalised JSON document.")
@click.pass_context
def show_command(ctx: click.Context, policy_file: str, as_json: bool) -> None:
    """Display the statements of POLICY_FILE."""
    policy = _load_policy(ctx, policy_file)
    if as_json:
        click.echo(policy.to_json(indent=2))
        return

    table = Table(title=f"Policy {policy.id or policy_file}", box=box.SIMPLE)
    table.add_column("Sid", style="cyan")
    table.add_column("Effect", style="magenta")
    table.add_column("Actions")
    table.add_column("Resources")
    table.add_column("Conditions")
    for statement in policy.statements:
        table.add_row(
            statement.sid or "-",
            statement.effect.value,
            "\n".join(statement.actions.to_json()),
            "\n".join(statement.resources.to_json()) or "-",
            json.dumps(statement.conditions.to_json()) if statement.conditions else "-",
        )
    console.print(table)
    console.print(f"  Version: [cyan]{policy.version or '(empty)'}[/cyan]")


# ---------------------------------------------------------------------------
# check
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("policy_file", type=click.Path(exists=True))
@click.option("--action", "-a", required=True, help="Requested action, e.g. s3:GetObject.")
@click.option("--bucket", "-b", default="", help="Target bucket name.")
@click.option("--object", "-o", "object_name", default="", help="Target object key.")
@click.option(
    "--attr",
    "attrs",
    multiple=True,
    help="Request attribute as KEY=VALUE, e.g. SourceIp=10.0.0.1. Repeatable.",
)
@click.option("--owner", is_flag=True, help="Treat the caller as the resource owner.")
@click.option("--account", default="", help="Caller account, matched against statement principals.")
@click.pass_context
def check_command(
    ctx: click.Context,
    policy_file: str,
    action: str,
    bucket: str,
    object_name: str,
    attrs: tuple[str, ...],
    owner: bool,
    account: str,
) -> None:
    """Decide whether POLICY_FILE allows a request."""
    policy = _load_policy(ctx, policy_file)
    request = AuthorizationRequest(
        action=action,
        bucket=bucket,
        object=object_name,
        attrs=_parse_attrs(attrs),
        is_owner=owner,
        account_name=account,
    )
    result = policy.evaluate(request)

    console.print(
        Panel(_DECISION_STYLES[result.decision], title="Policy Check Result", border_style="blue")
    )
    table = Table(title="Statement Votes", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Sid", style="cyan")
    table.add_column("Effect", style="magenta")
    table.add_column("Vote")
    for index, (statement, vote) in enumerate(result.votes, start=1):
        table.add_row(str(index), statement.sid or "-", statement.effect.value, _VOTE_STYLES[vote])
    console.print(table)

    sys.exit(0 if result.allowed else 1)


# ---------------------------------------------------------------------------
# templates group
# ---------------------------------------------------------------------------


@cli.group(name="templates")
def templates_group() -> None:
    """Canned policy commands."""


@templates_group.command(name="list")
def templates_list_command() -> None:
    """List the canned policies."""
    from s3_iam_policy.templates.canned_policies import get_policy, list_templates

    table = Table(title="Canned Policies", box=box.SIMPLE)
    table.add_column("Name", style="cyan")
    table.add_column("Statements", justify="right")
    for name in list_templates():
        table.add_row(name, str(len(get_policy(name).statements)))
    console.print(table)


@templates_group.command(name="show")
@click.argument("name")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Write the policy to this file instead of printing it.",
)
def templates_show_command(name: str, output: str | None) -> None:
    """Print the canned policy NAME."""
    from s3_iam_policy.templates.canned_policies import get_template, write_template

    try:
        content = get_template(name)
    except KeyError as exc:
        err_console.print(f"[red]Unknown template:[/red] {exc.args[0]}")
        sys.exit(1)

    if output:
        written = write_template(name, Path(output))
        console.print(f"[green]Wrote[/green] {name} to [bold]{written}[/bold]")
        return
    click.echo(content, nl=False)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cli()
