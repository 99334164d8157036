"""OpenAuth CLI - Command line interface."""

from __future__ import annotations

import json
import logging
import sys

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

BANNER = """
  ___                    _         _   _
 / _ \\ _ __   ___ _ __  / \\  _   _| |_| |__
| | | | '_ \\ / _ \\ '_ \\/ _ \\| | | | __| '_ \\
| |_| | |_) |  __/ | | / ___ \\ |_| | |_| | | |
 \\___/| .__/ \\___|_| |_/_/  \\_\\__,_|\\__|_| |_|
      |_|   Identity providers for OAuth2 issuers
"""


def _configure_logging(log_level: str) -> None:
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
    )


@click.group(invoke_without_command=True)
@click.option(
    "--config", "-c",
    "config_file",
    type=click.Path(exists=True),
    help="Path to YAML or TOML providers file",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level (default: OPENAUTH_LOG_LEVEL or warning)",
)
@click.pass_context
def main(ctx: click.Context, config_file: str | None, log_level: str | None):
    """OpenAuth - Identity providers for OAuth2 issuers.

    Examples:

        openauth providers

        openauth resolve gitlab --client-id ID --client-secret SECRET

        openauth resolve mastodon --client-id ID --client-secret SECRET --instance hachyderm.io

        openauth check --config providers.yaml

    Use 'openauth COMMAND --help' for more info on specific commands.
    """
    from pydantic import ValidationError

    from openauth.core.config import get_config

    try:
        settings = get_config()
    except ValidationError as e:
        console.print(f"[red]Invalid settings:[/red] {escape(str(e))}")
        sys.exit(1)
    _configure_logging(log_level or settings.log_level)

    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file or settings.providers_file

    if ctx.invoked_subcommand is None:
        console.print(BANNER, style="cyan")
        console.print("Usage: openauth providers", style="yellow")
        console.print("       openauth resolve gitlab --client-id ID --client-secret SECRET", style="yellow")
        console.print("       openauth check --config providers.yaml", style="yellow")
        console.print("\nCommands:", style="bold")
        console.print("  openauth providers  List supported provider types", style="dim")
        console.print("  openauth resolve    Resolve a provider's OAuth2 endpoints", style="dim")
        console.print("  openauth check      Validate a providers file", style="dim")
        console.print("  openauth version    Show version information", style="dim")


@main.command()
def providers():
    """List supported provider types and their endpoint templates."""
    from openauth.provider.registry import PROVIDERS

    table = Table()
    table.add_column("Type", style="cyan")
    table.add_column("Default Host")
    table.add_column("Authorization")
    table.add_column("Token")

    for template in PROVIDERS.values():
        table.add_row(
            template.type,
            template.default_host or "[dim]fixed[/dim]",
            template.authorization,
            template.token,
        )

    console.print(table)


@main.command()
@click.argument("provider_type")
@click.option("--client-id", envvar="OPENAUTH_CLIENT_ID", required=True, help="OAuth client ID")
@click.option(
    "--client-secret",
    envvar="OPENAUTH_CLIENT_SECRET",
    required=True,
    help="OAuth client secret",
)
@click.option("--instance", default=None, help="Self-hosted instance hostname (GitLab, Mastodon)")
@click.option("--scope", "scopes", multiple=True, help="Scope to request (repeatable)")
@click.option("--pkce", is_flag=True, help="Enable PKCE")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def resolve(
    provider_type: str,
    client_id: str,
    client_secret: str,
    instance: str | None,
    scopes: tuple[str, ...],
    pkce: bool,
    json_output: bool,
):
    """Resolve the OAuth2 endpoints for PROVIDER_TYPE.

    The client secret is masked in the output.
    """
    from openauth.provider.registry import build_config
    from openauth.provider.registry import resolve as resolve_provider

    try:
        config = build_config(
            provider_type,
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "instance": instance,
                "scopes": list(scopes),
                "pkce": pkce,
            },
        )
        resolved = resolve_provider(provider_type, config)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    if json_output:
        click.echo(json.dumps(resolved.as_dict(), indent=2, default=str))
        return

    console.print(f"\n[bold]Provider:[/bold] {resolved.type}")
    console.print(f"[bold]Authorization:[/bold] {resolved.endpoint.authorization}")
    console.print(f"[bold]Token:[/bold] {resolved.endpoint.token}")
    if resolved.scopes:
        console.print(f"[bold]Scopes:[/bold] {' '.join(resolved.scopes)}")
    console.print(f"[bold]PKCE:[/bold] {'enabled' if resolved.pkce else 'disabled'}")


@main.command()
@click.option(
    "--config", "-c",
    "config_file",
    type=click.Path(exists=True),
    default=None,
    help="Path to YAML or TOML providers file",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def check(ctx: click.Context, config_file: str | None, json_output: bool):
    """Load a providers file and show what each entry resolves to."""
    from openauth.core.config import load_providers

    config_file = config_file or ctx.obj.get("config_file")
    if not config_file:
        console.print("[red]No providers file given (use --config or OPENAUTH_PROVIDERS_FILE)[/red]")
        sys.exit(1)

    try:
        resolved = load_providers(config_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Failed to load providers:[/red] {escape(str(e))}")
        sys.exit(1)

    structlog.get_logger().info("Providers loaded", path=config_file, count=len(resolved))

    if json_output:
        click.echo(
            json.dumps({name: p.as_dict() for name, p in resolved.items()}, indent=2, default=str)
        )
        return

    if not resolved:
        console.print("[dim]No providers registered[/dim]")
        return

    table = Table()
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Authorization")
    table.add_column("Token")

    for name, provider in resolved.items():
        table.add_row(
            name,
            provider.type,
            provider.endpoint.authorization,
            provider.endpoint.token,
        )

    console.print(table)


@main.command()
def version():
    """Show version information."""
    from openauth import __version__

    console.print(BANNER, style="cyan")
    console.print(f"[bold]Version:[/bold] {__version__}")
    console.print(f"[bold]Python:[/bold] {sys.version}")


if __name__ == "__main__":
    main()
