"""Root CLI group for mdns-responder with global flags and command registration."""

from __future__ import annotations

import click
from pydantic import ValidationError

from mdns_responder import __version__
from mdns_responder.commands import register_commands
from mdns_responder.commands._base import ResponderGroup
from mdns_responder.commands._context import AppContext
from mdns_responder.config.settings import ResponderSettings
from mdns_responder.errors import ExitCode


@click.group(
    cls=ResponderGroup,
    invoke_without_command=True,
    examples=[
        ("Check the config, then advertise in the foreground", "mdns-responder validate"),
        (None, "mdns-responder run"),
        ("Install as a system service", "sudo mdns-responder install"),
        (None, "mdns-responder status"),
    ],
)
@click.version_option(version=__version__, prog_name="mdns-responder")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Override config file path.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """mdns-responder: advertise SMB shares over Bonjour/mDNS."""
    try:
        settings = ResponderSettings.from_cli(
            config_path=config_path,
            # Unset flags fall through to MDNS_RESPONDER_* env vars.
            json_output=json_output or None,
            quiet=quiet or None,
            verbose=verbose or None,
            log_json=log_json or None,
        )
    except ValidationError as exc:
        click.echo(f"ERROR: invalid settings: {exc.errors()[0]['msg']}", err=True)
        raise SystemExit(ExitCode.USAGE) from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)


def main() -> None:
    """Console-script entry point."""
    cli()
