"""
Danthes CLI

Command-line interface for publishing to and signing subscriptions for
the pub/sub server.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click
import httpx
import structlog

from danthes import __version__
from danthes.config import Settings, load_config
from danthes.core.errors import DanthesError
from danthes.core.models import DataPayload, ScriptPayload
from danthes.log import configure_logging

logger = structlog.get_logger()


# ══════════════════════════════════════════════════════════════
# CLI Group
# ══════════════════════════════════════════════════════════════


@click.group()
@click.version_option(version=__version__, prog_name="danthes")
@click.option(
    "--config", "-c", "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file",
)
@click.option("--env", "-e", default=None, help="Environment section to load")
@click.option("--debug/--no-debug", default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[Path], env: Optional[str], debug: bool) -> None:
    """Danthes - signed subscriptions and publishing for Faye."""
    configure_logging("DEBUG" if debug else "WARNING")

    try:
        settings = Settings() if config_file is None else load_config(config_file, env=env)
    except DanthesError as e:
        raise click.ClickException(str(e))
    ctx.obj = settings


# ══════════════════════════════════════════════════════════════
# Publishing
# ══════════════════════════════════════════════════════════════


@cli.command()
@click.argument("channel")
@click.argument("payload")
@click.option("--json", "as_json", is_flag=True, default=False, help="Send PAYLOAD as JSON data instead of a script")
@click.pass_obj
def publish(settings: Settings, channel: str, payload: str, as_json: bool) -> None:
    """Publish PAYLOAD to CHANNEL."""
    from danthes.publisher import PublishGateway

    if as_json:
        try:
            data = DataPayload(json.loads(payload))
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"Invalid JSON: {e}", param_hint="PAYLOAD")
    else:
        data = ScriptPayload(payload)

    gateway = PublishGateway(settings)
    try:
        response = gateway.publish(channel, data)
    except DanthesError as e:
        raise click.ClickException(str(e))
    except httpx.TransportError as e:
        click.echo(f"✗ Publish failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Published to {channel} (HTTP {response.status_code})")


# ══════════════════════════════════════════════════════════════
# Subscriptions
# ══════════════════════════════════════════════════════════════


@cli.command()
@click.argument("channel")
@click.option("--field", "-f", "fields", multiple=True, help="Extra key=value field")
@click.pass_obj
def subscription(settings: Settings, channel: str, fields: tuple[str, ...]) -> None:
    """Print a signed subscription for CHANNEL as JSON."""
    from danthes.subscription import SignedSubscriptionIssuer

    options = {}
    for field in fields:
        key, sep, value = field.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected key=value, got {field!r}", param_hint="--field")
        options[key] = value
    options["channel"] = channel

    try:
        sub = SignedSubscriptionIssuer(settings).issue(options)
    except DanthesError as e:
        raise click.ClickException(str(e))

    click.echo(json.dumps(sub.to_dict(), indent=2))


# ══════════════════════════════════════════════════════════════
# Config Commands
# ══════════════════════════════════════════════════════════════


@cli.command()
@click.pass_obj
def config(settings: Settings) -> None:
    """Show current configuration."""
    click.echo("Danthes Configuration\n")

    config_items = [
        ("Environment", settings.env),
        ("Server", settings.server or "Not set"),
        ("Mount", settings.mount),
        ("Secret Token", settings.secret_token),
        ("Signature Expiration", str(settings.signature_expiration) if settings.signature_expiration is not None else "Never"),
        ("Timeout", str(settings.timeout)),
        ("Publish Timeout", str(settings.publish_timeout)),
        ("Redis", f"{settings.engine.host}:{settings.engine.port}" if settings.engine else "Not set"),
    ]

    for key, value in config_items:
        # Mask sensitive values
        if "token" in key.lower() or "secret" in key.lower():
            value = "***" if value else "Not set"
        click.echo(f"  {key:22} {value}")


# ══════════════════════════════════════════════════════════════
# Entry Point
# ══════════════════════════════════════════════════════════════


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
