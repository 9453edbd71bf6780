"""CLI application factory."""

from dataclasses import replace
from typing import Optional

import typer

from ..app import create_app
from ..config.settings import LogLevel, Settings
from .commands.call import call
from .state import CLIState


def create_cli_app(
    settings: Settings | None = None, state: CLIState | None = None
) -> typer.Typer:
    """Create CLI application with optional settings or state override.

    Args:
        settings: Settings to use instead of reading the environment
        state: Prebuilt CLIState, used by tests to inject a client factory

    Returns:
        Configured Typer application with commands registered
    """
    app = typer.Typer(
        name="apify-http",
        help="Call the Apify API with retries and structured errors",
        no_args_is_help=True,
    )

    @app.callback()
    def setup(
        ctx: typer.Context,
        base_url: Optional[str] = typer.Option(
            None, "--base-url", help="API host, e.g. https://api.apify.com"
        ),
        token: Optional[str] = typer.Option(
            None, "--token", "-t", help="API token (defaults to $APIFY_TOKEN)"
        ),
        verbose: bool = typer.Option(
            False, "--verbose", "-v", help="Enable verbose output (DEBUG logging)"
        ),
    ) -> None:
        """Global options available to all commands."""
        if state is not None:
            ctx.obj = state
            return

        resolved = settings if settings is not None else Settings.from_env()
        overrides = {
            "base_url": base_url,
            "token": token,
            "log_level": LogLevel.DEBUG if verbose else None,
        }
        resolved = replace(
            resolved, **{key: value for key, value in overrides.items() if value is not None}
        )
        ctx.obj = CLIState(create_app(resolved).settings)

    app.command("call")(call)
    return app


def main() -> None:
    create_cli_app()()
