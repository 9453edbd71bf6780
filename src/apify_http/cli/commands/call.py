"""Call command implementation."""

import asyncio
import json
import typing as t
from typing import List, Optional

import typer

from ...domain.exceptions import ApifyClientError
from ...domain.stats import CallStatsSnapshot
from ...http import HttpClient, Response
from ..state import CLIState


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Parse ``key=value`` pairs into a query mapping.

    Raises:
        typer.Exit: If a pair has no ``=``
    """
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            typer.secho(f"✗ Invalid parameter: {pair} (expected key=value)", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        params[key] = value
    return params


def parse_body(body: str | None) -> t.Any:
    """Parse a JSON request body given on the command line."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except ValueError as e:
        typer.secho(f"✗ Invalid JSON body: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)


def render_result(result: t.Any) -> str:
    if isinstance(result, Response):
        result = {
            "status_code": result.status_code,
            "headers": dict(result.headers),
            "body": result.body,
        }
    if isinstance(result, bytes):
        return result.decode("utf-8", errors="replace")
    return json.dumps(result, indent=2, default=str)


def render_stats(stats: CallStatsSnapshot) -> str:
    rate_limits = ", ".join(
        f"#{ordinal}: {count}" for ordinal, count in sorted(stats.rate_limit_errors.items())
    )
    return (
        f"calls={stats.calls} requests={stats.requests} "
        f"rate_limit_errors=[{rate_limits}]"
    )


async def execute_call(client: HttpClient, **options: t.Any) -> t.Any:
    """Run one call inside the client's session."""
    async with client:
        return await client.call(**options)


def call(
    ctx: typer.Context,
    method: str = typer.Argument(..., help="HTTP method"),
    path: str = typer.Argument(..., help="Resource path, e.g. /v2/acts"),
    param: List[str] = typer.Option(
        [], "--param", "-p", help="Query parameter as key=value (repeatable)"
    ),
    body: Optional[str] = typer.Option(None, "--body", help="JSON request body"),
    max_attempts: Optional[int] = typer.Option(
        None, "--max-attempts", min=1, help="Attempt ceiling for retryable failures"
    ),
    auth: bool = typer.Option(
        False, "--auth-required", help="Fail before sending if no token is configured"
    ),
    full: bool = typer.Option(
        False, "--full", help="Print status and headers along with the body"
    ),
    show_stats: bool = typer.Option(
        False, "--stats", help="Print call statistics after the response"
    ),
) -> None:
    """Call an API endpoint and print the decoded response.

    Examples:
        apify-http call GET /v2/acts
        apify-http call GET /v2/acts -p limit=10 -p desc=1
        apify-http call POST /v2/acts --body '{"name": "my-act"}' --auth-required
    """
    state: CLIState = ctx.obj
    params = parse_params(param)
    payload = parse_body(body)

    client = state.create_client()
    try:
        result = asyncio.run(
            execute_call(
                client,
                url=path,
                method=method,
                params=params,
                body=payload,
                auth_required=auth,
                exp_backoff_max_repeats=max_attempts,
                resolve_with_full_response=full,
            )
        )
    except ApifyClientError as e:
        typer.secho(f"✗ {type(e).__name__}: {e}", fg=typer.colors.RED)
        if show_stats:
            typer.echo(render_stats(client.stats))
        raise typer.Exit(code=1)

    typer.echo(render_result(result))
    if show_stats:
        typer.echo(render_stats(client.stats))
