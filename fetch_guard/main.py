import asyncio
import logging
from typing import Optional

import httpx
import typer
from pydantic import ValidationError

from fetch_guard._classifier import RULES
from fetch_guard._errors import UnsafeUrlError
from fetch_guard.config import get_settings
from fetch_guard.display import (
    console,
    render_fetch_table,
    render_rules_table,
    render_verdict_table,
)
from fetch_guard.fetcher import SafeFetcher
from fetch_guard.validator import validate, validate_sync

app = typer.Typer(
    help="fetch-guard - check user-supplied URLs before the server fetches them",
    context_settings={"help_option_names": ["--help", "-h"]},
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Outbound fetch safety checks."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        get_settings()
    except ValidationError as e:
        console.print(f"[error]Invalid configuration:[/error] {e}")
        raise typer.Exit(code=2)


def _positive_timeout(value: Optional[float]) -> Optional[float]:
    if value is not None and value <= 0:
        raise typer.BadParameter("must be greater than 0")
    return value


@app.command()
def check(
    url: str = typer.Argument(..., help="URL to validate"),
    offline: bool = typer.Option(False, "--offline", "-o", help="Skip DNS; literal checks only"),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="DNS timeout in seconds", callback=_positive_timeout,
    ),
):
    """Validate a URL and exit 0 if it is safe to fetch, 1 otherwise."""
    if offline:
        verdict = validate_sync(url)
    else:
        verdict = asyncio.run(validate(url, timeout=timeout))
    console.print(render_verdict_table(url, verdict))
    raise typer.Exit(code=0 if verdict.safe else 1)


@app.command()
def rules():
    """Show the blocking rule table."""
    console.print(render_rules_table(RULES))


@app.command()
def fetch(
    url: str = typer.Argument(..., help="URL to fetch"),
):
    """Fetch a URL, validating it and every redirect target first."""
    try:
        result = asyncio.run(SafeFetcher().fetch(url))
    except UnsafeUrlError as e:
        console.print(render_verdict_table(e.url, e.verdict))
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        console.print(f"[error]Fetch failed:[/error] {e}")
        raise typer.Exit(code=2)
    console.print(render_fetch_table(result))


if __name__ == "__main__":
    app()
