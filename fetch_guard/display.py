"""Terminal display: console, semantic styles, verdict and rule tables."""

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from fetch_guard._classifier import ClassificationRule
from fetch_guard.fetcher import FetchResult
from fetch_guard.validator import Verdict

_THEME: dict[str, str] = {
    "info": "blue", "accent": "bold blue", "error": "bold red",
    "success": "green", "warning": "orange3", "hint": "dim",
}

console = Console(theme=Theme(_THEME))

SUCCESS = "✦"
ERROR = "✖"


def render_verdict_table(url: str, verdict: Verdict) -> Table:
    """Build a Rich Table describing one verdict (operator view, includes the reason)."""
    table = Table(title=f"Verdict for {url}", show_header=False)
    table.add_column("Field", style="accent")
    table.add_column("Value")

    if verdict.safe:
        table.add_row("Safe", f"[success]{SUCCESS} yes[/success]")
    else:
        table.add_row("Safe", f"[error]{ERROR} no[/error]")
        table.add_row("Reason", verdict.reason.value)
    if verdict.label is not None:
        table.add_row("Label", verdict.label.value)
    if verdict.resolved_addresses:
        table.add_row("Addresses", ", ".join(verdict.resolved_addresses))
    if verdict.detail:
        table.add_row("Detail", f"[hint]{verdict.detail}[/hint]")
    return table


def render_rules_table(rules: tuple[ClassificationRule, ...]) -> Table:
    table = Table(title="Blocking rules (first match wins)")
    table.add_column("#", style="hint", justify="right")
    table.add_column("Kind", style="info")
    table.add_column("Pattern", style="accent")
    table.add_column("Label")
    for i, rule in enumerate(rules, 1):
        table.add_row(str(i), rule.kind.value, rule.pattern, rule.label.value)
    return table


def render_fetch_table(result: FetchResult) -> Table:
    table = Table(title=f"Fetched {result.url}", show_header=False)
    table.add_column("Field", style="accent")
    table.add_column("Value")
    table.add_row("Status", str(result.status_code))
    table.add_row("Content-Type", result.content_type or "-")
    table.add_row("Bytes", f"{len(result.content)}{' (truncated)' if result.truncated else ''}")
    table.add_row("Redirects", str(result.redirects))
    for i, hop in enumerate(result.hops):
        table.add_row(f"Hop {i}", hop)
    return table
