"""
Command-line interface for the news feed aggregator.

Uses Typer to expose browse (`latest`) and search (`search`) commands.
Supports loading .env files for API key configuration.
"""

from __future__ import annotations

import json
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import AppConfig, load_config
from .core.types import AggregatedResult, ErrorResult
from .logging_utils import setup_logging
from .service import NewsRequest, NewsService

app = typer.Typer(add_completion=False)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
ApiKeyOption = typer.Option(
    None,
    "--api-key",
    envvar="NEWS_API_KEY",
    help="Override upstream API key (or set NEWS_API_KEY / .env).",
)
PageOption = typer.Option(None, "--page", "-p", help="Page token from a previous result.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
JsonOption = typer.Option(False, "--json", help="Print the raw JSON result.")


@app.command()
def latest(
    page: str | None = PageOption,
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    log_level: str | None = LogLevelOption,
    as_json: bool = JsonOption,
):
    """Show the latest news (browse mode)."""
    _run(NewsRequest(page_token=page), config, api_key, log_level, as_json)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search terms."),
    page: str | None = PageOption,
    config: Path | None = ConfigOption,
    api_key: str | None = ApiKeyOption,
    log_level: str | None = LogLevelOption,
    as_json: bool = JsonOption,
):
    """Search the news for QUERY."""
    _run(NewsRequest(query=query, page_token=page), config, api_key, log_level, as_json)


def _run(
    request: NewsRequest,
    config: Path | None,
    api_key: str | None,
    log_level: str | None,
    as_json: bool,
) -> None:
    load_dotenv()
    cfg = _build_config(config, api_key, log_level)
    setup_logging(cfg.logging)

    outcome = NewsService(cfg).aggregate_news(request)

    if isinstance(outcome, ErrorResult):
        if as_json:
            console.print_json(json.dumps(outcome.to_dict()))
        if outcome.is_empty:
            console.print("[yellow]No articles found. Try a different search.[/yellow]")
            return
        message = outcome.message
        if outcome.details:
            message = f"{message}: {outcome.details}"
        console.print(f"[red]Error ({outcome.status}):[/red] {message}")
        raise typer.Exit(code=1)

    if as_json:
        console.print_json(json.dumps(outcome.to_dict()))
        return
    console.print(_render_table(outcome))
    if outcome.next_page_token:
        console.print(f"Next page: {outcome.next_page_token}")


def _build_config(config: Path | None, api_key: str | None, log_level: str | None) -> AppConfig:
    cfg = load_config(str(config) if config else None)
    if api_key:
        cfg.upstream.api_key = api_key
    if log_level:
        cfg.logging.level = log_level
    return cfg


def _render_table(result: AggregatedResult) -> Table:
    table = Table(show_lines=False)
    table.add_column("Published", no_wrap=True)
    table.add_column("Source", no_wrap=True)
    table.add_column("Title")
    for article in result.articles:
        table.add_row(
            article.published_at.strftime("%Y-%m-%d %H:%M"),
            article.source_id,
            article.title,
        )
    return table


if __name__ == "__main__":
    app()
