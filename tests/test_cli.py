"""Tests for the typer command-line interface."""

from datetime import datetime, timezone

from typer.testing import CliRunner

from news_feed import cli
from news_feed.core.types import AggregatedResult, Article
from news_feed.errors import NoResultsError, UpstreamTimeoutError

runner = CliRunner()


class _StubService:
    outcome = None
    requests: list = []

    def __init__(self, cfg, *args, **kwargs):
        self.cfg = cfg

    def aggregate_news(self, request):
        _StubService.requests.append(request)
        return _StubService.outcome


def _install(monkeypatch, outcome):
    _StubService.outcome = outcome
    _StubService.requests = []
    monkeypatch.setattr(cli, "NewsService", _StubService)
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)


def _result() -> AggregatedResult:
    article = Article(
        provider_id="a1",
        title="Climate summit opens",
        source_id="bbc",
        published_at=datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc),
        link="https://example.com/a1",
    )
    return AggregatedResult(articles=[article], next_page_token="p2")


def test_latest_prints_table_and_next_page(monkeypatch):
    _install(monkeypatch, _result())

    result = runner.invoke(cli.app, ["latest", "--log-level", "WARNING"])

    assert result.exit_code == 0
    assert "Climate summit opens" in result.output
    assert "Next page: p2" in result.output
    assert _StubService.requests[0].query is None


def test_search_passes_query_and_page(monkeypatch):
    _install(monkeypatch, _result())

    result = runner.invoke(cli.app, ["search", "climate", "--page", "p2", "--json"])

    assert result.exit_code == 0
    assert '"nextPage": "p2"' in result.output
    assert _StubService.requests[0].query == "climate"
    assert _StubService.requests[0].page_token == "p2"


def test_no_results_is_a_neutral_notice(monkeypatch):
    _install(monkeypatch, NoResultsError().to_result())

    result = runner.invoke(cli.app, ["search", "zzzz"])

    assert result.exit_code == 0
    assert "Try a different search" in result.output


def test_timeout_exits_with_error(monkeypatch):
    _install(monkeypatch, UpstreamTimeoutError().to_result())

    result = runner.invoke(cli.app, ["latest"])

    assert result.exit_code == 1
    assert "timed out" in result.output
