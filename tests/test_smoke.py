from __future__ import annotations

import json

from typer.testing import CliRunner

import marketbrief.cli as cli_module
from marketbrief.schemas import Article, FeedSource


def test_cli_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["--help"])

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "top-news" in result.output


def test_top_news_prints_balanced_payload(monkeypatch) -> None:
    def _fake_fetch(self, source: FeedSource) -> list[Article]:
        if source.name != "Reuters":
            return []
        return [
            Article(title="Fed holds rates", link="https://example.com/fed", source=source.name),
            Article(
                title="Nvidia tops estimates",
                link="https://example.com/nvda",
                source=source.name,
            ),
        ]

    monkeypatch.setattr(cli_module.FeedFetcher, "fetch", _fake_fetch)

    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["top-news", "--symbols", "NVDA,SPY"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [story["title"] for story in payload["news"]] == [
        "Nvidia tops estimates",
        "Fed holds rates",
    ]
    assert payload["news"][0]["tickers"] == ["NVDA"]
    assert payload["news"][0]["pubDate"] is None
    assert payload["news"][0]["source"] == "Reuters"


def test_top_news_with_all_feeds_failing_is_not_an_error(monkeypatch) -> None:
    monkeypatch.setattr(cli_module.FeedFetcher, "fetch", lambda self, source: [])

    runner = CliRunner()
    json_result = runner.invoke(cli_module.app, ["top-news"])
    table_result = runner.invoke(cli_module.app, ["top-news", "--format", "table"])

    assert json_result.exit_code == 0
    assert json.loads(json_result.stdout) == {"news": []}
    assert table_result.exit_code == 0
    assert "no stories available" in table_result.stdout


def test_top_news_writes_json_out(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(cli_module.FeedFetcher, "fetch", lambda self, source: [])
    json_out = tmp_path / "reports" / "news.json"

    runner = CliRunner()
    result = runner.invoke(
        cli_module.app,
        ["top-news", "--format", "table", "--json-out", str(json_out)],
    )

    assert result.exit_code == 0
    assert json.loads(json_out.read_text(encoding="utf-8")) == {"news": []}


def test_invalid_config_exits_with_error(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"selection": {"target": -1}}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["top-news", "--config", str(config_path)])

    assert result.exit_code == 1


def test_invalid_format_exits_with_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["top-news", "--format", "xml"])

    assert result.exit_code == 1


def test_aliases_command_prints_index() -> None:
    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["aliases", "--symbols", "c,nvda"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "C": ["Citi", "Citigroup"],
        "NVDA": ["NVDA", "Nvidia"],
    }


def test_ai_news_limits_results(monkeypatch) -> None:
    def _fake_fetch(self, source: FeedSource) -> list[Article]:
        return [
            Article(title=f"{source.name} {index}", link=f"{source.url}#{index}")
            for index in range(3)
        ]

    monkeypatch.setattr(cli_module.FeedFetcher, "fetch", _fake_fetch)

    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["ai-news", "--limit", "4"])

    assert result.exit_code == 0
    assert len(json.loads(result.stdout)["news"]) == 4


def test_top_news_skips_disabled_feeds_and_layers_alias_override(monkeypatch, tmp_path) -> None:
    alias_path = tmp_path / "aliases.json"
    alias_path.write_text(json.dumps({"AVGO": ["Broadcom"]}), encoding="utf-8")
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "feeds": [
                    {"name": "wire", "url": "https://example.com/wire.xml"},
                    {"name": "off", "url": "https://example.com/off.xml", "enabled": False},
                ],
                "alias_map_path": str(alias_path),
            }
        ),
        encoding="utf-8",
    )
    fetched_sources: list[str] = []

    def _fake_fetch(self, source: FeedSource) -> list[Article]:
        fetched_sources.append(source.name)
        return [
            Article(title="Broadcom lifts guidance", link="https://example.com/avgo"),
            Article(title="Nvidia tops estimates", link="https://example.com/nvda"),
        ]

    monkeypatch.setattr(cli_module.FeedFetcher, "fetch", _fake_fetch)

    runner = CliRunner()
    result = runner.invoke(
        cli_module.app,
        ["top-news", "--symbols", "NVDA,AVGO", "--config", str(config_path)],
    )

    assert result.exit_code == 0
    assert fetched_sources == ["wire"]
    tickers = [story["tickers"] for story in json.loads(result.stdout)["news"]]
    assert sorted(tickers) == [["AVGO"], ["NVDA"]]


def test_aliases_command_keeps_curated_names_beside_override(tmp_path) -> None:
    alias_path = tmp_path / "aliases.json"
    alias_path.write_text(json.dumps({"AVGO": ["Broadcom"]}), encoding="utf-8")
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"alias_map_path": str(alias_path)}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        cli_module.app,
        ["aliases", "--symbols", "NVDA,AVGO", "--config", str(config_path)],
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "NVDA": ["NVDA", "Nvidia"],
        "AVGO": ["AVGO", "Broadcom"],
    }


def test_ai_news_skips_disabled_feeds(monkeypatch, tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "ai_feeds": [
                    {"name": "lab", "url": "https://example.com/lab.xml", "enabled": False},
                    {"name": "desk", "url": "https://example.com/desk.xml"},
                ]
            }
        ),
        encoding="utf-8",
    )
    fetched_sources: list[str] = []

    def _fake_fetch(self, source: FeedSource) -> list[Article]:
        fetched_sources.append(source.name)
        return [Article(title=f"{source.name} update", link=source.url)]

    monkeypatch.setattr(cli_module.FeedFetcher, "fetch", _fake_fetch)

    runner = CliRunner()
    result = runner.invoke(cli_module.app, ["ai-news", "--config", str(config_path)])

    assert result.exit_code == 0
    assert fetched_sources == ["desk"]
    assert [story["title"] for story in json.loads(result.stdout)["news"]] == ["desk update"]
