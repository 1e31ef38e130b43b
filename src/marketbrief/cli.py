from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from marketbrief import AppConfig, load_config
from marketbrief.news import FeedFetcher, build_alias_index, parse_symbols, resolve_alias_table
from marketbrief.pipeline import (
    AggregationResult,
    aggregate_ai_news,
    aggregate_top_news,
    render_article_table,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = typer.Typer(help="marketbrief CLI")

_OUTPUT_FORMATS = ("json", "table")


@app.command("top-news")
def top_news(
    symbols: str | None = typer.Option(
        None,
        "--symbols",
        help="Comma-separated tracked symbols. Defaults to the configured watch list.",
    ),
    target: int | None = typer.Option(
        None,
        "--target",
        help="Maximum number of stories to return.",
        min=0,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file path (YAML or JSON).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        help="Output format: json or table.",
    ),
    json_out: Path | None = typer.Option(
        None,
        "--json-out",
        help="Optional output path for the JSON payload.",
    ),
) -> None:
    """Aggregate business feeds and pick a symbol-balanced story list."""
    _check_format(output_format)
    config = _load_config_or_exit(config_path)
    tracked = parse_symbols(symbols) if symbols is not None else list(config.symbols)

    try:
        alias_table = resolve_alias_table(config.alias_map_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    result = aggregate_top_news(
        feeds=config.enabled_feeds,
        symbols=tracked,
        fetcher=_build_fetcher(config),
        target=config.selection.target if target is None else target,
        max_per_symbol=config.selection.max_per_symbol,
        alias_table=alias_table,
    )
    _emit(result, output_format=output_format, json_out=json_out)


@app.command("ai-news")
def ai_news(
    limit: int = typer.Option(
        12,
        "--limit",
        help="Maximum number of stories to return.",
        min=0,
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file path (YAML or JSON).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        help="Output format: json or table.",
    ),
    json_out: Path | None = typer.Option(
        None,
        "--json-out",
        help="Optional output path for the JSON payload.",
    ),
) -> None:
    """Collect AI-focused feeds, newest first."""
    _check_format(output_format)
    config = _load_config_or_exit(config_path)
    result = aggregate_ai_news(
        feeds=config.enabled_ai_feeds,
        fetcher=_build_fetcher(config),
        limit=limit,
    )
    _emit(result, output_format=output_format, json_out=json_out)


@app.command("aliases")
def show_aliases(
    symbols: str | None = typer.Option(
        None,
        "--symbols",
        help="Comma-separated tracked symbols. Defaults to the configured watch list.",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file path (YAML or JSON).",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
) -> None:
    """Print the alias index used to match symbols in headlines."""
    config = _load_config_or_exit(config_path)
    tracked = parse_symbols(symbols) if symbols is not None else list(config.symbols)
    try:
        alias_table = resolve_alias_table(config.alias_map_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    index = build_alias_index(tracked, alias_table=alias_table)
    typer.echo(json.dumps(index, ensure_ascii=False, indent=2))


def _build_fetcher(config: AppConfig) -> FeedFetcher:
    return FeedFetcher(
        timeout_seconds=config.fetch.timeout_seconds,
        max_items_per_feed=config.fetch.max_items_per_feed,
        max_workers=config.fetch.max_workers,
        user_agent=config.fetch.user_agent,
    )


def _load_config_or_exit(config_path: Path | None) -> AppConfig:
    if config_path is None:
        return AppConfig()
    try:
        return load_config(config_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _check_format(output_format: str) -> None:
    if output_format not in _OUTPUT_FORMATS:
        typer.echo(
            f"invalid --format: {output_format} (expected one of {', '.join(_OUTPUT_FORMATS)})",
            err=True,
        )
        raise typer.Exit(code=1)


def _emit(result: AggregationResult, *, output_format: str, json_out: Path | None) -> None:
    payload = result.to_payload()
    if output_format == "table":
        typer.echo(render_article_table(result.articles))
        typer.echo(
            "summary "
            f"feeds={result.stats.feeds} "
            f"fetched={result.stats.fetched} "
            f"unique={result.stats.unique} "
            f"selected={result.stats.selected} "
            f"duration={result.stats.duration_seconds:.3f}s"
        )
    else:
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))

    if json_out is not None:
        json_out.parent.mkdir(parents=True, exist_ok=True)
        json_out.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        typer.echo(f"json_out={json_out}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
