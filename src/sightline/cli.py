from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from sightline.budget import BudgetExhausted
from sightline.config import insight_defaults, merge_payload, pass_config
from sightline.ingest.registry import adapter_for_path, registered_languages
from sightline.insight.analyzer import InsightAnalyzer
from sightline.insight.durations import MappingDurationStore, load_duration_store
from sightline.report import build_report, render_lines

app = typer.Typer(add_completion=False)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine decisions."),
) -> None:
    """Estimate call durations from static execution paths."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
        force=True,
    )


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="Source file to analyze."),
    durations: Optional[Path] = typer.Option(
        None, "--durations", help="JSON object mapping qualified function names to measured milliseconds."
    ),
    config: Optional[Path] = typer.Option(None, "--config"),
    resolved_functions: Optional[bool] = typer.Option(
        None, "--resolved-functions/--no-resolved-functions"
    ),
    max_ticks: Optional[int] = typer.Option(None, "--max-ticks", min=1),
    language: Optional[str] = typer.Option(
        None, "--language", help="Adapter to use instead of picking one by file extension."
    ),
    as_json: bool = typer.Option(False, "--json"),
) -> None:
    defaults = insight_defaults(root=Path.cwd(), config_path=config)
    merged = merge_payload(
        {
            "analyze_resolved_functions": resolved_functions,
            "max_ticks": max_ticks,
        },
        defaults,
    )
    store = load_duration_store(durations) if durations is not None else MappingDurationStore()
    analyzer = InsightAnalyzer(config=pass_config(merged), duration_store=store)

    if language is not None and language.lower() not in registered_languages():
        raise typer.BadParameter(
            f"unknown language {language!r}; known: {', '.join(registered_languages())}",
            param_hint="--language",
        )
    adapter = adapter_for_path(path, language_id=language)
    try:
        parsed = adapter.parse_file(path)
    except OSError as exc:
        raise typer.BadParameter(f"cannot read {path}: {exc}") from exc
    except SyntaxError as exc:
        typer.echo(f"{path}:{exc.lineno}: {exc.msg}", err=True)
        raise typer.Exit(code=2)

    try:
        analyzer.analyze(parsed.root)
    except BudgetExhausted as exc:
        typer.echo(f"analysis aborted: {exc}", err=True)
        raise typer.Exit(code=3)

    report = build_report(parsed)
    if as_json:
        typer.echo(report.model_dump_json(indent=2))
        return
    lines = render_lines(report)
    if not lines:
        typer.echo("No duration insights.")
        return
    for line in lines:
        typer.echo(line)
