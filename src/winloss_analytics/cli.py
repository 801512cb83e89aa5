"""CLI entry point for the win/loss analytics engine."""

from __future__ import annotations

from pathlib import Path

import click

from .analytics.engine import WinLossAnalyzer
from .analytics.export import ReportExporter
from .core.config import Settings, load_settings
from .core.errors import AnalyticsError
from .core.loader import load_trades
from .core.models import TradeRecord
from .observability.logger import setup_logging


def _parse_thresholds(value: str | None) -> list[float] | None:
    if not value:
        return None
    try:
        return [float(v) for v in value.split(",") if v.strip()]
    except ValueError as exc:
        raise click.BadParameter(f"thresholds must be comma-separated numbers: {value}") from exc


def _load(trades_file: str) -> list[TradeRecord]:
    try:
        trades, warnings = load_trades(trades_file)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    if warnings:
        click.echo(f"Skipped {len(warnings)} invalid trade record(s)", err=True)
    return trades


def _emit(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text, encoding="utf-8")
        click.echo(f"Wrote {output}", err=True)
    else:
        click.echo(text)


@click.group()
@click.option("--config", default=None, help="TOML config file path")
@click.option("--log-level", default=None, help="Override log level")
@click.pass_context
def main(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """Trade outcome statistics & stop-loss simulation."""
    try:
        settings: Settings = load_settings(config)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc

    obs = settings.observability
    setup_logging(level=log_level or obs.log_level, format=obs.log_format)

    ctx.obj = {
        "analyzer": WinLossAnalyzer(settings.engine),
        "exporter": ReportExporter(),
    }


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--threshold", type=float, default=None, help="Loss threshold in percent")
@click.pass_obj
def summary(obj: dict, trades_file: str, threshold: float | None) -> None:
    """Win rate, profit factor and expectancy at one loss threshold."""
    trades = _load(trades_file)
    try:
        report = obj["analyzer"].summary(trades, threshold)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(obj["exporter"].to_json(report))


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--thresholds", default=None, help="Comma-separated thresholds, e.g. 0,2,5,10")
@click.pass_obj
def simulate(obj: dict, trades_file: str, thresholds: str | None) -> None:
    """Sweep stop-loss thresholds and pick the optimal one."""
    trades = _load(trades_file)
    try:
        result = obj["analyzer"].simulate(trades, _parse_thresholds(thresholds))
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(obj["exporter"].to_json(result))


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def expirations(obj: dict, trades_file: str) -> None:
    """Forensics on trades that expired without hitting target or stop."""
    trades = _load(trades_file)
    click.echo(obj["exporter"].to_json(obj["analyzer"].expirations(trades)))


@main.command("loss-patterns")
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--threshold", type=float, default=None, help="Loss threshold in percent")
@click.option("--detailed", is_flag=True, help="Include symbols, sources and severity")
@click.pass_obj
def loss_patterns(obj: dict, trades_file: str, threshold: float | None, detailed: bool) -> None:
    """Losing trades grouped by reason code."""
    trades = _load(trades_file)
    analyzer: WinLossAnalyzer = obj["analyzer"]
    try:
        if detailed:
            payload = obj["exporter"].to_json(analyzer.loss_summary(trades, threshold))
        else:
            payload = obj["exporter"].to_json(analyzer.loss_patterns(trades, threshold))
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(payload)


@main.command()
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--threshold", type=float, default=None, help="Loss threshold in percent")
@click.option("--output", default=None, help="Write JSON to this file instead of stdout")
@click.pass_obj
def analyze(obj: dict, trades_file: str, threshold: float | None, output: str | None) -> None:
    """Run every report and emit one combined JSON document."""
    trades = _load(trades_file)
    try:
        analysis = obj["analyzer"].analyze(trades, threshold)
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(obj["exporter"].to_json(analysis), output)


@main.command("export-csv")
@click.argument("trades_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--thresholds", default=None, help="Comma-separated thresholds")
@click.option("--output", default=None, help="Write CSV to this file instead of stdout")
@click.pass_obj
def export_csv(obj: dict, trades_file: str, thresholds: str | None, output: str | None) -> None:
    """Export the stop-loss sweep as CSV."""
    trades = _load(trades_file)
    try:
        result = obj["analyzer"].simulate(trades, _parse_thresholds(thresholds))
    except AnalyticsError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(obj["exporter"].simulations_to_csv(result), output)


if __name__ == "__main__":
    main()
