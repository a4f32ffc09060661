"""
End-to-end walkthrough of the lab pipeline.

This script:
1. Imports the bundled sample report into an in-memory store
2. Parses a plain-text report
3. Adds earlier glucose draws and analyzes the trend
4. Prints results and trends as rich tables

Run with: python -m vitalcore.demo
"""

import asyncio

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.storage.memory import InMemoryBloodTestStore
from vitalcore.config import AppConfig, get_config, print_config_summary
from vitalcore.domain.models import (
    BloodTest,
    HealthStatus,
    SeriesStatistics,
    TestResult,
    TestStatus,
    TrendAnalysis,
)
from vitalcore.observability import configure_logging
from vitalcore.samples import SAMPLE_GLUCOSE_HISTORY, SAMPLE_LAB_TEXT, sample_report_json
from vitalcore.services.lab_import import create_manual_blood_test
from vitalcore.services.records import HealthRecordService
from vitalcore.services.text_import import parse_lab_text

STATUS_STYLES = {
    TestStatus.NORMAL: "green",
    TestStatus.HIGH: "red",
    TestStatus.LOW: "yellow",
    TestStatus.UNKNOWN: "dim",
}

HEALTH_STYLES = {
    HealthStatus.EXCELLENT: "green",
    HealthStatus.GOOD: "cyan",
    HealthStatus.FAIR: "yellow",
    HealthStatus.POOR: "red",
    HealthStatus.CRITICAL: "bold red",
}


def results_table(title: str, results: list[TestResult]) -> Table:
    table = Table(title=title)
    table.add_column("Test", style="cyan")
    table.add_column("Value", justify="right")
    table.add_column("Unit", style="magenta")
    table.add_column("Reference", style="white")
    table.add_column("Status")
    table.add_column("Lab Flag", style="dim")

    for result in results:
        style = STATUS_STYLES[result.status]
        table.add_row(
            result.display_name or result.name,
            "" if result.value is None else f"{result.value:g}",
            result.unit,
            result.reference_range_text or "-",
            f"[{style}]{result.status.value}[/{style}]",
            result.source_flag or "",
        )
    return table


def blood_test_table(blood_test: BloodTest) -> Table:
    return results_table(
        f"{blood_test.test_type} ({blood_test.date:%Y-%m-%d})", blood_test.results
    )


def trend_table(analyses: list[tuple[TrendAnalysis, SeriesStatistics]]) -> Table:
    table = Table(title="Trends")
    table.add_column("Metric", style="cyan")
    table.add_column("Points", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Direction")
    table.add_column("Change", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Health")
    table.add_column("Per Year", justify="right")

    for analysis, stats in analyses:
        style = HEALTH_STYLES[analysis.health_status]
        table.add_row(
            analysis.metric,
            str(analysis.sample_size),
            "-" if analysis.average is None else f"{analysis.average:.1f}",
            analysis.direction.value,
            f"{analysis.rate_of_change:+.1%}",
            f"{analysis.confidence:.0%}",
            f"[{style}]{analysis.health_status.value}[/{style}]",
            "-" if stats.change_per_year is None else f"{stats.change_per_year:+.1f}",
        )
    return table


async def run_demo(console: Console, config: AppConfig | None = None) -> list[TrendAnalysis]:
    """Run the walkthrough against a fresh in-memory store."""
    store = InMemoryBloodTestStore()
    service = HealthRecordService(store, config=config)

    console.print(Panel("Importing sample lab report", style="blue"))
    imported = await service.import_report(sample_report_json())
    if imported.is_err():
        console.print(f"Import failed: {imported.unwrap_err()}", style="red")
        return []
    for blood_test in imported.unwrap():
        console.print(blood_test_table(blood_test))

    console.print(Panel("Parsing a plain-text report", style="blue"))
    console.print(results_table("Text Report", parse_lab_text(SAMPLE_LAB_TEXT)))

    for date, value in SAMPLE_GLUCOSE_HISTORY:
        manual = create_manual_blood_test("Fasting Glucose", date, {"Glucose": value})
        saved = await store.save(manual)
        if saved.is_err():
            console.print(f"Save failed: {saved.unwrap_err()}", style="red")

    console.print(Panel("Analyzing trends", style="blue"))
    rows: list[tuple[TrendAnalysis, SeriesStatistics]] = []
    for metric in ("Glucose", "WBC"):
        analysis = await service.analyze_metric(metric)
        stats = await service.summarize_metric(metric)
        if analysis.is_err() or stats.is_err():
            console.print(f"Could not analyze {metric}", style="red")
            continue
        rows.append((analysis.unwrap(), stats.unwrap()))

    console.print(trend_table(rows))
    for analysis, _ in rows:
        console.print(f"[cyan]{analysis.metric}[/cyan]: {analysis.recommendation}")

    return [analysis for analysis, _ in rows]


def main() -> None:
    config = get_config()
    configure_logging(config.logging)
    console = Console()
    print_config_summary()
    try:
        asyncio.run(run_demo(console, config))
    except KeyboardInterrupt:
        console.print("\nDemo stopped by user", style="yellow")


if __name__ == "__main__":
    main()
