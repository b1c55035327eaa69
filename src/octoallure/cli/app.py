"""CLI interface for octoallure."""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from octoallure.core.config import ConverterConfig
from octoallure.core.events import BATCH_STARTED, REPORT_RENDERED, REPORT_STARTED, Event
from octoallure.core.exceptions import OctoAllureError

app = typer.Typer(
    name="octoallure",
    help="Convert Octomind test reports to Allure results",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(level: str, debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=debug)],
        force=True,
    )
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def _fail(message: str, hint: str | None = None) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    if hint:
        err_console.print(hint)
    return typer.Exit(code=1)


def _load_config(config_path: str | None) -> ConverterConfig:
    try:
        return ConverterConfig.load(config_path)
    except OctoAllureError as e:
        raise _fail(str(e))


def _make_client(config: ConverterConfig, api_key: str):
    from octoallure.octomind.client import OctomindClient

    return OctomindClient(
        api_key=api_key,
        base_url=config.api.resolved_base_url(),
        timeout=config.api.timeout,
    )


@app.command()
def convert(
    api_key: str | None = typer.Option(None, "--api-key", "-k", help="Octomind API key [env: OCTOMIND_API_KEY]"),
    test_target_id: str | None = typer.Option(None, "--test-target-id", "-t", help="Test target ID"),
    test_report_id: str | None = typer.Option(None, "--test-report-id", "-r", help="Test report ID (single mode)"),
    output_dir: str | None = typer.Option(None, "--output-dir", "-o", help="Allure results directory [default: ./allure-results]"),
    batch: bool = typer.Option(False, "--batch", "-b", help="Convert all reports of the test target"),
    max_reports: int | None = typer.Option(None, "--max-reports", "-m", min=1, help="Maximum number of reports in batch mode"),
    environment_id: str | None = typer.Option(None, "--environment-id", "-e", help="Only reports of this environment (batch mode)"),
    report_dir: str | None = typer.Option(None, "--report-dir", help="Allure report directory [default: allure-report]"),
    allure_path: str | None = typer.Option(None, "--allure-path", help="Path to the allure executable"),
    no_generate: bool = typer.Option(False, "--no-generate", help="Batch mode: skip allure generate, keep all results"),
    config_path: str | None = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging for API requests"),
) -> None:
    """Convert one test report, or all of them with --batch."""
    config = _load_config(config_path)
    api_key = api_key or config.api.resolved_api_key()

    if not api_key or not test_target_id:
        missing = [name for name, value in (("--api-key", api_key), ("--test-target-id", test_target_id)) if not value]
        raise _fail(f"Missing required arguments: {', '.join(missing)}", "Run with --help for more information")
    if batch and test_report_id:
        raise _fail(
            "Cannot specify both --batch and --test-report-id",
            "Use --batch for multiple reports OR --test-report-id for a single report",
        )
    if not batch and not test_report_id:
        raise _fail(
            "--test-report-id is required in single report mode",
            "Use --batch flag to convert multiple reports",
        )

    _setup_logging(config.log_level, debug)
    output_dir = output_dir or config.reporter.output_dir
    report_dir = report_dir or config.reporter.report_dir
    generate = config.reporter.generate and not no_generate

    async def _convert() -> None:
        from octoallure.converter import ReportConverter
        from octoallure.reporter.generator import AllureCommandLine
        from octoallure.reporter.translator import AllureTranslator

        async with _make_client(config, api_key) as client:
            converter = ReportConverter(
                client,
                translator=AllureTranslator(web_url=config.api.web_url),
                renderer=AllureCommandLine(allure_path or config.reporter.allure_path),
            )

            if not batch:
                converted = await converter.convert_report(test_target_id, test_report_id, output_dir)
                console.print(
                    f"Generated [cyan]{len(converted.results)}[/cyan] test result file(s) "
                    f"and 1 container file in [blue]{output_dir}[/blue]"
                )
                return

            async def _on_progress(event: Event) -> None:
                if event.type == BATCH_STARTED:
                    console.print(f"Found [cyan]{event.data['total']}[/cyan] report(s) for {event.data['target']}")
                elif event.type == REPORT_STARTED:
                    console.print(f"[{event.data['index']}/{event.data['total']}] {event.data['report_id']}")
                elif event.type == REPORT_RENDERED:
                    console.print(f"  Report: [blue]{event.data['report_dir']}[/blue]")

            for event_type in (BATCH_STARTED, REPORT_STARTED, REPORT_RENDERED):
                converter.event_bus.on(event_type, _on_progress)

            summary = await converter.convert_batch(
                test_target_id,
                output_dir,
                report_dir=report_dir,
                max_reports=max_reports,
                environment_id=environment_id,
                generate=generate,
            )

            table = Table(title="Conversion Summary")
            table.add_column("Item", style="cyan")
            table.add_column("Count", justify="right")
            table.add_row("Test reports converted", str(summary.reports))
            table.add_row("Test result files", str(summary.results))
            table.add_row("Container files", str(summary.containers))
            table.add_row("Total files", str(summary.total_files))
            table.add_row("Test cases cached", str(summary.cached_cases))
            console.print(table)
            console.print(f"Output directory: [blue]{output_dir}[/blue]")

    try:
        asyncio.run(_convert())
    except OctoAllureError as e:
        raise _fail(f"Error during conversion: {e}")
    except OSError as e:
        raise _fail(f"Error writing Allure files: {e}", f"Check that {escape(str(output_dir))} is a writable directory")


@app.command()
def reports(
    api_key: str | None = typer.Option(None, "--api-key", "-k", help="Octomind API key [env: OCTOMIND_API_KEY]"),
    test_target_id: str = typer.Option(..., "--test-target-id", "-t", help="Test target ID"),
    max_reports: int | None = typer.Option(None, "--max-reports", "-m", min=1, help="Maximum number of reports"),
    environment_id: str | None = typer.Option(None, "--environment-id", "-e", help="Only reports of this environment"),
    config_path: str | None = typer.Option(None, "--config", "-c", help="YAML configuration file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging for API requests"),
) -> None:
    """List the test reports of a test target."""
    config = _load_config(config_path)
    api_key = api_key or config.api.resolved_api_key()
    if not api_key:
        raise _fail("Missing required arguments: --api-key", "Run with --help for more information")

    _setup_logging(config.log_level, debug)

    async def _list() -> None:
        from octoallure.core.types import ReportFilter
        from octoallure.octomind.pagination import ReportPaginator

        filters = [ReportFilter.environment(environment_id)] if environment_id else None
        async with _make_client(config, api_key) as client:
            found = await ReportPaginator(client).fetch_all(
                test_target_id, max_reports=max_reports, filters=filters
            )

        table = Table(title=f"Test Reports ({len(found)})")
        table.add_column("ID", style="cyan")
        table.add_column("Status")
        table.add_column("Created")
        table.add_column("Tests", justify="right")

        for r in found:
            status_style = {
                "PASSED": "green",
                "FAILED": "red",
                "BROKEN": "red bold",
                "SKIPPED": "yellow",
            }.get(r.status, "white")
            table.add_row(r.id, f"[{status_style}]{r.status}[/]", r.created_at or "-", str(len(r.test_results)))

        console.print(table)

    try:
        asyncio.run(_list())
    except OctoAllureError as e:
        raise _fail(str(e))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
