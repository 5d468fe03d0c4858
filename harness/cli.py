"""CLI interface for screening fragments and running test suites."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from evaluator.comparator import TestComparator
from harness.config import HarnessConfig, load_config
from harness.suite import load_suite
from safety.analyzer import analyze
from safety.capabilities import host_api_references
from safety.sanitizer import sanitize
from sandbox.executor import SandboxExecutor

app = typer.Typer(help="Fragment grader CLI")


def _read_fragment(fragment_path: str) -> str:
    path = Path(fragment_path)
    if not path.exists():
        typer.secho(f"❌ Fragment not found: {fragment_path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


@app.command()
def check(
    fragment_path: str = typer.Argument(..., help="Path to the fragment source file"),
) -> None:
    """Screen a fragment for blocking issues, warnings and host-only APIs."""
    fragment = _read_fragment(fragment_path)
    report = analyze(fragment)

    for issue in report.issues:
        typer.secho(f"❌ {issue}", fg=typer.colors.RED)
    for warning in report.warnings:
        typer.secho(f"⚠️  {warning}", fg=typer.colors.YELLOW)

    host_apis = host_api_references(fragment)
    if host_apis:
        typer.echo(f"Host-only APIs referenced: {', '.join(host_apis)}")

    if not report.safe:
        raise typer.Exit(1)
    typer.secho("✅ No blocking issues found", fg=typer.colors.GREEN)


@app.command()
def run(
    fragment_path: str = typer.Argument(..., help="Path to the fragment source file"),
    suite_path: str = typer.Argument(..., help="Path to the YAML test suite"),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to harness YAML config"),
    time_limit_ms: Optional[int] = typer.Option(
        None, "--time-limit-ms", min=1, help="Per-case time limit override (milliseconds)"
    ),
    entry_point: Optional[str] = typer.Option(None, "--entry-point", help="Function to call"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """Run a test suite against a fragment."""
    fragment = _read_fragment(fragment_path)

    try:
        config = load_config(config_path) if config_path else HarnessConfig()
        suite = load_suite(suite_path)
    except FileNotFoundError as e:
        typer.secho(f"❌ File not found: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    except ValueError as e:
        typer.secho(f"❌ Invalid input: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    limit = time_limit_ms or config.time_limit_ms
    executor = SandboxExecutor(
        memory_limit_mb=config.memory_limit_mb,
        default_time_limit_ms=limit,
        allowed_modules=config.allowed_modules,
    )
    comparator = TestComparator(
        executor=executor,
        time_limit_ms=limit,
        max_code_size=config.max_code_size,
    )
    report = comparator.run(
        fragment,
        entry_point or suite.entry_point,
        suite.test_cases,
        analyze(fragment),
    )

    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        for warning in report.safety_report.warnings:
            typer.secho(f"⚠️  {warning}", fg=typer.colors.YELLOW)
        if report.error:
            typer.secho(f"❌ {report.error}", fg=typer.colors.RED, err=True)
        for result in report.results:
            if result.passed:
                typer.secho(f"✅ {result.description}", fg=typer.colors.GREEN)
                continue
            typer.secho(f"❌ {result.description}", fg=typer.colors.RED)
            if result.error:
                typer.echo(f"   {result.error}")
            else:
                typer.echo(f"   expected: {result.expected!r}")
                typer.echo(f"   actual:   {result.actual!r}")

        typer.echo(f"\n{report.passed_count}/{report.total_count} passed")
        if report.failure_stats:
            summary = ", ".join(f"{name}={count}" for name, count in report.failure_stats)
            typer.echo(f"Failures: {summary}")

    if not report.all_passed:
        raise typer.Exit(1)


@app.command("sanitize")
def sanitize_message(
    message: str = typer.Argument(..., help="Diagnostic message to sanitize"),
) -> None:
    """Print a message with filesystem paths removed and length bounded."""
    typer.echo(sanitize(message))


if __name__ == "__main__":
    app()
