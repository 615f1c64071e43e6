"""Invoke tasks for ImpactCRM development and operations."""

import sys
from pathlib import Path

from invoke import task
from invoke.context import Context

LOG_FILE = Path("data/impactcrm.log")


@task
def start(ctx: Context, host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Start the ImpactCRM API server in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"impactcrm-server start --host {host} --port {port} --foreground"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task(name="start-background")
def start_background(ctx: Context, host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the ImpactCRM API server in the background."""
    ctx.run(f"impactcrm-server start --host {host} --port {port}")


@task
def stop(ctx: Context) -> None:
    """Stop the ImpactCRM API server."""
    ctx.run("impactcrm-server stop")


@task
def status(ctx: Context) -> None:
    """Check the status of the ImpactCRM API server."""
    ctx.run("impactcrm-server status")


@task
def logs(ctx: Context, follow: bool = False, lines: int = 50) -> None:
    """View the server logs.

    Args:
        ctx: Invoke context
        follow: Follow log output (like tail -f)
        lines: Number of lines to show (default: 50)
    """
    if not LOG_FILE.exists():
        print(f"No log file at {LOG_FILE}")
        return
    flag = "-f" if follow else f"-n {lines}"
    ctx.run(f"tail {flag} {LOG_FILE}", pty=follow)


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False, unit: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
        unit: Skip tests that need MongoDB
    """
    cmd = "pytest"
    if verbose:
        cmd += " -v"
    if unit:
        cmd += " -m 'not mongo'"
    if coverage:
        cmd += " --cov=impactcrm --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task(name="import")
def import_file(
    ctx: Context,
    path: str,
    type: str,
    org: str,
    year: int = 0,
    dry_run: bool = False,
) -> None:
    """Import a CSV file for an organization.

    Args:
        ctx: Invoke context
        path: CSV file to import
        type: Record type (client_files, donor_tracker, networking, disbursed_awards)
        org: Organization id
        year: Reporting year override (0 for none)
        dry_run: Validate only
    """
    cmd = f"impactcrm-import {path} --type {type} --org {org}"
    if year:
        cmd += f" --year {year}"
    if dry_run:
        cmd += " --dry-run"
    ctx.run(cmd, pty=True, warn=True)


@task
def clean(ctx: Context) -> None:
    """Clean up caches and build artifacts."""
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    print("Cleanup complete")
