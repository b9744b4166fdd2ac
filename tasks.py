"""Invoke tasks for sqlmigrator development."""

from invoke import task
from invoke.context import Context


def _migrator(source: str | None, database: str | None) -> str:
    cmd = "uv run migrator"
    if source:
        cmd += f" --source {source}"
    if database:
        cmd += f" --database {database}"
    return cmd


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
    """
    cmd = "uv run pytest"
    if verbose:
        cmd += " -v"
    if coverage:
        cmd += " --cov=sqlmigrator --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task
def up(ctx: Context, n: int | None = None, source: str | None = None, database: str | None = None) -> None:
    """Apply N migrations, or all pending ones."""
    cmd = f"{_migrator(source, database)} up"
    if n is not None:
        cmd += f" -n {n}"
    ctx.run(cmd)


@task
def down(ctx: Context, n: int | None = None, source: str | None = None, database: str | None = None) -> None:
    """Revert N migrations, or all of them."""
    cmd = f"{_migrator(source, database)} down"
    if n is not None:
        cmd += f" -n {n}"
    ctx.run(cmd)


@task
def status(ctx: Context, source: str | None = None, database: str | None = None) -> None:
    """Show the database version and pending migrations."""
    ctx.run(f"{_migrator(source, database)} status")


@task
def create(ctx: Context, name: str, source: str | None = None) -> None:
    """Scaffold a new migration folder.

    Args:
        ctx: Invoke context
        name: Name of the migration
        source: Migration directory (default: from config)
    """
    ctx.run(f"{_migrator(source, None)} create {name}")


@task
def clean(ctx: Context) -> None:
    """Clean up temporary files."""
    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    print("Cleanup complete")
