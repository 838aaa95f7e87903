# type: ignore
import os

from invoke import task


@task
def venv(ctx):
    """Create .venv and install pingwatch with its test and dev extras."""
    ctx.run("uv venv")
    ctx.run("uv pip install -e '.[test,dev]'")


@task
def clean(ctx):
    """
    Remove untracked files (build output, caches, coverage data).
    Asks before deleting anything.
    """
    ctx.run("git clean -nfdx")

    response = (
        input("Are you sure you want to remove all untracked files? (y/n) [n]: ")
        .strip()
        .lower()
    )
    if response == "y":
        ctx.run("git clean -fdx")


@task
def lint(ctx):
    """Ruff and mypy over the package."""
    ctx.run("ruff check src tests", pty=True)
    ctx.run("ruff format --check src", pty=True)
    ctx.run("mypy src", pty=True)


@task
def test(ctx):
    """Run tests with coverage information."""
    ctx.run("pytest --cov=pingwatch --cov-report=term-missing", pty=True)


@task
def monitor(ctx, duration=60):
    """Run the monitor against the configured server for a short while."""
    ctx.run(f"pingwatch monitor --duration {duration}", pty=True)


@task
def build_package(ctx):
    """Build sdist and wheel into dist/."""
    ctx.run("rm -rf dist")
    ctx.run("uv build")


@task
def release(ctx):
    """Build and publish to PyPI."""
    token = os.getenv("PYPI_TOKEN")
    if not token:
        raise ValueError("PYPI_TOKEN environment variable is not set")

    ctx.run("invoke build-package")
    ctx.run(f"uv publish --token {token}")
