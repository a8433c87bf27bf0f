"""Command line interface for the e2e suites.

Runs the scenario suites through pytest with the configured retry
policy, and exposes the tasks and session cache for use outside a run.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated

import pytest
import typer

from app_e2e.auth.credentials import CredentialStore, KeyringError
from app_e2e.auth.session import SessionCache
from app_e2e.browser.config import HEADLESS_ENV_VAR, get_headless_mode
from app_e2e.commands.tasks import cleanup_test_data, run_task
from app_e2e.commands.visual import UPDATE_ENV_VAR
from app_e2e.config import CONFIG_ENV_VAR, E2EConfig, get_config, reset_config
from app_e2e.models import ConfigError, E2EError
from app_e2e.utils.logging import setup_logging

app = typer.Typer(
    name="app-e2e",
    help="End-to-end browser tests for the web application",
)

# Suite name -> scenario file name
SUITES: dict[str, str] = {
    "login": "test_login.py",
    "forms": "test_form_handling.py",
    "api": "test_api.py",
    "performance": "test_performance.py",
    "visual": "test_visual.py",
}


def resolve_spec_files(patterns: list[str], suites: list[str] | None = None, root: Path | None = None) -> list[Path]:
    """Expand spec patterns into scenario files, optionally limited to suites.

    Raises:
        typer.BadParameter: If a suite name is unknown
    """
    base = root or Path.cwd()
    files = sorted({path for pattern in patterns for path in base.glob(pattern) if path.is_file()})
    if not suites:
        return files

    unknown = [s for s in suites if s not in SUITES]
    if unknown:
        raise typer.BadParameter(f"Unknown suite(s): {', '.join(unknown)}. Choose from: {', '.join(SUITES)}")
    wanted = {SUITES[s] for s in suites}
    return [f for f in files if f.name in wanted]


def build_pytest_args(files: list[Path], reruns: int, extra: list[str] | None = None) -> list[str]:
    args = [str(f) for f in files]
    if reruns > 0:
        args.extend(["--reruns", str(reruns)])
    args.extend(extra or [])
    return args


def _load_config_or_exit() -> E2EConfig:
    reset_config()
    try:
        return get_config()
    except ConfigError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1) from e


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show the command log (DEBUG)",
        ),
    ] = False,
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.INFO)


@app.command()
def run(
    suite: Annotated[
        list[str] | None,
        typer.Option(
            "--suite",
            "-s",
            help=f"Suite to run (repeatable): {', '.join(SUITES)}",
        ),
    ] = None,
    open_mode: Annotated[
        bool,
        typer.Option(
            "--open",
            help="Interactive run: headed browser and open-mode retries",
        ),
    ] = False,
    update_snapshots: Annotated[
        bool,
        typer.Option(
            "--update-snapshots",
            help="Overwrite image snapshot baselines",
        ),
    ] = False,
    browser: Annotated[
        str | None,
        typer.Option(
            "--browser",
            "-b",
            help="chromium, firefox or webkit",
        ),
    ] = None,
    headed: Annotated[
        bool,
        typer.Option(
            "--headed",
            help="Show the browser window",
        ),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="YAML config file (default: ./app_e2e.yaml)",
        ),
    ] = None,
    extra: Annotated[
        list[str] | None,
        typer.Argument(
            help="Extra pytest arguments (after --)",
        ),
    ] = None,
) -> None:
    """Run the e2e scenario suites with pytest.

    Example:
        app-e2e run --suite login --suite api -- -x
    """
    if config_file is not None:
        os.environ[CONFIG_ENV_VAR] = str(config_file)
    if browser is not None:
        os.environ["APP_E2E_BROWSER"] = browser
    if headed or open_mode:
        os.environ[HEADLESS_ENV_VAR] = "false"
    if update_snapshots:
        os.environ[UPDATE_ENV_VAR] = "true"

    config = _load_config_or_exit()
    files = resolve_spec_files(config.spec_patterns, suite)
    if not files:
        typer.echo("❌ No scenario files matched the spec patterns", err=True)
        raise typer.Exit(1)

    reruns = config.retries.for_mode(open_mode)
    typer.echo(f"🧪 Running {len(files)} file(s) against {config.base_url}")
    mode = "headless" if get_headless_mode() else "headed"
    typer.echo(f"   Browser: {config.browser} ({mode})")
    typer.echo(f"   Retries: {reruns}")

    exit_code = pytest.main(build_pytest_args(files, reruns, extra))
    raise typer.Exit(int(exit_code))


@app.command("config")
def show_config() -> None:
    """Print the resolved configuration as JSON."""
    config = _load_config_or_exit()
    typer.echo(config.model_dump_json(indent=2))


@app.command("clear-sessions")
def clear_sessions() -> None:
    """Delete persisted login sessions."""
    deleted = SessionCache(persist=True).clear()
    typer.echo(f"🧹 Deleted {deleted} session(s)")


@app.command()
def seed() -> None:
    """Reset the application database (runs the db:seed task)."""
    _load_config_or_exit()
    try:
        asyncio.run(cleanup_test_data())
    except E2EError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1) from e
    typer.echo("✅ Database seeded")


@app.command()
def task(
    name: Annotated[str, typer.Argument(help="Task name from the config's tasks section")],
    arg: Annotated[str | None, typer.Argument(help="Argument passed to the task")] = None,
) -> None:
    """Run a configured task."""
    _load_config_or_exit()
    try:
        output = asyncio.run(run_task(name, arg))
    except E2EError as e:
        typer.echo(f"❌ {e.message}", err=True)
        raise typer.Exit(1) from e
    if output:
        typer.echo(output)


@app.command("set-password")
def set_password(
    email: Annotated[str, typer.Argument(help="Test account email")],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            prompt=True,
            hide_input=True,
            help="Password to store in the system keyring",
        ),
    ],
) -> None:
    """Store a test account password in the system keyring."""
    try:
        CredentialStore().save(email, password)
    except KeyringError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1) from e
    typer.echo(f"🔑 Password stored for {email}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
