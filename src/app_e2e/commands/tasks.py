"""Node-side tasks run outside the browser.

Tasks are named shell commands from the `tasks` section of the config,
for example:

    tasks:
      db:seed: "npm run db:seed"

The built-in `log` task writes its argument to the log.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import subprocess

from app_e2e.config import get_config
from app_e2e.models import E2EError, ErrorCode

logger = logging.getLogger(__name__)

SEED_TASK = "db:seed"
DEFAULT_TASK_TIMEOUT = 60.0


def _run_shell_task(name: str, cmd: str, arg: str | None, timeout: float) -> str | None:
    argv = shlex.split(cmd)
    if arg is not None:
        argv.append(arg)
    try:
        result = subprocess.run(argv, capture_output=True, text=True, timeout=timeout, check=False)
    except FileNotFoundError as e:
        raise E2EError(
            code=ErrorCode.TASK_FAILED,
            message=f"Task {name!r} command not found: {argv[0]}",
            details={"task": name, "command": cmd},
        ) from e
    except subprocess.TimeoutExpired as e:
        raise E2EError(
            code=ErrorCode.TASK_FAILED,
            message=f"Task {name!r} timed out after {timeout:.0f}s",
            details={"task": name, "command": cmd},
        ) from e

    if result.returncode != 0:
        raise E2EError(
            code=ErrorCode.TASK_FAILED,
            message=f"Task {name!r} exited with status {result.returncode}",
            details={"task": name, "command": cmd, "stderr": result.stderr.strip()},
        )
    output = result.stdout.strip()
    return output or None


async def run_task(name: str, arg: str | None = None, *, timeout: float = DEFAULT_TASK_TIMEOUT) -> str | None:
    """Run a named task.

    Args:
        name: Task name ("log" or a key of the config's `tasks`)
        arg: Argument passed to the task (appended to the command line)
        timeout: Maximum run time in seconds

    Returns:
        The task's stdout, or None when it printed nothing

    Raises:
        E2EError: If the task is unknown, fails, or times out
    """
    if name == "log":
        logger.info("%s", arg)
        return None

    cmd = get_config().tasks.get(name)
    if cmd is None:
        raise E2EError(
            code=ErrorCode.TASK_FAILED,
            message=f"Unknown task {name!r}. Add it to the 'tasks' section of the config.",
            details={"task": name},
        )

    logger.debug("Running task %s: %s", name, cmd)
    return await asyncio.to_thread(_run_shell_task, name, cmd, arg, timeout)


async def cleanup_test_data() -> None:
    """Reset the application database to its seed data."""
    await run_task(SEED_TASK)
