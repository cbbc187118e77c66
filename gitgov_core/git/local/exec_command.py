"""Default process executor for LocalGitModule.

Hosts that already own a process runner inject their own; this one is built on
asyncio subprocesses for everyone else (CLI, tests).
"""

import asyncio
import logging
import os
from typing import List, Optional

from common.constants import COMMAND_TIMEOUT_EXIT_CODE
from gitgov_core.git.types import ExecOptions, ExecResult

logger = logging.getLogger(__name__)


async def exec_command(
    command: str, args: List[str], options: Optional[ExecOptions] = None
) -> ExecResult:
    """Run a command and capture its output.

    Args:
        command: Executable name or path.
        args: Command arguments.
        options: Working directory, extra environment and timeout.

    Returns:
        ExecResult with decoded stdout/stderr. A command that exceeds its
        timeout is killed and reported with a non-zero exit code; a missing
        executable is reported with exit code 127.
    """
    options = options or ExecOptions()
    env = None
    if options.env:
        env = {**os.environ, **options.env}

    try:
        process = await asyncio.create_subprocess_exec(
            command, *args,
            cwd=options.cwd,
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        logger.error(f"Executable not found: {command}")
        return ExecResult(exit_code=127, stdout="", stderr=str(e))

    timeout = options.timeout_ms / 1000 if options.timeout_ms else None
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        logger.warning(f"Command timed out after {options.timeout_ms}ms: {command} {' '.join(args)}")
        return ExecResult(
            exit_code=COMMAND_TIMEOUT_EXIT_CODE,
            stdout="",
            stderr=f"Command timed out after {options.timeout_ms}ms",
        )

    return ExecResult(
        exit_code=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
