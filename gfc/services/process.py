"""
External process invocation.
"""

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from gfc.core.exceptions import CommandError
from gfc.core.logging import get_logger

logger = get_logger(__name__)

SAFE_PATH = "/usr/local/bin:/usr/bin:/bin"


@dataclass(frozen=True)
class ProcessResult:
    """Exit code and captured output of a finished command."""

    exit_code: int
    stdout: str
    stderr: str


class Runner(Protocol):
    async def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult: ...


class ProcessRunner:
    """Runs commands as subprocesses without blocking the event loop."""

    async def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult:
        """
        Run a command to completion and capture its output.

        Args:
            args: Program and arguments, never passed through a shell
            cwd: Working directory
            env: Complete environment; None inherits the current one

        Returns:
            Exit code with decoded stdout and stderr

        Raises:
            CommandError: If the program cannot be started
        """
        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CommandError(args[0], None) from exc

        try:
            out, err = await proc.communicate()
        except BaseException:
            # No orphaned git/fly once the build that started it is gone
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
            raise
        return ProcessResult(
            exit_code=proc.returncode,
            stdout=out.decode("utf-8", errors="replace"),
            stderr=err.decode("utf-8", errors="replace"),
        )


def minimal_env(home: Path, **extra: str) -> dict[str, str]:
    """Environment with a fixed PATH and an isolated HOME, nothing inherited."""
    env = {"PATH": SAFE_PATH, "HOME": str(home), "LANG": "C.UTF-8"}
    env.update(extra)
    return env


async def run_checked(
    runner: Runner,
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ProcessResult:
    """
    Run a command and raise on a non-zero exit.

    Only the program and subcommand are logged; arguments may carry
    credentials. Output goes to the debug log.
    """
    label = " ".join(args[:2])
    logger.debug(f"Running {label}")
    result = await runner.run(args, cwd=cwd, env=env)

    if result.stdout:
        logger.debug("%s stdout: %s", label, result.stdout.rstrip())
    if result.stderr:
        logger.debug("%s stderr: %s", label, result.stderr.rstrip())

    if result.exit_code != 0:
        logger.debug(f"{label} exit code: {result.exit_code}")
        raise CommandError(args[0], result.exit_code, result.stdout, result.stderr)
    return result
