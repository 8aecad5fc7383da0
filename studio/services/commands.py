"""Async subprocess helpers shared by the installer, supervisor and uninstaller."""

import asyncio
import os
import subprocess
from collections.abc import Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()

CREATE_NO_WINDOW = 0x08000000
DETACHED_PROCESS = 0x00000008


@dataclass(frozen=True)
class CommandResult:
    success: bool
    returncode: int | None = None
    output: str = ""

    @property
    def message(self) -> str:
        text = self.output.strip()
        if text:
            return text
        if self.returncode is not None:
            return f"command failed with exit code {self.returncode}"
        return "command failed"


def _creationflags_kwargs(detached: bool = False) -> dict:
    if os.name != "nt":
        return {}
    flags = CREATE_NO_WINDOW
    if detached:
        flags |= DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
    return {"creationflags": flags}


async def run_command(
    args: list[str],
    timeout: float = 300.0,
    on_output: Callable[[str], None] | None = None,
) -> CommandResult:
    """Run a command to completion and capture combined stdout/stderr.

    Never raises for process-level failures: a missing binary, an OS error or a
    timeout all come back as ``success=False``.
    """
    logger.debug("command_start", args=args)
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            **_creationflags_kwargs(),
        )
    except (FileNotFoundError, PermissionError, OSError) as e:
        logger.debug("command_spawn_failed", args=args, error=str(e))
        return CommandResult(success=False, output=str(e))

    lines: list[str] = []

    async def _drain() -> None:
        assert proc.stdout is not None
        async for raw in proc.stdout:
            text = raw.decode("utf-8", errors="replace").rstrip()
            if not text:
                continue
            lines.append(text)
            if on_output:
                on_output(text)

    try:
        await asyncio.wait_for(_drain(), timeout=timeout)
        returncode = await proc.wait()
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        logger.warning("command_timed_out", args=args, timeout=timeout)
        return CommandResult(success=False, returncode=None, output="Command timed out")

    output = "\n".join(lines)
    if returncode != 0:
        logger.debug("command_failed", args=args, returncode=returncode)
    return CommandResult(success=returncode == 0, returncode=returncode, output=output)


async def launch_detached(args: list[str]) -> bool:
    """Start a long-lived background process without waiting for it.

    The child outlives this process: stdio is discarded and it gets its own
    session (POSIX) or process group (Windows).
    """
    kwargs = _creationflags_kwargs(detached=True)
    if os.name != "nt":
        kwargs["start_new_session"] = True
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
            **kwargs,
        )
    except (FileNotFoundError, PermissionError, OSError) as e:
        logger.warning("detached_launch_failed", args=args, error=str(e))
        return False
    logger.info("detached_launch", args=args, pid=proc.pid)
    return True
