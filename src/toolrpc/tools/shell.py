"""shell — run a single executable without a shell."""

from __future__ import annotations

import asyncio
import logging
import os

from pydantic import Field, NonNegativeInt

from toolrpc.errors import InvalidArgumentError, NotFoundError
from toolrpc.tools.base import Tool, ToolOutput, ToolParams

logger = logging.getLogger(__name__)

_FORBIDDEN = frozenset(";&|()<>$`\\\"'")


class ShellParams(ToolParams):
    command: str = Field(..., description="Executable name or path. No whitespace or shell metacharacters.")
    args: list[str] = Field(default_factory=list, description="Arguments passed verbatim.")
    env: dict[str, str] = Field(default_factory=dict, description="Added to the inherited environment.")
    cwd: str | None = Field(default=None, description="Working directory.")
    capture_stderr: bool = Field(default=False)
    timeout_ms: NonNegativeInt = Field(default=0, description="Kill the process after this long; 0 for no limit.")


class ShellOutput(ToolOutput):
    command: str
    args: list[str]
    status: int = Field(..., description="Exit status; -1 when killed or terminated by a signal.")
    success: bool
    stdout: str
    stderr: str | None = None
    timed_out: bool = False


def validate_command(command: str) -> None:
    """Reject anything that is not a bare executable name or path."""
    if not command:
        raise InvalidArgumentError("Command must not be empty")
    if any(ch.isspace() for ch in command):
        raise InvalidArgumentError(f"Command must not contain whitespace: {command!r}")
    bad = sorted(_FORBIDDEN & set(command))
    if bad:
        raise InvalidArgumentError(
            f"Command contains forbidden characters {''.join(bad)!r}: {command!r}"
        )


async def _reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()


class Shell(Tool[ShellParams, ShellOutput]):
    name = "shell"
    description = "Execute a shell command"
    params_model = ShellParams
    output_model = ShellOutput

    async def execute(self, params: ShellParams) -> ShellOutput:
        validate_command(params.command)
        if params.cwd is not None and not await asyncio.to_thread(os.path.isdir, params.cwd):
            raise NotFoundError(f"Working directory not found: {params.cwd}")

        env = {**os.environ, **params.env}
        logger.info("Running command %s %s", params.command, params.args)

        try:
            proc = await asyncio.create_subprocess_exec(
                params.command,
                *params.args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE if params.capture_stderr else asyncio.subprocess.DEVNULL,
                cwd=params.cwd,
                env=env,
            )
        except FileNotFoundError as exc:
            raise NotFoundError(f"Command not found: {params.command}") from exc

        timed_out = False
        try:
            if params.timeout_ms:
                try:
                    stdout, stderr = await asyncio.wait_for(
                        proc.communicate(), timeout=params.timeout_ms / 1000
                    )
                except TimeoutError:
                    timed_out = True
                    logger.warning("Command %s timed out after %d ms", params.command, params.timeout_ms)
                    await _reap(proc)
                    stdout, stderr = b"", b""
            else:
                stdout, stderr = await proc.communicate()
        finally:
            await _reap(proc)

        returncode = proc.returncode
        status = -1 if timed_out or returncode is None or returncode < 0 else returncode
        return ShellOutput(
            command=params.command,
            args=params.args,
            status=status,
            success=not timed_out and status == 0,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=(stderr.decode(errors="replace") if stderr else "") if params.capture_stderr else None,
            timed_out=timed_out,
        )
