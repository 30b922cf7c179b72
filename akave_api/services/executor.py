"""Runs the akavecli binary and captures everything it prints.

Each call spawns its own child process; stdout and stderr are drained
concurrently so neither pipe can fill up and stall the child.  The exit code
is reported but never interpreted here.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from akave_api.config import Settings, settings
from akave_api.errors import LaunchError
from akave_api.models.commands import CommandResult, CommandSpec
from akave_api.utils.logging import get_logger

log = get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


class CommandExecutor:
    """Spawns one process per call, optionally capped by a semaphore."""

    def __init__(
        self,
        cfg: Settings | None = None,
        *,
        max_concurrent: Optional[int] = None,
    ) -> None:
        self._cfg = cfg or settings
        limit = (
            self._cfg.max_concurrent_commands
            if max_concurrent is None
            else max_concurrent
        )
        self._limit = limit
        self._slots: Optional[asyncio.Semaphore] = (
            asyncio.Semaphore(limit) if limit > 0 else None
        )

    @property
    def max_concurrent(self) -> int:
        """0 means every call gets its own process immediately."""
        return self._limit

    # ── public ────────────────────────────────────────────────────────

    async def run(self, spec: CommandSpec) -> CommandResult:
        """Launch *spec*, wait for exit, return the combined output.

        Raises LaunchError if the process cannot be spawned.  Cancelling the
        awaiting task kills the child before the cancellation propagates.
        """
        if self._slots is None:
            return await self._execute(spec)
        async with self._slots:
            return await self._execute(spec)

    # ── helpers ───────────────────────────────────────────────────────

    async def _execute(self, spec: CommandSpec) -> CommandResult:
        redacted = spec.redacted()
        log.info("command.exec", args=redacted)
        started = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *spec.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            # ValueError: argv the OS cannot accept, e.g. an embedded NUL
            log.error("command.launch_failed", binary=spec.binary, error=str(exc))
            raise LaunchError(redacted, exc) from exc

        combined: list[bytes] = []
        stdout_buf = bytearray()
        stderr_buf = bytearray()
        try:
            await asyncio.gather(
                _drain(proc.stdout, stdout_buf, combined),
                _drain(proc.stderr, stderr_buf, combined),
            )
            exit_code = await proc.wait()
        except asyncio.CancelledError:
            log.warning("command.cancelled", pid=proc.pid)
            _kill(proc)
            await proc.wait()
            raise

        elapsed = time.monotonic() - started
        output = b"".join(combined).decode("utf-8", errors="replace").strip()
        log.info("command.exit", rc=exit_code, elapsed=round(elapsed, 3))
        log.debug(
            "command.output",
            stdout_bytes=len(stdout_buf),
            stderr_bytes=len(stderr_buf),
            out=output[:200],
        )
        return CommandResult(
            command=redacted,
            output=output,
            stdout=stdout_buf.decode("utf-8", errors="replace"),
            stderr=stderr_buf.decode("utf-8", errors="replace"),
            exit_code=exit_code,
            elapsed_time=elapsed,
        )


async def _drain(
    stream: Optional[asyncio.StreamReader],
    buf: bytearray,
    combined: list[bytes],
) -> None:
    """Append every chunk to the stream buffer and the shared arrival log."""
    if stream is None:
        return
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return
        buf.extend(chunk)
        combined.append(chunk)


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


# Singleton
command_executor = CommandExecutor()
