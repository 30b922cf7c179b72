"""Command-related data structures."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

REDACTED_FLAGS: tuple[str, ...] = ("--private-key=",)


class CommandSpec(BaseModel):
    """Argument vector for one invocation of the external tool."""

    model_config = ConfigDict(frozen=True)

    binary: str
    args: tuple[str, ...] = ()

    @property
    def argv(self) -> list[str]:
        return [self.binary, *self.args]

    def redacted(self) -> list[str]:
        """argv safe for logs: credential flags keep their name only."""
        out: list[str] = []
        for arg in self.argv:
            for flag in REDACTED_FLAGS:
                if arg.startswith(flag):
                    arg = f"{flag}***"
                    break
            out.append(arg)
        return out


class CommandResult(BaseModel):
    """Internal result from one external tool execution."""

    model_config = ConfigDict(frozen=True)

    command: list[str]
    output: str
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    elapsed_time: float = 0.0

    @property
    def failed(self) -> bool:
        return self.exit_code != 0
