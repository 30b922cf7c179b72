"""Exception types raised by the command and ledger layers."""

from __future__ import annotations

from typing import Optional, Sequence


class AkaveError(Exception):
    """Base exception for the gateway."""


class LaunchError(AkaveError):
    """The external tool could not be started at all."""

    def __init__(self, command: Sequence[str], cause: OSError | ValueError) -> None:
        self.command = list(command)
        self.cause = cause
        binary = self.command[0] if self.command else "<empty>"
        super().__init__(f"Failed to launch {binary}: {cause}")


class ParseError(AkaveError):
    """Tool output matched neither the JSON error shape nor the grammar."""

    def __init__(self, message: str, *, operation: str, output: str) -> None:
        self.operation = operation
        self.output = output
        super().__init__(f"{message} (operation={operation}, output={output!r})")


class LedgerError(AkaveError):
    """The ledger node answered with an error or an unreadable payload."""

    def __init__(self, message: str, *, method: Optional[str] = None) -> None:
        self.method = method
        super().__init__(f"{method}: {message}" if method else message)
