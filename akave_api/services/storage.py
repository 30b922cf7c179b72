"""Bucket and file operations backed by ``akavecli ipc``.

Each operation runs the tool once, parses what it printed and, for
operations that submit a transaction, attaches the account's latest ledger
transaction hash.  Launch and parse failures propagate; correlation never
fails an operation.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from akave_api.config import Settings, settings
from akave_api.models.commands import CommandSpec
from akave_api.models.storage import (
    TRACKABLE_OPERATIONS,
    ErrorPayload,
    OperationKind,
    OperationResult,
    RawPassthrough,
)
from akave_api.services.correlator import (
    TransactionCorrelator,
    transaction_correlator,
)
from akave_api.services.executor import CommandExecutor, command_executor
from akave_api.utils.akave_parser import parse_output
from akave_api.utils.logging import get_logger

log = get_logger(__name__)


class AkaveStorageService:
    """Facade over the executor, the output parser and the correlator."""

    def __init__(
        self,
        cfg: Settings | None = None,
        *,
        executor: Optional[CommandExecutor] = None,
        correlator: Optional[TransactionCorrelator] = None,
    ) -> None:
        self._cfg = cfg or settings
        self._executor = executor or command_executor
        self._correlator = correlator or transaction_correlator

    # ── helpers ───────────────────────────────────────────────────────

    def build_command(self, noun: str, verb: str, *positional: str) -> CommandSpec:
        """``<binary> ipc <noun> <verb> [args] --node-address=.. --private-key=..``"""
        return CommandSpec(
            binary=self._cfg.akave_cli_binary,
            args=(
                "ipc",
                noun,
                verb,
                *positional,
                f"--node-address={self._cfg.akave_node_address}",
                f"--private-key={self._cfg.akave_private_key}",
            ),
        )

    async def _execute(
        self,
        kind: OperationKind,
        spec: CommandSpec,
    ) -> OperationResult:
        result = await self._executor.run(spec)
        data = parse_output(result.output, kind)
        tx_hash = await self._correlate(kind, data)
        return OperationResult(
            operation=kind,
            data=data,
            transaction_hash=tx_hash,
            exit_code=result.exit_code,
        )

    async def _correlate(self, kind: OperationKind, data) -> Optional[str]:
        if kind not in TRACKABLE_OPERATIONS:
            return None
        if isinstance(data, ErrorPayload):
            log.info("storage.correlate_skipped", operation=kind.value, reason="error")
            return None
        address = self._cfg.akave_account_address
        if not address:
            log.debug("storage.correlate_skipped", operation=kind.value, reason="no_address")
            return None
        return await self._correlator.latest_transaction(address)

    # ── buckets ───────────────────────────────────────────────────────

    async def create_bucket(self, name: str) -> OperationResult:
        return await self._execute(
            OperationKind.create_bucket,
            self.build_command("bucket", "create", name),
        )

    async def delete_bucket(self, name: str) -> OperationResult:
        return await self._execute(
            OperationKind.delete_bucket,
            self.build_command("bucket", "delete", name),
        )

    async def view_bucket(self, name: str) -> OperationResult:
        return await self._execute(
            OperationKind.view_bucket,
            self.build_command("bucket", "view", name),
        )

    async def list_buckets(self) -> OperationResult:
        return await self._execute(
            OperationKind.list_buckets,
            self.build_command("bucket", "list"),
        )

    # ── files ─────────────────────────────────────────────────────────

    async def list_files(self, bucket: str) -> OperationResult:
        return await self._execute(
            OperationKind.list_files,
            self.build_command("file", "list", bucket),
        )

    async def file_info(self, bucket: str, name: str) -> OperationResult:
        return await self._execute(
            OperationKind.file_info,
            self.build_command("file", "info", bucket, name),
        )

    async def upload_file(self, bucket: str, local_path: str) -> OperationResult:
        return await self._execute(
            OperationKind.upload_file,
            self.build_command("file", "upload", bucket, str(local_path)),
        )

    async def download_file(
        self,
        bucket: str,
        name: str,
        dest_dir: str,
    ) -> OperationResult:
        """Download *name* into a fresh directory created under *dest_dir*.

        Every call gets its own directory, so a file left behind by an
        earlier call is never mistaken for this call's output.  On success
        the result points at the file and the caller owns (and removes) its
        parent directory; on failure the directory is removed here and the
        output is parsed to recover the error the tool reported.
        """
        kind = OperationKind.download_file
        Path(dest_dir).mkdir(parents=True, exist_ok=True)
        call_dir = Path(tempfile.mkdtemp(prefix="akave-dl-", dir=dest_dir))
        try:
            spec = self.build_command("file", "download", bucket, name, str(call_dir))
            result = await self._executor.run(spec)

            target = call_dir / name
            if target.is_file():
                return OperationResult(
                    operation=kind,
                    data=RawPassthrough(path=str(target), size=target.stat().st_size),
                    exit_code=result.exit_code,
                )
        except BaseException:
            shutil.rmtree(call_dir, ignore_errors=True)
            raise

        shutil.rmtree(call_dir, ignore_errors=True)
        log.warning("storage.download_missing", bucket=bucket, file=name, rc=result.exit_code)
        return OperationResult(
            operation=kind,
            data=parse_output(result.output, kind),
            exit_code=result.exit_code,
        )


# Singleton
storage_service = AkaveStorageService()
