"""Best-effort lookup of the ledger transaction behind a storage operation.

Nothing the CLI prints identifies the transaction it submitted, so the
correlator takes the newest transaction sent by the configured account in
the current block.  A hit is advisory: a concurrent operation from the same
account can be returned instead.  With the default policy the block is
polled twice, 5 seconds apart.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, Awaitable, Callable, Iterable, Optional

import httpx

from akave_api.config import Settings, settings
from akave_api.errors import LedgerError
from akave_api.services.ledger import LedgerClient
from akave_api.utils.logging import get_logger

log = get_logger(__name__)

TX_HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def last_matching_hash(
    transactions: Iterable[Any],
    address: str,
) -> Optional[str]:
    """Hash of the last transaction in block order sent from *address*."""
    wanted = address.lower()
    found: Optional[str] = None
    for tx in transactions:
        # Blocks fetched without bodies list bare hashes
        if not isinstance(tx, dict):
            continue
        sender = tx.get("from")
        if isinstance(sender, str) and sender.lower() == wanted:
            found = tx.get("hash")
    return found


class TransactionCorrelator:
    """Polls the ledger for the account's latest transaction."""

    def __init__(
        self,
        cfg: Settings | None = None,
        *,
        ledger: Optional[LedgerClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._cfg = cfg or settings
        self._ledger = ledger or LedgerClient(self._cfg)
        self._sleep = sleep

    async def latest_transaction(self, address: str) -> Optional[str]:
        """Return the tx hash, or None on a miss or any ledger failure."""
        if not address:
            return None
        attempts = self._cfg.correlation_attempts
        delay = self._cfg.correlation_retry_delay_seconds
        try:
            for attempt in range(1, attempts + 1):
                height, tx_hash = await self._poll(address)
                if tx_hash is not None:
                    log.info(
                        "correlate.hit",
                        attempt=attempt,
                        block=height,
                        tx=tx_hash,
                    )
                    return tx_hash
                if attempt < attempts:
                    log.debug("correlate.retry", attempt=attempt, delay=delay)
                    await self._sleep(delay)
        except (httpx.HTTPError, LedgerError) as exc:
            log.warning("correlate.failed", address=address, error=str(exc))
            return None
        except Exception as exc:
            log.warning(
                "correlate.failed",
                address=address,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None
        log.info("correlate.miss", address=address, attempts=attempts)
        return None

    async def _poll(self, address: str) -> tuple[int, Optional[str]]:
        height = await self._ledger.block_number()
        block = await self._ledger.get_block(height, full_transactions=True)
        transactions = block.get("transactions")
        if transactions is None:
            transactions = []
        if not isinstance(transactions, list):
            raise LedgerError(f"block {height} transactions is not a list")
        tx_hash = last_matching_hash(transactions, address)
        if tx_hash is not None and not TX_HASH_RE.match(str(tx_hash)):
            raise LedgerError(f"malformed transaction hash {tx_hash!r}")
        return height, tx_hash


# Singleton
transaction_correlator = TransactionCorrelator()
