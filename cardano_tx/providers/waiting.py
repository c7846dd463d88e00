"""Polling for transaction inclusion and balance changes."""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from cardano_tx.constants import DEFAULT_WAIT_RETRY_COUNT, DEFAULT_WAIT_RETRY_TIME
from cardano_tx.errors import RetryTryAgainError, TransactionNotFoundError
from cardano_tx.types import get_utxos_sum
from .base import TxProvider
from .retry import RetryConfig, execute_with_retry

logger = logging.getLogger(__name__)


async def wait_for_transaction(
    provider: TxProvider,
    tx_hash: str,
    retry_count: int = DEFAULT_WAIT_RETRY_COUNT,
    retry_wait_time: float = DEFAULT_WAIT_RETRY_TIME,
    cancel_event: Optional[asyncio.Event] = None,
) -> Dict[str, Any]:
    """Poll until the provider knows `tx_hash`. Only "not found" is retried."""
    config = RetryConfig(
        retry_count=retry_count,
        retry_wait_time=retry_wait_time,
        is_retryable=lambda e: isinstance(e, TransactionNotFoundError),
    )
    result = await execute_with_retry(lambda: provider.get_transaction(tx_hash), config, cancel_event)
    logger.info(f"Transaction {tx_hash} included")
    return result


async def wait_for_amount(
    provider: TxProvider,
    address: str,
    condition: Callable[[int], bool],
    retry_count: int = DEFAULT_WAIT_RETRY_COUNT,
    retry_wait_time: float = DEFAULT_WAIT_RETRY_TIME,
    cancel_event: Optional[asyncio.Event] = None,
) -> int:
    """Poll the balance of `address` until `condition(balance)` holds; returns the balance."""
    
    async def check() -> int:
        amount = get_utxos_sum(await provider.get_utxos(address))
        if not condition(amount):
            raise RetryTryAgainError(f"balance of {address} is {amount}")
        return amount
    
    return await execute_with_retry(check, RetryConfig(retry_count, retry_wait_time), cancel_event)
