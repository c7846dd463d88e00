"""Bounded retry for provider calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from cardano_tx.constants import DEFAULT_RETRY_COUNT, DEFAULT_RETRY_WAIT_TIME
from cardano_tx.errors import (
    OperationCancelledError,
    ProviderTimeoutError,
    RetryTimeoutError,
    RetryTryAgainError,
    SubmissionError,
    ValidationError,
)
from cardano_tx.types import ProtocolParameters, Utxo
from .base import TxProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Transient server failures reported by Ogmios/Blockfrost gateways
RETRYABLE_MESSAGES = (
    "status code 500",
    "status code 502",
    "status code 503",
)


def is_retryable_error(err: Optional[BaseException]) -> bool:
    """Timeouts, explicit try-again requests and known transient server errors."""
    if err is None:
        return False
    if isinstance(err, (OperationCancelledError, asyncio.CancelledError, SubmissionError)):
        return False
    if isinstance(err, (asyncio.TimeoutError, TimeoutError, ProviderTimeoutError, RetryTryAgainError)):
        return True
    message = str(err)
    return any(m in message for m in RETRYABLE_MESSAGES)


@dataclass
class RetryConfig:
    retry_count: int = DEFAULT_RETRY_COUNT
    retry_wait_time: float = DEFAULT_RETRY_WAIT_TIME
    is_retryable: Callable[[BaseException], bool] = is_retryable_error


async def _wait(delay: float, cancel_event: Optional[asyncio.Event]):
    if cancel_event is None:
        await asyncio.sleep(delay)
        return
    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return
    raise OperationCancelledError("operation cancelled")


async def execute_with_retry(
    handler: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> T:
    """
    Run `handler` until it succeeds, fails with a non-retryable error or the
    retry budget is spent.

    Non-retryable errors propagate unchanged. Running out of attempts raises
    RetryTimeoutError chained to the last error. Setting `cancel_event` stops
    the loop between attempts with OperationCancelledError.
    """
    config = config or RetryConfig()
    if config.retry_count < 1:
        raise ValidationError(f"invalid retry count: {config.retry_count}")

    last_error: Optional[BaseException] = None
    for attempt in range(1, config.retry_count + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise OperationCancelledError("operation cancelled")
        try:
            return await handler()
        except Exception as e:
            if not config.is_retryable(e):
                raise
            last_error = e
            logger.warning(f"Attempt {attempt}/{config.retry_count} failed: {e}")
        if attempt < config.retry_count:
            await _wait(config.retry_wait_time, cancel_event)

    raise RetryTimeoutError(f"timeout after {config.retry_count} attempts: {last_error}") from last_error


class RetryingTxProvider:
    """Wraps every call of another provider with execute_with_retry."""
    
    def __init__(self, provider: TxProvider, config: Optional[RetryConfig] = None,
                 cancel_event: Optional[asyncio.Event] = None):
        self.provider = provider
        self.config = config or RetryConfig()
        self.cancel_event = cancel_event
    
    async def _retry(self, handler: Callable[[], Awaitable[T]]) -> T:
        return await execute_with_retry(handler, self.config, self.cancel_event)
    
    async def get_protocol_parameters(self) -> ProtocolParameters:
        return await self._retry(self.provider.get_protocol_parameters)
    
    async def get_tip(self) -> int:
        return await self._retry(self.provider.get_tip)
    
    async def get_utxos(self, address: str) -> List[Utxo]:
        return await self._retry(lambda: self.provider.get_utxos(address))
    
    async def submit_transaction(self, tx_signed: bytes) -> None:
        await self._retry(lambda: self.provider.submit_transaction(tx_signed))
    
    async def get_transaction(self, tx_hash: str) -> Dict[str, Any]:
        return await self._retry(lambda: self.provider.get_transaction(tx_hash))
    
    async def close(self) -> None:
        await self.provider.close()
