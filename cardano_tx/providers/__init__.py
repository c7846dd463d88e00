"""Chain providers, retry policy and inclusion polling."""

from .base import TxProvider
from .retry import RetryConfig, RetryingTxProvider, execute_with_retry, is_retryable_error
from .waiting import wait_for_transaction, wait_for_amount
from .ogmios import OgmiosTxProvider
from .blockfrost import BlockfrostTxProvider
from .cli import CliTxProvider
from .factory import create_provider

__all__ = [
    "TxProvider",
    "RetryConfig", "RetryingTxProvider", "execute_with_retry", "is_retryable_error",
    "wait_for_transaction", "wait_for_amount",
    "OgmiosTxProvider", "BlockfrostTxProvider", "CliTxProvider",
    "create_provider",
]
