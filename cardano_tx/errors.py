"""Exceptions raised by transaction building, signing and providers."""


class CardanoTxError(Exception):
    """Base exception for this package."""


class ValidationError(CardanoTxError):
    """Malformed inputs, outputs, scripts or builder misuse."""


class InsufficientFundsError(CardanoTxError):
    """Available UTxOs do not cover the required amount."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"not enough available funds for generating transaction: "
            f"{available} available, {required} required"
        )

    @property
    def shortfall(self) -> int:
        return self.required - self.available


class SignatureInvalidError(CardanoTxError):
    """Witness signature does not verify against the transaction hash."""


class ProviderError(CardanoTxError):
    """Base exception for backend provider failures."""


class ProviderTimeoutError(ProviderError):
    """Provider call timed out."""


class TransactionNotFoundError(ProviderError):
    """Transaction is not (yet) known to the provider."""


class SubmissionError(ProviderError):
    """Ledger rejected the submitted transaction."""


class RetryTryAgainError(CardanoTxError):
    """Raised by a retried handler to ask for another attempt."""


class RetryTimeoutError(CardanoTxError):
    """Retry budget exhausted."""


class OperationCancelledError(CardanoTxError):
    """Retry or polling loop was cancelled from outside."""
