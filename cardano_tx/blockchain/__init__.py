"""Blockchain access clients."""

from .ogmios_client import (
    ChainTip,
    OgmiosClient,
    OgmiosError,
    OgmiosConnectionError,
    OgmiosQueryError,
    OgmiosTimeoutError,
)

__all__ = [
    "ChainTip", "OgmiosClient",
    "OgmiosError", "OgmiosConnectionError", "OgmiosQueryError", "OgmiosTimeoutError",
]
