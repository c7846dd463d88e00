"""Select a provider implementation from configuration."""

import logging
from typing import Any

from cardano_tx.blockchain import OgmiosClient
from .base import TxProvider
from .blockfrost import BlockfrostTxProvider
from .cli import CliTxProvider
from .ogmios import OgmiosTxProvider
from .retry import RetryConfig, RetryingTxProvider

logger = logging.getLogger(__name__)

PROVIDER_NAMES = ("ogmios", "blockfrost", "cli")


def create_provider(settings: Any) -> TxProvider:
    """
    Build the provider named by `settings.provider_name`, wrapped with retries.

    `settings` is any object with the attributes of config.settings.Settings.
    """
    name = settings.provider_name
    if name == "ogmios":
        provider = OgmiosTxProvider(OgmiosClient(
            url=settings.ogmios_url,
            username=settings.ogmios_username,
            password=settings.ogmios_password,
        ))
    elif name == "blockfrost":
        provider = BlockfrostTxProvider(settings.blockfrost_url, settings.blockfrost_project_id)
    elif name == "cli":
        provider = CliTxProvider(settings.testnet_magic, settings.socket_path, settings.cardano_cli_binary)
    else:
        raise ValueError(f"unknown provider {name!r}, expected one of {', '.join(PROVIDER_NAMES)}")
    
    logger.info(f"Using {name} provider")
    return RetryingTxProvider(provider, RetryConfig(settings.retry_count, settings.retry_wait_time))
