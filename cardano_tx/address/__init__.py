"""Networks, key hashes, addresses and native multisig scripts."""

from .network import (
    Network,
    network_from_magic,
    MAINNET_PROTOCOL_MAGIC,
    TESTNET_PROTOCOL_MAGIC,
    PREPROD_PROTOCOL_MAGIC,
    PREVIEW_PROTOCOL_MAGIC,
)
from .address import (
    CredentialKind,
    get_key_hash,
    derive_address,
    derive_reward_address,
    new_enterprise_address,
    new_base_address,
    new_reward_address,
    is_address_with_valid_prefix,
    get_address_bytes,
    get_address_network,
)
from .policy_script import PolicyScript

__all__ = [
    "Network", "network_from_magic",
    "MAINNET_PROTOCOL_MAGIC", "TESTNET_PROTOCOL_MAGIC", "PREPROD_PROTOCOL_MAGIC", "PREVIEW_PROTOCOL_MAGIC",
    "CredentialKind", "get_key_hash", "derive_address", "derive_reward_address",
    "new_enterprise_address", "new_base_address", "new_reward_address",
    "is_address_with_valid_prefix", "get_address_bytes", "get_address_network",
    "PolicyScript",
]
