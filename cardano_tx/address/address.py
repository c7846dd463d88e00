"""Key hashes and bech32 addresses."""

from enum import Enum
from typing import Optional, Union

from nacl.encoding import RawEncoder
from nacl.hash import blake2b
from pycardano import Address, ScriptHash, VerificationKeyHash
from pycardano.exception import PyCardanoException

from cardano_tx.constants import KEY_HASH_SIZE, KEY_SIZE
from cardano_tx.errors import ValidationError
from .network import Network


class CredentialKind(Enum):
    """What a 28-byte payment or stake credential hashes."""
    KEY = "key"
    SCRIPT = "script"


def _to_bytes(value: Union[str, bytes], size: int, what: str) -> bytes:
    try:
        raw = bytes.fromhex(value) if isinstance(value, str) else bytes(value)
    except ValueError as e:
        raise ValidationError(f"invalid {what}: {e}") from e
    if len(raw) != size:
        raise ValidationError(f"invalid {what} size: {len(raw)} bytes, expected {size}")
    return raw


def _credential(credential_hash: Union[str, bytes], kind: CredentialKind):
    payload = _to_bytes(credential_hash, KEY_HASH_SIZE, "credential hash")
    if kind is CredentialKind.SCRIPT:
        return ScriptHash(payload)
    return VerificationKeyHash(payload)


def get_key_hash(verification_key: Union[str, bytes]) -> str:
    """blake2b-224 of a raw 32-byte public key, hex encoded."""
    key = _to_bytes(verification_key, KEY_SIZE, "verification key")
    return blake2b(key, digest_size=KEY_HASH_SIZE, encoder=RawEncoder).hex()


def derive_address(
    network: Network,
    credential_hash: Union[str, bytes],
    kind: CredentialKind = CredentialKind.KEY,
    stake_hash: Optional[Union[str, bytes]] = None,
    stake_kind: CredentialKind = CredentialKind.KEY,
) -> str:
    """
    Build a payment address from a credential hash.

    Without a stake credential the result is an enterprise address
    (header 0x6_ for keys, 0x7_ for scripts); with one it is a base address.
    """
    staking_part = _credential(stake_hash, stake_kind) if stake_hash is not None else None
    address = Address(
        payment_part=_credential(credential_hash, kind),
        staking_part=staking_part,
        network=network.to_pycardano(),
    )
    return address.encode()


def derive_reward_address(
    network: Network,
    credential_hash: Union[str, bytes],
    kind: CredentialKind = CredentialKind.KEY,
) -> str:
    """Build a stake (reward) address: `stake...` / `stake_test...`."""
    address = Address(staking_part=_credential(credential_hash, kind), network=network.to_pycardano())
    return address.encode()


def new_enterprise_address(network: Network, verification_key: Union[str, bytes]) -> str:
    return derive_address(network, get_key_hash(verification_key))


def new_base_address(
    network: Network,
    verification_key: Union[str, bytes],
    stake_verification_key: Union[str, bytes],
) -> str:
    return derive_address(network, get_key_hash(verification_key), stake_hash=get_key_hash(stake_verification_key))


def new_reward_address(network: Network, stake_verification_key: Union[str, bytes]) -> str:
    return derive_reward_address(network, get_key_hash(stake_verification_key))


def is_address_with_valid_prefix(address: str) -> bool:
    return address.startswith("addr") or address.startswith("stake")


def _decode(address: str) -> Address:
    if not is_address_with_valid_prefix(address):
        raise ValidationError(f"invalid address prefix: {address}")
    try:
        return Address.from_primitive(address)
    except (PyCardanoException, ValueError, TypeError) as e:
        raise ValidationError(f"invalid address {address}: {e}") from e


def get_address_bytes(address: str) -> bytes:
    """Raw header + credential bytes of a bech32 address."""
    return _decode(address).to_primitive()


def get_address_network(address: str) -> Network:
    return Network(_decode(address).network.value)
