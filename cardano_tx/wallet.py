"""Signing key material for a payment (and optional stake) key pair."""

import os
from dataclasses import dataclass
from typing import Optional, Protocol

from pycardano import PaymentSigningKey, StakeSigningKey

from .address import Network, get_key_hash, new_base_address, new_enterprise_address, new_reward_address
from .constants import KEY_SIZE
from .errors import ValidationError

PAYMENT_SIGNING_KEY_FILE = "payment.skey"
STAKE_SIGNING_KEY_FILE = "stake.skey"


class Signer(Protocol):
    """Anything holding a raw ed25519 key pair."""
    signing_key: bytes
    verification_key: bytes


@dataclass(frozen=True)
class Wallet:
    """
    Raw 32-byte ed25519 keys.

    Key storage is left to the caller; `load` reads cardano-cli
    text envelopes (payment.skey / stake.skey) from a directory.
    """
    signing_key: bytes
    verification_key: bytes
    stake_signing_key: Optional[bytes] = None
    stake_verification_key: Optional[bytes] = None

    def __post_init__(self):
        for key in (self.signing_key, self.verification_key):
            if len(key) != KEY_SIZE:
                raise ValidationError(f"invalid key size: {len(key)} bytes, expected {KEY_SIZE}")

    @classmethod
    def from_signing_key(cls, signing_key: bytes, stake_signing_key: Optional[bytes] = None) -> "Wallet":
        skey = PaymentSigningKey.from_primitive(signing_key)
        stake_vkey = None
        if stake_signing_key is not None:
            stake_vkey = StakeSigningKey.from_primitive(stake_signing_key).to_verification_key().payload
        return cls(
            signing_key=skey.payload,
            verification_key=skey.to_verification_key().payload,
            stake_signing_key=stake_signing_key,
            stake_verification_key=stake_vkey,
        )

    @classmethod
    def generate(cls, with_stake: bool = False) -> "Wallet":
        stake_skey = StakeSigningKey.generate().payload if with_stake else None
        return cls.from_signing_key(PaymentSigningKey.generate().payload, stake_skey)

    @classmethod
    def load(cls, directory: str) -> "Wallet":
        skey = PaymentSigningKey.load(os.path.join(directory, PAYMENT_SIGNING_KEY_FILE))
        stake_path = os.path.join(directory, STAKE_SIGNING_KEY_FILE)
        stake_skey = StakeSigningKey.load(stake_path).payload if os.path.exists(stake_path) else None
        return cls.from_signing_key(skey.payload, stake_skey)

    @property
    def key_hash(self) -> str:
        return get_key_hash(self.verification_key)

    def get_address(self, network: Network) -> str:
        """Base address when a stake key is present, enterprise address otherwise."""
        if self.stake_verification_key is not None:
            return new_base_address(network, self.verification_key, self.stake_verification_key)
        return new_enterprise_address(network, self.verification_key)

    def get_stake_address(self, network: Network) -> str:
        if self.stake_verification_key is None:
            raise ValidationError("wallet has no stake key")
        return new_reward_address(network, self.stake_verification_key)

    def __repr__(self) -> str:
        return f"Wallet({self.key_hash[:16]}..)"
