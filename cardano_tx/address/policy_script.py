"""At-least-N-of-M native multisig scripts."""

import json
import logging
from typing import Any, Dict, List, Sequence, Union

import cbor2
from nacl.encoding import RawEncoder
from nacl.hash import blake2b

from cardano_tx.constants import KEY_HASH_SIZE
from cardano_tx.errors import ValidationError
from .address import CredentialKind, derive_address
from .network import Network

logger = logging.getLogger(__name__)

# Native script discriminators
SCRIPT_PUBKEY = 0
SCRIPT_N_OF_K = 3

# Prepended to the script CBOR before hashing
NATIVE_SCRIPT_HASH_TAG = b"\x00"


class PolicyScript:
    """
    Native script requiring signatures from at least `required_signatures`
    of the listed key hashes.

    Immutable once constructed. Key hashes keep their insertion order,
    which is part of the script's identity.
    """

    def __init__(self, key_hashes: Sequence[Union[str, bytes]], required_signatures: int):
        hashes: List[bytes] = []
        for key_hash in key_hashes:
            try:
                raw = bytes.fromhex(key_hash) if isinstance(key_hash, str) else bytes(key_hash)
            except ValueError as e:
                raise ValidationError(f"invalid key hash {key_hash!r}: {e}") from e
            if len(raw) != KEY_HASH_SIZE:
                raise ValidationError(f"invalid key hash size: {len(raw)} bytes, expected {KEY_HASH_SIZE}")
            if raw in hashes:
                raise ValidationError(f"duplicate key hash {raw.hex()}")
            hashes.append(raw)

        if not 1 <= required_signatures <= len(hashes):
            raise ValidationError(
                f"invalid policy threshold: {required_signatures} required out of {len(hashes)} keys"
            )

        self._key_hashes = tuple(hashes)
        self._required_signatures = required_signatures
        self._cbor = cbor2.dumps(self.to_primitive())
        self._hash = blake2b(NATIVE_SCRIPT_HASH_TAG + self._cbor, digest_size=KEY_HASH_SIZE, encoder=RawEncoder)

    @property
    def key_hashes(self) -> List[str]:
        return [h.hex() for h in self._key_hashes]

    @property
    def required_signatures(self) -> int:
        return self._required_signatures

    def get_count(self) -> int:
        """Number of keys that may sign."""
        return len(self._key_hashes)

    def to_primitive(self) -> List[Any]:
        return [
            SCRIPT_N_OF_K,
            self._required_signatures,
            [[SCRIPT_PUBKEY, h] for h in self._key_hashes],
        ]

    def to_cbor(self) -> bytes:
        return self._cbor

    def get_policy_script_hash(self) -> str:
        return self._hash.hex()

    def create_multisig_address(self, network: Network) -> str:
        """Enterprise address paying to this script."""
        address = derive_address(network, self._hash, CredentialKind.SCRIPT)
        logger.debug(f"Multisig address {address} for {self._required_signatures}-of-{len(self._key_hashes)} script")
        return address

    def to_json(self) -> str:
        """Script in the cardano-cli simple script JSON format."""
        document: Dict[str, Any] = {
            "type": "atLeast",
            "required": self._required_signatures,
            "scripts": [{"type": "sig", "keyHash": h.hex()} for h in self._key_hashes],
        }
        return json.dumps(document, indent=2)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PolicyScript):
            return NotImplemented
        return self._cbor == other._cbor

    def __hash__(self) -> int:
        return hash(self._cbor)

    def __repr__(self) -> str:
        return f"PolicyScript({self._required_signatures}-of-{len(self._key_hashes)}, {self.get_policy_script_hash()[:16]}..)"
