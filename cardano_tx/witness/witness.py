"""Per-signer witnesses and their assembly into a signed transaction."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Union

import cbor2
from cbor2 import CBORDecodeError
from nacl.exceptions import BadSignatureError
from nacl.exceptions import ValueError as NaclValueError
from nacl.signing import VerifyKey
from pycardano import PaymentSigningKey

from cardano_tx.builder.encoding import (
    TX_ARRAY_HEADER,
    WITNESS_NATIVE_SCRIPTS,
    WITNESS_VKEYS,
    split_transaction,
)
from cardano_tx.constants import KEY_SIZE, SIGNATURE_SIZE, TX_HASH_SIZE
from cardano_tx.errors import SignatureInvalidError, ValidationError
from cardano_tx.wallet import Signer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TxWitness:
    """Verification key and its signature over a transaction hash."""
    verification_key: bytes
    signature: bytes

    def to_primitive(self) -> List[bytes]:
        return [self.verification_key, self.signature]

    def to_cbor(self) -> bytes:
        return cbor2.dumps(self.to_primitive())

    @classmethod
    def from_cbor(cls, data: bytes) -> "TxWitness":
        try:
            vkey, signature = cbor2.loads(data)
        except (CBORDecodeError, TypeError, ValueError) as e:
            raise ValidationError(f"invalid witness encoding: {e}") from e
        if len(vkey) != KEY_SIZE or len(signature) != SIGNATURE_SIZE:
            raise ValidationError("invalid witness key or signature size")
        return cls(verification_key=bytes(vkey), signature=bytes(signature))


def _tx_hash_bytes(tx_hash: Union[str, bytes]) -> bytes:
    raw = bytes.fromhex(tx_hash) if isinstance(tx_hash, str) else bytes(tx_hash)
    if len(raw) != TX_HASH_SIZE:
        raise ValidationError(f"invalid transaction hash size: {len(raw)} bytes")
    return raw


def create_witness(tx_hash: Union[str, bytes], signer: Signer) -> TxWitness:
    """Sign the 32-byte transaction hash (never the full transaction)."""
    message = _tx_hash_bytes(tx_hash)
    signing_key = PaymentSigningKey.from_primitive(signer.signing_key)
    return TxWitness(verification_key=bytes(signer.verification_key), signature=signing_key.sign(message))


def verify_witness(tx_hash: Union[str, bytes], witness: TxWitness) -> None:
    """Raise SignatureInvalidError unless the witness signs `tx_hash`."""
    message = _tx_hash_bytes(tx_hash)
    try:
        VerifyKey(witness.verification_key).verify(message, witness.signature)
    except (BadSignatureError, NaclValueError, ValueError) as e:
        raise SignatureInvalidError(
            f"invalid signature for key {witness.verification_key.hex()[:16]}..: {e}"
        ) from e


def assemble_witnesses(tx_raw: bytes, witnesses: Sequence[TxWitness]) -> bytes:
    """
    Put key witnesses into a built transaction.

    Witnesses already present are kept. Duplicates by verification key
    collapse to the first occurrence and order is otherwise preserved.
    Native scripts placed by the builder stay as they are. Body bytes are
    copied verbatim, so the transaction hash does not change.
    """
    body, witness_set, rest = split_transaction(tx_raw)

    unique: Dict[bytes, List[bytes]] = {}
    for vkey, signature in witness_set.get(WITNESS_VKEYS, []):
        unique.setdefault(bytes(vkey), [bytes(vkey), bytes(signature)])
    for witness in witnesses:
        unique.setdefault(witness.verification_key, witness.to_primitive())

    new_witness_set: Dict[int, Any] = {}
    if unique:
        new_witness_set[WITNESS_VKEYS] = list(unique.values())
    if witness_set.get(WITNESS_NATIVE_SCRIPTS):
        new_witness_set[WITNESS_NATIVE_SCRIPTS] = witness_set[WITNESS_NATIVE_SCRIPTS]

    logger.debug(f"Assembled {len(unique)} key witnesses")
    return TX_ARRAY_HEADER + body + cbor2.dumps(new_witness_set) + rest


def sign_tx(tx_raw: bytes, tx_hash: Union[str, bytes], signer: Signer) -> bytes:
    """Single-signer shortcut: witness, verify and assemble."""
    witness = create_witness(tx_hash, signer)
    verify_witness(tx_hash, witness)
    return assemble_witnesses(tx_raw, [witness])
