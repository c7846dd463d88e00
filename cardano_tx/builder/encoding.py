"""Canonical CBOR pieces shared by the builder and the witness engine."""

import io
import json
from typing import Any, Dict, Tuple, Union

import cbor2
from cbor2 import CBORDecodeError, CBORTag
from nacl.encoding import RawEncoder
from nacl.hash import blake2b

from cardano_tx.constants import MAX_UINT64, METADATA_MAX_VALUE_SIZE, TX_HASH_SIZE
from cardano_tx.errors import ValidationError

# Alonzo-style auxiliary data wrapper
AUXILIARY_DATA_TAG = 259

# Top-level transaction array header: [body, witness_set, is_valid, auxiliary_data]
TX_ARRAY_HEADER = b"\x84"

# Body map keys
BODY_INPUTS = 0
BODY_OUTPUTS = 1
BODY_FEE = 2
BODY_TTL = 3
BODY_AUXILIARY_DATA_HASH = 7

# Witness set map keys
WITNESS_VKEYS = 0
WITNESS_NATIVE_SCRIPTS = 1

MetadataInput = Union[Dict[Any, Any], bytes, str]


def blake2b_256(data: bytes) -> bytes:
    return blake2b(data, digest_size=TX_HASH_SIZE, encoder=RawEncoder)


def _metadatum(value: Any) -> Any:
    # bool is an int subclass but has no metadata representation
    if isinstance(value, bool) or value is None or isinstance(value, float):
        raise ValidationError(f"unsupported metadata value: {value!r}")
    if isinstance(value, int):
        if not -MAX_UINT64 <= value <= MAX_UINT64:
            raise ValidationError(f"metadata integer out of range: {value}")
        return value
    if isinstance(value, str):
        if len(value.encode("utf-8")) > METADATA_MAX_VALUE_SIZE:
            raise ValidationError(f"metadata string longer than {METADATA_MAX_VALUE_SIZE} bytes: {value[:16]}..")
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) > METADATA_MAX_VALUE_SIZE:
            raise ValidationError(f"metadata bytes longer than {METADATA_MAX_VALUE_SIZE} bytes")
        return bytes(value)
    if isinstance(value, (list, tuple)):
        return [_metadatum(v) for v in value]
    if isinstance(value, dict):
        return {_metadatum_key(k): _metadatum(v) for k, v in value.items()}
    raise ValidationError(f"unsupported metadata value type: {type(value).__name__}")


def _metadatum_key(key: Any) -> Any:
    # Map keys must stay hashable once converted
    if isinstance(key, (list, tuple, dict)):
        raise ValidationError(f"unsupported metadata map key: {key!r}")
    return _metadatum(key)


def _label(key: Any) -> int:
    if isinstance(key, str) and key.isdigit():
        key = int(key)
    if isinstance(key, bool) or not isinstance(key, int) or not 0 <= key <= MAX_UINT64:
        raise ValidationError(f"metadata label must be an unsigned integer: {key!r}")
    return key


def normalize_metadata(metadata: MetadataInput) -> Dict[int, Any]:
    """
    Convert caller metadata into ledger metadata.

    Accepts a dict or its JSON encoding (as produced by json.dumps).
    Top-level keys are labels; digit strings such as "0" become integers.
    Key order is preserved.
    """
    if isinstance(metadata, (bytes, str)):
        try:
            metadata = json.loads(metadata)
        except ValueError as e:
            raise ValidationError(f"invalid metadata json: {e}") from e
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be a map of label to value")
    return {_label(k): _metadatum(v) for k, v in metadata.items()}


def encode_auxiliary_data(metadata: Dict[int, Any]) -> bytes:
    return cbor2.dumps(CBORTag(AUXILIARY_DATA_TAG, {0: metadata}))


def split_transaction(tx_raw: bytes) -> Tuple[bytes, Dict[int, Any], bytes]:
    """
    Split serialized transaction into body bytes, decoded witness set and the
    encoded remainder (validity flag and auxiliary data).

    Body bytes are returned verbatim so the transaction hash never changes.
    """
    if not tx_raw or tx_raw[:1] != TX_ARRAY_HEADER:
        raise ValidationError("not a serialized transaction")

    fp = io.BytesIO(tx_raw)
    fp.seek(1)
    decoder = cbor2.CBORDecoder(fp)
    try:
        body = decoder.decode()
        body_end = fp.tell()
        witness_set = decoder.decode()
        witness_end = fp.tell()
    except (CBORDecodeError, EOFError) as e:
        raise ValidationError(f"invalid transaction encoding: {e}") from e

    if not isinstance(body, dict) or not isinstance(witness_set, dict):
        raise ValidationError("invalid transaction encoding: body and witness set must be maps")
    return tx_raw[1:body_end], witness_set, tx_raw[witness_end:]


def get_tx_hash(tx_raw: bytes) -> str:
    """Transaction id: blake2b-256 of the body bytes, hex encoded."""
    body, _, _ = split_transaction(tx_raw)
    return blake2b_256(body).hex()
