"""Transaction body builder."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import cbor2

from cardano_tx.address import Network, PolicyScript, get_address_bytes, get_address_network
from cardano_tx.constants import KEY_SIZE, MAX_UINT64, SIGNATURE_SIZE, TX_HASH_SIZE
from cardano_tx.errors import ValidationError
from cardano_tx.types import ProtocolParameters, TxInput, TxOutput
from .encoding import (
    BODY_AUXILIARY_DATA_HASH,
    BODY_FEE,
    BODY_INPUTS,
    BODY_OUTPUTS,
    BODY_TTL,
    TX_ARRAY_HEADER,
    WITNESS_NATIVE_SCRIPTS,
    WITNESS_VKEYS,
    MetadataInput,
    blake2b_256,
    encode_auxiliary_data,
    normalize_metadata,
)
from .fee import calculate_linear_fee, max_tx_fee

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Input:
    tx_input: TxInput
    policy_script: Optional[PolicyScript] = None


class TxBuilder:
    """
    Accumulates everything a transaction needs, then serializes it.

    Mutators return the builder so calls can be chained. Typical order:
    protocol parameters and ttl, metadata, inputs, outputs (with a trailing
    zero-amount change output), calculate_fee, set_fee, update the change
    amount, build. After build() the builder is frozen.

    Not safe for concurrent use; create one builder per transaction.
    """

    def __init__(self, network: Optional[Network] = None):
        self._network = network
        self._protocol_parameters: Optional[ProtocolParameters] = None
        self._time_to_live: Optional[int] = None
        self._metadata: Optional[Dict[int, Any]] = None
        self._inputs: List[_Input] = []
        self._outputs: List[TxOutput] = []
        self._fee = 0
        self._finalized = False

    # --- accumulation -----------------------------------------------------

    def _check_not_finalized(self):
        if self._finalized:
            raise ValidationError("transaction has already been built")

    def set_network(self, network: Network) -> "TxBuilder":
        self._check_not_finalized()
        self._network = network
        return self

    def set_protocol_parameters(self, params: ProtocolParameters) -> "TxBuilder":
        self._check_not_finalized()
        self._protocol_parameters = params
        return self

    def set_time_to_live(self, slot: int) -> "TxBuilder":
        self._check_not_finalized()
        if slot < 0:
            raise ValidationError(f"invalid time to live: {slot}")
        self._time_to_live = slot
        return self

    def set_metadata(self, metadata: Optional[MetadataInput]) -> "TxBuilder":
        """Attach metadata (dict or JSON). None or an empty map removes it."""
        self._check_not_finalized()
        normalized = normalize_metadata(metadata) if metadata else None
        self._metadata = normalized or None
        return self

    def add_inputs(self, *inputs: TxInput) -> "TxBuilder":
        self._check_not_finalized()
        for tx_input in inputs:
            self._inputs.append(_Input(self._validate_input(tx_input)))
        return self

    def add_inputs_with_script(self, policy_script: PolicyScript, *inputs: TxInput) -> "TxBuilder":
        """Add inputs locked by `policy_script`; the script goes into the witness set."""
        self._check_not_finalized()
        for tx_input in inputs:
            self._inputs.append(_Input(self._validate_input(tx_input), policy_script))
        return self

    def add_outputs(self, *outputs: TxOutput) -> "TxBuilder":
        self._check_not_finalized()
        for output in outputs:
            if output.amount < 0:
                raise ValidationError(f"negative output amount {output.amount} for {output.address}")
            get_address_bytes(output.address)
            self._outputs.append(TxOutput(address=output.address, amount=output.amount))
        return self

    def update_output_amount(self, index: int, amount: int) -> "TxBuilder":
        """Set amount of the output at `index`; negative indices count from the end."""
        self._check_not_finalized()
        output = self._outputs[self._resolve_index(index)]
        if amount < 0:
            raise ValidationError(f"negative output amount {amount} for {output.address}")
        output.amount = amount
        return self

    def remove_output(self, index: int) -> "TxBuilder":
        self._check_not_finalized()
        del self._outputs[self._resolve_index(index)]
        return self

    def set_fee(self, fee: int) -> "TxBuilder":
        self._check_not_finalized()
        if fee < 0:
            raise ValidationError(f"invalid fee: {fee}")
        self._fee = fee
        return self

    # --- inspection -------------------------------------------------------

    @property
    def fee(self) -> int:
        return self._fee

    @property
    def inputs(self) -> List[TxInput]:
        return [i.tx_input for i in self._inputs]

    @property
    def outputs(self) -> List[TxOutput]:
        return [TxOutput(o.address, o.amount) for o in self._outputs]

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def get_policy_scripts(self) -> List[PolicyScript]:
        """Distinct scripts of the inputs, ordered by script hash."""
        scripts = {i.policy_script.get_policy_script_hash(): i.policy_script for i in self._inputs if i.policy_script}
        return [scripts[h] for h in sorted(scripts)]

    def get_required_witness_count(self) -> int:
        """Distinct key hashes that may sign for the attached scripts."""
        return len({h for script in self.get_policy_scripts() for h in script.key_hashes})

    # --- serialization ----------------------------------------------------

    def calculate_fee(self, witness_count: int = 0) -> int:
        """
        Minimum fee for this transaction once signed.

        The transaction is serialized with zero-filled key witnesses, one per
        distinct key hash of the attached scripts plus `witness_count`. The fee
        field and every zero-amount output use their largest possible values so
        the estimate never comes out short.
        """
        if witness_count < 0:
            raise ValidationError(f"invalid witness count: {witness_count}")
        params = self._require_protocol_parameters()
        self._validate()

        total_witnesses = self.get_required_witness_count() + witness_count
        placeholder_fee = max(self._fee, max_tx_fee(params))
        body = self._encode_body(fee=placeholder_fee, change_placeholder=MAX_UINT64)
        fake_witnesses = [[bytes(KEY_SIZE), bytes(SIGNATURE_SIZE)] for _ in range(total_witnesses)]
        tx = self._encode_tx(body, self._encode_witness_set(fake_witnesses))

        fee = calculate_linear_fee(params, len(tx))
        logger.debug(f"Estimated fee {fee} for {len(tx)} bytes with {total_witnesses} witnesses")
        return fee

    def build(self) -> Tuple[bytes, str]:
        """
        Serialize the unsigned transaction.

        Returns the transaction bytes and its hash (hex), which is both the
        transaction id and the message every signer signs.
        """
        self._require_protocol_parameters()
        self._validate()

        body = self._encode_body(fee=self._fee)
        tx_raw = self._encode_tx(body, self._encode_witness_set([]))
        tx_hash = blake2b_256(body).hex()

        params = self._protocol_parameters
        if len(tx_raw) > params.max_tx_size:
            logger.warning(f"Transaction {tx_hash} is {len(tx_raw)} bytes, above max size {params.max_tx_size}")

        self._finalized = True
        logger.debug(f"Built transaction {tx_hash}: {len(self._inputs)} inputs, {len(self._outputs)} outputs, fee {self._fee}")
        return tx_raw, tx_hash

    def _encode_body(self, fee: int, change_placeholder: Optional[int] = None) -> bytes:
        body: Dict[int, Any] = {
            BODY_INPUTS: [[bytes.fromhex(i.tx_input.hash), i.tx_input.index] for i in self._inputs],
            BODY_OUTPUTS: [
                [get_address_bytes(o.address), o.amount or change_placeholder or 0]
                for o in self._outputs
            ],
            BODY_FEE: fee,
        }
        if self._time_to_live is not None:
            body[BODY_TTL] = self._time_to_live
        if self._metadata:
            body[BODY_AUXILIARY_DATA_HASH] = blake2b_256(encode_auxiliary_data(self._metadata))
        return cbor2.dumps(body)

    def _encode_witness_set(self, vkey_witnesses: List[List[bytes]]) -> bytes:
        witness_set: Dict[int, Any] = {}
        if vkey_witnesses:
            witness_set[WITNESS_VKEYS] = vkey_witnesses
        scripts = self.get_policy_scripts()
        if scripts:
            witness_set[WITNESS_NATIVE_SCRIPTS] = [s.to_primitive() for s in scripts]
        return cbor2.dumps(witness_set)

    def _encode_tx(self, body: bytes, witness_set: bytes) -> bytes:
        auxiliary_data = encode_auxiliary_data(self._metadata) if self._metadata else cbor2.dumps(None)
        return TX_ARRAY_HEADER + body + witness_set + cbor2.dumps(True) + auxiliary_data

    # --- validation -------------------------------------------------------

    def _require_protocol_parameters(self) -> ProtocolParameters:
        if self._protocol_parameters is None:
            raise ValidationError("protocol parameters are not set")
        return self._protocol_parameters

    def _resolve_index(self, index: int) -> int:
        resolved = index + len(self._outputs) if index < 0 else index
        if not 0 <= resolved < len(self._outputs):
            raise ValidationError(f"output index {index} out of range ({len(self._outputs)} outputs)")
        return resolved

    @staticmethod
    def _validate_input(tx_input: TxInput) -> TxInput:
        try:
            size = len(bytes.fromhex(tx_input.hash))
        except ValueError as e:
            raise ValidationError(f"invalid input hash {tx_input.hash}: {e}") from e
        if size != TX_HASH_SIZE:
            raise ValidationError(f"invalid input hash size {size} for {tx_input}")
        if tx_input.index < 0:
            raise ValidationError(f"invalid input index {tx_input.index}")
        return tx_input

    def _validate(self):
        if not self._inputs:
            raise ValidationError("transaction has no inputs")
        if not self._outputs:
            raise ValidationError("transaction has no outputs")
        for output in self._outputs:
            if output.amount < 0:
                raise ValidationError(f"negative output amount {output.amount} for {output.address}")
            if self._network is not None and get_address_network(output.address) != self._network:
                raise ValidationError(f"output address {output.address} is not on {self._network.name}")
