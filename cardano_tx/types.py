"""
Core types for transaction building.

Plain dataclasses for UTxOs, inputs, outputs and protocol parameters.
Uses pycardano for addresses and keys.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from .constants import MIN_UTXO_DEFAULT_VALUE
from .errors import ValidationError


@dataclass(frozen=True)
class Utxo:
    """Unspent output at an address. Amount is in lovelace."""
    hash: str
    index: int
    amount: int

    def to_input(self) -> "TxInput":
        return TxInput(hash=self.hash, index=self.index)

    def __str__(self) -> str:
        return f"{self.hash}#{self.index} ({self.amount})"


@dataclass(frozen=True)
class TxInput:
    """Reference to an output of a previous transaction."""
    hash: str  # hex encoded, 32 bytes
    index: int

    def __str__(self) -> str:
        return f"{self.hash}#{self.index}"


@dataclass
class TxOutput:
    """
    Output of a transaction.

    An amount of 0 marks the change output whose amount is set once the fee is known.
    """
    address: str
    amount: int = 0


@dataclass
class TxInputs:
    """Selected inputs together with the sum of their amounts."""
    inputs: List[TxInput] = field(default_factory=list)
    sum: int = 0


def get_utxos_sum(utxos: Iterable[Utxo]) -> int:
    return sum(u.amount for u in utxos)


def get_outputs_sum(outputs: Iterable[TxOutput]) -> int:
    return sum(o.amount for o in outputs)


@dataclass(frozen=True)
class ProtocolParameters:
    """
    Ledger protocol parameters needed to build a transaction.

    Only the fields used for fees and output sizing are lifted out,
    everything else stays available through `raw`.
    """
    min_fee_constant: int
    min_fee_coefficient: int
    max_tx_size: int
    min_utxo_value: int = MIN_UTXO_DEFAULT_VALUE
    coins_per_utxo_byte: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProtocolParameters":
        """Create from cardano-cli `query protocol-parameters` JSON."""
        try:
            min_utxo = data.get("minUTxOValue")
            return cls(
                min_fee_constant=int(data["txFeeFixed"]),
                min_fee_coefficient=int(data["txFeePerByte"]),
                max_tx_size=int(data["maxTxSize"]),
                min_utxo_value=int(min_utxo) if min_utxo is not None else MIN_UTXO_DEFAULT_VALUE,
                coins_per_utxo_byte=data.get("utxoCostPerByte"),
                raw=dict(data),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"invalid protocol parameters: {e}") from e

    @classmethod
    def from_json(cls, content: Union[str, bytes]) -> "ProtocolParameters":
        try:
            data = json.loads(content)
        except ValueError as e:
            raise ValidationError(f"invalid protocol parameters json: {e}") from e
        return cls.from_dict(data)
