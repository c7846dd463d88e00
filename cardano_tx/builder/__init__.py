"""Transaction building: encoding, fees, coin selection and the builder itself."""

from .encoding import get_tx_hash, normalize_metadata, split_transaction
from .fee import calculate_linear_fee, max_tx_fee
from .coin_selection import get_utxos_for_amount
from .tx_builder import TxBuilder
from .transfer import set_protocol_parameters_and_ttl, select_utxos, build_transfer, build_multisig_transfer

__all__ = [
    "get_tx_hash", "normalize_metadata", "split_transaction",
    "calculate_linear_fee", "max_tx_fee",
    "get_utxos_for_amount",
    "TxBuilder",
    "set_protocol_parameters_and_ttl", "select_utxos", "build_transfer", "build_multisig_transfer",
]
