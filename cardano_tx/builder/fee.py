"""Linear fee calculation."""

from cardano_tx.types import ProtocolParameters


def calculate_linear_fee(params: ProtocolParameters, size: int) -> int:
    """fee = constant + coefficient * size_in_bytes"""
    return params.min_fee_constant + params.min_fee_coefficient * size


def max_tx_fee(params: ProtocolParameters) -> int:
    """Fee of the largest transaction the ledger accepts."""
    return calculate_linear_fee(params, params.max_tx_size)
