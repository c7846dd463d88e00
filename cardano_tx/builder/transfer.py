"""End-to-end transfer building: fetch chain data, select inputs, balance fee and change."""

import logging
from typing import Optional, Sequence, Tuple

from cardano_tx.address import Network, PolicyScript
from cardano_tx.constants import DEFAULT_POTENTIAL_FEE, DEFAULT_SELECTION_WINDOW, DEFAULT_TTL_SLOT_INCREMENT
from cardano_tx.errors import InsufficientFundsError, ValidationError
from cardano_tx.providers.base import TxProvider
from cardano_tx.types import ProtocolParameters, TxInputs, TxOutput, get_outputs_sum
from .coin_selection import get_utxos_for_amount
from .encoding import MetadataInput
from .tx_builder import TxBuilder

logger = logging.getLogger(__name__)


async def set_protocol_parameters_and_ttl(
    builder: TxBuilder,
    provider: TxProvider,
    ttl_slot_increment: int = DEFAULT_TTL_SLOT_INCREMENT,
) -> ProtocolParameters:
    """Fetch protocol parameters and tip; ttl becomes tip + `ttl_slot_increment`."""
    params = await provider.get_protocol_parameters()
    slot = await provider.get_tip()
    builder.set_protocol_parameters(params).set_time_to_live(slot + ttl_slot_increment)
    return params


async def select_utxos(
    provider: TxProvider,
    address: str,
    amount: int,
    min_utxo_value: int,
    window: Optional[int] = None,
) -> TxInputs:
    """
    Fetch UTxOs of `address` and select enough to pay `amount` and leave
    change of at least `min_utxo_value`.

    `window` widens the upper bound of an exact single-UTxO fit; None makes it unbounded.
    """
    utxos = await provider.get_utxos(address)
    min_target = amount + min_utxo_value
    max_target = min_target + window if window is not None else None
    inputs = get_utxos_for_amount(utxos, min_target, max_target)
    logger.debug(f"Selected {len(inputs.inputs)} of {len(utxos)} UTxOs at {address}, sum {inputs.sum}")
    return inputs


def _validate_receivers(outputs: Sequence[TxOutput]):
    if not outputs:
        raise ValidationError("transfer has no receivers")
    for output in outputs:
        if output.amount <= 0:
            raise ValidationError(f"receiver {output.address} has no amount")


async def build_transfer(
    provider: TxProvider,
    network: Network,
    sender_address: str,
    outputs: Sequence[TxOutput],
    metadata: Optional[MetadataInput] = None,
    policy_script: Optional[PolicyScript] = None,
    witness_count: Optional[int] = None,
    potential_fee: int = DEFAULT_POTENTIAL_FEE,
    ttl_slot_increment: int = DEFAULT_TTL_SLOT_INCREMENT,
    min_utxo_value: Optional[int] = None,
    selection_window: Optional[int] = DEFAULT_SELECTION_WINDOW,
) -> Tuple[bytes, str]:
    """
    Build an unsigned transfer from `sender_address` with change back to it.

    With `policy_script` the sender is a multisig address and the script's
    keys determine the witness count; otherwise one signer is assumed
    unless `witness_count` says otherwise.
    """
    _validate_receivers(outputs)
    builder = TxBuilder(network)
    params = await set_protocol_parameters_and_ttl(builder, provider, ttl_slot_increment)
    min_utxo = params.min_utxo_value if min_utxo_value is None else min_utxo_value
    outputs_sum = get_outputs_sum(outputs)
    inputs = await select_utxos(provider, sender_address, outputs_sum + potential_fee, min_utxo, selection_window)

    builder.set_metadata(metadata)
    if policy_script is not None:
        builder.add_inputs_with_script(policy_script, *inputs.inputs)
        extra_witnesses = witness_count or 0
    else:
        builder.add_inputs(*inputs.inputs)
        extra_witnesses = 1 if witness_count is None else witness_count
    builder.add_outputs(*outputs, TxOutput(address=sender_address))

    fee = builder.calculate_fee(extra_witnesses)
    change = inputs.sum - outputs_sum - fee
    if change < min_utxo:
        raise InsufficientFundsError(required=outputs_sum + fee + min_utxo, available=inputs.sum)

    builder.set_fee(fee).update_output_amount(-1, change)
    tx_raw, tx_hash = builder.build()
    logger.info(f"Built transfer {tx_hash} from {sender_address}: fee {fee}, change {change}")
    return tx_raw, tx_hash


async def build_multisig_transfer(
    provider: TxProvider,
    network: Network,
    policy_script: PolicyScript,
    fee_policy_script: PolicyScript,
    outputs: Sequence[TxOutput],
    metadata: Optional[MetadataInput] = None,
    potential_fee: int = DEFAULT_POTENTIAL_FEE,
    ttl_slot_increment: int = DEFAULT_TTL_SLOT_INCREMENT,
    min_utxo_value: Optional[int] = None,
    selection_window: Optional[int] = DEFAULT_SELECTION_WINDOW,
) -> Tuple[bytes, str]:
    """
    Build a transfer paid by one multisig address while a second multisig
    address pays the fee.

    Outputs get two trailing change outputs: the spending address receives
    what is left of its inputs, the fee address what is left after the fee.
    """
    _validate_receivers(outputs)
    builder = TxBuilder(network)
    params = await set_protocol_parameters_and_ttl(builder, provider, ttl_slot_increment)
    min_utxo = params.min_utxo_value if min_utxo_value is None else min_utxo_value
    multisig_address = policy_script.create_multisig_address(network)
    fee_address = fee_policy_script.create_multisig_address(network)
    outputs_sum = get_outputs_sum(outputs)

    inputs = await select_utxos(provider, multisig_address, outputs_sum, min_utxo, selection_window)
    fee_inputs = await select_utxos(provider, fee_address, potential_fee, min_utxo, selection_window)

    builder.set_metadata(metadata)
    builder.add_outputs(*outputs, TxOutput(address=multisig_address), TxOutput(address=fee_address))
    builder.add_inputs_with_script(policy_script, *inputs.inputs)
    builder.add_inputs_with_script(fee_policy_script, *fee_inputs.inputs)

    fee = builder.calculate_fee(0)
    fee_change = fee_inputs.sum - fee
    if fee_change < min_utxo:
        raise InsufficientFundsError(required=fee + min_utxo, available=fee_inputs.sum)

    builder.set_fee(fee)
    builder.update_output_amount(-2, inputs.sum - outputs_sum)
    builder.update_output_amount(-1, fee_change)
    tx_raw, tx_hash = builder.build()
    logger.info(f"Built multisig transfer {tx_hash}: fee {fee}")
    return tx_raw, tx_hash

