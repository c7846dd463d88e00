"""Pick UTxOs covering a target amount."""

import logging
from typing import Optional, Sequence

from cardano_tx.errors import ValidationError, InsufficientFundsError
from cardano_tx.types import TxInputs, Utxo

logger = logging.getLogger(__name__)


def get_utxos_for_amount(
    utxos: Sequence[Utxo],
    min_target: int,
    max_target: Optional[int] = None,
) -> TxInputs:
    """
    Select inputs whose sum is at least `min_target`.

    UTxOs are considered in the order given (no sorting), so the result is
    deterministic for a given provider response:

    1. the first UTxO with amount in [min_target, max_target] is taken alone,
       otherwise the largest single UTxO >= min_target is taken alone;
    2. otherwise UTxOs are accumulated until their sum first reaches min_target;
    3. otherwise InsufficientFundsError is raised.

    A max_target of None leaves the window unbounded.
    """
    if min_target < 0:
        raise ValidationError(f"invalid target amount: {min_target}")
    if max_target is not None and max_target < min_target:
        raise ValidationError(f"invalid target window: [{min_target}, {max_target}]")

    largest: Optional[Utxo] = None
    for utxo in utxos:
        if utxo.amount < min_target:
            continue
        if max_target is None or utxo.amount <= max_target:
            logger.debug(f"Selected {utxo} fitting window [{min_target}, {max_target}]")
            return TxInputs(inputs=[utxo.to_input()], sum=utxo.amount)
        if largest is None or utxo.amount > largest.amount:
            largest = utxo

    if largest is not None:
        logger.debug(f"Selected largest {largest} above {min_target}")
        return TxInputs(inputs=[largest.to_input()], sum=largest.amount)

    selected = TxInputs()
    for utxo in utxos:
        selected.inputs.append(utxo.to_input())
        selected.sum += utxo.amount
        if selected.sum >= min_target:
            logger.debug(f"Selected {len(selected.inputs)} inputs summing {selected.sum}")
            return selected

    if selected.sum >= min_target:
        return selected
    raise InsufficientFundsError(required=min_target, available=selected.sum)
