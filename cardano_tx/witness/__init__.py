"""Transaction witnesses."""

from .witness import TxWitness, create_witness, verify_witness, assemble_witnesses, sign_tx

__all__ = ["TxWitness", "create_witness", "verify_witness", "assemble_witnesses", "sign_tx"]
