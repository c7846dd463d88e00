#!/usr/bin/env python3
"""
Cardano Wallet Tx - Send a transfer

Builds a transfer from the configured wallet to the receiver address,
signs it, submits it through the configured provider and waits until
the receiver balance grows.

Usage:
    python main.py [--multisig N]
"""

import argparse
import asyncio
import logging
import os
import sys

from config import settings
from cardano_tx import CardanoTxError, Network, PolicyScript, TxOutput, Wallet
from cardano_tx.address import network_from_magic
from cardano_tx.builder import build_multisig_transfer, build_transfer
from cardano_tx.providers import TxProvider, create_provider, wait_for_amount
from cardano_tx.types import get_utxos_sum
from cardano_tx.witness import assemble_witnesses, create_witness, sign_tx, verify_witness

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_wallets(count: int):
    """Load wallets from <wallet_directory>1 .. <wallet_directory>N."""
    base = os.path.expanduser(settings.wallet_directory)
    return [Wallet.load(f"{base}{i + 1}") for i in range(count)]


async def send_single(provider: TxProvider, network: Network, receiver: str) -> None:
    wallet = load_wallets(1)[0]
    address = wallet.get_address(network)
    print(f"Sender: {address}")
    
    tx_raw, tx_hash = await build_transfer(
        provider, network, address,
        outputs=[TxOutput(address=receiver, amount=settings.min_utxo_value)],
        metadata={"0": {"type": "single"}},
        potential_fee=settings.potential_fee,
        ttl_slot_increment=settings.ttl_slot_increment,
        min_utxo_value=settings.min_utxo_value,
    )
    await submit_and_wait(provider, sign_tx(tx_raw, tx_hash, wallet), tx_hash, receiver)


async def send_multisig(provider: TxProvider, network: Network, receiver: str, signers_count: int) -> None:
    wallets = load_wallets(signers_count * 2)
    signers, fee_signers = wallets[:signers_count], wallets[signers_count:]
    required = signers_count * 2 // 3 + 1
    policy = PolicyScript([w.key_hash for w in signers], required)
    fee_policy = PolicyScript([w.key_hash for w in fee_signers], required)
    print(f"Multisig address: {policy.create_multisig_address(network)}")
    print(f"Multisig fee address: {fee_policy.create_multisig_address(network)}")
    
    tx_raw, tx_hash = await build_multisig_transfer(
        provider, network, policy, fee_policy,
        outputs=[TxOutput(address=receiver, amount=settings.min_utxo_value)],
        metadata={"0": {"type": "multi"}},
        potential_fee=settings.potential_fee,
        ttl_slot_increment=settings.ttl_slot_increment,
        min_utxo_value=settings.min_utxo_value,
    )
    
    witnesses = []
    for wallet in signers[:required] + fee_signers[:required]:
        witness = create_witness(tx_hash, wallet)
        verify_witness(tx_hash, witness)
        witnesses.append(witness)
    
    await submit_and_wait(provider, assemble_witnesses(tx_raw, witnesses), tx_hash, receiver)


async def submit_and_wait(provider: TxProvider, tx_signed: bytes, tx_hash: str, receiver: str) -> None:
    previous = get_utxos_sum(await provider.get_utxos(receiver))
    
    await provider.submit_transaction(tx_signed)
    print(f"✅ Transaction submitted. hash = {tx_hash}")
    
    await wait_for_amount(provider, receiver, lambda amount: amount > previous)
    print(f"✅ Transaction included in block. hash = {tx_hash}")


async def run(multisig: int) -> bool:
    receiver = settings.receiver_address
    if not receiver:
        print("❌ Set receiver_address in config/settings.py")
        return False
    network = network_from_magic(settings.testnet_magic)
    provider = create_provider(settings)
    
    try:
        if multisig:
            await send_multisig(provider, network, receiver, multisig)
        else:
            await send_single(provider, network, receiver)
        return True
    except CardanoTxError as e:
        print(f"❌ Error: {e}")
        logger.exception("Transfer failed")
        return False
    finally:
        await provider.close()


async def main():
    """Main entry point"""
    parser = argparse.ArgumentParser()
    parser.add_argument("--multisig", type=int, default=0, help="Signers per multisig group (0 = single signer)")
    args = parser.parse_args()
    
    try:
        success = await run(args.multisig)
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
