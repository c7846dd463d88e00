"""
Configuration settings - edit values directly here
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings - configure values below"""
    
    # ===================
    # Provider selection: "ogmios", "blockfrost" or "cli"
    # ===================
    provider_name: str = "ogmios"
    
    # ===================
    # Ogmios Configuration
    # ===================
    ogmios_url: str = "ws://localhost:1337"
    ogmios_username: Optional[str] = None
    ogmios_password: Optional[str] = None
    
    # ===================
    # Blockfrost
    # ===================
    blockfrost_url: str = "https://cardano-preview.blockfrost.io/api/v0"
    blockfrost_project_id: Optional[str] = None
    
    # ===================
    # cardano-cli (local node)
    # ===================
    cardano_cli_binary: str = "cardano-cli"
    socket_path: str = "/ipc/node.socket"
    
    # ===================
    # Network
    # ===================
    testnet_magic: int = 2  # preview; 0 selects mainnet
    
    # ===================
    # Transactions (lovelace / slots)
    # ===================
    potential_fee: int = 300_000
    min_utxo_value: int = 1_000_000
    ttl_slot_increment: int = 200
    
    # ===================
    # Retries
    # ===================
    retry_count: int = 10
    retry_wait_time: float = 5.0  # seconds
    
    # ===================
    # Wallets
    # ===================
    wallet_directory: str = "~/cardano/wallet"
    receiver_address: Optional[str] = None


# Global settings instance - import this
settings = Settings()
