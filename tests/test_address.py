import pytest
from pycardano import PaymentSigningKey, PaymentVerificationKey, StakeSigningKey

from cardano_tx import Network, ValidationError, Wallet
from cardano_tx.address import (
    CredentialKind,
    derive_address,
    derive_reward_address,
    get_address_bytes,
    get_address_network,
    get_key_hash,
    is_address_with_valid_prefix,
    network_from_magic,
    new_base_address,
    new_enterprise_address,
)

from conftest import RECEIVER_ADDRESS, RECEIVER_KEY_HASH


def test_key_hash_matches_pycardano(wallets):
    vkey = wallets[0].verification_key

    assert get_key_hash(vkey) == PaymentVerificationKey.from_primitive(vkey).hash().payload.hex()
    assert get_key_hash(vkey.hex()) == get_key_hash(vkey)
    assert len(bytes.fromhex(get_key_hash(vkey))) == 28


def test_key_hash_rejects_wrong_size():
    with pytest.raises(ValidationError):
        get_key_hash(b"\x01" * 31)


def test_derive_enterprise_key_address():
    assert derive_address(Network.TESTNET, RECEIVER_KEY_HASH) == RECEIVER_ADDRESS
    assert get_address_bytes(RECEIVER_ADDRESS) == bytes.fromhex("60" + RECEIVER_KEY_HASH)


def test_header_encodes_network_and_credential_kind():
    mainnet_key = derive_address(Network.MAINNET, RECEIVER_KEY_HASH, CredentialKind.KEY)
    testnet_script = derive_address(Network.TESTNET, RECEIVER_KEY_HASH, CredentialKind.SCRIPT)

    assert mainnet_key.startswith("addr1")
    assert get_address_bytes(mainnet_key)[0] == 0x61
    assert testnet_script.startswith("addr_test1")
    assert get_address_bytes(testnet_script)[0] == 0x70


def test_reward_address_prefixes():
    assert derive_reward_address(Network.TESTNET, RECEIVER_KEY_HASH).startswith("stake_test1")
    assert derive_reward_address(Network.MAINNET, RECEIVER_KEY_HASH).startswith("stake1")


def test_enterprise_and_base_addresses(wallets):
    wallet = wallets[0]
    enterprise = new_enterprise_address(Network.TESTNET, wallet.verification_key)
    base = new_base_address(Network.TESTNET, wallet.verification_key, wallets[1].verification_key)

    assert get_address_bytes(enterprise) == bytes.fromhex("60" + wallet.key_hash)
    assert get_address_bytes(base)[:29] == bytes.fromhex("00" + wallet.key_hash)
    assert len(get_address_bytes(base)) == 57


def test_address_network():
    assert get_address_network(RECEIVER_ADDRESS) is Network.TESTNET
    assert get_address_network(derive_address(Network.MAINNET, RECEIVER_KEY_HASH)) is Network.MAINNET


@pytest.mark.parametrize("address", ["", "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx", "addr_test1invalid"])
def test_invalid_addresses(address):
    with pytest.raises(ValidationError):
        get_address_bytes(address)


def test_prefix_check():
    assert is_address_with_valid_prefix(RECEIVER_ADDRESS)
    assert is_address_with_valid_prefix("stake_test1xyz")
    assert not is_address_with_valid_prefix("DdzFF")


def test_network_prefixes_and_magic():
    assert Network.MAINNET.get_prefix() == "addr"
    assert Network.TESTNET.get_prefix() == "addr_test"
    assert Network.MAINNET.get_stake_prefix() == "stake"
    assert Network.TESTNET.get_stake_prefix() == "stake_test"
    assert network_from_magic(764824073) is Network.MAINNET
    assert network_from_magic(0) is Network.MAINNET
    assert network_from_magic(2) is Network.TESTNET
    assert network_from_magic(203) is Network.TESTNET


def test_wallet_addresses():
    wallet = Wallet.generate(with_stake=True)

    assert wallet.get_address(Network.TESTNET).startswith("addr_test1")
    assert get_address_bytes(wallet.get_address(Network.TESTNET))[0] == 0x00
    assert wallet.get_stake_address(Network.MAINNET).startswith("stake1")


def test_wallet_without_stake_key(wallets):
    with pytest.raises(ValidationError):
        wallets[0].get_stake_address(Network.TESTNET)
    assert Wallet.from_signing_key(wallets[0].signing_key) == wallets[0]


def test_wallet_load(tmp_path):
    payment = PaymentSigningKey.generate()
    payment.save(str(tmp_path / "payment.skey"))
    wallet = Wallet.load(str(tmp_path))

    assert wallet.signing_key == payment.payload
    assert wallet.stake_verification_key is None

    stake = StakeSigningKey.generate()
    stake.save(str(tmp_path / "stake.skey"))
    wallet = Wallet.load(str(tmp_path))

    assert wallet.stake_signing_key == stake.payload
    assert get_address_bytes(wallet.get_address(Network.TESTNET))[0] == 0x00
