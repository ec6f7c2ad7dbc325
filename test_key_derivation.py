#!/usr/bin/env python3
"""
Tests for public key and address derivation
"""
import pytest

from key_derivation import (
    SECP256K1_ORDER,
    KeyOutOfRange,
    derive_address,
    derive_public_key,
    hash160,
    pubkey_to_p2wpkh,
)
from library_codec import ZeroKeyNotUsable, key_to_location, location_to_key

# Generator point G, the public key of private key 1 (BIP-173 test vectors)
G_COMPRESSED = "0279be667ef9dcbbac55a06295ce870b07029bfcdb2dce28d959f2815b16f81798"


def test_public_key_of_one():
    assert derive_public_key(1).hex() == G_COMPRESSED


def test_hash160_of_generator():
    assert hash160(bytes.fromhex(G_COMPRESSED)).hex() == "751e76e8199196d454941c45d1b3a323f1433bd6"


def test_p2wpkh_addresses():
    pubkey = bytes.fromhex(G_COMPRESSED)
    assert pubkey_to_p2wpkh(pubkey) == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
    assert pubkey_to_p2wpkh(pubkey, "testnet") == "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx"


def test_unknown_network():
    with pytest.raises(ValueError):
        pubkey_to_p2wpkh(bytes.fromhex(G_COMPRESSED), "regtest-ish")


def test_address_for_library_location():
    loc = key_to_location(1)
    assert derive_address(location_to_key(*loc)) == "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"


def test_zero_key_has_no_public_key():
    with pytest.raises(ZeroKeyNotUsable):
        derive_public_key(0)


def test_keys_at_or_above_order_rejected():
    with pytest.raises(KeyOutOfRange):
        derive_public_key(SECP256K1_ORDER)
    assert len(derive_public_key(SECP256K1_ORDER - 1)) == 33
