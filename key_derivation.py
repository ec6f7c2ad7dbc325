#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Public key and P2WPKH address for a library key.

secp256k1 comes from coincurve, bech32 segwit encoding from the bech32
package. Key 0 and keys at or above the curve order have no public key.
"""
import hashlib

from bech32 import encode as segwit_encode
from coincurve import PrivateKey
from Crypto.Hash import RIPEMD160

from key_formats import ensure_usable_key, key_to_bytes

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

NETWORK_PREFIXES = {
    "mainnet": "bc",
    "testnet": "tb",
}


class KeyOutOfRange(ValueError):
    """Key is not below the secp256k1 group order."""


def derive_public_key(key: int) -> bytes:
    """33-byte compressed SEC1 public key."""
    key = ensure_usable_key(key)
    if key >= SECP256K1_ORDER:
        raise KeyOutOfRange("key is not below the secp256k1 curve order")
    return PrivateKey(key_to_bytes(key)).public_key.format(compressed=True)


def hash160(data: bytes) -> bytes:
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def network_prefix(network: str) -> str:
    try:
        return NETWORK_PREFIXES[network]
    except KeyError:
        raise ValueError(f"unknown network: {network!r}")


def pubkey_to_p2wpkh(pubkey: bytes, network: str = "mainnet") -> str:
    """Segwit v0 address of HASH160(pubkey)."""
    address = segwit_encode(network_prefix(network), 0, hash160(pubkey))
    if address is None:
        raise ValueError("failed to encode segwit address")
    return address


def derive_address(key: int, network: str = "mainnet") -> str:
    return pubkey_to_p2wpkh(derive_public_key(key), network)
