#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Key encodings: hex, 32-byte big-endian, canonical base64, brainwallet.

Also interprets a free-form search string every way it can be read as a key.
"""
import base64
import binascii
import hashlib
import re
from collections import namedtuple

from library_codec import (
    KEYSPACE,
    InvalidEncoding,
    ZeroKeyNotUsable,
    key_to_location,
)

KEY_BYTES = 32

_HEX_KEY = re.compile(r"^(0x)?[0-9a-fA-F]{1,64}$")
_BASE64_CHARS = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")

SearchInterpretation = namedtuple(
    "SearchInterpretation",
    [
        "input",
        "brainwallet_key",
        "brainwallet_location",
        "base64_key",
        "base64_location",
        "base64_canonical",
        "hex_key",
        "hex_location",
    ],
)


def key_to_hex(key: int) -> str:
    """64 lowercase hex digits, zero-padded."""
    return format(key % KEYSPACE, "064x")


def key_to_bytes(key: int) -> bytes:
    return (key % KEYSPACE).to_bytes(KEY_BYTES, "big")


def bytes_to_key(data: bytes) -> int:
    return int.from_bytes(data, "big")


def to_32_bytes(data: bytes) -> bytes:
    """
    Fit arbitrary bytes to a key.

    Short inputs are right-aligned behind zero bytes; long inputs keep only
    their first 32 bytes.
    """
    if len(data) >= KEY_BYTES:
        return bytes(data[:KEY_BYTES])
    return bytes(KEY_BYTES - len(data)) + bytes(data)


def base64_to_bytes(text: str) -> bytes:
    """Decode standard base64. Missing padding is tolerated."""
    text = text.strip()
    if not text or not _BASE64_CHARS.match(text):
        raise InvalidEncoding("input is not base64")
    stripped = text.rstrip("=")
    try:
        return base64.b64decode(stripped + "=" * (-len(stripped) % 4), validate=True)
    except (binascii.Error, ValueError):
        raise InvalidEncoding("input is not base64")


def bytes_to_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def key_to_canonical_base64(key: int) -> str:
    return bytes_to_base64(key_to_bytes(key))


def base64_to_key(text: str) -> int:
    return bytes_to_key(to_32_bytes(base64_to_bytes(text)))


def is_hex_key(text: str) -> bool:
    return bool(_HEX_KEY.match(text))


def parse_hex_key(text: str) -> int:
    text = text.strip()
    if not is_hex_key(text):
        raise InvalidEncoding("key must be 1-64 hex digits, optionally prefixed with 0x")
    if text.startswith("0x"):
        text = text[2:]
    return int(text, 16)


def brainwallet_key(phrase: str) -> int:
    """SHA-256 of the phrase. Never use brainwallets for real funds."""
    return bytes_to_key(hashlib.sha256(phrase.encode("utf-8")).digest())


def is_usable_key(key: int) -> bool:
    return key % KEYSPACE != 0


def ensure_usable_key(key: int) -> int:
    if not is_usable_key(key):
        raise ZeroKeyNotUsable("key 0 is not a valid private key")
    return key % KEYSPACE


def interpret_input(text: str) -> SearchInterpretation:
    """Read a search string as a brainwallet phrase, a base64 key and a hex key."""
    brain_key = brainwallet_key(text)

    base64_key = base64_location = base64_canonical = None
    try:
        padded = to_32_bytes(base64_to_bytes(text))
    except InvalidEncoding:
        padded = None
    if padded is not None:
        base64_key = bytes_to_key(padded)
        base64_location = key_to_location(base64_key)
        base64_canonical = bytes_to_base64(padded)

    hex_key = hex_location = None
    if is_hex_key(text):
        hex_key = parse_hex_key(text)
        hex_location = key_to_location(hex_key)

    return SearchInterpretation(
        input=text,
        brainwallet_key=brain_key,
        brainwallet_location=key_to_location(brain_key),
        base64_key=base64_key,
        base64_location=base64_location,
        base64_canonical=base64_canonical,
        hex_key=hex_key,
        hex_location=hex_location,
    )
