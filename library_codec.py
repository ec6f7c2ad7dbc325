#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Library location <-> private key codec

A location is (hexagon, wall, shelf, volume, page). The hexagon is an
arbitrary-length base-36 number; the other four fields are bounded digits of
a mixed-radix number. The flattened index is reduced mod 2^256 and then
scrambled by the Feistel permutation, so neighbouring pages land on
unrelated keys.
"""
import random
import re
from collections import namedtuple

from feistel import feistel_decrypt, feistel_encrypt

# Library structure constants
WALLS_PER_HEX = 4
SHELVES_PER_WALL = 5
VOLUMES_PER_SHELF = 32
PAGES_PER_VOLUME = 410

KEYSPACE = 1 << 256
MAX_KEY = KEYSPACE - 1

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
_BASE36_VALUES = {ch: i for i, ch in enumerate(BASE36_DIGITS)}

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


class InvalidEncoding(ValueError):
    """Input string contains characters outside the expected alphabet."""


class ZeroKeyNotUsable(ValueError):
    """Key 0 is not a valid secp256k1 private key."""


Location = namedtuple("Location", ["hex", "wall", "shelf", "volume", "page"])

ORIGIN = Location("0", 0, 0, 0, 0)


def base36_to_int(text: str, strict: bool = False) -> int:
    """
    Expand a base-36 string (case-insensitive) into an integer.

    Characters outside [0-9a-z] are skipped, unless strict is set, in which
    case they raise InvalidEncoding. An empty string is 0.
    """
    result = 0
    for ch in text.lower():
        value = _BASE36_VALUES.get(ch)
        if value is None:
            if strict:
                raise InvalidEncoding(f"invalid base36 character: {ch!r}")
            continue
        result = result * 36 + value
    return result


def int_to_base36(n: int) -> str:
    """Render a non-negative integer in lowercase base 36; 0 is "0"."""
    if n < 0:
        raise ValueError("base36 conversion requires a non-negative integer")
    if n == 0:
        return "0"
    digits = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(BASE36_DIGITS[rem])
    return "".join(reversed(digits))


LOCATIONS_PER_HEX = WALLS_PER_HEX * SHELVES_PER_WALL * VOLUMES_PER_SHELF * PAGES_PER_VOLUME


def _hexagon_residue(text: str):
    """
    Hexagon value mod 2^256, plus whether the value itself fits below 2^256.

    Reduced after every digit; linear in the hexagon length.
    """
    residue = 0
    exact = True
    for ch in text.lower():
        value = _BASE36_VALUES.get(ch)
        if value is None:
            continue
        residue = residue * 36 + value
        if residue >= KEYSPACE:
            residue %= KEYSPACE
            exact = False
    return residue, exact


def _page_offset(wall: int, shelf: int, volume: int, page: int) -> int:
    return ((wall * SHELVES_PER_WALL + shelf) * VOLUMES_PER_SHELF + volume) * PAGES_PER_VOLUME + page


def raw_location_index(hex: str, wall: int, shelf: int, volume: int, page: int) -> int:
    """Exact mixed-radix composition before wrapping into the keyspace."""
    return base36_to_int(hex) * LOCATIONS_PER_HEX + _page_offset(wall, shelf, volume, page)


def locate_index(hex: str, wall: int, shelf: int, volume: int, page: int):
    """
    (index, overflows) for a location in a single pass over the hexagon.

    index is the composition reduced mod 2^256; overflows is True when the
    unreduced composition reaches 2^256 and the location wraps around.
    """
    residue, exact = _hexagon_residue(hex)
    offset = _page_offset(wall, shelf, volume, page)
    index = (residue * LOCATIONS_PER_HEX + offset) % KEYSPACE
    if exact:
        overflows = residue * LOCATIONS_PER_HEX + offset >= KEYSPACE
    elif offset >= -KEYSPACE * (LOCATIONS_PER_HEX - 1):
        # hexagon >= 2^256, so the composition is at least 2^256 * LOCATIONS_PER_HEX + offset
        overflows = True
    else:
        overflows = raw_location_index(hex, wall, shelf, volume, page) >= KEYSPACE
    return index, overflows


def location_to_index(hex: str, wall: int, shelf: int, volume: int, page: int) -> int:
    # Field bounds are not validated; large hexagons wrap (periodic library)
    return locate_index(hex, wall, shelf, volume, page)[0]


def location_overflows(hex: str, wall: int, shelf: int, volume: int, page: int) -> bool:
    """True when the location lies outside the canonical keyspace and wraps around."""
    return locate_index(hex, wall, shelf, volume, page)[1]


def index_to_location(index: int) -> Location:
    remainder = index % KEYSPACE
    remainder, page = divmod(remainder, PAGES_PER_VOLUME)
    remainder, volume = divmod(remainder, VOLUMES_PER_SHELF)
    remainder, shelf = divmod(remainder, SHELVES_PER_WALL)
    remainder, wall = divmod(remainder, WALLS_PER_HEX)
    return Location(int_to_base36(remainder), wall, shelf, volume, page)


def location_to_key(hex: str, wall: int, shelf: int, volume: int, page: int) -> int:
    index = location_to_index(hex, wall, shelf, volume, page)
    return feistel_encrypt(index)


def key_to_location(key: int) -> Location:
    index = feistel_decrypt(key)
    return index_to_location(index)


def random_location(rng=None) -> Location:
    """Pick a random canonical location with a 2-9 character hexagon."""
    rng = rng or random
    length = rng.randint(2, 9)
    # No leading zero, so the hexagon is already in canonical form
    hexagon = rng.choice(BASE36_DIGITS[1:]) + "".join(
        rng.choice(BASE36_DIGITS) for _ in range(length - 1))
    return Location(
        hexagon,
        rng.randrange(WALLS_PER_HEX),
        rng.randrange(SHELVES_PER_WALL),
        rng.randrange(VOLUMES_PER_SHELF),
        rng.randrange(PAGES_PER_VOLUME),
    )


def location_from_params(params) -> Location:
    """
    Build a location from query-string style parameters.

    Missing values default to the origin. Non-alphanumeric characters are
    stripped from the hexagon, the way the navigation form filters input.
    """
    hexagon = _NON_ALNUM.sub("", str(params.get("hex") or "0")).lower() or "0"
    fields = []
    for name in ("wall", "shelf", "volume", "page"):
        value = params.get(name)
        if value is None or value == "":
            fields.append(0)
            continue
        fields.append(parse_int_field(name, value))
    return Location(hexagon, *fields)


def parse_int_field(name: str, value) -> int:
    """
    Integer from a query-string or JSON value.

    Booleans and floats with a fractional part raise InvalidEncoding rather
    than being truncated.
    """
    if isinstance(value, bool):
        raise InvalidEncoding(f"{name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidEncoding(f"{name} must be an integer")
        return int(value)
    try:
        return int(value)
    except (ValueError, TypeError):
        raise InvalidEncoding(f"{name} must be an integer")


def location_to_dict(location: Location) -> dict:
    return dict(location._asdict())
