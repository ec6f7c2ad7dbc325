#!/usr/bin/env python3
"""
Tests for the 256-bit Feistel permutation
"""
import random

import pytest

from feistel import (
    FEISTEL_KEYS,
    FEISTEL_ROUNDS,
    FeistelPermutation,
    feistel_decrypt,
    feistel_encrypt,
    feistel_round,
)

N = 1 << 256

K0 = 0xaa06a0b165d070f19fefe3cb1c16dbd6ff4663b75a8620bd0e5dc4748e81de13

EDGE_VALUES = [0, 1, N - 1, 1 << 128, (1 << 128) - 1, (1 << 255)]


def test_round_constants():
    assert len(FEISTEL_KEYS) == FEISTEL_ROUNDS == 10
    assert FEISTEL_KEYS[0] == FEISTEL_KEYS[8]
    assert FEISTEL_KEYS[1] == FEISTEL_KEYS[7]


def test_round_function_reduces_once():
    # Shifts act on the unreduced value before the final mod 2^128
    right = (1 << 128) - 1
    k = 3
    expected = ((right ^ k) * (k | 1) + (right << 13) + (right >> 17)) % (1 << 128)
    assert feistel_round(right, k) == expected
    assert 0 <= feistel_round(right, FEISTEL_KEYS[0]) < (1 << 128)


def test_encrypt_zero_regression():
    assert feistel_encrypt(0) == K0
    assert feistel_decrypt(K0) == 0


def test_decrypt_zero_regression():
    assert feistel_decrypt(0) == 0x4a92f3c7222b11940b82c3025b8514bb8038090a9148d57a46275f53eea81b83


def test_encrypt_max_regression():
    assert feistel_encrypt(N - 1) == 0x7a3a81670cfddf83bb7c785cf2707b35937f7e4265f6e77115d7275d729632ba


@pytest.mark.parametrize("x", EDGE_VALUES)
def test_edge_values_are_inverse(x):
    assert feistel_decrypt(feistel_encrypt(x)) == x
    assert feistel_encrypt(feistel_decrypt(x)) == x


def test_random_round_trip():
    rng = random.Random(2024)
    for _ in range(2000):
        x = rng.getrandbits(256)
        y = feistel_encrypt(x)
        assert 0 <= y < N
        assert feistel_decrypt(y) == x
        assert feistel_encrypt(feistel_decrypt(x)) == x


def test_no_collisions_in_sample():
    rng = random.Random(7)
    inputs = set()
    while len(inputs) < 5000:
        inputs.add(rng.getrandbits(256))
    # Small consecutive indices too, where a weak mix would collide first
    inputs.update(range(5000))
    outputs = {feistel_encrypt(x) for x in inputs}
    assert len(outputs) == len(inputs)


def test_inputs_outside_block_are_reduced():
    assert feistel_encrypt(N) == feistel_encrypt(0)
    assert feistel_encrypt(N + 5) == feistel_encrypt(5)
    assert feistel_decrypt(-1) == feistel_decrypt(N - 1)


def test_custom_constants():
    perm = FeistelPermutation(keys=[1, 2, 3])
    assert perm.rounds == 3
    assert perm.keys == (1, 2, 3)
    for x in EDGE_VALUES:
        assert perm.decrypt(perm.encrypt(x)) == x
    assert perm.encrypt(12345) != feistel_encrypt(12345)


def test_empty_constants_rejected():
    with pytest.raises(ValueError):
        FeistelPermutation(keys=[])
