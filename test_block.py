from __future__ import annotations

import unittest

from chacharng.block import (
    block_words,
    chacha_block,
    double_round,
    finalize,
    init_state,
    permute,
    quarter_round,
    validate_rounds,
)
from chacharng.errors import ConfigurationError, KeyMaterialError
from chacharng.selftest import (
    RFC_BLOCK_WORDS,
    RFC_COUNTER,
    RFC_INITIAL_STATE,
    RFC_KEY,
    RFC_NONCE,
    ZERO_KEY_BLOCK0,
    _HAS_CRYPTODOME,
    cross_check,
    reference_block,
    run_selftest,
)


def _popcount(data: bytes) -> int:
    return sum(bin(b).count("1") for b in data)


def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))


class QuarterRoundTests(unittest.TestCase):
    def test_rfc7539_2_1_1(self):
        state = [0x11111111, 0x01020304, 0x9B8D6F43, 0x01234567]
        quarter_round(state, 0, 1, 2, 3)
        self.assertEqual(state, [0xEA2A92F4, 0xCB1CF8CE, 0x4581472E, 0x5881C4BB])

    def test_rfc7539_2_1_2_on_state_positions(self):
        state = [
            0x879531E0, 0xC5ECF37D, 0x516461B1, 0xC9A62F8A,
            0x44C20EF3, 0x3390AF7F, 0xD9FC690B, 0x2A5F714C,
            0x53372767, 0xB00A5631, 0x974C541A, 0x359E9963,
            0x5C971061, 0x3D631689, 0x2098D9D6, 0x91DBD320,
        ]
        quarter_round(state, 2, 7, 8, 13)
        expected = [
            0x879531E0, 0xC5ECF37D, 0xBDB886DC, 0xC9A62F8A,
            0x44C20EF3, 0x3390AF7F, 0xD9FC690B, 0xCFACAFD2,
            0xE46BEA80, 0xB00A5631, 0x974C541A, 0x359E9963,
            0x5C971061, 0xCCC07C79, 0x2098D9D6, 0x91DBD320,
        ]
        self.assertEqual(state, expected)

    def test_additions_wrap(self):
        state = [0xFFFFFFFF, 0xFFFFFFFF, 0xFFFFFFFF, 0xFFFFFFFF]
        quarter_round(state, 0, 1, 2, 3)
        # the first three additions overflow 32 bits
        self.assertEqual(state, [0xF0000FFD, 0x88790878, 0x0110FDEF, 0x010FFDF0])


class StateSetupTests(unittest.TestCase):
    def test_rfc7539_2_3_2_setup(self):
        self.assertEqual(tuple(init_state(RFC_KEY, RFC_COUNTER, RFC_NONCE)), RFC_INITIAL_STATE)

    def test_counter_stored_directly(self):
        state = init_state(RFC_KEY, 0xDEADBEEF, RFC_NONCE)
        self.assertEqual(state[12], 0xDEADBEEF)

    def test_bad_lengths(self):
        with self.assertRaises(KeyMaterialError):
            init_state(b"\x00" * 31, 1, RFC_NONCE)
        with self.assertRaises(KeyMaterialError):
            init_state(RFC_KEY, 1, b"\x00" * 8)
        # still a ValueError for callers that do not know the package errors
        with self.assertRaises(ValueError):
            init_state(RFC_KEY, 1, b"")

    def test_counter_bounds(self):
        with self.assertRaises(ConfigurationError):
            init_state(RFC_KEY, -1, RFC_NONCE)
        with self.assertRaises(ConfigurationError):
            init_state(RFC_KEY, 1 << 32, RFC_NONCE)


class BlockTests(unittest.TestCase):
    def test_rfc7539_2_3_2_block(self):
        block = chacha_block(RFC_KEY, RFC_COUNTER, RFC_NONCE)
        self.assertEqual(len(block), 64)
        self.assertEqual(tuple(block_words(block)), RFC_BLOCK_WORDS)
        self.assertEqual(block[:4], bytes([0x10, 0xF1, 0xE7, 0xE4]))

    def test_zero_key_block(self):
        self.assertEqual(chacha_block(bytes(32), 0, bytes(12)), ZERO_KEY_BLOCK0)

    def test_pipeline_stages_compose(self):
        initial = init_state(RFC_KEY, RFC_COUNTER, RFC_NONCE)
        working = permute(initial, 20)
        # permute works on a copy
        self.assertEqual(tuple(initial), RFC_INITIAL_STATE)
        self.assertEqual(finalize(working, initial), chacha_block(RFC_KEY, RFC_COUNTER, RFC_NONCE))

    def test_permute_is_repeated_double_round(self):
        initial = init_state(RFC_KEY, RFC_COUNTER, RFC_NONCE)
        manual = list(initial)
        for _ in range(4):
            double_round(manual)
        self.assertEqual(permute(initial, 8), manual)

    def test_reduced_rounds_differ(self):
        b8 = chacha_block(RFC_KEY, 1, RFC_NONCE, rounds=8)
        b12 = chacha_block(RFC_KEY, 1, RFC_NONCE, rounds=12)
        b20 = chacha_block(RFC_KEY, 1, RFC_NONCE, rounds=20)
        self.assertEqual(len({b8, b12, b20}), 3)
        self.assertEqual(b8, chacha_block(RFC_KEY, 1, RFC_NONCE, rounds=8))

    def test_adjacent_counters_differ(self):
        for n in (0, 1, 7, 0xFFFFFFFE):
            self.assertNotEqual(
                chacha_block(RFC_KEY, n, RFC_NONCE),
                chacha_block(RFC_KEY, n + 1, RFC_NONCE),
            )

    def test_key_bit_avalanche(self):
        base = chacha_block(RFC_KEY, RFC_COUNTER, RFC_NONCE)
        for bit in range(256):
            key = bytearray(RFC_KEY)
            key[bit // 8] ^= 1 << (bit % 8)
            flipped = chacha_block(bytes(key), RFC_COUNTER, RFC_NONCE)
            distance = _popcount(_xor(base, flipped))
            # 512 output bits, expect about half to flip
            self.assertGreater(distance, 160, f"key bit {bit}")
            self.assertLess(distance, 352, f"key bit {bit}")

    def test_validate_rounds(self):
        for ok in (2, 8, 12, 20):
            self.assertEqual(validate_rounds(ok), ok)
        for bad in (0, -2, 1, 7, 21, 20.0, "20", True, None):
            with self.assertRaises(ConfigurationError):
                validate_rounds(bad)


class SelfTestTests(unittest.TestCase):
    def test_known_answers_pass(self):
        results = run_selftest()
        self.assertEqual(len(results), 4)
        for r in results:
            self.assertTrue(r.ok, f"{r.name}: {r.detail}")

    @unittest.skipUnless(_HAS_CRYPTODOME, "PyCryptodomex required")
    def test_matches_pycryptodomex(self):
        for r in cross_check(16, seed=1234):
            self.assertTrue(r.ok, r.detail)

    @unittest.skipUnless(_HAS_CRYPTODOME, "PyCryptodomex required")
    def test_reference_block_rfc_vector(self):
        self.assertEqual(
            reference_block(RFC_KEY, RFC_COUNTER, RFC_NONCE),
            chacha_block(RFC_KEY, RFC_COUNTER, RFC_NONCE),
        )


if __name__ == "__main__":
    unittest.main()
