from __future__ import annotations

"""Known-answer tests and a cross-check against PyCryptodomex.

The vectors are the ChaCha20 examples from RFC 7539 (sections 2.1.1 and
2.3.2) and the first all-zero-key test vector from appendix A.1.
"""

import random
from dataclasses import dataclass
from typing import List, Optional

try:  # pragma: no cover - optional dependency at runtime
    from Cryptodome.Cipher import ChaCha20  # type: ignore
    _HAS_CRYPTODOME = True
except ImportError:  # pragma: no cover - fallback
    ChaCha20 = None  # type: ignore
    _HAS_CRYPTODOME = False

from .block import block_words, chacha_block, init_state, quarter_round
from .constants import BLOCK_SIZE, COUNTER_MAX, KEY_SIZE, NONCE_SIZE
from .generator import ChaChaGenerator


RFC_KEY = bytes(range(32))
RFC_NONCE = bytes([0x00, 0x00, 0x00, 0x09, 0x00, 0x00, 0x00, 0x4A, 0x00, 0x00, 0x00, 0x00])
RFC_COUNTER = 1

QUARTER_ROUND_INPUT = (0x11111111, 0x01020304, 0x9B8D6F43, 0x01234567)
QUARTER_ROUND_OUTPUT = (0xEA2A92F4, 0xCB1CF8CE, 0x4581472E, 0x5881C4BB)

RFC_INITIAL_STATE = (
    0x61707865, 0x3320646E, 0x79622D32, 0x6B206574,
    0x03020100, 0x07060504, 0x0B0A0908, 0x0F0E0D0C,
    0x13121110, 0x17161514, 0x1B1A1918, 0x1F1E1D1C,
    0x00000001, 0x09000000, 0x4A000000, 0x00000000,
)

RFC_BLOCK_WORDS = (
    0xE4E7F110, 0x15593BD1, 0x1FDD0F50, 0xC47120A3,
    0xC7F4D1C7, 0x0368C033, 0x9AAA2204, 0x4E6CD4C3,
    0x466482D2, 0x09AA9F07, 0x05D7C214, 0xA2028BD9,
    0xD19C12B5, 0xB94E16DE, 0xE883D0CB, 0x4E3C50A2,
)

ZERO_KEY_BLOCK0 = bytes.fromhex(
    "76b8e0ada0f13d90405d6ae55386bd28bdd219b8a08ded1aa836efcc8b770dc7"
    "da41597c5157488d7724e03fb8d84a376a43b8f41518a11cc387b669b2ee6586"
)


@dataclass
class SelfTestResult:
    name: str
    ok: bool
    detail: str = ""


def _check_quarter_round() -> SelfTestResult:
    state = list(QUARTER_ROUND_INPUT)
    quarter_round(state, 0, 1, 2, 3)
    ok = tuple(state) == QUARTER_ROUND_OUTPUT
    return SelfTestResult("rfc7539-2.1.1-quarter-round", ok, "" if ok else f"got {[hex(w) for w in state]}")


def _check_state_setup() -> SelfTestResult:
    state = init_state(RFC_KEY, RFC_COUNTER, RFC_NONCE)
    ok = tuple(state) == RFC_INITIAL_STATE
    return SelfTestResult("rfc7539-2.3.2-state-setup", ok, "" if ok else f"got {[hex(w) for w in state]}")


def _check_block() -> SelfTestResult:
    gen = ChaChaGenerator.from_key(RFC_KEY, RFC_NONCE)
    words = tuple(block_words(gen.next_bytes(BLOCK_SIZE)))
    ok = words == RFC_BLOCK_WORDS
    return SelfTestResult("rfc7539-2.3.2-block", ok, "" if ok else f"got {[hex(w) for w in words]}")


def _check_zero_key() -> SelfTestResult:
    block = chacha_block(bytes(KEY_SIZE), 0, bytes(NONCE_SIZE))
    ok = block == ZERO_KEY_BLOCK0
    return SelfTestResult("rfc7539-a.1-zero-key", ok, "" if ok else f"got {block.hex()}")


def run_selftest() -> List[SelfTestResult]:
    return [
        _check_quarter_round(),
        _check_state_setup(),
        _check_block(),
        _check_zero_key(),
    ]


def reference_block(key: bytes, counter: int, nonce: bytes) -> bytes:
    """20-round keystream block for ``counter`` computed by PyCryptodomex."""
    if not _HAS_CRYPTODOME:
        raise RuntimeError("PyCryptodomex is required for cross-checking")
    cipher = ChaCha20.new(key=key, nonce=nonce)
    cipher.seek(counter * BLOCK_SIZE)
    return cipher.encrypt(bytes(BLOCK_SIZE))


def cross_check(samples: int, *, seed: Optional[int] = None) -> List[SelfTestResult]:
    """Compare random 20-round blocks against the PyCryptodomex cipher."""
    if not _HAS_CRYPTODOME:
        raise RuntimeError("PyCryptodomex is required for cross-checking")
    rng = random.Random(seed)
    results = []
    for i in range(samples):
        key = bytes(rng.getrandbits(8) for _ in range(KEY_SIZE))
        nonce = bytes(rng.getrandbits(8) for _ in range(NONCE_SIZE))
        counter = rng.randint(0, COUNTER_MAX - 1)
        ours = chacha_block(key, counter, nonce)
        theirs = reference_block(key, counter, nonce)
        ok = ours == theirs
        detail = "" if ok else f"key={key.hex()} nonce={nonce.hex()} counter={counter}"
        results.append(SelfTestResult(f"cross-check-{i}", ok, detail))
    return results


__all__ = [
    "SelfTestResult",
    "run_selftest",
    "reference_block",
    "cross_check",
    "_HAS_CRYPTODOME",
]
