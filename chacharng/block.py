from __future__ import annotations

"""Pure-Python ChaCha block function (RFC 7539 layout).

The block is computed in three stages that callers can also drive separately:
``init_state`` builds the 16-word input from constants, key, counter and
nonce; ``permute`` runs the double rounds on a copy; ``finalize`` adds the
input back and serializes the words as 64 little-endian bytes. Byte/word
conversions always go through ``int.from_bytes``/``int.to_bytes`` so output
does not depend on the host byte order.
"""

from typing import List, Sequence

from .constants import (
    BLOCK_SIZE,
    CHACHA_CONST,
    COUNTER_MAX,
    DEFAULT_ROUNDS,
    KEY_SIZE,
    NONCE_SIZE,
    STATE_WORDS,
    WORD_MASK,
)
from .errors import ConfigurationError, KeyMaterialError


_COLUMNS = (
    (0, 4, 8, 12),
    (1, 5, 9, 13),
    (2, 6, 10, 14),
    (3, 7, 11, 15),
)
_DIAGONALS = (
    (0, 5, 10, 15),
    (1, 6, 11, 12),
    (2, 7, 8, 13),
    (3, 4, 9, 14),
)


def _rotl32(v: int, n: int) -> int:
    return ((v << n) & WORD_MASK) | (v >> (32 - n))


def quarter_round(state: List[int], a: int, b: int, c: int, d: int) -> None:
    """Apply the add-rotate-xor quarter round to positions a, b, c, d in place."""
    state[a] = (state[a] + state[b]) & WORD_MASK
    state[d] ^= state[a]
    state[d] = _rotl32(state[d], 16)

    state[c] = (state[c] + state[d]) & WORD_MASK
    state[b] ^= state[c]
    state[b] = _rotl32(state[b], 12)

    state[a] = (state[a] + state[b]) & WORD_MASK
    state[d] ^= state[a]
    state[d] = _rotl32(state[d], 8)

    state[c] = (state[c] + state[d]) & WORD_MASK
    state[b] ^= state[c]
    state[b] = _rotl32(state[b], 7)


def double_round(state: List[int]) -> None:
    for a, b, c, d in _COLUMNS:
        quarter_round(state, a, b, c, d)
    for a, b, c, d in _DIAGONALS:
        quarter_round(state, a, b, c, d)


def validate_rounds(rounds: int) -> int:
    # bool is an int subclass but never a sensible round count
    if isinstance(rounds, bool) or not isinstance(rounds, int):
        raise ConfigurationError(f"Round count must be an integer, got {rounds!r}")
    if rounds < 2 or rounds % 2:
        raise ConfigurationError(f"Round count must be a positive even integer, got {rounds}")
    return rounds


def _check_counter(counter: int) -> None:
    if isinstance(counter, bool) or not isinstance(counter, int):
        raise ConfigurationError(f"Block counter must be an integer, got {counter!r}")
    if not 0 <= counter <= COUNTER_MAX:
        raise ConfigurationError(f"Block counter {counter} does not fit in 32 bits")


def _check_key_nonce(key: bytes, nonce: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise KeyMaterialError(f"ChaCha expects {KEY_SIZE}-byte key, got {len(key)}")
    if len(nonce) != NONCE_SIZE:
        raise KeyMaterialError(f"ChaCha expects {NONCE_SIZE}-byte nonce, got {len(nonce)}")


def init_state(key: bytes, counter: int, nonce: bytes) -> List[int]:
    """Build the 16-word initial state: constants, key, counter, nonce."""
    _check_key_nonce(key, nonce)
    _check_counter(counter)

    state = list(CHACHA_CONST)
    state.extend(int.from_bytes(key[i : i + 4], "little") for i in range(0, KEY_SIZE, 4))
    state.append(counter)
    state.extend(int.from_bytes(nonce[i : i + 4], "little") for i in range(0, NONCE_SIZE, 4))
    return state


def permute(state: Sequence[int], rounds: int = DEFAULT_ROUNDS) -> List[int]:
    """Return a copy of ``state`` after ``rounds // 2`` double rounds."""
    validate_rounds(rounds)
    if len(state) != STATE_WORDS:
        raise ValueError(f"ChaCha state must have {STATE_WORDS} words")
    working = list(state)
    for _ in range(rounds // 2):
        double_round(working)
    return working


def finalize(working: Sequence[int], initial: Sequence[int]) -> bytes:
    """Add the initial state back word-wise and serialize little-endian."""
    if len(working) != STATE_WORDS or len(initial) != STATE_WORDS:
        raise ValueError(f"ChaCha state must have {STATE_WORDS} words")
    out = bytearray(BLOCK_SIZE)
    for i in range(STATE_WORDS):
        word = (working[i] + initial[i]) & WORD_MASK
        out[4 * i : 4 * i + 4] = word.to_bytes(4, "little")
    return bytes(out)


def chacha_block(key: bytes, counter: int, nonce: bytes, rounds: int = DEFAULT_ROUNDS) -> bytes:
    """Compute the 64-byte keystream block for ``counter``."""
    initial = init_state(key, counter, nonce)
    return finalize(permute(initial, rounds), initial)


def block_words(block: bytes) -> List[int]:
    """Split a 64-byte block into its 16 little-endian words."""
    if len(block) != BLOCK_SIZE:
        raise ValueError(f"ChaCha block must be {BLOCK_SIZE} bytes")
    return [int.from_bytes(block[i : i + 4], "little") for i in range(0, BLOCK_SIZE, 4)]


__all__ = [
    "quarter_round",
    "double_round",
    "validate_rounds",
    "init_state",
    "permute",
    "finalize",
    "chacha_block",
    "block_words",
]
