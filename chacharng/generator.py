from __future__ import annotations

from typing import Optional

from .block import chacha_block, validate_rounds, _check_counter, _check_key_nonce
from .constants import (
    BLOCK_SIZE,
    COUNTER_MAX,
    DEFAULT_ROUNDS,
    INITIAL_COUNTER,
    KEY_SIZE,
    NONCE_SIZE,
)
from .entropy import SystemEntropy
from .errors import CounterExhaustedError, GeneratorClosedError
from .kdf import KdfParams, derive_key_nonce


class PRNGenerator:
    """Byte-at-a-time generator; subclasses provide ``next_byte``."""

    def next_byte(self) -> int:
        raise NotImplementedError

    def fill(self, buffer: bytearray) -> None:
        for i in range(len(buffer)):
            buffer[i] = self.next_byte()

    def next_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("n must be non-negative")
        buf = bytearray(n)
        self.fill(buf)
        return bytes(buf)

    def next_uint(self, modulus: int) -> int:
        if modulus <= 0:
            return 0
        # 64-bit rejection sampling for all moduli > 0
        limit = (1 << 64) - ((1 << 64) % modulus)
        while True:
            v = 0
            for _ in range(8):
                v = (v << 8) | self.next_byte()
            if v < limit:
                return v % modulus


class ChaChaGenerator(PRNGenerator):
    """Deterministic keystream generator over the ChaCha block function.

    Output is the concatenation of the blocks for ``counter``,
    ``counter + 1``, ... served in ascending byte order. ``counter`` always
    names the next block to compute. The stream ends after block
    ``0xFFFFFFFF`` (``counter`` then reads ``2**32``); asking for more raises
    ``CounterExhaustedError`` rather than wrapping around and repeating
    keystream.

    Not thread-safe: guard shared instances with a lock.
    """

    def __init__(
        self,
        key: bytes,
        nonce: bytes,
        *,
        counter: int = INITIAL_COUNTER,
        rounds: int = DEFAULT_ROUNDS,
    ):
        _check_key_nonce(key, nonce)
        _check_counter(counter)
        self.rounds = validate_rounds(rounds)
        self._key = bytearray(key)
        self._nonce = bytearray(nonce)
        self.initial_counter = counter
        self.counter = counter
        self._buffer = bytearray(BLOCK_SIZE)
        self._pos = BLOCK_SIZE
        self._closed = False

    @classmethod
    def from_key(
        cls,
        key: bytes,
        nonce: bytes,
        *,
        counter: int = INITIAL_COUNTER,
        rounds: int = DEFAULT_ROUNDS,
    ) -> "ChaChaGenerator":
        return cls(key, nonce, counter=counter, rounds=rounds)

    @classmethod
    def from_system(cls, entropy=None, *, rounds: int = DEFAULT_ROUNDS) -> "ChaChaGenerator":
        """Seed key and nonce from ``entropy`` (``SystemEntropy`` by default).

        Whatever the collaborator raises reaches the caller untouched.
        """
        validate_rounds(rounds)
        source = entropy if entropy is not None else SystemEntropy()
        key = bytearray(KEY_SIZE)
        nonce = bytearray(NONCE_SIZE)
        try:
            source.fill(key)
            source.fill(nonce)
            return cls(bytes(key), bytes(nonce), rounds=rounds)
        finally:
            key[:] = bytes(KEY_SIZE)
            nonce[:] = bytes(NONCE_SIZE)

    @classmethod
    def from_passphrase(
        cls,
        passphrase: str,
        salt: bytes,
        *,
        params: Optional[KdfParams] = None,
        counter: int = INITIAL_COUNTER,
        rounds: int = DEFAULT_ROUNDS,
    ) -> "ChaChaGenerator":
        key, nonce = derive_key_nonce(passphrase, salt, params)
        return cls(key, nonce, counter=counter, rounds=rounds)

    @property
    def nonce(self) -> bytes:
        return bytes(self._nonce)

    @property
    def blocks_generated(self) -> int:
        return self.counter - self.initial_counter

    @property
    def closed(self) -> bool:
        return self._closed

    def _refill(self):
        if self.counter > COUNTER_MAX:
            raise CounterExhaustedError(
                f"Block counter exhausted after block {COUNTER_MAX:#x}; use a new nonce"
            )
        self._buffer[:] = chacha_block(bytes(self._key), self.counter, bytes(self._nonce), self.rounds)
        self.counter += 1
        self._pos = 0

    def next_byte(self) -> int:
        if self._closed:
            raise GeneratorClosedError("Generator key material has been wiped")
        if self._pos >= BLOCK_SIZE:
            self._refill()
        b = self._buffer[self._pos]
        self._pos += 1
        return b

    def wipe(self) -> None:
        """Overwrite key, nonce and buffered keystream with zeros."""
        for buf in (self._key, self._nonce, self._buffer):
            for i in range(len(buf)):
                buf[i] = 0
        self._pos = BLOCK_SIZE
        self._closed = True

    close = wipe

    def __enter__(self) -> "ChaChaGenerator":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()
        return False

    def __del__(self):
        try:
            self.wipe()
        except AttributeError:
            # __init__ raised before the buffers existed
            pass

    def __repr__(self) -> str:
        state = "closed" if self._closed else f"counter={self.counter}"
        return f"<ChaChaGenerator rounds={self.rounds} {state}>"


__all__ = [
    "PRNGenerator",
    "ChaChaGenerator",
]
