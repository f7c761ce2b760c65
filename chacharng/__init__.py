"""
chacharng — deterministic pseudorandom bytes from the ChaCha block function.

Features:

- Bit-exact ChaCha block function (RFC 7539 layout: 32-bit counter, 96-bit nonce)
  with a selectable round count (8, 12, 20, ...).
- ChaChaGenerator: byte-at-a-time keystream cursor seeded from an explicit
  key/nonce, from an injectable entropy source, or from a passphrase (Argon2id).
- The 32-bit block counter never wraps; an exhausted stream raises instead of
  repeating keystream. Key material can be wiped explicitly or via ``with``.
- Known-answer self tests plus a cross-check against PyCryptodomex.

This is a keystream generator only; it does not authenticate anything.
"""

__version__ = "0.1"

from .errors import (
    ChaChaRngError,
    ConfigurationError,
    KeyMaterialError,
    EntropySourceError,
    CounterExhaustedError,
    GeneratorClosedError,
)
from .block import chacha_block
from .entropy import SystemEntropy, DeviceEntropy, get_system_random_bytes
from .generator import PRNGenerator, ChaChaGenerator

__all__ = [
    "ChaChaRngError",
    "ConfigurationError",
    "KeyMaterialError",
    "EntropySourceError",
    "CounterExhaustedError",
    "GeneratorClosedError",
    "chacha_block",
    "SystemEntropy",
    "DeviceEntropy",
    "get_system_random_bytes",
    "PRNGenerator",
    "ChaChaGenerator",
]
