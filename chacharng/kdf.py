from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

try:  # pragma: no cover - availability depends on environment
    from argon2.low_level import Type as _ArgonType, hash_secret_raw as _argon_hash  # type: ignore
    _HAS_ARGON2 = True
except ImportError:  # pragma: no cover - graceful fallback
    _ArgonType = None  # type: ignore
    _argon_hash = None  # type: ignore
    _HAS_ARGON2 = False

from .constants import KEY_SIZE, NONCE_SIZE
from .errors import KeyMaterialError


MIN_SALT_SIZE = 8

# Argon2id defaults (same strength as archive encryption keys)
ARGON_TIME_COST = 3
ARGON_MEMORY_COST_KIB = 256 * 1024  # 256 MiB
ARGON_PARALLELISM = 4


@dataclass(frozen=True)
class KdfParams:
    time_cost: int = ARGON_TIME_COST
    memory_cost_kib: int = ARGON_MEMORY_COST_KIB
    parallelism: int = ARGON_PARALLELISM


def derive_key_nonce(passphrase: str, salt: bytes, params: Optional[KdfParams] = None) -> Tuple[bytes, bytes]:
    """Stretch ``passphrase`` with Argon2id into a ChaCha key and nonce.

    The same (passphrase, salt, params) always yields the same pair, so the
    resulting stream is reproducible. Distinct streams need distinct salts.
    """
    if not _HAS_ARGON2:
        raise RuntimeError("argon2-cffi is required for passphrase seeding")
    if len(salt) < MIN_SALT_SIZE:
        raise KeyMaterialError(f"Salt must be at least {MIN_SALT_SIZE} bytes")
    p = params or KdfParams()
    material = _argon_hash(
        passphrase.encode("utf-8"),
        bytes(salt),
        time_cost=p.time_cost,
        memory_cost=p.memory_cost_kib,
        parallelism=p.parallelism,
        hash_len=KEY_SIZE + NONCE_SIZE,
        type=_ArgonType.ID,
    )
    return material[:KEY_SIZE], material[KEY_SIZE:]


__all__ = [
    "KdfParams",
    "derive_key_nonce",
    "_HAS_ARGON2",
]
