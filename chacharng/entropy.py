from __future__ import annotations

"""Entropy collaborators used to seed generators.

A collaborator is any object with ``fill(buffer)`` that writes
``len(buffer)`` unpredictable bytes into a ``bytearray`` or raises an
``OSError``. Generators only ever call ``fill``; nothing here retries.
"""

import os
from typing import Optional

from .constants import DEFAULT_ENTROPY_DEVICE
from .errors import EntropySourceError


class SystemEntropy:
    """Operating-system CSPRNG via ``os.urandom``."""

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = os.urandom(len(buffer))


class DeviceEntropy:
    """Read entropy from a character device such as ``/dev/random``.

    The file is opened on the first ``fill`` and kept open, so successive
    fills consume successive bytes. Call ``close()`` (or use ``with``) when
    done.
    """

    def __init__(self, path: str = DEFAULT_ENTROPY_DEVICE):
        self.path = path
        self._fh = None

    def fill(self, buffer: bytearray) -> None:
        want = len(buffer)
        got = 0
        try:
            if self._fh is None:
                self._fh = open(self.path, "rb", buffering=0)
            view = memoryview(buffer)
            while got < want:
                n = self._fh.readinto(view[got:])
                if not n:
                    break
                got += n
        except OSError as exc:
            msg = f"Cannot read entropy from {self.path}: {exc.strerror or exc}"
            if exc.errno is None:
                raise EntropySourceError(msg) from exc
            raise EntropySourceError(exc.errno, msg) from exc
        if got != want:
            raise EntropySourceError(f"Short read from {self.path}: wanted {want} bytes, got {got}")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "DeviceEntropy":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"DeviceEntropy({self.path!r})"


def get_system_random_bytes(size: int, entropy: Optional[object] = None) -> bytes:
    if size < 0:
        raise ValueError("size must be non-negative")
    source = entropy if entropy is not None else SystemEntropy()
    buf = bytearray(size)
    source.fill(buf)
    return bytes(buf)


__all__ = [
    "SystemEntropy",
    "DeviceEntropy",
    "get_system_random_bytes",
]
