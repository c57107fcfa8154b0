"""Fingerprint utilities."""

from __future__ import annotations

import hashlib
from typing import Iterable

DELIMITER = "-"
DEFAULT_ALGORITHM = "sha256"
DIGEST_SIZE = 32


def hash_buffer(data: bytes) -> str:
    """Reduce a byte buffer to a short, non-cryptographic hex token.

    Runs ``acc = acc * 31 + byte`` over a signed 32-bit accumulator and renders
    the result the way a signed integer prints in hex (``-1`` is ``"-1"``).
    Collisions are expected; the token only compresses the rendered canvas.
    """
    acc = 0
    for byte in data:
        acc = ((acc << 5) - acc + byte) & 0xFFFFFFFF
    if acc & 0x80000000:
        acc -= 0x100000000
    return format(acc, "x")


def build_canonical(values: Iterable[str], delimiter: str = DELIMITER) -> str:
    # Values are not escaped: the canonical string is only ever hashed.
    return delimiter.join(values)


def digest(canonical: str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    hasher = hashlib.new(algorithm)
    if hasher.digest_size != DIGEST_SIZE:
        raise ValueError(
            f"Digest algorithm {algorithm!r} produces {hasher.digest_size * 8} bits, expected 256"
        )
    hasher.update(canonical.encode("utf-8"))
    return hasher.hexdigest()
