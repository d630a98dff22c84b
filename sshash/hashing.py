"""64-bit MurmurHash2 and the k-mer hashers built on top of it."""

from __future__ import annotations

import struct

MASK64 = (1 << 64) - 1

_M = 0xC6A4A7935BD1E995
_R = 47
_SUPPORTED_KMER_BITS = (64, 128)


def murmurhash2_64(data: bytes, seed: int) -> int:
    """Return the 64-bit MurmurHash2 (variant 64A) of ``data``."""
    seed &= MASK64
    length = len(data)
    h = (seed ^ (length * _M)) & MASK64
    body_len = length - length % 8
    for (k,) in struct.iter_unpack("<Q", data[:body_len]):
        k = (k * _M) & MASK64
        k ^= k >> _R
        k = (k * _M) & MASK64
        h ^= k
        h = (h * _M) & MASK64
    tail = data[body_len:]
    if tail:
        h ^= int.from_bytes(tail, "little")
        h = (h * _M) & MASK64
    h ^= h >> _R
    h = (h * _M) & MASK64
    h ^= h >> _R
    return h


def hash_uint64(x: int, seed: int) -> int:
    """Hash a 64-bit unsigned integer, as used for m-mers and minimizers."""
    return murmurhash2_64((x & MASK64).to_bytes(8, "little"), seed)


def _check_kmer_bits(kmer_bits: int) -> None:
    if kmer_bits not in _SUPPORTED_KMER_BITS:
        raise ValueError(f"kmer_bits must be 64 or 128, got {kmer_bits}")


def _hash_wide(kmer: int, seed: int) -> int:
    low = kmer & MASK64
    high = (kmer >> 64) & MASK64
    return hash_uint64(low, seed) ^ hash_uint64(high, ~seed & MASK64)


def hash_kmer_64(kmer: int, seed: int, kmer_bits: int = 64) -> int:
    """Return a 64-bit hash of a k-mer stored in a ``kmer_bits``-wide integer."""
    _check_kmer_bits(kmer_bits)
    seed &= MASK64
    if kmer_bits == 64:
        return hash_uint64(kmer, seed)
    return _hash_wide(kmer, seed)


def hash_kmer_128(kmer: int, seed: int, kmer_bits: int = 64) -> tuple[int, int]:
    """Return a 128-bit hash of a k-mer as a pair of 64-bit halves."""
    _check_kmer_bits(kmer_bits)
    seed &= MASK64
    if kmer_bits == 64:
        return hash_uint64(kmer, seed), hash_uint64(kmer, ~seed & MASK64)
    return _hash_wide(kmer, seed), _hash_wide(kmer, (seed + 1) & MASK64)