"""Rolling computation of the minimizer of consecutive k-mers."""

from __future__ import annotations

from collections import deque
from typing import NamedTuple

from .hashing import hash_uint64


class _Mmer(NamedTuple):
    hash: int
    position: int
    value: int


class MinimizerEnumerator:
    """Computes minimizers of a stream of overlapping k-mers in amortised O(1).

    K-mers are 2-bit packed integers; the minimizer is the m-mer of smallest
    hash, the leftmost one on ties.
    """

    def __init__(self, k: int, m: int, seed: int) -> None:
        if m < 1 or m > k:
            raise ValueError(f"minimizer length must be in [1, k], got m = {m}, k = {k}")
        self._k = k
        self._m = m
        self._seed = seed
        self._position = 0
        self._mask = (1 << (2 * m)) - 1
        self._window: deque[_Mmer] = deque()

    def next(self, kmer: int, clear: bool, reverse: bool = False) -> int:
        """Feed the next k-mer and return its minimizer.

        With ``clear`` every m-mer of ``kmer`` is consumed; otherwise only the
        one that entered since the previous k-mer. With ``reverse`` the k-mer
        grows at its low end (reverse-complement strand) instead of its high end.
        """
        k, m = self._k, self._m
        if clear:
            if reverse:
                for i in range(k - m + 1):
                    self._eat((kmer >> (2 * (k - m - i))) & self._mask)
            else:
                for _ in range(k - m + 1):
                    self._eat(kmer & self._mask)
                    kmer >>= 2
        elif reverse:
            self._eat(kmer & self._mask)
        else:
            self._eat(kmer >> (2 * (k - m)))
        return self._window[0].value

    def _eat(self, mmer: int) -> None:
        h = hash_uint64(mmer, self._seed)
        window = self._window
        last = self._position + self._m - 1
        if last >= self._k:
            oldest_allowed = last - self._k
            while window and window[0].position <= oldest_allowed:
                window.popleft()
        while window and h < window[-1].hash:
            window.pop()
        window.append(_Mmer(h, self._position, mmer))
        self._position += 1