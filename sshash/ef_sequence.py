"""Elias-Fano encoding of a non-decreasing sequence of integers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class EliasFanoSequence:
    """A monotone integer sequence split into unary high parts and fixed-width low parts.

    Supports random access, iteration and successor/predecessor search.
    """

    def __init__(self, values: Iterable[int], universe: int) -> None:
        values = list(values)
        n = len(values)
        self._universe = 0
        self._low_width = 0
        self._low: list[int] = []
        self._ones: list[int] = []
        self._zeros: list[int] = []
        self._high_len = 0
        if n == 0:
            return
        if universe < 0:
            raise ValueError("universe must be non-negative")
        self._universe = universe

        quotient = universe // n
        width = quotient.bit_length() - 1 if quotient else 0
        low_mask = (1 << width) - 1
        high_len = n + (universe >> width) + 1

        last = 0
        for i, v in enumerate(values):
            if i and v < last:
                raise ValueError(
                    f"ef_sequence is not sorted: at {i}/{n} got {v} after {last}"
                )
            if v < 0 or v > universe:
                raise ValueError(f"value {v} at {i} is outside [0, {universe}]")
            self._low.append(v & low_mask)
            self._ones.append((v >> width) + i)
            last = v

        ones = set(self._ones)
        self._zeros = [p for p in range(high_len) if p not in ones]
        self._low_width = width
        self._high_len = high_len

    def __len__(self) -> int:
        return len(self._low)

    def back(self) -> int:
        """Return the universe, the largest value the sequence may hold."""
        return self._universe

    def _check_index(self, i: int) -> None:
        if not 0 <= i < len(self):
            raise IndexError(f"position {i} out of range for size {len(self)}")

    def _value(self, i: int, high_pos: int) -> int:
        return ((high_pos - i) << self._low_width) | self._low[i]

    def access(self, i: int) -> int:
        """Return the value at position ``i``."""
        self._check_index(i)
        return self._value(i, self._ones[i])

    def iter_from(self, pos: int) -> Iterator[int]:
        """Yield the values from position ``pos`` to the end."""
        self._check_index(pos)
        for i in range(pos, len(self)):
            yield self._value(i, self._ones[i])

    def _bucket_begin(self, x: int) -> int:
        h_x = x >> self._low_width
        if h_x == 0:
            return 0
        return self._zeros[h_x - 1] - h_x + 1

    def _require_nonempty(self) -> None:
        if not self._low:
            raise ValueError("the sequence is empty")

    def next_geq(self, x: int) -> tuple[int, int]:
        """Return (position, value) of the rightmost smallest element >= x.

        Returns (len, back()) when x exceeds back().
        """
        self._require_nonempty()
        back = self.back()
        if x >= back:
            return len(self) - (x == back), back

        begin = self._bucket_begin(x)
        it = self.iter_from(begin)
        pos = begin
        for val in it:
            if val >= x:
                break
            pos += 1
        else:
            return len(self), back

        if val == x:
            for following in it:
                if following != x:
                    break
                pos += 1
        return pos, val

    def locate(self, x: int) -> tuple[int, int, int]:
        """Return (pos_next, prev, next) with prev < x <= next.

        Requires distinct values, a first value of 0 and x <= back().
        """
        self._require_nonempty()
        if x == 0:
            return 0, 0, 0
        if x > self.back():
            raise ValueError(f"{x} is larger than the last value {self.back()}")

        begin = self._bucket_begin(x)
        it = self.iter_from(begin)
        pos_next = begin
        nxt = next(it)
        prev = nxt
        while nxt < x:
            pos_next += 1
            prev = nxt
            try:
                nxt = next(it)
            except StopIteration:
                raise ValueError(f"no element >= {x} in the sequence") from None
        if pos_next == 0:
            raise ValueError("the first value of the sequence must be 0")
        return pos_next, prev if pos_next != begin else self.access(pos_next - 1), nxt

    def prev_leq(self, x: int) -> int:
        """Return the position of the rightmost largest element <= x (len if x > back())."""
        pos, val = self.next_geq(x)
        return pos - (val > x)

    def num_bits(self) -> int:
        """Return the size of the encoding in bits, word-aligned."""

        def words(bits: int) -> int:
            return (bits + 63) // 64

        n = len(self)
        high_words = words(self._high_len)
        low_words = words(n * self._low_width)
        # select samples over ones and zeros, one 64-bit word per 64 positions
        select_words = words(n) + words(len(self._zeros))
        return 64 * (1 + high_words + low_words + select_words)