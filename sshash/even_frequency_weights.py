"""Weights of even frequency, served in order of increasing frequency."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass
class _WeightFrequency:
    w: int
    f: int


@dataclass
class _Range:
    b: int
    e: int  # one past the end


class EvenFrequencyWeights:
    """Priority structure over weights with even frequency.

    The weights are kept sorted by frequency in one array; each frequency owns a
    contiguous range of it, so decreasing a frequency by two is O(1).
    """

    def __init__(self, freq: Mapping[int, int]) -> None:
        self._table = sorted(
            (_WeightFrequency(w, f) for w, f in freq.items() if f % 2 == 0),
            key=lambda wf: wf.f,
        )
        self._ranges: dict[int, _Range] = {0: _Range(0, 0)}
        self._positions: dict[int, int] = {}
        if not self._table:
            return

        current = self._table[0].f
        rng = _Range(0, 0)
        for i, wf in enumerate(self._table):
            self._positions[wf.w] = i
            if wf.f == current:
                rng.e += 1
            else:
                self._ranges[current] = rng
                rng = _Range(i, i + 1)
            current = wf.f
        self._ranges[current] = rng

    def has_next(self) -> bool:
        """Return True while some weight still has a positive frequency."""
        return self._ranges[0].e < len(self._table)

    def min(self) -> int:
        """Return a weight of lowest positive frequency and decrease its frequency by two."""
        if not self.has_next():
            raise IndexError("no weight with positive even frequency is left")
        w = self._table[self._ranges[0].e].w
        self.decrease_freq(w)
        return w

    def decrease_freq(self, w: int) -> None:
        """Decrease the frequency of ``w`` by two; weights not tracked are ignored."""
        table = self._table
        i = self._ranges[0].e
        if i >= len(table) or table[i].w != w:
            j = self._positions.get(w)
            if j is None:
                return
            f = table[j].f
            if f not in self._ranges or f < 2:
                raise ValueError(f"weight {w} has frequency {f} and cannot be decreased")
            i = self._ranges[f].b
            v = table[i].w
            table[i], table[j] = table[j], table[i]
            self._positions[w] = i
            self._positions[v] = j

        entry = table[i]
        f = entry.f
        if f < 2:
            raise ValueError(f"weight {w} has frequency {f} and cannot be decreased")
        lower = self._ranges.get(f - 2)
        if lower is not None:
            lower.e += 1
        else:
            self._ranges[f - 2] = _Range(i, i + 1)
        rng = self._ranges[f]
        rng.b += 1
        if rng.b == rng.e:
            del self._ranges[f]
        entry.f = f - 2