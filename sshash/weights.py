"""Compressed storage of per-k-mer weights as runs over a small dictionary."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field

from .ef_sequence import EliasFanoSequence


def _ceil_log2(n: int) -> int:
    return (n - 1).bit_length()


def _compact_vector_bits(size: int, width: int) -> int:
    # size, width and mask words, the array length word, then the packed data
    data_words = (size * width + 63) // 64
    return 64 * (4 + data_words)


@dataclass
class Weights:
    """Weights of k-mers stored as runs: run boundaries, run value ids and a dictionary."""

    interval_values: list[int] = field(default_factory=list)
    interval_lengths: EliasFanoSequence | None = None
    dictionary: list[int] = field(default_factory=list)
    value_width: int = 0
    dictionary_width: int = 0

    def empty(self) -> bool:
        """Return True when no weights are stored."""
        return not self.dictionary

    def weight(self, kmer_id: int) -> int:
        """Return the weight of the k-mer with identifier ``kmer_id``."""
        if self.empty() or self.interval_lengths is None:
            raise ValueError("no weights are stored")
        num_kmers = self.interval_lengths.back()
        if not 0 <= kmer_id < num_kmers:
            raise IndexError(f"kmer_id {kmer_id} out of range for {num_kmers} kmers")
        interval = self.interval_lengths.prev_leq(kmer_id)
        return self.dictionary[self.interval_values[interval]]

    def _interval_values_bits(self) -> int:
        return _compact_vector_bits(len(self.interval_values), self.value_width)

    def _interval_lengths_bits(self) -> int:
        return self.interval_lengths.num_bits() if self.interval_lengths is not None else 0

    def _dictionary_bits(self) -> int:
        return _compact_vector_bits(len(self.dictionary), self.dictionary_width)

    def num_bits(self) -> int:
        """Return the size of the encoding in bits."""
        return (
            self._interval_values_bits()
            + self._interval_lengths_bits()
            + self._dictionary_bits()
        )

    def print_space_breakdown(self, num_kmers: int) -> None:
        """Print the space taken by each component, in bits per k-mer."""
        print(f"    weight_interval_values: {self._interval_values_bits() / num_kmers} [bits/kmer]")
        print(f"    weight_interval_lengths: {self._interval_lengths_bits() / num_kmers} [bits/kmer]")
        print(f"    weight_dictionary: {self._dictionary_bits() / num_kmers} [bits/kmer]")


class WeightsBuilder:
    """Collects weights and their runs, then builds a :class:`Weights`."""

    def __init__(self) -> None:
        self._frequencies: Counter[int] = Counter()
        self._by_frequency: list[tuple[int, int]] = []  # (weight, frequency)
        self._ids: dict[int, int] = {}
        self._interval_values: list[int] = []
        self._interval_lengths: list[int] = [0]
        self._dictionary: list[int] = []
        self._dictionary_width = 0

    def eat(self, weight: int) -> None:
        """Count one occurrence of ``weight``, which must be positive."""
        if weight <= 0:
            raise ValueError(f"weights must be positive, got {weight}")
        self._frequencies[weight] += 1

    def push_weight_interval(self, value: int, length: int) -> None:
        """Append a run of ``length`` k-mers sharing weight ``value``."""
        self._interval_values.append(value)
        self._interval_lengths.append(self._interval_lengths[-1] + length)

    def num_weight_intervals(self) -> int:
        """Return the number of runs pushed so far."""
        return len(self._interval_values)

    def finalize(self, num_kmers: int) -> None:
        """Check the counts against ``num_kmers`` and assign dictionary ids by frequency."""
        print(f"num_weight_intervals {self.num_weight_intervals()}")
        if not self._frequencies:
            raise ValueError("no weights were added")

        num_distinct = len(self._frequencies)
        print(
            f"found {num_distinct} distint weights "
            f"(ceil(log2({num_distinct})) = {math.ceil(math.log2(num_distinct))})"
        )

        largest = max(self._frequencies)
        total = sum(self._frequencies.values())
        print(
            f"largest_weight+1 = {largest + 1} "
            f"(ceil(log2({largest + 1})) = {math.ceil(math.log2(largest + 1))})"
        )

        if total != num_kmers:
            print(f"ERROR: expected {num_kmers} kmers but got {total}")
            raise ValueError("file is malformed")

        self._by_frequency = sorted(
            self._frequencies.items(), key=lambda item: (-item[1], item[0])
        )

        rest = num_kmers - self._by_frequency[0][1]
        print(
            f"kmers that do not have the most frequent weight: {rest} "
            f"({rest * 100.0 / num_kmers}%)"
        )

        self._dictionary = [weight for weight, _ in self._by_frequency]
        self._dictionary_width = largest.bit_length()
        self._ids = {weight: i for i, weight in enumerate(self._dictionary)}

    def build(self) -> Weights:
        """Return the compressed weights; :meth:`finalize` must have been called."""
        if not self._dictionary:
            raise ValueError("finalize() must be called before build()")

        num_values = len(self._interval_values)
        ids = []
        prev = None
        for i, weight in enumerate(self._interval_values):
            if i and weight == prev:
                raise ValueError(
                    f"weight intervals are malformed: at {i}/{num_values} two consecutive "
                    "intervals have the same weight value"
                )
            prev = weight
            try:
                ids.append(self._ids[weight])
            except KeyError:
                raise ValueError(f"weight {weight} of interval {i} was never counted") from None

        num_distinct = len(self._dictionary)
        return Weights(
            interval_values=ids,
            interval_lengths=EliasFanoSequence(
                self._interval_lengths, self._interval_lengths[-1]
            ),
            dictionary=list(self._dictionary),
            value_width=1 if num_distinct == 1 else _ceil_log2(num_distinct),
            dictionary_width=self._dictionary_width,
        )

    def print_info(self, num_kmers: int) -> float:
        """Print the most frequent weights and return the empirical entropy per weight."""
        if not self._by_frequency:
            raise ValueError("finalize() must be called before print_info()")
        expected_weight = 0.0
        entropy = 0.0
        for rank, (weight, freq) in enumerate(self._by_frequency):
            prob = freq / num_kmers
            expected_weight += weight * prob
            entropy += prob * math.log2(1.0 / prob)
            if rank < 10:
                print(f"weight:{weight} freq:{freq} ({freq * 100.0 / num_kmers}%)")
        print(f"expected_weight {expected_weight}")
        print(f"entropy_weights {entropy} [bits/kmer]")
        return entropy