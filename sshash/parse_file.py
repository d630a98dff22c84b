"""Reading weighted sequence files and writing them back in a permuted order.

A weighted file holds two lines per sequence: a header of the form
``>[id] LN:i:[seq_len] ab:Z:[w1] [w2] ...`` carrying one weight per k-mer,
followed by the DNA sequence itself.
"""

from __future__ import annotations

import gzip
import heapq
import os
import re
import time
from collections.abc import Iterable, Iterator, Sequence
from contextlib import ExitStack
from dataclasses import dataclass, field
from itertools import groupby
from typing import TextIO

from .node import Node

_BUFFER_LIMIT = 1 << 30  # bytes of sequences held in memory before a sorted run is flushed
_LENGTH_TAG = "LN:i:"
_WEIGHTS_TAG = "ab:Z:"
_SEQUENCE_ID = re.compile(r">(\d+)")
_COMPLEMENT = str.maketrans("ACGTacgt", "TGCAtgca")


class ParseError(ValueError):
    """Raised when a header or a line of a weighted file is malformed."""


@dataclass
class PermuteData:
    """What is read from a weighted file: one node per sequence plus counts."""

    num_runs_weights: int = 0
    num_sequences: int = 0
    nodes: list[Node] = field(default_factory=list)
    num_bases: int = 0
    num_kmers: int = 0
    num_distinct_weights: int = 0
    sum_of_weights: int = 0


def _chomp(line: str) -> str:
    return line.rstrip("\r\n")


def _open_text(filename: str) -> TextIO:
    if filename.endswith(".gz"):
        return gzip.open(filename, "rt", encoding="utf-8")
    return open(filename, encoding="utf-8")


def _parse_uint(text: str, what: str) -> int:
    if not (text.isascii() and text.isdigit()):
        raise ParseError(f"expected an unsigned integer for {what}, got {text!r}")
    return int(text)


def _expect(header: str, pos: int, tag: str) -> None:
    if header[pos : pos + len(tag)] != tag:
        raise ParseError(f"expected {tag!r} at position {pos} of header {header!r}")


def _split_header(header: str, validate: bool) -> tuple[int, int]:
    """Return (position where the weights start, sequence length)."""
    if validate and not header.startswith(">"):
        raise ParseError(f"header must start with '>': {header!r}")
    i = header.find(" ")
    if i < 0:
        raise ParseError(f"missing fields in header {header!r}")
    i += 1
    if validate:
        _expect(header, i, _LENGTH_TAG)
    i += len(_LENGTH_TAG)
    j = header.find(" ", i)
    if j < 0:
        raise ParseError(f"missing weights in header {header!r}")
    seq_len = _parse_uint(header[i:j], "the sequence length")
    start = j + 1
    if validate:
        _expect(header, start, _WEIGHTS_TAG)
    return start + len(_WEIGHTS_TAG), seq_len


def _read_weights(header: str, start: int, seq_len: int, k: int) -> list[int]:
    if seq_len < k:
        raise ParseError(f"sequence length {seq_len} is smaller than k = {k}")
    count = seq_len - k + 1
    tokens = header[start:].split()
    if len(tokens) < count:
        raise ParseError(f"expected {count} weights but found {len(tokens)} in header {header!r}")
    return [_parse_uint(token, "a weight") for token in tokens[:count]]


def parse_weighted_stream(stream: Iterable[str], k: int) -> PermuteData:
    """Read a weighted file from ``stream`` and return one node per sequence."""
    if k < 1:
        raise ValueError(f"k must be > 0, got {k}")
    data = PermuteData()
    distinct_weights: set[int] = set()
    lines = (_chomp(line) for line in stream)

    for header in lines:
        dna = next(lines, "")
        if not header:
            if dna:
                raise ParseError("a DNA sequence is not preceded by a header")
            continue

        start, seq_len = _split_header(header, validate=True)
        weights = _read_weights(header, start, seq_len, k)
        data.sum_of_weights += sum(weights)
        distinct_weights.update(weights)
        data.num_runs_weights += sum(1 for _ in groupby(weights))
        data.nodes.append(Node(id=data.num_sequences, front=weights[0], back=weights[-1]))

        if len(dna) != seq_len:
            print(
                f"ERROR: expected a sequence of length {seq_len} "
                f"but got one of length {len(dna)}"
            )
            raise ValueError("file is malformed")

        data.num_sequences += 1
        data.num_bases += len(dna)
        data.num_kmers += len(dna) - k + 1
        if data.num_sequences % 100000 == 0:
            print(
                f"read {data.num_sequences} sequences, {data.num_bases} bases, "
                f"{data.num_kmers} kmers"
            )

    data.num_distinct_weights = len(distinct_weights)
    print(
        f"read {data.num_sequences} sequences, {data.num_bases} bases, {data.num_kmers} kmers"
    )
    print(f"{data.num_distinct_weights} distinct weights")
    print(f"sum_of_weights {data.sum_of_weights}")
    return data


def parse_weighted_file(filename: str, k: int) -> PermuteData:
    """Read a weighted file, gzip-compressed when its name ends in ``.gz``."""
    with _open_text(filename) as stream:
        print(f"reading file '{filename}'...")
        return parse_weighted_stream(stream, k)


def reverse_header(header: str, k: int) -> str:
    """Return ``header`` with its weights in reverse order, each followed by a space."""
    start, seq_len = _split_header(header, validate=False)
    weights = _read_weights(header, start, seq_len, k)
    return header[:start] + "".join(f"{w} " for w in reversed(weights))


def reverse_complement(dna: str) -> str:
    """Return the reverse complement of a DNA string, keeping the case of each base."""
    return dna.translate(_COMPLEMENT)[::-1]


def _sequence_id(header: str) -> int:
    match = _SEQUENCE_ID.match(header)
    if match is None:
        raise ParseError(f"header does not start with '>' and a sequence id: {header!r}")
    return int(match.group(1))


def _read_pairs(stream: TextIO) -> Iterator[tuple[str, str]]:
    lines = (_chomp(line) for line in stream)
    for header in lines:
        dna = next(lines, "")
        if not header or not dna:
            return
        yield header, dna


def permute_and_write_stream(
    stream: Iterable[str],
    output_filename: str,
    tmp_dirname: str,
    permutation: Sequence[int],
    signs: Sequence[bool],
    k: int,
) -> None:
    """Write the sequences of ``stream`` to ``output_filename`` in permuted order.

    ``permutation[id]`` is the output rank of sequence ``id``; a false
    ``signs[i]`` turns the i-th sequence into its reverse complement, with its
    weights reversed. Sorting is done in external memory under ``tmp_dirname``.
    """
    num_sequences = len(permutation)
    if len(signs) < num_sequences:
        raise ValueError(f"expected {num_sequences} signs, got {len(signs)}")

    def rank(pair: tuple[str, str]) -> int:
        return permutation[_sequence_id(pair[0])]

    run_identifier = str(time.time_ns())
    tmp_paths: list[str] = []
    buffer: list[tuple[str, str]] = []
    buffered_bytes = 0
    num_bases = 0

    def sort_and_flush() -> None:
        nonlocal buffered_bytes
        if not buffer:
            return
        print("sorting buffer...")
        buffer.sort(key=rank)
        path = os.path.join(tmp_dirname, f"sshash.tmp.run{run_identifier}.{len(tmp_paths)}")
        print(f"saving to file '{path}'...")
        tmp_paths.append(path)
        with open(path, "w", encoding="utf-8") as out:
            out.writelines(f"{header}\n{dna}\n" for header, dna in buffer)
        buffer.clear()
        buffered_bytes = 0

    lines = (_chomp(line) for line in stream)
    try:
        for i in range(num_sequences):
            header = next(lines, None)
            dna = next(lines, None)
            if header is None or dna is None:
                raise ValueError(
                    f"expected {num_sequences} sequences but the input ended after {i}"
                )
            if not signs[i]:
                dna = reverse_complement(dna)
                header = reverse_header(header, k)

            seq_bytes = len(header) + len(dna) + 16
            if buffered_bytes + seq_bytes > _BUFFER_LIMIT:
                sort_and_flush()
            buffered_bytes += seq_bytes
            buffer.append((header, dna))
            num_bases += len(dna)
            if i and i % 1000000 == 0:
                print(f"read {i} sequences, {num_bases} bases")
        sort_and_flush()
        print(f"read {num_sequences} sequences, {num_bases} bases")

        print(f"files to merge = {len(tmp_paths)}")
        written = 0
        with ExitStack() as stack, open(output_filename, "w", encoding="utf-8") as out:
            runs = [
                _read_pairs(stack.enter_context(open(path, encoding="utf-8")))
                for path in tmp_paths
            ]
            for header, dna in heapq.merge(*runs, key=rank):
                out.write(f"{header}\n{dna}\n")
                written += 1
                if written % 1000000 == 0:
                    print(f"written sequences = {written}/{num_sequences}")
        print(f"written sequences = {written}/{num_sequences}")
    finally:
        for path in tmp_paths:
            if os.path.exists(path):
                os.remove(path)


def permute_and_write(
    input_filename: str,
    output_filename: str,
    tmp_dirname: str,
    permutation: Sequence[int],
    signs: Sequence[bool],
    k: int,
) -> None:
    """Permute the sequences of ``input_filename`` (gzip when ending in ``.gz``)."""
    with _open_text(input_filename) as stream:
        print(f"reading file '{input_filename}'...")
        permute_and_write_stream(stream, output_filename, tmp_dirname, permutation, signs, k)