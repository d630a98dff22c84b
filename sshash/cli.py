"""Command-line entry point: permute a weighted sequence file to reduce weight runs."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Sequence

from .cover import Cover
from .parse_file import parse_weighted_file, permute_and_write

MAX_K = 31
DEFAULT_TMP_DIRNAME = "."
PERMUTATION_BASENAME = "tmp.permutation"

_TOOLS = {
    "permute": "permute a weighted input file",
}


class _UsageError(Exception):
    """Raised by the argument parser instead of exiting the interpreter."""


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise _UsageError(message)

    def exit(self, status: int = 0, message: str | None = None) -> None:  # type: ignore[override]
        if message:
            print(message, file=sys.stderr, end="")
        raise _UsageError(None)


def read_permutation(filename: str, num_sequences: int) -> tuple[list[int], list[bool]]:
    """Read the "id sign" lines written by a cover.

    Returns ``(permutation, signs)`` where ``permutation[id]`` is the output rank
    of sequence ``id`` and ``signs[id]`` tells whether it keeps its orientation.
    """
    with open(filename, encoding="ascii") as stream:
        tokens = stream.read().split()
    if len(tokens) < 2 * num_sequences:
        raise ValueError(
            f"expected {num_sequences} entries in '{filename}' but found {len(tokens) // 2}"
        )
    permutation = [0] * num_sequences
    signs = [False] * num_sequences
    pairs = zip(tokens[0 : 2 * num_sequences : 2], tokens[1 : 2 * num_sequences : 2])
    for rank, (position_text, sign_text) in enumerate(pairs):
        if not position_text.isdigit():
            raise ValueError(f"invalid position {position_text!r} in '{filename}'")
        if sign_text not in ("0", "1"):
            raise ValueError(f"invalid sign {sign_text!r} in '{filename}'")
        position = int(position_text)
        if position >= num_sequences:
            raise ValueError(
                f"position {position} out of range for {num_sequences} sequences"
            )
        permutation[position] = rank
        signs[position] = sign_text == "1"
    return permutation, signs


def _permute_parser() -> _Parser:
    parser = _Parser(prog="permute", description="Permute a weighted input file.")
    parser.add_argument(
        "-i",
        dest="input_filename",
        required=True,
        help=(
            "Must be a FASTA file (.fa/fasta extension) compressed with gzip (.gz) or not: "
            "without duplicate nor invalid kmers, one DNA sequence per line, "
            "with also kmers' weights."
        ),
    )
    parser.add_argument(
        "-k", dest="k", type=int, required=True, help=f"K-mer length (must be <= {MAX_K})."
    )
    parser.add_argument(
        "-o",
        dest="output_filename",
        help="Output file where the permuted collection will be written.",
    )
    parser.add_argument(
        "-d",
        dest="tmp_dirname",
        default=DEFAULT_TMP_DIRNAME,
        help=(
            "Temporary directory used for merging in external memory. "
            f"Default is directory '{DEFAULT_TMP_DIRNAME}'."
        ),
    )
    return parser


def permute(argv: Sequence[str] | None = None) -> int:
    """Run the permute tool on ``argv``; return the process exit status."""
    parser = _permute_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else [])
    except _UsageError as exc:
        if exc.args and exc.args[0]:
            print(parser.format_usage(), file=sys.stderr, end="")
            print(f"error: {exc.args[0]}", file=sys.stderr)
        return 1

    k = args.k
    if k < 1:
        print("k must be > 0", file=sys.stderr)
        return 1
    if k > MAX_K:
        print(f"k must be less <= {MAX_K} but got k = {k}", file=sys.stderr)
        return 1

    input_filename = args.input_filename
    output_filename = args.output_filename or input_filename + ".permuted"
    tmp_dirname = args.tmp_dirname
    permutation_filename = os.path.join(tmp_dirname, PERMUTATION_BASENAME)

    data = parse_weighted_file(input_filename, k)

    cover = Cover(data.nodes, data.num_runs_weights)
    cover.compute()
    cover.save(permutation_filename)

    try:
        permutation, signs = read_permutation(permutation_filename, data.num_sequences)
        permute_and_write(input_filename, output_filename, tmp_dirname, permutation, signs, k)
    finally:
        if os.path.exists(permutation_filename):
            os.remove(permutation_filename)
    return 0


def _help(prog: str) -> int:
    print("== SSHash: (S)parse and (S)kew (Hash)ing of k-mers =========================")
    print()
    print(f"Usage: {prog} <tool> ...\n")
    print("Available tools:")
    for name, description in _TOOLS.items():
        print(f"  {name:<19}\t {description} ")
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Dispatch to the tool named by the first argument."""
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "sshash"
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        return _help(prog)
    tool, rest = args[0], args[1:]
    if tool == "permute":
        return permute(rest)
    print(f"Unsupported tool '{tool}'.\n")
    return _help(prog)