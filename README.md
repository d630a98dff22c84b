# sshash

Pure-Python building blocks for k-mer indexing (MurmurHash2 hashing,
rolling minimizers, Elias-Fano sequences, compressed per-k-mer weights)
and a command that reorders a weighted FASTA file so that k-mer weights
form fewer runs.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command line

```
sshash <tool> ...
```

Run without arguments to print the list of tools. The only tool is
`permute`; any other name prints an error and the list.

### `sshash permute`

Reads a weighted FASTA file (plain, or gzip-compressed when the name ends
in `.gz`) with two lines per sequence: a header carrying one weight per
k-mer, then the DNA sequence.

```
>12 LN:i:41 ab:Z:2 2 2 2 2 2 2 2 2 2 2
ACGTACGTACGTACGTACGTACGTACGTACGTACGTACGTA
```

The `ab:Z:` field holds `LN - k + 1` weights. The tool computes a cover
of the sequences by walks, orients each sequence (reverse-complementing
the DNA and reversing its weights where needed) and writes the sequences
in walk order.

```
sshash permute -i unitigs.fa.gz -k 31 -o unitigs.permuted.fa -d tmp_dir
```

Options:

- `-i` input file (required)
- `-k` k-mer length (required, between 1 and 31)
- `-o` output file (default: the input name followed by `.permuted`)
- `-d` directory for temporary files: the `tmp.permutation` file and the
  sorted runs of the external merge (default: the current directory)

The exit status is 0 on success and 1 on a usage error or an invalid `k`.

## Library

### Hashing (`sshash.hashing`)

- `murmurhash2_64(data, seed)`: 64-bit MurmurHash2 (64A) of a `bytes` object.
- `hash_uint64(x, seed)`: hash of a 64-bit unsigned integer.
- `hash_kmer_64(kmer, seed, kmer_bits=64)` and
  `hash_kmer_128(kmer, seed, kmer_bits=64)`: 64-bit and 128-bit (pair of
  halves) hashes of a k-mer held in a 64- or 128-bit integer.

### Minimizers (`sshash.minimizer_enumerator`)

`MinimizerEnumerator(k, m, seed)` returns the minimizer of each k-mer of a
stream of overlapping 2-bit packed k-mers. Pass `clear=True` for the first
k-mer (or after a break), `clear=False` when sliding by one base, and
`reverse=True` for k-mers that grow at their low end.

```python
from sshash.minimizer_enumerator import MinimizerEnumerator

enum = MinimizerEnumerator(k=31, m=15, seed=1)
first = enum.next(first_kmer, True, False)
following = enum.next(next_kmer, False, False)
```

### Elias-Fano sequences (`sshash.ef_sequence`)

```python
from sshash.ef_sequence import EliasFanoSequence

ef = EliasFanoSequence([0, 3, 3, 10, 17], 17)
ef.access(3)          # 10
len(ef)               # 5
list(ef.iter_from(2)) # [3, 10, 17]
ef.next_geq(x)        # (position, value) of the rightmost smallest element >= x
ef.prev_leq(x)        # position of the rightmost largest element <= x
ef.locate(x)          # (pos_next, prev, next) with prev < x <= next
ef.num_bits()         # size of the encoding in bits
```

Values must be non-decreasing and within `[0, universe]`; otherwise a
`ValueError` is raised.

### Weights (`sshash.weights`)

`WeightsBuilder` counts the weight of every k-mer and records the runs of
equal weights; `build()` returns a `Weights` answering `weight(kmer_id)`.
`finalize` and `print_info` print statistics to standard output.

```python
from sshash.weights import WeightsBuilder

builder = WeightsBuilder()
for w in [5, 5, 2, 2, 2, 7]:
    builder.eat(w)
for value, length in [(5, 2), (2, 3), (7, 1)]:
    builder.push_weight_interval(value, length)
builder.finalize(6)
weights = builder.build()
weights.weight(3)  # 2
```

### Cover and permutation (`sshash.cover`, `sshash.parse_file`, `sshash.cli`)

- `parse_weighted_file(filename, k)` / `parse_weighted_stream(stream, k)`
  return a `PermuteData` with one `Node` per sequence (weights at its two
  ends) and counts; malformed headers raise `ParseError`.
- `Cover(nodes, num_runs_weights)`: `compute()` builds the walks,
  `write(out)` / `save(filename)` write one `id sign` line per sequence in
  walk order.
- `read_permutation(filename, num_sequences)` turns such a file into
  `(permutation, signs)`.
- `permute_and_write(input_filename, output_filename, tmp_dirname,
  permutation, signs, k)` writes the sequences in permuted order, sorting
  in external memory.
- `reverse_header(header, k)` and `reverse_complement(dna)` are the
  helpers used to flip a sequence.

## What this package does not do

It does not build, load, save or query a k-mer dictionary: there are no
commands to build an index, look up or stream-query k-mers, check or
benchmark an index, or dump its contents. The only command is `permute`.