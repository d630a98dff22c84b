"""K-mer hashing, minimizers, Elias-Fano sequences, compressed weights and weighted FASTA permutation."""

__version__ = "0.1.0"