import gzip
import io

import pytest

from sshash.node import Node
from sshash.parse_file import (
    ParseError,
    PermuteData,
    parse_weighted_file,
    parse_weighted_stream,
    permute_and_write,
    permute_and_write_stream,
    reverse_complement,
    reverse_header,
)

SAMPLE = (
    ">0 LN:i:5 ab:Z:1 2 3\n"
    "ACGTA\n"
    ">1 LN:i:4 ab:Z:4 5\n"
    "AACC\n"
    ">2 LN:i:3 ab:Z:6\n"
    "GGG\n"
)

SOURCE_EXAMPLE_WEIGHTS = [4, 4, 4] + [2] * 27 + [1]


def _source_example_header():
    return ">2 LN:i:61 ab:Z:" + " ".join(str(w) for w in SOURCE_EXAMPLE_WEIGHTS)


def _pairs(text):
    lines = text.splitlines()
    return list(zip(lines[0::2], lines[1::2]))


def test_parse_example_header_from_format_description():
    data = parse_weighted_stream(io.StringIO(">12 LN:i:41 ab:Z:2 2 2 2 2 2 2 2 2 2 2\n" + "A" * 41 + "\n"), 31)
    assert data.num_sequences == 1
    assert data.nodes == [Node(id=0, front=2, back=2)]
    assert data.num_runs_weights == 1
    assert data.num_kmers == 11


def test_parse_sample_nodes_and_counts():
    data = parse_weighted_stream(io.StringIO(SAMPLE), 3)
    assert isinstance(data, PermuteData)
    assert data.num_sequences == 3
    assert data.nodes == [
        Node(id=0, front=1, back=3),
        Node(id=1, front=4, back=5),
        Node(id=2, front=6, back=6),
    ]
    assert data.num_runs_weights == 6
    assert data.num_bases == 5 + 4 + 3
    assert data.num_distinct_weights == 6
    assert data.sum_of_weights == 1 + 2 + 3 + 4 + 5 + 6
    assert data.num_runs_weights >= data.num_sequences


def test_parse_counts_runs_within_each_sequence():
    text = ">0 LN:i:6 ab:Z:7 7 8 8\nACGTAC\n>1 LN:i:4 ab:Z:8 8\nACGT\n"
    data = parse_weighted_stream(io.StringIO(text), 3)
    assert data.num_runs_weights == 3
    assert data.num_distinct_weights == 2


def test_parse_length_mismatch_is_malformed():
    text = ">0 LN:i:5 ab:Z:1 2 3\nACGT\n"
    with pytest.raises(ValueError, match="malformed"):
        parse_weighted_stream(io.StringIO(text), 3)


@pytest.mark.parametrize(
    "header",
    [
        "0 LN:i:5 ab:Z:1 2 3",
        ">0 XX:i:5 ab:Z:1 2 3",
        ">0 LN:i:5 cd:Z:1 2 3",
        ">0",
        ">0 LN:i:5 ab:Z:1 2",
        ">0 LN:i:x ab:Z:1 2 3",
    ],
)
def test_parse_bad_header_raises(header):
    with pytest.raises(ParseError):
        parse_weighted_stream(io.StringIO(header + "\nACGTA\n"), 3)


def test_parse_rejects_non_positive_k():
    with pytest.raises(ValueError):
        parse_weighted_stream(io.StringIO(SAMPLE), 0)


def test_parse_weighted_file_plain_and_gzip(tmp_path):
    plain = tmp_path / "input.fa"
    plain.write_text(SAMPLE)
    packed = tmp_path / "input.fa.gz"
    with gzip.open(packed, "wt") as out:
        out.write(SAMPLE)
    from_plain = parse_weighted_file(str(plain), 3)
    from_gzip = parse_weighted_file(str(packed), 3)
    assert from_plain == from_gzip
    assert from_plain.num_sequences == 3


def test_reverse_header_source_example():
    expected = ">2 LN:i:61 ab:Z:" + "".join(f"{w} " for w in reversed(SOURCE_EXAMPLE_WEIGHTS))
    assert reverse_header(_source_example_header(), 31) == expected


def test_reverse_header_round_trip():
    header = _source_example_header() + " "
    assert reverse_header(reverse_header(header, 31), 31) == header


def test_reverse_header_without_weights_raises():
    with pytest.raises(ParseError):
        reverse_header(">2 LN:i:61", 31)


def test_reverse_complement_values():
    assert reverse_complement("ACGTT") == "AACGT"
    assert reverse_complement("acgtt") == "aacgt"
    assert reverse_complement("") == ""


@pytest.mark.parametrize("dna", ["A", "ACGT", "ttgttagcaaatgaagtc", "GGGCCCAAATTT"])
def test_reverse_complement_round_trip(dna):
    assert reverse_complement(reverse_complement(dna)) == dna
    assert len(reverse_complement(dna)) == len(dna)


def test_permute_and_write_stream_orders_and_orients(tmp_path):
    tmp_dir = tmp_path / "tmp"
    tmp_dir.mkdir()
    output = tmp_path / "out.fa"
    permutation = [2, 0, 1]
    signs = [True, False, True]
    permute_and_write_stream(io.StringIO(SAMPLE), str(output), str(tmp_dir), permutation, signs, 3)

    original = _pairs(SAMPLE)
    written = _pairs(output.read_text())
    assert [h.split(" ")[0] for h, _ in written] == [">1", ">2", ">0"]
    assert written[0] == (reverse_header(original[1][0], 3), reverse_complement(original[1][1]))
    assert written[0][0] == ">1 LN:i:4 ab:Z:5 4 "
    assert written[1] == original[2]
    assert written[2] == original[0]
    assert list(tmp_dir.iterdir()) == []


def test_permuted_output_parses_back(tmp_path):
    output = tmp_path / "out.fa"
    permute_and_write_stream(io.StringIO(SAMPLE), str(output), str(tmp_path), [1, 2, 0], [False, True, False], 3)
    data = parse_weighted_file(str(output), 3)
    assert data.num_sequences == 3
    assert data.num_bases == 12
    assert sorted((n.front, n.back) for n in data.nodes) == [(3, 1), (4, 5), (6, 6)]


def test_permute_and_write_gzip_input(tmp_path):
    packed = tmp_path / "input.fa.gz"
    with gzip.open(packed, "wt") as out:
        out.write(SAMPLE)
    output = tmp_path / "out.fa"
    permute_and_write(str(packed), str(output), str(tmp_path), [0, 1, 2], [True, True, True], 3)
    assert output.read_text() == SAMPLE


def test_permute_and_write_short_input_raises(tmp_path):
    output = tmp_path / "out.fa"
    with pytest.raises(ValueError):
        permute_and_write_stream(
            io.StringIO(">0 LN:i:5 ab:Z:1 2 3\nACGTA\n"),
            str(output),
            str(tmp_path),
            [0, 1],
            [True, True],
            3,
        )
    assert not any(p.name.startswith("sshash.tmp.run") for p in tmp_path.iterdir())


def test_permute_and_write_too_few_signs_raises(tmp_path):
    with pytest.raises(ValueError):
        permute_and_write_stream(io.StringIO(SAMPLE), str(tmp_path / "o.fa"), str(tmp_path), [0, 1, 2], [True], 3)