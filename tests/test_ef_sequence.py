import random

import pytest

from sshash.ef_sequence import EliasFanoSequence


def _sorted_values(n, max_value, seed, distinct=False, start_zero=False):
    rng = random.Random(seed)
    if distinct:
        values = sorted(rng.sample(range(1, max_value + 1), n - 1 if start_zero else n))
    else:
        values = sorted(rng.randrange(max_value + 1) for _ in range(n))
    if start_zero:
        values = [0] + values
    return values


CASES = [
    _sorted_values(1, 10, 1),
    _sorted_values(50, 40, 2),
    _sorted_values(200, 100_000, 3),
    _sorted_values(100, 1 << 40, 4),
    [0, 0, 0, 1, 1, 7, 7, 7, 20],
]


@pytest.mark.parametrize("values", CASES)
def test_access_round_trip(values):
    ef = EliasFanoSequence(values, values[-1])
    assert len(ef) == len(values)
    assert [ef.access(i) for i in range(len(values))] == values


@pytest.mark.parametrize("values", CASES)
def test_iter_from_yields_suffix(values):
    ef = EliasFanoSequence(values, values[-1])
    for pos in (0, len(values) // 2, len(values) - 1):
        assert list(ef.iter_from(pos)) == values[pos:]


def test_back_is_universe():
    values = [1, 4, 9]
    ef = EliasFanoSequence(values, 9)
    assert ef.back() == 9


def test_unsorted_input_rejected():
    with pytest.raises(ValueError, match="not sorted"):
        EliasFanoSequence([1, 5, 3], 5)


def test_value_above_universe_rejected():
    with pytest.raises(ValueError):
        EliasFanoSequence([1, 2, 30], 10)


def test_access_out_of_range():
    ef = EliasFanoSequence([0, 2, 4], 4)
    with pytest.raises(IndexError):
        ef.access(3)


def test_empty_sequence():
    ef = EliasFanoSequence([], 100)
    assert len(ef) == 0
    assert ef.back() == 0
    with pytest.raises(ValueError):
        ef.next_geq(5)


@pytest.mark.parametrize("values", CASES)
def test_next_geq_beyond_back(values):
    ef = EliasFanoSequence(values, values[-1])
    assert ef.next_geq(values[-1] + 5) == (len(values), values[-1])
    assert ef.next_geq(values[-1]) == (len(values) - 1, values[-1])


@pytest.mark.parametrize("values", CASES)
def test_prev_leq_invariants(values):
    ef = EliasFanoSequence(values, values[-1])
    n = len(values)
    assert ef.prev_leq(values[-1] + 1) == n
    for x in sorted(set(values) | {v + 1 for v in values if v + 1 < values[-1]}):
        pos = ef.prev_leq(x)
        if x < values[0]:
            continue
        assert ef.access(pos) <= x
        if pos + 1 < n:
            assert ef.access(pos + 1) > x


@pytest.mark.parametrize(
    "values",
    [
        _sorted_values(60, 1000, 5, distinct=True, start_zero=True),
        _sorted_values(30, 1 << 30, 6, distinct=True, start_zero=True),
        [0, 1, 2, 3, 10, 11, 50],
    ],
)
def test_locate_brackets_value(values):
    ef = EliasFanoSequence(values, values[-1])
    assert ef.locate(0) == (0, 0, 0)
    probes = set(values) | {v + 1 for v in values} | {v - 1 for v in values if v > 0}
    for x in sorted(p for p in probes if 0 < p <= values[-1]):
        pos, prev, nxt = ef.locate(x)
        assert prev < x <= nxt
        assert ef.access(pos) == nxt
        assert ef.access(pos - 1) == prev


def test_locate_above_back_rejected():
    ef = EliasFanoSequence([0, 3, 8], 8)
    with pytest.raises(ValueError):
        ef.locate(9)


def test_num_bits_grows_with_size():
    small = EliasFanoSequence(_sorted_values(10, 1000, 7), 1000)
    large = EliasFanoSequence(_sorted_values(1000, 1000, 8), 1000)
    assert small.num_bits() >= 64
    assert large.num_bits() > small.num_bits()
    assert large.num_bits() % 64 == 0