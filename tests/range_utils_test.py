from pytest import mark, raises
from ranges import Range

from range_readers.range_utils import (
    align_range,
    range_len,
    range_max,
    range_min,
    range_termini,
    validate_range,
)

termini_test_triples = [(0, 3, (0, 2)), (1, 4, (1, 3))]


@mark.parametrize("start,stop,expected", termini_test_triples)
def test_range_termini(start, stop, expected):
    rng = Range(start, stop)
    assert range_termini(rng) == expected


@mark.parametrize("start,stop,expected", termini_test_triples)
def test_range_min_max(start, stop, expected):
    rng = Range(start, stop)
    assert (range_min(rng), range_max(rng)) == expected


@mark.parametrize("start,stop", [(0, 1), (0, 3), (5, 1029)])
def test_range_len(start, stop):
    assert range_len(Range(start, stop)) == stop - start


def test_empty_range_len():
    assert range_len(Range(0, 0)) == 0


@mark.parametrize(
    "rng,expected",
    [((1, 3), Range(1, 4)), ((0, 0), Range(0, 1)), (Range(1, 3), Range(1, 3))],
)
def test_validate_range(rng, expected):
    assert validate_range(rng) == expected


@mark.parametrize(
    "error_msg",
    [
        "byte_range=.* must be a Range from the python-ranges package or an integer 2-tuple"
    ],
)
@mark.parametrize("bad_range", [(1, 2.5), (1, 2, 3), [0, 3]])
def test_validate_bad_type_range(bad_range, error_msg):
    with raises(TypeError, match=error_msg):
        validate_range(bad_range)


def test_validate_float_range():
    with raises(TypeError, match="Ranges must be discrete"):
        validate_range(Range(1.5, 4.5))


@mark.parametrize("bad_range", [(5, 4), (-1, 4)])
def test_validate_inverted_tuple(bad_range):
    with raises(ValueError, match="need 0 <= start <= end"):
        validate_range(bad_range)


def test_validate_empty_range():
    with raises(ValueError, match="Range is empty"):
        validate_range(Range(3, 3))
    assert validate_range(Range(3, 3), allow_empty=True).isempty()


@mark.parametrize("chunk_size", [1, 3, 1024])
@mark.parametrize("start,length", [(0, 1), (0, 10), (7, 1024), (100, 1025), (3, 4096)])
def test_alignment_law(start, length, chunk_size):
    """The fetched length is the smallest multiple of the chunk size >= the length"""
    aligned = align_range(Range(start, start + length), chunk_size=chunk_size)
    aligned_len = range_len(aligned)
    assert range_min(aligned) == start
    assert aligned_len % chunk_size == 0
    assert length <= aligned_len < length + chunk_size


def test_align_range_clipped_at_eof():
    assert align_range(Range(4000, 4010), 1024, total_bytes=5000) == Range(4000, 5000)
    assert align_range(Range(0, 10), 1024, total_bytes=5000) == Range(0, 1024)


def test_align_range_beyond_eof():
    with raises(ValueError, match="starts beyond the end of the file"):
        align_range(Range(5000, 5001), 1024, total_bytes=5000)


def test_align_range_bad_chunk_size():
    with raises(ValueError, match="must be positive"):
        align_range(Range(0, 1), 0)
