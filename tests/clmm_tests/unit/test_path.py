"""
Packed path codec tests.
"""

import pytest

from clmm.core.defi.path import (
    ADDR_SIZE,
    MULTIPLE_POOLS_MIN_LENGTH,
    NEXT_OFFSET,
    POP_OFFSET,
    decode_first_pool,
    encode_path,
    get_first_pool,
    has_multiple_pools,
    num_pools,
    skip_token,
    validate_path,
)
from clmm.core.exceptions import InputValidationError, PathBoundsError

A = "0x" + "11" * 20
B = "0x" + "22" * 20
C = "0x" + "33" * 20


@pytest.fixture
def two_hop():
    return encode_path([A, B, C], [500, 3000])


class TestLayout:
    def test_offsets(self):
        assert (ADDR_SIZE, NEXT_OFFSET, POP_OFFSET, MULTIPLE_POOLS_MIN_LENGTH) == (20, 23, 43, 66)

    def test_encoding_bytes(self):
        path = encode_path([A, B], [3000])
        assert path == bytes.fromhex("11" * 20 + "000bb8" + "22" * 20)

    def test_length_is_20_plus_23k(self, two_hop):
        assert len(two_hop) == 20 + 23 * 2

    def test_mismatched_lists_rejected(self):
        with pytest.raises(InputValidationError):
            encode_path([A, B], [500, 3000])
        with pytest.raises(InputValidationError):
            encode_path([A], [])

    def test_fee_must_fit_24_bits(self):
        with pytest.raises(InputValidationError, match="24 bits"):
            encode_path([A, B], [1 << 24])


class TestDecoding:
    def test_decode_first_pool(self, two_hop):
        token_a, token_b, fee = decode_first_pool(two_hop)
        assert token_a.lower() == A
        assert token_b.lower() == B
        assert fee == 500

    def test_skip_token_walks_hops(self, two_hop):
        rest = skip_token(two_hop)
        token_a, token_b, fee = decode_first_pool(rest)
        assert token_a.lower() == B
        assert token_b.lower() == C
        assert fee == 3000
        assert not has_multiple_pools(rest)

    def test_get_first_pool(self, two_hop):
        first = get_first_pool(two_hop)
        assert first == encode_path([A, B], [500])
        assert not has_multiple_pools(first)

    def test_pool_counting(self, two_hop):
        assert has_multiple_pools(two_hop)
        assert num_pools(two_hop) == 2
        assert num_pools(encode_path([A, B], [500])) == 1


class TestBounds:
    def test_short_path_decode_fails(self):
        with pytest.raises(PathBoundsError) as exc_info:
            decode_first_pool(bytes(42))
        assert exc_info.value.length == 42
        assert exc_info.value.required == 43

    def test_get_first_pool_short(self):
        with pytest.raises(PathBoundsError):
            get_first_pool(bytes(ADDR_SIZE))

    def test_skip_token_short(self):
        with pytest.raises(PathBoundsError):
            skip_token(bytes(NEXT_OFFSET - 1))

    def test_validate_rejects_misaligned(self, two_hop):
        with pytest.raises(PathBoundsError, match="Malformed"):
            validate_path(two_hop + b"\x00")

    def test_validate_rejects_token_only(self):
        with pytest.raises(PathBoundsError):
            validate_path(bytes(ADDR_SIZE))

    def test_validate_accepts_well_formed(self, two_hop):
        validate_path(two_hop)
        validate_path(get_first_pool(two_hop))
