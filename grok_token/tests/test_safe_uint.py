from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from grok_token.errors import AmountOverflow, AmountUnderflow, InvalidAmount
from grok_token.safe_uint import (
    U256_MAX,
    is_u256,
    require_amount,
    try_add_u256,
    try_sub_u256,
    u256_add,
    u256_sub,
)

u256 = st.integers(min_value=0, max_value=U256_MAX)


@pytest.mark.parametrize("n", [0, 1, U256_MAX])
def test_is_u256_accepts_domain(n) -> None:
    assert is_u256(n)
    assert require_amount(n) == n


@pytest.mark.parametrize("n", [-1, U256_MAX + 1, True, False, 1.0, "1", None])
def test_is_u256_rejects_outside(n) -> None:
    assert not is_u256(n)
    with pytest.raises(InvalidAmount):
        require_amount(n)


def test_add_overflow() -> None:
    assert u256_add(U256_MAX - 1, 1) == U256_MAX
    with pytest.raises(AmountOverflow):
        u256_add(U256_MAX, 1)
    assert try_add_u256(U256_MAX, 1) is None


def test_sub_underflow() -> None:
    assert u256_sub(5, 5) == 0
    with pytest.raises(AmountUnderflow):
        u256_sub(0, 1)
    assert try_sub_u256(0, 1) is None


def test_try_variants_reject_bad_input() -> None:
    assert try_add_u256(-1, 1) is None
    assert try_sub_u256(1, True) is None


@given(u256, u256)
def test_add_matches_python_int_when_in_range(x: int, y: int) -> None:
    if x + y <= U256_MAX:
        assert u256_add(x, y) == x + y
        assert try_add_u256(x, y) == x + y
    else:
        assert try_add_u256(x, y) is None


@given(u256, u256)
def test_sub_never_goes_negative(x: int, y: int) -> None:
    r = try_sub_u256(x, y)
    if y <= x:
        assert r == x - y == u256_sub(x, y)
    else:
        assert r is None
