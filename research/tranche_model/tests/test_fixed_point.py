"""Fixed point primitives - rounding direction, monotonicity and failure modes"""
import numpy as np
import pytest
from tranche_model.src.constants import PRECISION, UINT256_MAX
from tranche_model.src.errors import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    DepositCapExceededError,
)
from tranche_model.src.fixed_point import (
    checked_mul,
    checked_add,
    checked_sub,
    mul_div,
    calculate_backing_ratio,
    calculate_balance_from_shares,
    calculate_shares_from_balance,
    calculate_shares_from_balance_ceil,
    calculate_total_supply,
    calculate_deposit_cap,
    check_deposit_cap,
    apply_signed_percentage,
)

def _random_pairs(count: int, seed: int = 7):
    """(balance, index) pairs spanning dust to millions, index 0.5x .. 3x"""
    rng = np.random.default_rng(seed)
    balances = rng.integers(1, 10**9, size=count)
    scales = rng.integers(0, 16, size=count)
    indices = rng.integers(PRECISION // 2, 3 * PRECISION, size=count)
    return [
        (int(balance) * 10 ** int(scale), int(index))
        for balance, scale, index in zip(balances, scales, indices)
    ]

def test_backing_ratio_formula():
    assert calculate_backing_ratio(1_250_000, 1_000_000) == PRECISION * 125 // 100
    assert calculate_backing_ratio(5 * PRECISION, 5 * PRECISION) == PRECISION

def test_backing_ratio_zero_supply():
    with pytest.raises(DivisionByZeroError):
        calculate_backing_ratio(1_000, 0)

def test_backing_ratio_monotonic():
    supply = 1_000_000 * PRECISION
    values = [supply // 2 + step * 10**21 for step in range(50)]
    ratios = [calculate_backing_ratio(value, supply) for value in values]
    assert all(a < b for a, b in zip(ratios, ratios[1:]))

    value = 1_000_000 * PRECISION
    supplies = [value // 2 + step * 10**21 for step in range(50)]
    ratios = [calculate_backing_ratio(value, supply) for supply in supplies]
    assert all(a > b for a, b in zip(ratios, ratios[1:]))

def test_shares_balance_roundtrip():
    for balance, index in _random_pairs(500):
        index = min(index, PRECISION)
        shares = calculate_shares_from_balance(balance, index)
        recovered = calculate_balance_from_shares(shares, index)
        assert balance - 1 <= recovered <= balance, (balance, index, recovered)

def test_shares_balance_roundtrip_grown_index():
    # above 1.0 one share is worth more than one unit, so the loss is bounded by ceil(index)
    for balance, index in _random_pairs(500, seed=3):
        index = max(index, PRECISION)
        shares = calculate_shares_from_balance(balance, index)
        recovered = calculate_balance_from_shares(shares, index)
        max_loss = -(-index // PRECISION)
        assert balance - max_loss <= recovered <= balance, (balance, index, recovered)

def test_ceil_shares_never_under_burn():
    for balance, index in _random_pairs(500, seed=11):
        floor_shares = calculate_shares_from_balance(balance, index)
        ceil_shares = calculate_shares_from_balance_ceil(balance, index)
        assert 0 <= ceil_shares - floor_shares <= 1
        assert calculate_balance_from_shares(ceil_shares, index) >= balance

def test_ceil_shares_exact_division():
    # 2.0 index divides evenly, both variants agree
    assert calculate_shares_from_balance_ceil(10 * PRECISION, 2 * PRECISION) == 5 * PRECISION
    assert calculate_shares_from_balance(10 * PRECISION, 2 * PRECISION) == 5 * PRECISION

def test_shares_zero_index():
    with pytest.raises(DivisionByZeroError):
        calculate_shares_from_balance(1, 0)
    with pytest.raises(DivisionByZeroError):
        calculate_shares_from_balance_ceil(1, 0)

def test_total_supply_grows_with_index():
    shares = 777_777 * PRECISION
    old_supply = calculate_total_supply(shares, PRECISION)
    new_supply = calculate_total_supply(shares, PRECISION + PRECISION // 100)
    assert old_supply == shares
    assert new_supply == shares * 101 // 100

def test_deposit_cap_linear():
    assert calculate_deposit_cap(50_000 * PRECISION) == 500_000 * PRECISION
    assert calculate_deposit_cap(100_000 * PRECISION) == 2 * calculate_deposit_cap(50_000 * PRECISION)
    assert calculate_deposit_cap(0) == 0

def test_check_deposit_cap():
    reserve = 100 * PRECISION  # cap 1000
    assert check_deposit_cap(900 * PRECISION, 50 * PRECISION, reserve) == 50 * PRECISION
    assert check_deposit_cap(900 * PRECISION, 100 * PRECISION, reserve) == 0
    with pytest.raises(DepositCapExceededError):
        check_deposit_cap(900 * PRECISION, 100 * PRECISION + 1, reserve)

def test_signed_percentage():
    assert apply_signed_percentage(10_000, 500) == 10_500
    assert apply_signed_percentage(10_000, -2_500) == 7_500
    assert apply_signed_percentage(10_000, 0) == 10_000
    assert apply_signed_percentage(10_000, -10_000) == 0

def test_signed_percentage_rejects_sign_flip():
    with pytest.raises(ArithmeticOverflowError):
        apply_signed_percentage(10_000, -10_001)

def test_mul_div():
    assert mul_div(3 * PRECISION, PRECISION // 2) == 3 * PRECISION // 2
    assert mul_div(1, 1) == 0

def test_checked_arithmetic_bounds():
    with pytest.raises(ArithmeticOverflowError):
        checked_mul(2**200, 2**100)
    with pytest.raises(ArithmeticOverflowError):
        checked_add(UINT256_MAX, 1)
    with pytest.raises(ArithmeticOverflowError):
        checked_sub(1, 2)
    assert checked_add(UINT256_MAX - 1, 1) == UINT256_MAX

def test_checked_arithmetic_rejects_negative_operands():
    for op in (checked_mul, checked_add, checked_sub):
        with pytest.raises(ArithmeticOverflowError):
            op(-1, PRECISION)
        with pytest.raises(ArithmeticOverflowError):
            op(PRECISION, -1)
    # a negative vault value cannot produce a ratio
    with pytest.raises(ArithmeticOverflowError):
        calculate_backing_ratio(-PRECISION, PRECISION)
