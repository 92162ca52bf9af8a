"""Fixed point primitives shared by the rebase engine.

All values are non-negative integers scaled by PRECISION (1.0 == PRECISION).
Bounds checks mirror the uint256 range the on-chain accounting runs in, so an
overflow surfaces as ArithmeticOverflowError instead of a silently huge int.
"""
from .errors import ArithmeticOverflowError, DivisionByZeroError, DepositCapExceededError
from .constants import (
    PRECISION,
    BPS_DENOMINATOR,
    UINT256_MAX,
    DEPOSIT_CAP_MULTIPLIER,
)

def _require_unsigned(a: int, b: int) -> None:
    if a < 0 or b < 0:
        raise ArithmeticOverflowError(f"Negative operand ({a}, {b}) outside the unsigned range")

def checked_mul(a: int, b: int) -> int:
    """Multiply with overflow checking"""
    _require_unsigned(a, b)
    result = a * b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("Arithmetic overflow in multiplication")
    return result

def checked_add(a: int, b: int) -> int:
    """Add with overflow checking"""
    _require_unsigned(a, b)
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflowError("Arithmetic overflow in addition")
    return result

def checked_sub(a: int, b: int) -> int:
    """Subtract with underflow checking"""
    _require_unsigned(a, b)
    if b > a:
        raise ArithmeticOverflowError("Arithmetic underflow in subtraction")
    return a - b

def checked_div(a: int, b: int) -> int:
    """Floor divide, refusing a zero divisor"""
    if b == 0:
        raise DivisionByZeroError("Division by zero")
    return a // b

def checked_div_ceil(a: int, b: int) -> int:
    """Ceiling divide, refusing a zero divisor"""
    if b == 0:
        raise DivisionByZeroError("Division by zero")
    return -(-a // b)

def mul_div(a: int, b: int) -> int:
    """a * b / PRECISION"""
    return checked_mul(a, b) // PRECISION

def calculate_backing_ratio(vault_value: int, total_supply: int) -> int:
    """Backing ratio R = V / S, scaled by PRECISION"""
    if total_supply == 0:
        raise DivisionByZeroError("Backing ratio undefined for zero supply")
    return checked_mul(vault_value, PRECISION) // total_supply

def calculate_balance_from_shares(shares: int, rebase_index: int) -> int:
    """Visible balance for a share count, rounded down"""
    return checked_mul(shares, rebase_index) // PRECISION

def calculate_shares_from_balance(balance: int, rebase_index: int) -> int:
    """Share count for a visible balance, rounded down (used when minting)"""
    if rebase_index == 0:
        raise DivisionByZeroError("Rebase index is zero")
    return checked_mul(balance, PRECISION) // rebase_index

def calculate_shares_from_balance_ceil(balance: int, rebase_index: int) -> int:
    """Share count for a visible balance, rounded up (used when burning)

    At most one share above the floor variant, so a withdrawal never burns
    fewer shares than the balance it releases.
    """
    if rebase_index == 0:
        raise DivisionByZeroError("Rebase index is zero")
    return checked_div_ceil(checked_mul(balance, PRECISION), rebase_index)

def calculate_total_supply(total_shares: int, rebase_index: int) -> int:
    """Total Senior supply S = shares * index"""
    return checked_mul(total_shares, rebase_index) // PRECISION

def calculate_deposit_cap(reserve_value: int, multiplier: int = DEPOSIT_CAP_MULTIPLIER) -> int:
    """Senior supply ceiling, linear in the Reserve value"""
    return checked_mul(reserve_value, multiplier)

def check_deposit_cap(
    current_supply: int,
    amount: int,
    reserve_value: int,
    multiplier: int = DEPOSIT_CAP_MULTIPLIER
) -> int:
    """Validate a Senior deposit against the cap, returning the capacity left after it"""
    cap = calculate_deposit_cap(reserve_value, multiplier)
    new_supply = checked_add(current_supply, amount)
    if new_supply > cap:
        raise DepositCapExceededError(
            f"Deposit of {amount} would raise supply to {new_supply}, cap is {cap}"
        )
    return cap - new_supply

def apply_signed_percentage(value: int, delta_bps: int) -> int:
    """Apply a signed basis point change to a value

    A loss larger than 100% would flip the sign of the value, which the
    unsigned accounting cannot represent.
    """
    if delta_bps >= 0:
        return checked_add(value, checked_mul(value, delta_bps) // BPS_DENOMINATOR)

    magnitude = -delta_bps
    if magnitude > BPS_DENOMINATOR:
        raise ArithmeticOverflowError(
            f"Negative change of {delta_bps} bps exceeds 100% of value"
        )
    return value - checked_mul(value, magnitude) // BPS_DENOMINATOR
