"""Fee accrual formulas for the Senior rebase

Every time-prorated formula multiplies fully before dividing:
value * rate * elapsed / (period * PRECISION), never rate / period * elapsed.
"""
from typing import Tuple
from ..state.protocol_config import ProtocolConstants, DEFAULT_CONSTANTS
from ..errors import InvalidWithdrawalAmountError
from ..fixed_point import checked_mul, checked_add

def calculate_management_fee(
    vault_value: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> int:
    """Fixed monthly approximation: F = V * mgmt / 12"""
    return checked_mul(vault_value, constants.mgmt_fee_annual) // (12 * constants.precision)

def calculate_management_fee_tokens(
    vault_value: int,
    time_elapsed: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> int:
    """Time-prorated management fee tokens: V * mgmt * t / (1 year)

    Minted on top of supply rather than taken out of the vault value, so
    holders are diluted and the vault is not drained.
    """
    numerator = checked_mul(checked_mul(vault_value, constants.mgmt_fee_annual), time_elapsed)
    return numerator // (constants.seconds_per_year * constants.precision)

def calculate_performance_fee(
    user_tokens: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> int:
    """Performance fee: 2% of the yield minted to users, minted in addition to it"""
    return checked_mul(user_tokens, constants.perf_fee) // constants.precision

def calculate_withdrawal_penalty(
    amount: int,
    cooldown_start: int,
    current_time: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> Tuple[int, int]:
    """Early withdrawal penalty

    Returns (penalty, net_amount). A cooldown that was never started
    (cooldown_start == 0) or has not yet run its full period costs 20%.
    """
    if amount == 0:
        raise InvalidWithdrawalAmountError("Withdrawal amount must be positive")

    cooldown_met = (
        cooldown_start != 0
        and current_time >= cooldown_start
        and current_time - cooldown_start >= constants.cooldown_period
    )
    if cooldown_met:
        return 0, amount

    penalty = checked_mul(amount, constants.early_withdrawal_penalty) // constants.precision
    return penalty, amount - penalty

def calculate_rebase_supply(
    current_supply: int,
    monthly_rate: int,
    time_elapsed: int,
    mgmt_fee_tokens: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> Tuple[int, int, int]:
    """Supply after a rebase: S_new = S + S_users + S_fee + S_mgmt

    The monthly rate is prorated by time_elapsed / 30 days.
    Returns (new_supply, user_tokens, fee_tokens).
    """
    numerator = checked_mul(checked_mul(current_supply, monthly_rate), time_elapsed)
    user_tokens = numerator // (constants.seconds_per_month * constants.precision)
    fee_tokens = calculate_performance_fee(user_tokens, constants)

    new_supply = checked_add(
        checked_add(current_supply, user_tokens),
        checked_add(fee_tokens, mgmt_fee_tokens)
    )
    return new_supply, user_tokens, fee_tokens

def calculate_new_rebase_index(
    old_index: int,
    monthly_rate: int,
    time_elapsed: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> int:
    """I_new = I_old * (1 + r * t / 30 days)

    Only the user rate grows the index. The performance fee reaches the
    treasury as separately minted tokens; folding it in here as well
    (r * 1.02) would count that yield twice.
    """
    scaled_rate = checked_mul(monthly_rate, time_elapsed) // constants.seconds_per_month
    return checked_mul(old_index, checked_add(constants.precision, scaled_rate)) // constants.precision
