"""Dynamic APY selection - waterfall over the yield tiers"""
from dataclasses import dataclass, replace
from typing import Tuple
from ..state.protocol_config import ProtocolConstants, YieldTier, DEFAULT_CONSTANTS
from ..errors import InvalidSupplyError, InvalidVaultValueError
from ..fixed_point import calculate_backing_ratio
from .accrue_fees import calculate_rebase_supply

@dataclass(frozen=True)
class ApySelection:
    """Outcome of the tier waterfall for one epoch"""
    tier: YieldTier
    monthly_rate: int
    new_supply: int  # includes user, performance fee and management fee tokens
    user_tokens: int
    fee_tokens: int
    backing_ratio: int  # hypothetical V / S_new
    backstop_needed: bool

def _validate_inputs(current_supply: int, vault_value: int) -> None:
    if current_supply == 0:
        raise InvalidSupplyError("Senior supply must be positive")
    if vault_value == 0:
        raise InvalidVaultValueError("Senior vault value must be positive")

def select_dynamic_apy(
    current_supply: int,
    vault_value: int,
    time_elapsed: int,
    mgmt_fee_tokens: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> ApySelection:
    """Pick the highest tier whose post-rebase backing stays at or above 100%

    Tiers are tried in descending rate order. When none clears the trigger
    the lowest tier is still minted and backstop_needed is set, leaving the
    shortfall to the zone allocator in the same epoch.
    """
    _validate_inputs(current_supply, vault_value)

    candidate = None
    for tier in constants.yield_tiers:
        new_supply, user_tokens, fee_tokens = calculate_rebase_supply(
            current_supply, tier.monthly_rate, time_elapsed, mgmt_fee_tokens, constants
        )
        ratio = calculate_backing_ratio(vault_value, new_supply)
        candidate = ApySelection(
            tier=tier,
            monthly_rate=tier.monthly_rate,
            new_supply=new_supply,
            user_tokens=user_tokens,
            fee_tokens=fee_tokens,
            backing_ratio=ratio,
            backstop_needed=False,
        )
        if ratio >= constants.senior_trigger_backing:
            return candidate

    # candidate is the lowest tier here
    return replace(candidate, backstop_needed=True)

def simulate_all_apys(
    current_supply: int,
    vault_value: int,
    time_elapsed: int,
    mgmt_fee_tokens: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> Tuple[int, ...]:
    """Hypothetical backing ratio for every tier, highest rate first. Commits nothing."""
    _validate_inputs(current_supply, vault_value)

    ratios = []
    for tier in constants.yield_tiers:
        new_supply, _, _ = calculate_rebase_supply(
            current_supply, tier.monthly_rate, time_elapsed, mgmt_fee_tokens, constants
        )
        ratios.append(calculate_backing_ratio(vault_value, new_supply))
    return tuple(ratios)

def get_apy_in_bps(tier_id: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> int:
    return constants.tier(tier_id).apy_bps

def get_monthly_rate(tier_id: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> int:
    return constants.tier(tier_id).monthly_rate
