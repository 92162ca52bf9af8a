"""Three-zone capital reallocation between Senior, Junior and Reserve

Zone 1 (> 110%):        profit spillover, Senior excess split 80/20 to Junior/Reserve
Zone 2 (100% - 110%):   healthy buffer, no transfer
Zone 3 (< 100%):        backstop, Reserve then Junior restore Senior to 100.9%
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Tuple
from ..state.protocol_config import ProtocolConstants, DEFAULT_CONSTANTS
from ..fixed_point import checked_mul, checked_add

class Zone(IntEnum):
    BACKSTOP = 0
    HEALTHY = 1
    SPILLOVER = 2

@dataclass(frozen=True)
class SpilloverResult:
    excess: int
    to_junior: int
    to_reserve: int
    senior_final_value: int

@dataclass(frozen=True)
class BackstopResult:
    deficit: int
    from_reserve: int
    from_junior: int
    senior_final_value: int
    fully_restored: bool

def needs_profit_spillover(backing_ratio: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> bool:
    return backing_ratio > constants.senior_target_backing

def is_healthy_buffer_zone(backing_ratio: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> bool:
    # both boundaries belong to the healthy zone
    return constants.senior_trigger_backing <= backing_ratio <= constants.senior_target_backing

def needs_backstop(backing_ratio: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> bool:
    return backing_ratio < constants.senior_trigger_backing

def determine_zone(backing_ratio: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> Zone:
    """Classify a backing ratio. Recomputed on every call, never stored."""
    if needs_profit_spillover(backing_ratio, constants):
        return Zone.SPILLOVER
    if needs_backstop(backing_ratio, constants):
        return Zone.BACKSTOP
    return Zone.HEALTHY

def calculate_zone_thresholds(
    new_supply: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> Tuple[int, int, int]:
    """Absolute USD levels (target 110%, trigger 100%, restore 100.9%) for a supply"""
    target = checked_mul(new_supply, constants.senior_target_backing) // constants.precision
    trigger = checked_mul(new_supply, constants.senior_trigger_backing) // constants.precision
    restore = checked_mul(new_supply, constants.senior_restore_backing) // constants.precision
    return target, trigger, restore

def calculate_profit_spillover(
    vault_value: int,
    new_supply: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> SpilloverResult:
    """Move Senior value above the 110% target out to Junior and Reserve

    Senior ends at exactly the target; the two shares are floored, so
    to_junior + to_reserve may fall one unit short of the excess.
    """
    target = checked_mul(new_supply, constants.senior_target_backing) // constants.precision
    if vault_value <= target:
        return SpilloverResult(excess=0, to_junior=0, to_reserve=0, senior_final_value=vault_value)

    excess = vault_value - target
    to_junior = checked_mul(excess, constants.junior_spillover_share) // constants.precision
    to_reserve = checked_mul(excess, constants.reserve_spillover_share) // constants.precision
    return SpilloverResult(
        excess=excess,
        to_junior=to_junior,
        to_reserve=to_reserve,
        senior_final_value=target,
    )

def calculate_backstop(
    vault_value: int,
    new_supply: int,
    reserve_value: int,
    junior_value: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> BackstopResult:
    """Pull value into Senior up to the 100.9% restore level

    Reserve pays first, Junior covers what remains, each up to its full
    value. A shortfall is reported through fully_restored, never reverted.
    """
    restore = checked_mul(new_supply, constants.senior_restore_backing) // constants.precision
    if vault_value >= restore:
        return BackstopResult(
            deficit=0,
            from_reserve=0,
            from_junior=0,
            senior_final_value=vault_value,
            fully_restored=True,
        )

    deficit = restore - vault_value
    from_reserve = min(reserve_value, deficit)
    from_junior = min(junior_value, deficit - from_reserve)
    remaining = deficit - from_reserve - from_junior

    return BackstopResult(
        deficit=deficit,
        from_reserve=from_reserve,
        from_junior=from_junior,
        senior_final_value=checked_add(vault_value, from_reserve + from_junior),
        fully_restored=remaining == 0,
    )
