"""Protocol constants fixed at genesis"""
from dataclasses import dataclass
from typing import Tuple
from ..errors import InvalidConfigError, InvalidTierError
from ..constants import (
    PRECISION,
    BPS_DENOMINATOR,
    SECONDS_PER_YEAR,
    SECONDS_PER_MONTH,
    MAX_APY,
    MID_APY,
    MIN_APY,
    MAX_MONTHLY_RATE,
    MID_MONTHLY_RATE,
    MIN_MONTHLY_RATE,
    MGMT_FEE_ANNUAL,
    PERF_FEE,
    EARLY_WITHDRAWAL_PENALTY,
    COOLDOWN_PERIOD,
    SENIOR_TARGET_BACKING,
    SENIOR_TRIGGER_BACKING,
    SENIOR_RESTORE_BACKING,
    JUNIOR_SPILLOVER_SHARE,
    RESERVE_SPILLOVER_SHARE,
    DEPOSIT_CAP_MULTIPLIER,
)

@dataclass(frozen=True)
class YieldTier:
    """One rung of the APY waterfall"""
    tier_id: int
    apy_bps: int
    monthly_rate: int  # scaled by PRECISION

DEFAULT_YIELD_TIERS: Tuple[YieldTier, ...] = (
    YieldTier(tier_id=3, apy_bps=MAX_APY, monthly_rate=MAX_MONTHLY_RATE),
    YieldTier(tier_id=2, apy_bps=MID_APY, monthly_rate=MID_MONTHLY_RATE),
    YieldTier(tier_id=1, apy_bps=MIN_APY, monthly_rate=MIN_MONTHLY_RATE),
)

@dataclass(frozen=True)
class ProtocolConstants:
    """Every rate and threshold the engine reads

    Defaults are the genesis values from constants.py. Instances are frozen;
    the engine never mutates them.
    """
    precision: int = PRECISION
    bps_denominator: int = BPS_DENOMINATOR
    seconds_per_year: int = SECONDS_PER_YEAR
    seconds_per_month: int = SECONDS_PER_MONTH
    yield_tiers: Tuple[YieldTier, ...] = DEFAULT_YIELD_TIERS  # highest rate first
    mgmt_fee_annual: int = MGMT_FEE_ANNUAL
    perf_fee: int = PERF_FEE
    early_withdrawal_penalty: int = EARLY_WITHDRAWAL_PENALTY
    cooldown_period: int = COOLDOWN_PERIOD
    senior_target_backing: int = SENIOR_TARGET_BACKING
    senior_trigger_backing: int = SENIOR_TRIGGER_BACKING
    senior_restore_backing: int = SENIOR_RESTORE_BACKING
    junior_spillover_share: int = JUNIOR_SPILLOVER_SHARE
    reserve_spillover_share: int = RESERVE_SPILLOVER_SHARE
    deposit_cap_multiplier: int = DEPOSIT_CAP_MULTIPLIER

    def __post_init__(self):
        # fixed_point.py scales every ratio and balance by the module-level PRECISION
        if self.precision != PRECISION:
            raise InvalidConfigError(f"precision is fixed at {PRECISION}")
        if self.junior_spillover_share + self.reserve_spillover_share != self.precision:
            raise InvalidConfigError("Spillover shares must sum to 100%")
        if not (self.senior_trigger_backing < self.senior_restore_backing < self.senior_target_backing):
            raise InvalidConfigError("Zone thresholds must satisfy trigger < restore < target")
        if not self.yield_tiers:
            raise InvalidConfigError("At least one yield tier is required")
        rates = [tier.monthly_rate for tier in self.yield_tiers]
        if any(higher <= lower for higher, lower in zip(rates, rates[1:])):
            raise InvalidConfigError("Yield tiers must be ordered by strictly descending rate")

    @property
    def lowest_tier(self) -> YieldTier:
        return self.yield_tiers[-1]

    def tier(self, tier_id: int) -> YieldTier:
        """Look up a tier by id"""
        for tier in self.yield_tiers:
            if tier.tier_id == tier_id:
                return tier
        raise InvalidTierError(f"Unknown yield tier {tier_id}")

DEFAULT_CONSTANTS = ProtocolConstants()
