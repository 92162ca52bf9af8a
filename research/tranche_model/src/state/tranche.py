"""Tranche state management"""
from dataclasses import dataclass
from enum import Enum
from ..constants import PRECISION
from ..fixed_point import (
    checked_add,
    checked_sub,
    calculate_backing_ratio,
    calculate_balance_from_shares,
)

class Tranche(Enum):
    SENIOR = "senior"
    JUNIOR = "junior"
    RESERVE = "reserve"

@dataclass
class TrancheRecord:
    """USD value held by a tranche, scaled by PRECISION"""
    value: int = 0

    def credit(self, amount: int) -> None:
        self.value = checked_add(self.value, amount)

    def debit(self, amount: int) -> None:
        """Remove value, refusing to go negative"""
        self.value = checked_sub(self.value, amount)

@dataclass
class SeniorTrancheRecord(TrancheRecord):
    """Rebasing Senior tranche

    Holders own internal shares; visible balances are shares * rebase_index.
    total_supply tracks total_shares * rebase_index / PRECISION up to rounding.
    """
    total_supply: int = 0
    total_shares: int = 0
    rebase_index: int = PRECISION
    epoch: int = 0
    last_rebase_time: int = 0

    @classmethod
    def genesis(cls, shares: int, value: int, timestamp: int = 0) -> "SeniorTrancheRecord":
        """Fresh record with index 1.0 and supply equal to shares"""
        return cls(
            value=value,
            total_supply=shares,
            total_shares=shares,
            rebase_index=PRECISION,
            epoch=0,
            last_rebase_time=timestamp,
        )

    def balance_of(self, shares: int) -> int:
        return calculate_balance_from_shares(shares, self.rebase_index)

    def backing_ratio(self) -> int:
        return calculate_backing_ratio(self.value, self.total_supply)
