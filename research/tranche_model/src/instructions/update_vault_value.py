"""Signed profit/loss marks on a tranche value"""
from ..state.tranche import TrancheRecord
from ..errors import InvalidProfitBpsError
from ..fixed_point import apply_signed_percentage
from ..constants import MIN_PROFIT_BPS, MAX_PROFIT_BPS

def update_vault_value(record: TrancheRecord, profit_bps: int) -> int:
    """Apply a profit (positive) or loss (negative) in basis points to a tranche

    A single mark is bounded to -50% .. +100%; larger moves are split by the
    caller into several marks.
    """
    if profit_bps < MIN_PROFIT_BPS or profit_bps > MAX_PROFIT_BPS:
        raise InvalidProfitBpsError(
            f"profit_bps {profit_bps} outside [{MIN_PROFIT_BPS}, {MAX_PROFIT_BPS}]"
        )

    record.value = apply_signed_percentage(record.value, profit_bps)
    return record.value
