"""Senior rebase orchestration

One epoch runs, in order:
1. management fee tokens from elapsed time and gross Senior value
2. APY waterfall against current supply and value
3. zone classification from the hypothetical new supply
4. spillover or backstop transfers between tranches
5. new rebase index from the selected rate alone
6. commit of supply, shares and index

compute_rebase is pure and works on copies. TrancheLedger owns the live
records and swaps the copies in only when every step has succeeded.
"""
import threading
from dataclasses import dataclass, field, replace, asdict
from typing import Any, Dict, List, Optional, Tuple

import structlog

from ..state.protocol_config import ProtocolConstants, DEFAULT_CONSTANTS
from ..state.tranche import Tranche, TrancheRecord, SeniorTrancheRecord
from ..errors import RebaseTooSoonError, LedgerNotInitializedError
from ..constants import MIN_REBASE_INTERVAL
from ..fixed_point import (
    checked_add,
    checked_sub,
    calculate_backing_ratio,
    calculate_shares_from_balance,
    calculate_deposit_cap,
    check_deposit_cap,
)
from .accrue_fees import (
    calculate_management_fee_tokens,
    calculate_new_rebase_index,
    calculate_withdrawal_penalty,
)
from .select_apy import select_dynamic_apy
from .allocate_zone import (
    Zone,
    determine_zone,
    calculate_profit_spillover,
    calculate_backstop,
)
from .update_vault_value import update_vault_value

log = structlog.get_logger()

@dataclass(frozen=True)
class Transfer:
    """Value moved between two tranches during an epoch"""
    source: Tranche
    destination: Tranche
    amount: int

@dataclass(frozen=True)
class RebaseEvent:
    """Per-epoch record of what the rebase did. Not persisted by the engine."""
    epoch: int
    time_elapsed: int
    mgmt_fee_tokens: int
    user_tokens: int
    perf_fee_tokens: int
    fee_shares: int
    tier_id: int
    apy_bps: int
    monthly_rate: int
    old_supply: int
    new_supply: int
    old_index: int
    new_index: int
    backing_ratio: int  # V / S_new before any transfer
    zone: Zone
    backstop_needed: bool
    fully_restored: Optional[bool] = None  # None when no backstop ran
    transfers: Tuple[Transfer, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        """Plain snapshot for callers that persist epochs"""
        snapshot = asdict(self)
        snapshot["zone"] = self.zone.name
        snapshot["transfers"] = [
            {
                "source": transfer.source.value,
                "destination": transfer.destination.value,
                "amount": transfer.amount,
            }
            for transfer in self.transfers
        ]
        return snapshot

@dataclass(frozen=True)
class RebaseOutcome:
    senior: SeniorTrancheRecord
    junior: TrancheRecord
    reserve: TrancheRecord
    event: RebaseEvent

def compute_rebase(
    senior: SeniorTrancheRecord,
    junior: TrancheRecord,
    reserve: TrancheRecord,
    time_elapsed: int,
    constants: ProtocolConstants = DEFAULT_CONSTANTS
) -> RebaseOutcome:
    """Run one epoch over copies of the three tranche records"""
    # Step 1: management fee dilutes supply, vault value stays gross
    mgmt_fee_tokens = calculate_management_fee_tokens(senior.value, time_elapsed, constants)

    # Step 2: tier waterfall; new_supply already carries mgmt_fee_tokens
    selection = select_dynamic_apy(
        senior.total_supply, senior.value, time_elapsed, mgmt_fee_tokens, constants
    )

    # Step 3
    backing_ratio = calculate_backing_ratio(senior.value, selection.new_supply)
    zone = determine_zone(backing_ratio, constants)

    new_senior = replace(senior)
    new_junior = replace(junior)
    new_reserve = replace(reserve)
    transfers: List[Transfer] = []
    fully_restored = None

    # Step 4
    if zone == Zone.SPILLOVER:
        spill = calculate_profit_spillover(senior.value, selection.new_supply, constants)
        new_senior.value = spill.senior_final_value
        new_junior.credit(spill.to_junior)
        new_reserve.credit(spill.to_reserve)
        if spill.to_junior:
            transfers.append(Transfer(Tranche.SENIOR, Tranche.JUNIOR, spill.to_junior))
        if spill.to_reserve:
            transfers.append(Transfer(Tranche.SENIOR, Tranche.RESERVE, spill.to_reserve))
    elif zone == Zone.BACKSTOP or selection.backstop_needed:
        backstop = calculate_backstop(
            senior.value, selection.new_supply, reserve.value, junior.value, constants
        )
        new_reserve.debit(backstop.from_reserve)
        new_junior.debit(backstop.from_junior)
        new_senior.value = backstop.senior_final_value
        fully_restored = backstop.fully_restored
        if backstop.from_reserve:
            transfers.append(Transfer(Tranche.RESERVE, Tranche.SENIOR, backstop.from_reserve))
        if backstop.from_junior:
            transfers.append(Transfer(Tranche.JUNIOR, Tranche.SENIOR, backstop.from_junior))

    # Step 5: user rate only, the performance fee is minted as tokens instead
    new_index = calculate_new_rebase_index(
        senior.rebase_index, selection.monthly_rate, time_elapsed, constants
    )

    # Step 6: fee tokens become treasury shares at the new index
    fee_shares = calculate_shares_from_balance(
        checked_add(selection.fee_tokens, mgmt_fee_tokens), new_index
    )
    new_senior.total_supply = selection.new_supply
    new_senior.total_shares = checked_add(senior.total_shares, fee_shares)
    new_senior.rebase_index = new_index
    new_senior.epoch = senior.epoch + 1

    event = RebaseEvent(
        epoch=new_senior.epoch,
        time_elapsed=time_elapsed,
        mgmt_fee_tokens=mgmt_fee_tokens,
        user_tokens=selection.user_tokens,
        perf_fee_tokens=selection.fee_tokens,
        fee_shares=fee_shares,
        tier_id=selection.tier.tier_id,
        apy_bps=selection.tier.apy_bps,
        monthly_rate=selection.monthly_rate,
        old_supply=senior.total_supply,
        new_supply=selection.new_supply,
        old_index=senior.rebase_index,
        new_index=new_index,
        backing_ratio=backing_ratio,
        zone=zone,
        backstop_needed=selection.backstop_needed,
        fully_restored=fully_restored,
        transfers=tuple(transfers),
    )
    return RebaseOutcome(senior=new_senior, junior=new_junior, reserve=new_reserve, event=event)

class TrancheLedger:
    """Single owner of the Senior, Junior and Reserve records

    Every mutation runs under one lock, so no caller can observe a
    partially applied rebase.
    """

    def __init__(
        self,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
        min_rebase_interval: int = MIN_REBASE_INTERVAL
    ):
        self.constants = constants
        self.min_rebase_interval = min_rebase_interval
        self.senior: Optional[SeniorTrancheRecord] = None
        self.junior: Optional[TrancheRecord] = None
        self.reserve: Optional[TrancheRecord] = None
        self._lock = threading.Lock()

    def initialize(
        self,
        senior_shares: int,
        senior_value: int,
        junior_value: int,
        reserve_value: int,
        timestamp: int
    ) -> None:
        with self._lock:
            self.senior = SeniorTrancheRecord.genesis(senior_shares, senior_value, timestamp)
            self.junior = TrancheRecord(value=junior_value)
            self.reserve = TrancheRecord(value=reserve_value)
        log.info(
            "ledger.initialized",
            senior_shares=senior_shares,
            senior_value=senior_value,
            junior_value=junior_value,
            reserve_value=reserve_value,
            timestamp=timestamp,
        )

    def _require_initialized(self) -> None:
        if self.senior is None or self.junior is None or self.reserve is None:
            raise LedgerNotInitializedError("Ledger has no tranche records yet")

    def rebase(self, current_time: int) -> RebaseEvent:
        """Run one epoch and commit it, or raise and commit nothing"""
        with self._lock:
            self._require_initialized()
            time_elapsed = checked_sub(current_time, self.senior.last_rebase_time)
            if time_elapsed < self.min_rebase_interval:
                log.warning(
                    "rebase.rejected",
                    time_elapsed=time_elapsed,
                    min_rebase_interval=self.min_rebase_interval,
                )
                raise RebaseTooSoonError(
                    f"Only {time_elapsed}s since last rebase, minimum is {self.min_rebase_interval}s"
                )

            outcome = compute_rebase(
                self.senior, self.junior, self.reserve, time_elapsed, self.constants
            )
            self.senior = replace(outcome.senior, last_rebase_time=current_time)
            self.junior = outcome.junior
            self.reserve = outcome.reserve

        event = outcome.event
        log.info(
            "rebase.executed",
            epoch=event.epoch,
            time_elapsed=event.time_elapsed,
            apy_bps=event.apy_bps,
            zone=event.zone.name,
            new_supply=event.new_supply,
            new_index=event.new_index,
        )
        if event.fully_restored is False:
            log.warning(
                "rebase.backstop_partial",
                epoch=event.epoch,
                senior_value=outcome.senior.value,
                new_supply=event.new_supply,
            )
        return event

    def mark_to_market(self, tranche: Tranche, profit_bps: int) -> int:
        """Apply a signed bps profit/loss to one tranche value"""
        with self._lock:
            self._require_initialized()
            record = self._record(tranche)
            new_value = update_vault_value(record, profit_bps)
        log.info("ledger.vault_value_marked", tranche=tranche.value, profit_bps=profit_bps, value=new_value)
        return new_value

    def withdrawal_penalty(self, amount: int, cooldown_start: int, current_time: int) -> Tuple[int, int]:
        return calculate_withdrawal_penalty(amount, cooldown_start, current_time, self.constants)

    def deposit_cap(self) -> int:
        with self._lock:
            self._require_initialized()
            return calculate_deposit_cap(self.reserve.value, self.constants.deposit_cap_multiplier)

    def check_deposit(self, amount: int) -> int:
        """Validate a Senior deposit against the cap, returning capacity left"""
        with self._lock:
            self._require_initialized()
            return check_deposit_cap(
                self.senior.total_supply, amount, self.reserve.value, self.constants.deposit_cap_multiplier
            )

    def total_value(self) -> int:
        with self._lock:
            self._require_initialized()
            return self.senior.value + self.junior.value + self.reserve.value

    def _record(self, tranche: Tranche) -> TrancheRecord:
        return {
            Tranche.SENIOR: self.senior,
            Tranche.JUNIOR: self.junior,
            Tranche.RESERVE: self.reserve,
        }[tranche]
