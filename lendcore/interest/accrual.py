"""Time-based interest accrual using borrow and supply indexes.

Balances that earn or owe interest are stored as index shares. An account's
debt is ``borrow_shares * borrow_index / INDEX_SCALE`` and the pool total is
the same expression over the summed shares, so account amounts and pool
totals round the same way however often accrual runs.

Rounding always favours the pool. Shares minted for a borrow and burned for a
withdrawal round up. Shares minted for a deposit and burned for a repayment
round down.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from ..fixed_point import INDEX_SCALE, SCALE, SECONDS_PER_YEAR, mul_div, mul_div_up
from ..models import Account, PoolState
from .rate_model import InterestRateModel, utilization

logger = logging.getLogger(__name__)

_YEAR_SCALE = SECONDS_PER_YEAR * SCALE


class InterestAccrualEngine:
    """Advance pool totals and indexes from ``last_accrual_time`` to ``now``.

    The borrow index grows linearly over each accrual interval, so the cost
    is constant however long the pool sat idle. All interest that borrowers
    owe is credited to depositors through the supply index, which keeps
    borrows within deposits.
    """

    def __init__(self, rate_model: InterestRateModel) -> None:
        self._rate_model = rate_model

    def accrue(self, state: PoolState, now: int) -> PoolState:
        """Return ``state`` advanced to ``now``; the input is never mutated."""
        elapsed = now - state.last_accrual_time
        if elapsed == 0:
            return state
        if elapsed < 0:
            logger.warning(
                "Clock reading %d is behind last accrual %d; skipping accrual",
                now,
                state.last_accrual_time,
            )
            return state

        rate = self._rate_model.get_borrow_rate(
            utilization(state.total_borrows, state.total_deposits)
        )
        borrow_index = state.borrow_index + state.borrow_index * rate * elapsed // _YEAR_SCALE
        total_borrows = mul_div(state.borrow_shares, borrow_index, INDEX_SCALE)
        interest = total_borrows - state.total_borrows

        supply_index = state.supply_index
        if interest > 0 and state.deposit_shares > 0:
            supply_index += mul_div(interest, INDEX_SCALE, state.deposit_shares)

        logger.debug(
            "Accrued %d over %ds at rate %d; borrow index %d -> %d",
            interest,
            elapsed,
            rate,
            state.borrow_index,
            borrow_index,
        )
        return replace(
            state,
            total_borrows=total_borrows,
            total_deposits=state.total_deposits + interest,
            borrow_index=borrow_index,
            supply_index=supply_index,
            last_accrual_time=now,
        )

    def preview(self, state: PoolState, now: int) -> PoolState:
        """Read-only accrual for queries; identical math, nothing is stored."""
        return self.accrue(state, now)


def current_debt(account: Account, state: PoolState) -> int:
    """Borrow balance with interest up to ``state.borrow_index``."""
    return mul_div(account.borrow_shares, state.borrow_index, INDEX_SCALE)


def current_deposit(account: Account, state: PoolState) -> int:
    """Deposit balance with interest up to ``state.supply_index``."""
    return mul_div(account.deposit_shares, state.supply_index, INDEX_SCALE)


def borrow_shares_for(amount: int, state: PoolState) -> int:
    return mul_div_up(amount, INDEX_SCALE, state.borrow_index)


def repay_shares_for(amount: int, state: PoolState) -> int:
    return mul_div(amount, INDEX_SCALE, state.borrow_index)


def deposit_shares_for(amount: int, state: PoolState) -> int:
    return mul_div(amount, INDEX_SCALE, state.supply_index)


def withdraw_shares_for(amount: int, state: PoolState) -> int:
    return mul_div_up(amount, INDEX_SCALE, state.supply_index)


def with_borrow_shares(state: PoolState, borrow_shares: int) -> PoolState:
    """Replace the pool's borrow shares and revalue ``total_borrows`` from them."""
    return replace(
        state,
        borrow_shares=borrow_shares,
        total_borrows=mul_div(borrow_shares, state.borrow_index, INDEX_SCALE),
    )
