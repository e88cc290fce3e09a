"""Pool ledger — deposits, collateral, borrows, repayments and liquidations.

Every mutating operation follows the same shape:

1. authorize the caller and validate the amount;
2. accrue interest into a *new* ``PoolState`` value;
3. run every check (balances, liquidity, risk engine);
4. move tokens through the collaborator;
5. commit the new pool state and account record together;
6. emit the event.

Nothing is written before step 5, so any raised error leaves the ledger
exactly as it was.
"""
from __future__ import annotations

import logging
from dataclasses import replace

from ..adapters.events import publish
from ..auth import require_authorization
from ..config import AppConfig
from ..errors import (
    AlreadyInitialized,
    ExceedsCapacity,
    InsufficientBalance,
    InsufficientLiquidity,
    InvalidInput,
    NoOutstandingDebt,
    NotInitialized,
    PositionHealthy,
    UnhealthyPosition,
)
from ..fixed_point import SCALE, format_scaled
from ..interest.accrual import (
    InterestAccrualEngine,
    borrow_shares_for,
    current_debt,
    current_deposit,
    deposit_shares_for,
    repay_shares_for,
    with_borrow_shares,
    withdraw_shares_for,
)
from ..interest.rate_model import InterestRateModel, utilization
from ..interfaces.clock import Clock
from ..interfaces.event_sink import EventSink
from ..interfaces.token import TokenTransfer
from ..models import (
    Account,
    LedgerEvent,
    LiquidationResult,
    PoolState,
    PositionSnapshot,
    RiskParameters,
    SimulatedAction,
)
from ..oracles.ledger_oracle import PriceOracle
from ..risk.engine import RiskEngine
from .accounts import AccountBook

logger = logging.getLogger(__name__)


class LendingPool:
    """Single collateral asset / single borrow asset lending pool."""

    def __init__(
        self,
        oracle: PriceOracle,
        rate_model: InterestRateModel,
        clock: Clock,
        lendable_token: TokenTransfer,
        collateral_token: TokenTransfer,
        events: EventSink | None = None,
    ) -> None:
        self._oracle = oracle
        self._rate_model = rate_model
        self._accrual = InterestAccrualEngine(rate_model)
        self._clock = clock
        self._lendable = lendable_token
        self._collateral = collateral_token
        self._events = events
        self._accounts = AccountBook()
        self._state: PoolState | None = None
        self._admin: str | None = None
        self._risk: RiskEngine | None = None

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        oracle: PriceOracle,
        rate_model: InterestRateModel,
        clock: Clock,
        lendable_token: TokenTransfer,
        collateral_token: TokenTransfer,
        events: EventSink | None = None,
    ) -> LendingPool:
        pool = cls(oracle, rate_model, clock, lendable_token, collateral_token, events)
        pool.initialize(
            config.pool.admin,
            config.pool.collateral_asset,
            config.pool.borrow_asset,
            config.pool.risk,
        )
        return pool

    # ------------------------------------------------------------------
    # Setup & admin
    # ------------------------------------------------------------------

    def initialize(
        self,
        admin: str,
        collateral_asset: str,
        borrow_asset: str,
        risk_params: RiskParameters | None = None,
    ) -> None:
        if self._state is not None:
            raise AlreadyInitialized("Lending pool already initialized")
        if not admin:
            raise InvalidInput("Pool admin must not be empty")
        if collateral_asset == borrow_asset:
            raise InvalidInput("Collateral and borrow assets must differ")
        if self._lendable.symbol != borrow_asset:
            raise InvalidInput(
                f"Lendable token is {self._lendable.symbol}, pool lends {borrow_asset}"
            )
        if self._collateral.symbol != collateral_asset:
            raise InvalidInput(
                f"Collateral token is {self._collateral.symbol}, pool takes {collateral_asset}"
            )
        if not self._rate_model.is_initialized:
            raise NotInitialized("Interest rate model must be initialized first")

        self._risk = RiskEngine(
            self._oracle, collateral_asset, borrow_asset, risk_params or RiskParameters()
        )
        self._admin = admin
        self._state = PoolState(last_accrual_time=self._clock.now())
        logger.info(
            "Lending pool initialized — lends %s against %s  (LTV %d bps, LT %d bps)",
            borrow_asset,
            collateral_asset,
            self._risk.parameters.ltv_ratio,
            self._risk.parameters.liquidation_threshold,
        )

    def set_risk_parameters(self, caller: str, params: RiskParameters) -> None:
        """Admin-only replacement of LTV, liquidation threshold and bonus."""
        risk = self._require_risk()
        require_authorization(caller, self._admin or "")
        risk.parameters = params
        logger.info(
            "Risk parameters updated — LTV %d  LT %d  bonus %d",
            params.ltv_ratio,
            params.liquidation_threshold,
            params.liquidation_bonus,
        )

    def accrue_interest(self) -> PoolState:
        """Commit accrual up to ``now`` without any balance change."""
        state = self._accrual.accrue(self._require_state(), self._clock.now())
        self._state = state
        return state

    # ------------------------------------------------------------------
    # Lendable asset
    # ------------------------------------------------------------------

    def deposit(self, caller: str, account: str, amount: int) -> int:
        """Supply ``amount`` of the lendable asset."""
        state, record = self._begin(caller, account, amount)

        minted = deposit_shares_for(amount, state)
        if minted == 0:
            raise InvalidInput(f"Deposit of {amount} is below one pool share")

        self._lendable.transfer_in(account, amount)

        record = replace(record, deposit_shares=record.deposit_shares + minted)
        state = replace(
            state,
            total_deposits=state.total_deposits + amount,
            deposit_shares=state.deposit_shares + minted,
        )
        self._commit(state, account, record)

        logger.info("Deposit — %s: %d %s", account, amount, self._lendable.symbol)
        self._emit("deposit", account, amount)
        return amount

    def withdraw(self, caller: str, account: str, amount: int) -> int:
        """Withdraw ``amount`` of supplied liquidity (interest included)."""
        state, record = self._begin(caller, account, amount)

        claim = current_deposit(record, state)
        if amount > claim:
            raise InsufficientBalance(f"{account} has {claim} deposited, requested {amount}")
        if amount > state.available_liquidity:
            raise InsufficientLiquidity(
                f"Pool liquidity {state.available_liquidity} is below {amount}"
            )

        if amount == claim:
            burned = record.deposit_shares
        else:
            burned = min(withdraw_shares_for(amount, state), record.deposit_shares)

        self._lendable.transfer_out(account, amount)

        record = replace(record, deposit_shares=record.deposit_shares - burned)
        state = replace(
            state,
            total_deposits=state.total_deposits - amount,
            deposit_shares=state.deposit_shares - burned,
        )
        self._commit(state, account, record)

        logger.info("Withdraw — %s: %d %s", account, amount, self._lendable.symbol)
        self._emit("withdraw", account, amount)
        return amount

    # ------------------------------------------------------------------
    # Collateral asset
    # ------------------------------------------------------------------

    def deposit_collateral(self, caller: str, account: str, amount: int) -> int:
        state, record = self._begin(caller, account, amount)

        self._collateral.transfer_in(account, amount)

        record = replace(record, collateral_balance=record.collateral_balance + amount)
        self._commit(state, account, record)

        logger.info("Collateral deposit — %s: %d %s", account, amount, self._collateral.symbol)
        self._emit("collateral_deposited", account, amount)
        return amount

    def withdraw_collateral(self, caller: str, account: str, amount: int) -> int:
        """Release collateral, provided any outstanding debt stays covered."""
        state, record = self._begin(caller, account, amount)
        risk = self._require_risk()

        if amount > record.collateral_balance:
            raise InsufficientBalance(
                f"{account} has {record.collateral_balance} collateral, requested {amount}"
            )

        remaining = record.collateral_balance - amount
        debt = current_debt(record, state)
        if debt > 0:
            projected = risk.assess(remaining, debt, strict=True)
            if remaining == 0 or projected.is_liquidatable:
                logger.warning(
                    "Collateral withdrawal rejected — %s: HF would be %s",
                    account,
                    format_scaled(projected.health_factor),
                )
                raise UnhealthyPosition(
                    f"Withdrawing {amount} would leave {account} with health factor "
                    f"{format_scaled(projected.health_factor)}"
                )

        self._collateral.transfer_out(account, amount)

        record = replace(record, collateral_balance=remaining)
        self._commit(state, account, record)

        logger.info("Collateral withdraw — %s: %d %s", account, amount, self._collateral.symbol)
        self._emit("collateral_withdrawn", account, amount)
        return amount

    # ------------------------------------------------------------------
    # Borrowing
    # ------------------------------------------------------------------

    def borrow(self, caller: str, account: str, amount: int) -> int:
        """Borrow ``amount`` of the lendable asset against posted collateral."""
        state, record = self._begin(caller, account, amount)
        risk = self._require_risk()

        if amount > state.available_liquidity:
            raise InsufficientLiquidity(
                f"Pool liquidity {state.available_liquidity} is below {amount}"
            )

        minted = borrow_shares_for(amount, state)
        new_record = replace(record, borrow_shares=record.borrow_shares + minted)
        new_state = with_borrow_shares(state, state.borrow_shares + minted)

        capacity = risk.max_borrow(record.collateral_balance, strict=True)
        new_debt = current_debt(new_record, new_state)
        if new_debt > capacity:
            logger.warning(
                "Borrow rejected — %s: debt %d would exceed capacity %d",
                account,
                new_debt,
                capacity,
            )
            raise ExceedsCapacity(
                f"Borrowing {amount} brings debt to {new_debt}, capacity is {capacity}"
            )

        # share rounding can push the pool total one unit past the amount lent
        if new_state.total_borrows > new_state.total_deposits:
            raise InsufficientLiquidity(
                f"Pool liquidity {state.available_liquidity} is below {amount}"
            )

        self._lendable.transfer_out(account, amount)
        self._commit(new_state, account, new_record)

        logger.info("Borrow — %s: %d %s", account, amount, self._lendable.symbol)
        self._emit("borrow", account, amount)
        return amount

    def repay(self, caller: str, account: str, amount: int) -> int:
        """Repay up to ``amount``; returns what was actually repaid."""
        state, record = self._begin(caller, account, amount)

        debt = current_debt(record, state)
        if debt == 0:
            raise NoOutstandingDebt(f"{account} has no outstanding borrow")
        repay_amount = min(amount, debt)
        if repay_amount == debt:
            burned = record.borrow_shares
        else:
            burned = repay_shares_for(repay_amount, state)

        self._lendable.transfer_in(account, repay_amount)

        record = replace(record, borrow_shares=record.borrow_shares - burned)
        state = _release_debt(state, burned, repay_amount)
        self._commit(state, account, record)

        logger.info("Repay — %s: %d %s", account, repay_amount, self._lendable.symbol)
        self._emit("repay", account, repay_amount)
        return repay_amount

    def liquidate(self, caller: str, liquidator: str, borrower: str) -> LiquidationResult:
        """Repay all of an unhealthy borrower's debt in exchange for collateral.

        The liquidator pays the full debt in the lendable asset and receives
        collateral worth the debt plus the liquidation bonus, capped at the
        borrower's collateral balance. Leftover collateral stays with the
        borrower.
        """
        state = self._require_state()
        risk = self._require_risk()
        require_authorization(caller, liquidator)
        if liquidator == borrower:
            raise InvalidInput("An account cannot liquidate its own position")

        state = self._accrual.accrue(state, self._clock.now())
        record = self._accounts.get(borrower)

        debt = current_debt(record, state)
        if debt == 0:
            raise NoOutstandingDebt(f"{borrower} has no outstanding borrow")

        assessment = risk.assess(record.collateral_balance, debt, strict=True)
        if not assessment.is_liquidatable:
            raise PositionHealthy(
                f"{borrower} health factor {format_scaled(assessment.health_factor)} "
                "is not below 1.0"
            )
        seized = risk.liquidation_seizure(record.collateral_balance, debt)

        self._lendable.transfer_in(liquidator, debt)
        if seized > 0:
            self._collateral.transfer_out(liquidator, seized)

        burned = record.borrow_shares
        record = replace(
            record, borrow_shares=0, collateral_balance=record.collateral_balance - seized
        )
        state = _release_debt(state, burned, debt)
        self._commit(state, borrower, record)

        logger.warning(
            "Liquidation — %s liquidated %s: repaid %d %s, seized %d %s (HF %s)",
            liquidator,
            borrower,
            debt,
            self._lendable.symbol,
            seized,
            self._collateral.symbol,
            format_scaled(assessment.health_factor),
        )
        self._emit(
            "liquidation",
            borrower,
            debt,
            {"liquidator": liquidator, "collateral_seized": seized},
        )
        return LiquidationResult(
            borrower=borrower,
            liquidator=liquidator,
            debt_repaid=debt,
            collateral_seized=seized,
        )

    # ------------------------------------------------------------------
    # Queries: previewed to now, never committed
    # ------------------------------------------------------------------

    @property
    def admin(self) -> str:
        self._require_state()
        return self._admin or ""

    @property
    def risk_parameters(self) -> RiskParameters:
        return self._require_risk().parameters

    @property
    def pool_state(self) -> PoolState:
        """Committed pool state, as of the last accrual."""
        return self._require_state()

    def account(self, account: str) -> Account:
        """Committed account record: index shares and raw collateral."""
        self._require_state()
        return self._accounts.get(account)

    def account_count(self) -> int:
        return len(self._accounts)

    def total_deposits(self) -> int:
        return self._preview().total_deposits

    def total_borrows(self) -> int:
        return self._preview().total_borrows

    def utilization_rate(self) -> int:
        state = self._preview()
        return utilization(state.total_borrows, state.total_deposits)

    def borrow_rate(self) -> int:
        return self._rate_model.get_borrow_rate(self.utilization_rate())

    def supply_rate(self) -> int:
        return self._rate_model.get_supply_rate(self.utilization_rate())

    def deposit_balance(self, account: str) -> int:
        return current_deposit(self._accounts.get(account), self._preview())

    def borrow_balance(self, account: str) -> int:
        return current_debt(self._accounts.get(account), self._preview())

    def collateral_balance(self, account: str) -> int:
        self._require_state()
        return self._accounts.get(account).collateral_balance

    def health_factor(self, account: str) -> int:
        return self.position(account).health_factor

    def max_borrow(self, account: str) -> int:
        return self.position(account).max_borrow

    def position(self, account: str) -> PositionSnapshot:
        state = self._preview()
        record = self._accounts.get(account)
        debt = current_debt(record, state)
        assessment = self._require_risk().assess(record.collateral_balance, debt, strict=False)
        return PositionSnapshot(
            account=account,
            deposit_balance=current_deposit(record, state),
            borrow_balance=debt,
            collateral_balance=record.collateral_balance,
            collateral_value_usd=assessment.collateral_value_usd,
            borrow_value_usd=assessment.borrow_value_usd,
            max_borrow=assessment.max_borrow,
            health_factor=assessment.health_factor,
        )

    def simulate_health_factor(
        self, account: str, action: SimulatedAction, amount: int
    ) -> int:
        """Health factor ``account`` would have after ``action`` — nothing is applied."""
        if amount <= 0:
            raise InvalidInput("Amount must be positive")
        state = self._preview()
        record = self._accounts.get(account)
        collateral = record.collateral_balance
        debt = current_debt(record, state)

        if action is SimulatedAction.DEPOSIT_COLLATERAL:
            collateral += amount
        elif action is SimulatedAction.WITHDRAW_COLLATERAL:
            if amount > collateral:
                raise InsufficientBalance(
                    f"{account} has {collateral} collateral, simulated withdrawal {amount}"
                )
            collateral -= amount
        elif action is SimulatedAction.BORROW:
            debt += amount
        elif action is SimulatedAction.REPAY:
            debt -= min(amount, debt)

        return self._require_risk().health_factor(collateral, debt, strict=False)

    def liquidatable_accounts(self) -> list[PositionSnapshot]:
        """Positions with debt whose health factor is below 1.0."""
        self._require_risk()
        positions = []
        for account in self._accounts:
            snapshot = self.position(account)
            if snapshot.borrow_balance > 0 and snapshot.health_factor < SCALE:
                positions.append(snapshot)
        return positions

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_state(self) -> PoolState:
        if self._state is None:
            raise NotInitialized("Lending pool not initialized")
        return self._state

    def _require_risk(self) -> RiskEngine:
        self._require_state()
        if self._risk is None:
            raise NotInitialized("Lending pool not initialized")
        return self._risk

    def _preview(self) -> PoolState:
        return self._accrual.preview(self._require_state(), self._clock.now())

    def _begin(self, caller: str, account: str, amount: int) -> tuple[PoolState, Account]:
        """Authorize, validate and accrue; returns uncommitted state and the account."""
        state = self._require_state()
        require_authorization(caller, account)
        if amount <= 0:
            raise InvalidInput(f"Amount must be positive (got {amount})")

        state = self._accrual.accrue(state, self._clock.now())
        return state, self._accounts.get(account)

    def _commit(self, state: PoolState, account: str, record: Account) -> None:
        self._state = state
        self._accounts.put(account, record)

    def _emit(self, name: str, account: str, amount: int, details: dict | None = None) -> None:
        publish(
            self._events,
            LedgerEvent(
                name=name,
                account=account,
                amount=amount,
                timestamp=self._clock.now(),
                details=details or {},
            ),
        )


def _release_debt(state: PoolState, burned: int, paid: int) -> PoolState:
    """Burn ``burned`` borrow shares against a payment of ``paid``.

    A full repayment can drop the pool total by one unit more than the
    account's floored debt. That unit was credited to depositors at accrual
    but never reaches the vault, so it comes back out of ``total_deposits``.
    """
    released = with_borrow_shares(state, state.borrow_shares - burned)
    dust = state.total_borrows - released.total_borrows - paid
    if dust > 0:
        released = replace(released, total_deposits=released.total_deposits - dust)
    return released
