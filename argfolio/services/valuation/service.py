# argfolio/services/valuation/service.py
"""
Valuation Service - Main orchestrator for portfolio valuation.

This is the single entry point for all valuation operations:
- get_valuation(): Complete portfolio valuation as of today
- get_holdings(): Valued positions, optionally for one account
- run_automations(): Wallet yield catch-up and plazo fijo payouts

Design Principles:
- Dependency Injection: FX and price services injected via constructor
- Recompute from scratch: the ledger is rebuilt from all movements on
  every call; nothing derived is persisted
- No HTTP Knowledge: raises domain exceptions, not HTTPException
- Composable: uses specialized calculators for each task

Data Flow:
    FX rates ─┐ (fetched concurrently, joined before aggregation)
    Prices  ──┤
              ├─> AverageCostLedger ─> HoldingValueCalculator ─┐
    Movements ┘   FixedDepositProcessor ───────────────────────┤
                  DebtCalculator ──────────────────────────────┴─> PortfolioTotalsCalculator

Usage:
    service = ValuationService(repository, fx_service, price_service)
    valuation = service.get_valuation()
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date

from argfolio.models import AssetCategory
from argfolio.schemas.instruments import Instrument
from argfolio.schemas.movements import Movement
from argfolio.services.fixed_deposits.processor import FixedDepositProcessor
from argfolio.services.fixed_deposits.service import FixedDepositService
from argfolio.services.fx.rate_service import FxRateService, FxRatesResult
from argfolio.services.fx.resolver import FxResolver
from argfolio.services.ledger.average_cost import AverageCostLedger
from argfolio.services.ledger.debts import DebtCalculator
from argfolio.services.market_data.price_service import PriceService, PriceSnapshot
from argfolio.services.storage.repository import PortfolioRepository
from argfolio.services.valuation.calculators import HoldingValueCalculator, PortfolioTotalsCalculator
from argfolio.services.valuation.types import HoldingValuation, PortfolioValuation
from argfolio.services.valuation_config import ValuationConfig
from argfolio.services.yield_accrual.service import YieldAccrualService
from argfolio.utils.date_utils import today_local

logger = logging.getLogger(__name__)


class ValuationService:
    """
    Main service for portfolio valuation operations.

    Attributes:
        repository: Storage facade
        _fx_service: Current rates with cached fallback
        _price_service: Manual, live and cached prices
    """

    def __init__(
            self,
            repository: PortfolioRepository,
            fx_service: FxRateService,
            price_service: PriceService,
    ) -> None:
        self.repository = repository
        self._fx_service = fx_service
        self._price_service = price_service
        self._ledger = AverageCostLedger()
        self._debt_calc = DebtCalculator()
        self._fd_processor = FixedDepositProcessor()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def get_valuation(
            self,
            today: date | None = None,
            fetch_live: bool = True,
    ) -> PortfolioValuation:
        """
        Value the whole portfolio.

        Args:
            today: Local date used for plazo fijo maturity (default: today)
            fetch_live: False to value from manual and cached prices only

        Returns:
            PortfolioValuation; data problems are reported in `warnings`,
            never raised
        """
        today = today or today_local()

        config = ValuationConfig.from_preferences(self.repository.get_preferences())
        movements = self.repository.list_movements()
        instruments = {i.id: i for i in self.repository.list_instruments()}
        accounts = {a.id: a for a in self.repository.list_accounts()}

        fx_result, prices = self._fetch_market_data(
            self._referenced_instruments(movements, instruments),
            fetch_live,
        )
        resolver = FxResolver(fx_result.rates, config)

        ledger = self._ledger.build(movements, instruments, resolver)

        valuation = PortfolioValuation(
            as_of=today,
            fx_rates=fx_result.rates,
            fx_is_fallback=fx_result.is_fallback,
            oversold_movement_ids=list(ledger.oversold_movement_ids),
        )
        valuation.warnings.extend(fx_result.warnings)
        valuation.warnings.extend(prices.warnings)
        valuation.warnings.extend(ledger.warnings)

        value_calc = HoldingValueCalculator(resolver)
        for position in ledger.open_positions():
            account = accounts.get(position.key.account_id)
            if position.key.is_cash:
                holding = value_calc.value_cash(position, account)
            else:
                instrument = instruments[position.key.instrument_id]
                holding = value_calc.value_instrument(
                    position,
                    instrument,
                    account,
                    prices.get(instrument.id),
                )
                if holding.price_status == "missing":
                    valuation.warnings.append(
                        f"No price for {instrument.symbol} in account {holding.account_name}; value unavailable"
                    )
            valuation.holdings.append(holding)

        fixed_deposits = self._fd_processor.derive(
            movements,
            today,
            resolver.rate_now(AssetCategory.PF),
        )
        debts = self._debt_calc.calculate(self.repository.list_debts(), movements)

        PortfolioTotalsCalculator(resolver).calculate(
            valuation,
            ledger,
            fixed_deposits,
            debts,
            config.top_n,
        )
        valuation.fixed_deposits = fixed_deposits

        logger.info(
            f"Valued {len(valuation.holdings)} holding(s): "
            f"{valuation.total_value_ars:.2f} ARS, {len(valuation.warnings)} warning(s)"
        )
        return valuation

    def get_holdings(
            self,
            account_id: str | None = None,
            fetch_live: bool = True,
    ) -> tuple[list[HoldingValuation], list[str]]:
        """
        Valued open positions, optionally restricted to one account.

        Returns:
            (holdings, warnings) where warnings cover the whole valuation

        Raises:
            AccountNotFoundError: `account_id` does not exist
        """
        if account_id is not None:
            self.repository.require_account(account_id)

        valuation = self.get_valuation(fetch_live=fetch_live)
        holdings = valuation.holdings
        if account_id is not None:
            holdings = [h for h in holdings if h.account_id == account_id]
        return holdings, valuation.warnings

    def run_automations(self, today: date | None = None) -> list[str]:
        """
        Apply the enabled daily automations before a valuation.

        Returns:
            Human-readable notes of what was done
        """
        today = today or today_local()
        preferences = self.repository.get_preferences()
        notes = []

        if preferences.auto_accrue_wallet_interest:
            report = YieldAccrualService(self.repository).run(today)
            if report.movements_created:
                notes.append(f"Accrued {report.movements_created} day(s) of wallet interest")

        if preferences.auto_settle_fixed_terms:
            payouts = FixedDepositService(self.repository).settle_matured(today)
            if payouts:
                notes.append(f"Settled {len(payouts)} matured fixed deposit(s)")

        return notes

    # =========================================================================
    # PRIVATE
    # =========================================================================

    @staticmethod
    def _referenced_instruments(
            movements: list[Movement],
            instruments: dict[str, Instrument],
    ) -> list[Instrument]:
        """Instruments that appear in at least one movement."""
        ids = {getattr(m, "instrument_id", None) for m in movements}
        return [instruments[i] for i in sorted(ids - {None}) if i in instruments]

    def _fetch_market_data(
            self,
            instruments: list[Instrument],
            fetch_live: bool,
    ) -> tuple[FxRatesResult, PriceSnapshot]:
        """Fetch rates and prices concurrently; both are joined before returning."""
        if not fetch_live:
            rates = self.repository.get_cached_fx_rates()
            fx_result = FxRatesResult(rates=rates, is_fallback=rates is not None)
            if rates is None:
                fx_result.warnings.append("No cached FX rates; cross-currency values unavailable")
            return fx_result, self._price_service.resolve_prices(instruments, fetch_live=False)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="valuation") as pool:
            fx_future = pool.submit(self._fx_service.get_rates)
            price_future = pool.submit(self._price_service.resolve_prices, instruments)
            return fx_future.result(), price_future.result()
