"""
Unit tests - Imputación de operaciones en caja y bancos.
"""

import logging
import uuid
from decimal import Decimal

import pytest

from caja.domain.entities import BankBalances, CashRegisterBalances, TransactionInput
from caja.domain.exceptions import ValidationError
from caja.domain.services import LedgerPoster
from caja.domain.value_objects import BalanceDelta, Currency, CurrencyOperation, LedgerBook, Money

BANK = "galicia"

BANK_REQUIRED = [op for op in CurrencyOperation if op.requires_bank]


class TestBankRequirement:
    """Banco obligatorio salvo USDT_IN, USDT_OUT, USD_IN, USD_OUT."""

    @pytest.mark.parametrize("operation", BANK_REQUIRED)
    def test_missing_bank_rejected_without_side_effects(self, poster, make_input, operation):
        """Sin banco: ValidationError y saldos sin cambios."""
        data = make_input(operation, "100", bank_id=None, exchange_rate="10", calculated_amount="10")

        with pytest.raises(ValidationError, match=".*requiere seleccionar un banco.*"):
            poster.post(data)

        assert poster.cash == CashRegisterBalances()
        assert poster.banks == BankBalances()
        assert len(poster.log) == 0

    def test_no_bank_operations(self):
        no_bank = {op for op in CurrencyOperation if not op.requires_bank}
        assert no_bank == {
            CurrencyOperation.USDT_IN,
            CurrencyOperation.USDT_OUT,
            CurrencyOperation.USD_IN,
            CurrencyOperation.USD_OUT,
        }

    def test_usd_in_without_bank_moves_cash_only(self, poster, make_input):
        poster.post(make_input(CurrencyOperation.USD_IN, "50", bank_id=None))

        assert poster.cash.get(Currency.USD) == Decimal("50")
        assert poster.banks.banks() == []


class TestInputValidation:

    def test_negative_amount_rejected(self, poster, make_input):
        with pytest.raises(ValidationError, match=".*monto.*"):
            poster.post(make_input(CurrencyOperation.ARS_IN, "-1"))
        assert len(poster.log) == 0

    def test_non_positive_exchange_rate_rejected(self, poster, make_input):
        data = TransactionInput(
            operation_type="Mostrador",
            currency_operation=CurrencyOperation.USD_BUY,
            amount=Decimal("1000"),
            bank_id=BANK,
            exchange_rate=Decimal("0"),
            calculated_amount=Decimal("1"),
        )
        with pytest.raises(ValidationError, match=".*cotización.*"):
            poster.post(data)
        assert poster.cash.get(Currency.ARS) == Decimal("0")

    def test_zero_amount_allowed(self, poster, make_input):
        transaction = poster.post(make_input(CurrencyOperation.ARS_OUT, "0"))
        assert transaction.amount == Decimal("0")
        assert poster.cash.get(Currency.ARS) == Decimal("0")


class TestPostingRules:
    """Movimientos por operación (caja y banco)."""

    def test_ars_in(self, poster, make_input):
        """ARS_IN 100: caja ARS +100, banco ARS -100."""
        poster.post(make_input(CurrencyOperation.ARS_IN, "100"))

        assert poster.cash.get(Currency.ARS) == Decimal("100")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("-100")

    def test_ars_out(self, poster, make_input):
        poster.post(make_input(CurrencyOperation.ARS_OUT, "100"))

        assert poster.cash.get(Currency.ARS) == Decimal("-100")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("100")

    def test_usdt_buy(self, poster, make_input):
        """Compra 1 USDT a 1000: caja ARS -1000, USDT +1, banco ARS -1000."""
        poster.post(make_input(
            CurrencyOperation.USDT_BUY, "1000", exchange_rate="1000", calculated_amount="1"
        ))

        assert poster.cash.get(Currency.ARS) == Decimal("-1000")
        assert poster.cash.get(Currency.USDT) == Decimal("1")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("-1000")

    def test_usdt_sell(self, poster, make_input):
        """Venta 2 USDT a 1000: caja USDT -2, ARS +2000, banco ARS +2000."""
        poster.post(make_input(
            CurrencyOperation.USDT_SELL, "2", exchange_rate="1000", calculated_amount="2000"
        ))

        assert poster.cash.get(Currency.USDT) == Decimal("-2")
        assert poster.cash.get(Currency.ARS) == Decimal("2000")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("2000")

    @pytest.mark.parametrize("operation, expected", [
        (CurrencyOperation.USDT_IN, Decimal("5")),
        (CurrencyOperation.USDT_OUT, Decimal("-5")),
    ])
    def test_usdt_in_out_never_touch_banks(self, poster, make_input, operation, expected):
        """USDT_IN/OUT no mueven bancos aunque se informe banco."""
        poster.post(make_input(operation, "5", bank_id=BANK))

        assert poster.cash.get(Currency.USDT) == expected
        assert poster.banks.banks() == []

    def test_usd_in_with_bank(self, poster, make_input):
        poster.post(make_input(CurrencyOperation.USD_IN, "300"))

        assert poster.cash.get(Currency.USD) == Decimal("300")
        assert poster.banks.get(BANK, Currency.USD) == Decimal("-300")

    def test_usd_out_with_bank(self, poster, make_input):
        poster.post(make_input(CurrencyOperation.USD_OUT, "300"))

        assert poster.cash.get(Currency.USD) == Decimal("-300")
        assert poster.banks.get(BANK, Currency.USD) == Decimal("300")

    def test_usd_buy(self, poster, make_input):
        poster.post(make_input(
            CurrencyOperation.USD_BUY, "120000", exchange_rate="1200", calculated_amount="100"
        ))

        assert poster.cash.get(Currency.ARS) == Decimal("-120000")
        assert poster.cash.get(Currency.USD) == Decimal("100")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("-120000")
        assert poster.banks.get(BANK, Currency.USD) == Decimal("0")

    def test_usd_sell(self, poster, make_input):
        poster.post(make_input(
            CurrencyOperation.USD_SELL, "100", exchange_rate="1200", calculated_amount="120000"
        ))

        assert poster.cash.get(Currency.USD) == Decimal("-100")
        assert poster.cash.get(Currency.ARS) == Decimal("120000")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("120000")

    def test_balances_accumulate_per_bank(self, poster, make_input):
        poster.post(make_input(CurrencyOperation.ARS_IN, "100", bank_id="galicia"))
        poster.post(make_input(CurrencyOperation.ARS_IN, "40", bank_id="macro"))
        poster.post(make_input(CurrencyOperation.ARS_OUT, "10", bank_id="galicia"))

        assert poster.cash.get(Currency.ARS) == Decimal("130")
        assert poster.banks.get("galicia", Currency.ARS) == Decimal("-90")
        assert poster.banks.get("macro", Currency.ARS) == Decimal("-40")
        assert poster.banks.banks() == ["galicia", "macro"]


class TestMissingCalculatedAmount:
    """Compra/venta sin monto calculado: solo el tramo principal."""

    def test_buy_skips_counter_leg(self, poster, make_input, caplog):
        with caplog.at_level(logging.WARNING, logger="caja.domain.services"):
            poster.post(make_input(CurrencyOperation.USDT_BUY, "1000"))

        assert poster.cash.get(Currency.ARS) == Decimal("-1000")
        assert poster.cash.get(Currency.USDT) == Decimal("0")
        assert poster.banks.get(BANK, Currency.ARS) == Decimal("-1000")
        assert "counter leg skipped" in caplog.text

    def test_sell_skips_cash_and_bank_counter_legs(self, poster, make_input):
        poster.post(make_input(CurrencyOperation.USD_SELL, "10"))

        assert poster.cash.get(Currency.USD) == Decimal("-10")
        assert poster.cash.get(Currency.ARS) == Decimal("0")
        assert poster.banks.banks() == []


class TestCalculatedAmountTrust:
    """calculated_amount se imputa tal cual; solo se advierte la diferencia."""

    def test_divergent_calculated_amount_posted_as_is(self, poster, make_input, caplog):
        with caplog.at_level(logging.WARNING, logger="caja.domain.services"):
            poster.post(make_input(
                CurrencyOperation.USDT_SELL, "2", exchange_rate="1000", calculated_amount="1500"
            ))

        assert poster.cash.get(Currency.ARS) == Decimal("1500")
        assert "diverges" in caplog.text

    def test_matching_calculated_amount_no_warning(self, poster, make_input, caplog):
        with caplog.at_level(logging.WARNING, logger="caja.domain.services"):
            poster.post(make_input(
                CurrencyOperation.USD_BUY, "1000", exchange_rate="3", calculated_amount="333.3333333"
            ))

        assert "diverges" not in caplog.text


class TestComputeDeltas:

    def test_deltas_are_pure(self, poster, make_input):
        deltas = poster.compute_deltas(make_input(CurrencyOperation.ARS_IN, "100"))

        assert deltas == [
            BalanceDelta(LedgerBook.CASH, Money(Decimal("100"), Currency.ARS)),
            BalanceDelta(LedgerBook.BANK, Money(Decimal("-100"), Currency.ARS), BANK),
        ]
        assert poster.cash.get(Currency.ARS) == Decimal("0")
        assert len(poster.log) == 0

    def test_cash_deltas_before_bank_deltas(self, poster, make_input):
        deltas = poster.compute_deltas(make_input(
            CurrencyOperation.USDT_SELL, "2", exchange_rate="1000", calculated_amount="2000"
        ))

        assert [d.book for d in deltas] == [LedgerBook.CASH, LedgerBook.CASH, LedgerBook.BANK]


class TestTransactionCreation:

    def test_post_returns_logged_transaction(self, state, clock, fixed_ids, make_input):
        poster = LedgerPoster(state, clock=clock, id_factory=fixed_ids)

        first = poster.post(make_input(CurrencyOperation.ARS_IN, "1"))
        second = poster.post(make_input(CurrencyOperation.ARS_IN, "2"))

        assert first.id == uuid.UUID(int=1)
        assert second.id == uuid.UUID(int=2)
        assert second.created_at > first.created_at
        assert poster.log.all() == [second, first]

    def test_transaction_keeps_input_fields(self, poster, make_input):
        data = make_input(CurrencyOperation.USD_BUY, "1200", exchange_rate="1200", calculated_amount="1")
        transaction = poster.post(data)

        assert transaction.currency_operation == CurrencyOperation.USD_BUY
        assert transaction.bank_id == BANK
        assert transaction.exchange_rate == Decimal("1200")
        assert transaction.calculated_amount == Decimal("1")
        assert transaction.client_id == "CLI001"
        assert transaction.created_at.tzinfo is not None

    def test_transaction_is_immutable(self, poster, make_input):
        transaction = poster.post(make_input(CurrencyOperation.ARS_IN, "1"))
        with pytest.raises(AttributeError):
            transaction.amount = Decimal("2")

    def test_default_ids_are_unique(self, poster, make_input):
        ids = {poster.post(make_input(CurrencyOperation.USDT_IN, "1")).id for _ in range(50)}
        assert len(ids) == 50
