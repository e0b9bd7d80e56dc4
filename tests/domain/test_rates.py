"""Tests for rate snapshots and the Central Bank of Turkey feed parser."""

from datetime import date
from decimal import Decimal

import pytest

from ledger_kernel.domain.rates import RateSnapshot, parse_tcmb_rates
from ledger_kernel.exceptions import (
    ExchangeRateNotFoundError,
    InvalidExchangeRateError,
    RateFeedError,
)


TCMB_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<Tarih_Date Tarih="15.03.2024" Date="03/15/2024" Bulten_No="2024/52">
  <Currency CrossOrder="0" Kod="USD" CurrencyCode="USD">
    <Unit>1</Unit>
    <Isim>ABD DOLARI</Isim>
    <CurrencyName>US DOLLAR</CurrencyName>
    <ForexBuying>32.1036</ForexBuying>
    <ForexSelling>32.1614</ForexSelling>
  </Currency>
  <Currency CrossOrder="9" Kod="EUR" CurrencyCode="EUR">
    <Unit>1</Unit>
    <Isim>EURO</Isim>
    <CurrencyName>EURO</CurrencyName>
    <ForexBuying>34.9911</ForexBuying>
    <ForexSelling>35,0541</ForexSelling>
  </Currency>
  <Currency CrossOrder="10" Kod="JPY" CurrencyCode="JPY">
    <Unit>100</Unit>
    <Isim>JAPON YENI</Isim>
    <CurrencyName>JAPENESE YEN</CurrencyName>
    <ForexBuying>21.5837</ForexBuying>
    <ForexSelling>21.7266</ForexSelling>
  </Currency>
  <Currency CrossOrder="18" Kod="XDR" CurrencyCode="XDR">
    <Unit>1</Unit>
    <Isim>OZEL CEKME HAKKI (SDR)</Isim>
    <CurrencyName>SPECIAL DRAWING RIGHT (SDR)</CurrencyName>
    <ForexBuying></ForexBuying>
    <ForexSelling></ForexSelling>
  </Currency>
</Tarih_Date>
"""


class TestRateSnapshot:
    """Immutable currency -> rate tables."""

    def test_base_currency_rate_is_one(self):
        snapshot = RateSnapshot("TRY", date(2024, 3, 15), {"USD": Decimal("32")})

        assert snapshot.rate_for("TRY") == Decimal("1")

    def test_missing_rate_raises(self):
        snapshot = RateSnapshot("TRY", date(2024, 3, 15), {"USD": Decimal("32")})

        with pytest.raises(ExchangeRateNotFoundError):
            snapshot.rate_for("EUR")

    def test_non_positive_rate_rejected(self):
        with pytest.raises(InvalidExchangeRateError):
            RateSnapshot("TRY", date(2024, 3, 15), {"USD": Decimal("0")})

    def test_rates_cannot_be_mutated(self):
        snapshot = RateSnapshot("TRY", date(2024, 3, 15), {"USD": Decimal("32")})

        with pytest.raises(TypeError):
            snapshot.rates["USD"] = Decimal("40")

    def test_with_rate_leaves_original_untouched(self):
        """A new snapshot never changes an earlier one."""
        original = RateSnapshot("TRY", date(2024, 3, 15), {"USD": Decimal("32")})
        updated = original.with_rate("USD", Decimal("40"))

        assert original.rate_for("USD") == Decimal("32")
        assert updated.rate_for("USD") == Decimal("40")

    def test_freeze_binds_current_rate(self):
        snapshot = RateSnapshot("TRY", date(2024, 3, 15), {"USD": Decimal("32")})

        value = snapshot.freeze("10", "USD")

        assert value.rate_to_base == Decimal("32")
        assert value.to_base("TRY").amount == Decimal("320")


class TestParseTcmbRates:
    """Parsing the daily today.xml feed."""

    def test_parses_selling_rates(self):
        snapshot = parse_tcmb_rates(TCMB_FEED)

        assert snapshot.base_currency == "TRY"
        assert snapshot.as_of == date(2024, 3, 15)
        assert snapshot.source == "tcmb"
        assert snapshot.rate_for("USD") == Decimal("32.1614")

    def test_comma_decimal_separator(self):
        snapshot = parse_tcmb_rates(TCMB_FEED)

        assert snapshot.rate_for("EUR") == Decimal("35.0541")

    def test_rate_divided_by_unit(self):
        """JPY is quoted per 100 units."""
        snapshot = parse_tcmb_rates(TCMB_FEED, currencies=("JPY",))

        assert snapshot.rate_for("JPY") == Decimal("0.217266")

    def test_missing_requested_currency(self):
        with pytest.raises(RateFeedError):
            parse_tcmb_rates(TCMB_FEED, currencies=("USD", "GBP"))

    def test_malformed_xml(self):
        with pytest.raises(RateFeedError):
            parse_tcmb_rates("<Tarih_Date><Currency>")

    def test_missing_date(self):
        with pytest.raises(RateFeedError):
            parse_tcmb_rates('<Tarih_Date><Currency CurrencyCode="USD"><Unit>1</Unit>'
                             '<ForexSelling>32</ForexSelling></Currency></Tarih_Date>')

    def test_logs_parse(self, captured_logs):
        parse_tcmb_rates(TCMB_FEED)

        logs = captured_logs()
        assert any(r["message"] == "rate_feed_parsed" for r in logs)
