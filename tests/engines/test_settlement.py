"""Tests for invoice settlement status."""

from decimal import Decimal

from ledger_kernel.domain.records import InvoiceStatus
from ledger_engines.settlement import settle_invoice
from tests.conftest import make_collection, make_invoice

TOLERANCE = Decimal("0.01")


class TestSettleInvoice:

    def setup_method(self):
        self.invoice = make_invoice(invoice_id="I1", total="1000")

    def test_nothing_collected_keeps_status(self):
        result = settle_invoice(self.invoice, [], TOLERANCE)

        assert result.status is InvoiceStatus.INVOICED
        assert result.remaining_base == Decimal("1000")

    def test_partial(self):
        result = settle_invoice(self.invoice, [make_collection(invoice_id="I1", amount="400")], TOLERANCE)

        assert result.status is InvoiceStatus.PARTIAL_PAID
        assert result.remaining_base == Decimal("600")
        assert not result.is_settled

    def test_paid_within_tolerance(self):
        result = settle_invoice(
            self.invoice, [make_collection(invoice_id="I1", amount="999.99")], TOLERANCE,
        )

        assert result.status is InvoiceStatus.PAID
        assert result.is_settled

    def test_unlinked_collections_ignored(self):
        result = settle_invoice(
            self.invoice,
            [make_collection(invoice_id="other", amount="1000"), make_collection(amount="1000")],
            TOLERANCE,
        )

        assert result.collected_base == Decimal("0")

    def test_cross_currency_settlement(self):
        """A USD invoice settled by TRY collections, each at its own rate."""
        invoice = make_invoice(invoice_id="I2", total="100", currency="USD", rate="30")

        result = settle_invoice(
            invoice,
            [
                make_collection(invoice_id="I2", amount="1500"),
                make_collection(invoice_id="I2", amount="50", currency="USD", rate="30"),
            ],
            TOLERANCE,
        )

        assert result.invoiced_base == Decimal("3000")
        assert result.status is InvoiceStatus.PAID
