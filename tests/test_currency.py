"""
Tests for currency table extraction.

Run with: pytest tests/ -v
"""

import json
import re
import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from financial.currency import (
    CurrencyExtractor,
    CurrencyPattern,
    CurrencyTable,
    CurrencyItem,
    CURRENCY_PATTERNS,
    parse_amount,
    describe_match,
    extract_currency_tables,
)


SAMPLE_STATEMENT = """
ACME Consulting Ltd
Statement of account

Consulting services           $1,500.00
Travel expenses               $320.40
Hotel (Berlin)                €845.10
Conference ticket             £199
Local transport               Rs. 2,400
Visa processing fee           ₹3,500.75
Tokyo office supplies         ¥12,000
Discount applied              $0.00
"""


class TestInvoiceScenario:
    """The two-currency sentence from the product description."""

    def setup_method(self):
        self.tables = CurrencyExtractor().extract(
            "Invoice total Rs. 1,250.50 paid; also $20 refund."
        )

    def test_two_tables_in_pattern_order(self):
        assert [t.currency for t in self.tables] == ["USD", "Rs"]

    def test_usd_table(self):
        usd = self.tables[0]
        assert len(usd.items) == 1
        assert usd.items[0].amount == Decimal("20")
        assert usd.total == usd.items[0].amount

    def test_rs_table(self):
        rs = self.tables[1]
        assert len(rs.items) == 1
        assert rs.items[0].amount == Decimal("1250.50")
        assert rs.total == Decimal("1250.50")
        assert rs.items[0].description == "Invoice total  paid; also $20 refund."


class TestCurrencyExtractor:
    """Tests for multi-currency extraction."""

    def setup_method(self):
        self.extractor = CurrencyExtractor()

    def test_statement_covers_every_currency(self):
        tables = self.extractor.extract(SAMPLE_STATEMENT)
        assert [t.currency for t in tables] == ["USD", "EUR", "GBP", "INR", "Rs", "JPY"]

    def test_descriptions_come_from_the_amount_line(self):
        tables = {t.currency: t for t in self.extractor.extract(SAMPLE_STATEMENT)}

        usd = tables["USD"]
        assert [i.description for i in usd.items] == ["Consulting services", "Travel expenses"]
        assert [i.amount for i in usd.items] == [Decimal("1500.00"), Decimal("320.40")]
        assert usd.total == Decimal("1820.40")

        assert tables["EUR"].items[0].description == "Hotel (Berlin)"
        assert tables["JPY"].items[0].amount == Decimal("12000")
        assert tables["INR"].items[0].amount == Decimal("3500.75")

    def test_zero_and_unparsable_amounts_are_dropped(self):
        tables = self.extractor.extract("Fee $0.00 and $, and $5")

        assert len(tables) == 1
        assert [i.amount for i in tables[0].items] == [Decimal("5")]

    def test_no_table_without_valid_items(self):
        assert self.extractor.extract("Nothing owed: $0 and $0.00") == []

    def test_placeholder_uses_match_index(self):
        tables = self.extractor.extract("$0\n$7\n$8")

        items = tables[0].items
        assert [i.description for i in items] == ["USD Transaction 2", "USD Transaction 3"]

    def test_short_descriptions_are_replaced(self):
        tables = self.extractor.extract("ok $15")
        assert tables[0].items[0].description == "USD Transaction 1"

    def test_amount_wrapped_onto_next_line(self):
        tables = self.extractor.extract("Consulting fee $\n1,500.00 due")

        item = tables[0].items[0]
        assert item.amount == Decimal("1500.00")
        assert item.description == "Item 1"

    def test_wrapped_amount_keeps_match_index(self):
        tables = self.extractor.extract("Paid $0 then\nLate fee $\n45 owed")
        assert tables[0].items[0].description == "Item 2"

    def test_form_feed_does_not_split_description(self):
        tables = self.extractor.extract("Page one\x0cParking fee $12")
        assert tables[0].items[0].description == "Page one\x0cParking fee"

    def test_rupee_abbreviation_is_case_insensitive(self):
        tables = self.extractor.extract("Parking RS 100\nTolls rs.50\nFuel Rs.   75.5")

        assert [t.currency for t in tables] == ["Rs"]
        assert [i.amount for i in tables[0].items] == [Decimal("100"), Decimal("50"), Decimal("75.5")]

    def test_space_between_symbol_and_amount(self):
        tables = self.extractor.extract("Deposit paid $  2,000")
        assert tables[0].items[0].amount == Decimal("2000")

    def test_context_window_limits_description(self):
        text = "x" * 150 + " $5 fee"
        tables = self.extractor.extract(text)
        assert tables[0].items[0].description == "x" * 99 + "  fee"

    def test_empty_text(self):
        assert self.extractor.extract("") == []

    def test_overlapping_patterns_are_not_deduplicated(self):
        amount = r'\s*([0-9,]+\.?[0-9]*)'
        extractor = CurrencyExtractor(patterns=(
            CurrencyPattern('AUD', re.compile(r'\$' + amount)),
            CurrencyPattern('USD', re.compile(r'\$' + amount)),
        ))

        tables = extractor.extract("Shared amount $42")

        assert [t.currency for t in tables] == ["AUD", "USD"]
        assert tables[0].items == tables[1].items

    def test_deterministic_output(self):
        first = json.dumps([t.to_dict() for t in self.extractor.extract(SAMPLE_STATEMENT)])
        second = json.dumps([t.to_dict() for t in self.extractor.extract(SAMPLE_STATEMENT)])
        assert first == second

    @pytest.mark.parametrize("text", [
        SAMPLE_STATEMENT,
        "$1 $2 $3 $0 $, $4.50",
        "Rs 0.01 Rs. 10,000,000.99 rs,",
        "€,5 £1.2.3 ¥007",
        "no money here",
    ])
    def test_amounts_positive_and_totals_exact(self, text):
        for table in self.extractor.extract(text):
            assert table.items
            assert all(item.amount > 0 for item in table.items)
            assert table.total == sum((i.amount for i in table.items), Decimal(0))


class TestHelpers:
    """Tests for parsing helpers and serialization."""

    def test_parse_amount(self):
        assert parse_amount("1,250.50") == Decimal("1250.50")
        assert parse_amount("12.") == Decimal("12")
        assert parse_amount("0") is None
        assert parse_amount(",") is None
        assert parse_amount(",,,") is None

    def test_describe_match_without_line(self):
        assert describe_match("abc", 0, "zzz") is None

    def test_describe_match_splits_on_newline_only(self):
        text = "Fee\u2028paid $5"  # Unicode line separator
        assert describe_match(text, 9, "$5") == "Fee\u2028paid"

    def test_describe_match_ignores_carriage_return(self):
        assert describe_match("Hotel $90\r\nnext", 6, "$90") == "Hotel"

    def test_pattern_order_is_fixed(self):
        assert [p.code for p in CURRENCY_PATTERNS] == ["USD", "EUR", "GBP", "INR", "Rs", "JPY"]

    def test_table_to_dict(self):
        table = CurrencyTable(currency="GBP", items=[
            CurrencyItem(description="Rent", amount=Decimal("950")),
            CurrencyItem(description="Deposit", amount=Decimal("100.25")),
        ])

        assert table.to_dict() == {
            'currency': 'GBP',
            'total': 1050.25,
            'items': [
                {'description': 'Rent', 'amount': 950.0},
                {'description': 'Deposit', 'amount': 100.25},
            ],
        }

    def test_extract_currency_tables(self):
        result = extract_currency_tables("Invoice total Rs. 1,250.50 paid; also $20 refund.")
        assert result[0]['currency'] == 'USD'
        assert result[0]['total'] == 20.0
        assert result[1]['items'][0]['amount'] == 1250.5


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
