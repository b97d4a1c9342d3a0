"""
Financial Package

Turns extracted document text into structured money data: one table per
currency, each holding described line items and their total.

Usage:
    from financial import CurrencyExtractor

    tables = CurrencyExtractor().extract("Invoice total Rs. 1,250.50 paid; also $20 refund.")
    for table in tables:
        print(table.currency, table.total)
"""

from .currency import (
    CurrencyPattern,
    CurrencyItem,
    CurrencyTable,
    CurrencyExtractor,
    CURRENCY_PATTERNS,
    parse_amount,
    describe_match,
    extract_currency_tables,
)

__all__ = [
    'CurrencyPattern',
    'CurrencyItem',
    'CurrencyTable',
    'CurrencyExtractor',
    'CURRENCY_PATTERNS',
    'parse_amount',
    'describe_match',
    'extract_currency_tables',
]
