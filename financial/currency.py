"""
Currency Table Extraction

Scans plain text for monetary amounts in several currencies and groups
them into one table per currency, each line item carrying a short
description taken from the line the amount appears on.

How it works:
- Each currency has a fixed pattern: a symbol followed by a number
  (e.g. "$ 1,234.56", "Rs. 500", "€20")
- Patterns are evaluated in a fixed order, and every match is taken in
  document order
- Amounts are parsed with Decimal after dropping thousands separators;
  anything that isn't a finite positive number is skipped
- The description is the surrounding line with the amount removed

Known limitation:
Patterns are independent. Text that happens to satisfy two symbol
patterns is counted under both currencies; there is no deduplication.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from loguru import logger


# Characters of context taken on each side of a match when looking for
# its description line.
CONTEXT_WINDOW = 100

# Descriptions shorter than this are replaced by a placeholder.
MIN_DESCRIPTION_LENGTH = 3

AMOUNT = r'\s*([0-9,]+\.?[0-9]*)'


@dataclass(frozen=True)
class CurrencyPattern:
    """A currency code and the regex that finds its amounts."""
    code: str
    regex: re.Pattern


CURRENCY_PATTERNS = (
    CurrencyPattern('USD', re.compile(r'\$' + AMOUNT)),
    CurrencyPattern('EUR', re.compile('€' + AMOUNT)),
    CurrencyPattern('GBP', re.compile('£' + AMOUNT)),
    CurrencyPattern('INR', re.compile('₹' + AMOUNT)),
    CurrencyPattern('Rs', re.compile(r'Rs\.?' + AMOUNT, re.IGNORECASE)),
    CurrencyPattern('JPY', re.compile('¥' + AMOUNT)),
)


@dataclass(frozen=True)
class CurrencyItem:
    """One monetary amount found in the text."""
    description: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {'description': self.description, 'amount': float(self.amount)}


@dataclass
class CurrencyTable:
    """All accepted amounts for one currency, in document order."""
    currency: str
    items: list[CurrencyItem] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        """Exact sum of item amounts."""
        return sum((item.amount for item in self.items), Decimal(0))

    def to_dict(self) -> dict[str, Any]:
        return {
            'currency': self.currency,
            'total': float(self.total),
            'items': [item.to_dict() for item in self.items],
        }


def parse_amount(raw: str) -> Optional[Decimal]:
    """
    Parse a captured number like "1,250.50".

    Returns None for anything that isn't a finite positive number.
    """
    try:
        amount = Decimal(raw.replace(',', ''))
    except InvalidOperation:
        return None

    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def describe_match(text: str, start: int, matched: str) -> Optional[str]:
    """
    Find the line a match sits on and return it without the match itself.

    Only a window of CONTEXT_WINDOW characters on each side of the match
    start is considered, so very long lines are cut at the window edges.
    Lines are split on newlines only. Returns None when no single line holds
    the whole match, which happens when the amount wraps onto the next line.
    """
    window = text[max(0, start - CONTEXT_WINDOW):start + CONTEXT_WINDOW]

    for line in window.split('\n'):
        if matched in line:
            return line.replace(matched, '').strip()
    return None


class CurrencyExtractor:
    """
    Builds per-currency tables of described amounts from plain text.

    Usage:
        extractor = CurrencyExtractor()
        for table in extractor.extract(text):
            print(table.currency, table.total, len(table.items))
    """

    def __init__(self, patterns: tuple = CURRENCY_PATTERNS):
        self.patterns = patterns

    def extract(self, text: str) -> list[CurrencyTable]:
        """
        Extract currency tables from text.

        Tables follow the pattern order, items follow document order.
        Never raises; unparsable amounts are dropped.
        """
        tables = []
        if not text:
            return tables

        for pattern in self.patterns:
            table = self._extract_currency(text, pattern)
            if table.items:
                tables.append(table)

        return tables

    def _extract_currency(self, text: str, pattern: CurrencyPattern) -> CurrencyTable:
        table = CurrencyTable(currency=pattern.code)

        for index, match in enumerate(pattern.regex.finditer(text), start=1):
            amount = parse_amount(match.group(1))
            if amount is None:
                logger.debug(f"Skipping {pattern.code} match {match.group(0)!r}: not a positive amount")
                continue

            description = describe_match(text, match.start(), match.group(0))
            if description is None:
                description = f"Item {index}"
            if len(description) < MIN_DESCRIPTION_LENGTH:
                description = f"{pattern.code} Transaction {index}"

            table.items.append(CurrencyItem(description=description, amount=amount))

        return table


def extract_currency_tables(text: str) -> list[dict[str, Any]]:
    """
    Convenience function returning serialized tables.

    Use this when you only need the JSON-ready structure:
    [{currency, total, items: [{description, amount}]}]
    """
    return [table.to_dict() for table in CurrencyExtractor().extract(text)]
