# rental/quotes/ledger.py

"""Priced rows of a quote being drafted, grouped by category."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterator, List, Mapping, Tuple

from rental.errors import ValidationError
from rental.quotes.domain import CATEGORY_ORDER, Category, LineItem

EDITABLE_FIELDS = ('name', 'quantity', 'days', 'unit_price')

# Aliases accepted from create payloads (the stored row keys included).
_FIELD_ALIASES = {
    'cant': 'quantity',
    'qty': 'quantity',
    'unit': 'unit_price',
}


class LineItemLedger:
    """Line items of one quote, keyed by category.

    Rows are immutable ``LineItem`` values; an update swaps in a new row so
    ``line_total`` can never drift from its three inputs.  Quantities and
    prices are not range-checked here.
    """

    def __init__(self, items: Mapping[Category, List[LineItem]] | None = None) -> None:
        self._items: Dict[Category, List[LineItem]] = {c: [] for c in CATEGORY_ORDER}
        for category, rows in (items or {}).items():
            self._items[Category.parse(category)] = list(rows)

    @classmethod
    def from_mapping(cls, data) -> 'LineItemLedger':
        """Build a ledger from create input, ``{category: [row, ...]}``."""
        ledger = cls()
        if data is None:
            return ledger
        if not isinstance(data, Mapping):
            raise ValidationError('Line items must be a mapping of category to rows')
        for key, rows in data.items():
            category = Category.parse(key)
            if not isinstance(rows, list):
                raise ValidationError(f'Line items for {key!r} must be a list')
            for row in rows:
                if not isinstance(row, Mapping):
                    raise ValidationError(f'Malformed line item in {key!r}: {row!r}')
                index = ledger.add_line_item(category)
                for name, value in row.items():
                    field_name = _FIELD_ALIASES.get(name, name)
                    if field_name in EDITABLE_FIELDS:
                        ledger.update_line_item(category, index, field_name, value)
        return ledger

    def add_line_item(self, category) -> int:
        """Append a fresh row and return its index."""
        rows = self._items[Category.parse(category)]
        rows.append(LineItem())
        return len(rows) - 1

    def update_line_item(self, category, index: int, field: str, value) -> LineItem:
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f'Line item field {field!r} is not editable')
        rows = self._rows_for(category, index)
        rows[index] = replace(rows[index], **{field: _coerce(field, value)})
        return rows[index]

    def remove_line_item(self, category, index: int) -> LineItem:
        rows = self._rows_for(category, index)
        return rows.pop(index)

    def net_total(self):
        return sum(item.line_total for _, _, item in self.rows())

    def rows(self) -> Iterator[Tuple[Category, int, LineItem]]:
        for category in CATEGORY_ORDER:
            for index, item in enumerate(self._items[category]):
                yield category, index, item

    def subtotal(self, category):
        return sum(item.line_total for item in self._items[Category.parse(category)])

    def as_mapping(self) -> Dict[Category, List[LineItem]]:
        return {c: list(self._items[c]) for c in CATEGORY_ORDER}

    def _rows_for(self, category, index: int) -> List[LineItem]:
        rows = self._items[Category.parse(category)]
        if not isinstance(index, int) or not 0 <= index < len(rows):
            raise ValidationError(f'No line item at index {index!r}')
        return rows


def _coerce(field: str, value):
    if field == 'name':
        return '' if value is None else str(value)
    if value is None or value == '':
        return 0
    try:
        if field == 'unit_price':
            number = float(value)
            return int(number) if number.is_integer() else number
        if isinstance(value, float) and not value.is_integer():
            raise ValidationError(f'Line item {field} must be a whole number, got {value!r}')
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Line item {field} must be a number, got {value!r}') from None
