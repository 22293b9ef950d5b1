# rental/quotes/mapping.py

"""Translate between ``Quote`` objects and the flattened rows of the store."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from rental.quotes.domain import (
    CATEGORY_ORDER,
    AttachmentKind,
    Category,
    ClientType,
    LineItem,
    Quote,
    QuoteAttachment,
    QuoteStatus,
    parse_date,
)

ATTACHMENT_COLUMNS = {
    AttachmentKind.VOUCHER: 'voucher_url',
    AttachmentKind.INVOICE: 'invoice_url',
}


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def item_to_row(item: LineItem) -> Dict[str, Any]:
    return {
        'name': item.name,
        'cant': item.quantity,
        'days': item.days,
        'unit': item.unit_price,
        'total': item.line_total,
    }


def item_from_row(row: Dict[str, Any]) -> LineItem:
    # 'total' is derived, so it is not read back.
    return LineItem(
        name=row.get('name') or '',
        quantity=row.get('cant', 0) or 0,
        days=row.get('days', 0) or 0,
        unit_price=row.get('unit', 0) or 0,
    )


def quote_to_row(quote: Quote) -> Dict[str, Any]:
    row = {
        'id': quote.id,
        'client': quote.client,
        'client_type': quote.client_type_text,
        'location': quote.location,
        'event_name': quote.event_name,
        'event_date': _iso(quote.event_date),
        'expiration_date': _iso(quote.expiration_date),
        'event_notes': quote.event_notes,
        'timing': {'montaje': quote.setup_time, 'desmontaje': quote.teardown_time},
        'items': {
            category.value: [item_to_row(i) for i in quote.line_items.get(category, [])]
            for category in CATEGORY_ORDER
        },
        'total': quote.total,
        'status': quote.status.value,
        'payment_date': _iso(quote.payment_due_date),
        'created_at': _iso(quote.created_at),
    }
    for kind, column in ATTACHMENT_COLUMNS.items():
        row[column] = quote.attachment_url(kind)
    return row


def row_to_quote(row: Dict[str, Any]) -> Quote:
    timing = row.get('timing') or {}
    stored_items = row.get('items') or {}
    line_items = {
        category: [item_from_row(r) for r in stored_items.get(category.value) or []]
        for category in CATEGORY_ORDER
    }
    attachments = {
        kind: QuoteAttachment(kind=kind, url=row[column])
        for kind, column in ATTACHMENT_COLUMNS.items()
        if row.get(column)
    }
    client_type = ClientType.lookup(row.get('client_type'))
    stored_total = row.get('total')
    created_at = row.get('created_at')
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    quote = Quote(
        id=str(row['id']),
        client=row.get('client') or '',
        created_at=created_at,
        client_type=client_type or ClientType.UNSPECIFIED,
        client_type_label=None if client_type else str(row['client_type']),
        event_name=row.get('event_name'),
        location=row.get('location'),
        event_date=parse_date(row.get('event_date'), 'event_date'),
        expiration_date=parse_date(row.get('expiration_date'), 'expiration_date'),
        event_notes=row.get('event_notes'),
        setup_time=timing.get('montaje') or '',
        teardown_time=timing.get('desmontaje') or '',
        line_items=line_items,
        status=QuoteStatus.parse(row.get('status')),
        payment_due_date=parse_date(row.get('payment_date'), 'payment_date'),
        attachments=attachments,
    )
    if stored_total is not None and stored_total != quote.net_total:
        quote.stored_total = stored_total
    return quote
