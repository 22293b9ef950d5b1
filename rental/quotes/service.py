# rental/quotes/service.py

"""Quote lifecycle: creation, status changes, payment dates and attachments."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from rental.errors import NotFoundError, ValidationError
from rental.quotes.dispatcher import SideEffectDispatcher, StatusChange
from rental.quotes.domain import (
    AttachmentKind,
    ClientType,
    Quote,
    QuoteStatus,
    gross_total,
    parse_date,
    tax_amount,
)
from rental.quotes.ledger import LineItemLedger
from rental.quotes.mapping import ATTACHMENT_COLUMNS, quote_to_row, row_to_quote
from rental.integrations.storage import attachment_path


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_quote_id() -> str:
    return uuid.uuid4().hex[:8]


def _text(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    return str(value).strip() or None


def totals(net) -> Dict[str, Any]:
    return {'net_total': net, 'tax_amount': tax_amount(net), 'gross_total': gross_total(net)}


class QuoteService:
    """Operations on quotes, on top of a quote repository and a calendar.

    Line items are only settable through ``create``; afterwards a quote changes
    by status, payment due date and attachments.  Status changes are not
    guarded: any status may follow any other.
    """

    def __init__(
        self,
        quotes,
        calendar,
        storage=None,
        now: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_quote_id,
    ) -> None:
        self.quotes = quotes
        self.storage = storage
        self.dispatcher = SideEffectDispatcher(calendar)
        self.now = now
        self.id_factory = id_factory

    # -- reads -------------------------------------------------------------

    def get(self, quote_id: str) -> Quote:
        row = self.quotes.get(quote_id)
        if row is None:
            raise NotFoundError(f'Quote #{quote_id} not found')
        return row_to_quote(row)

    def list(self, search: str | None = None) -> List[Quote]:
        quotes = [row_to_quote(r) for r in self.quotes.list_all()]
        term = (search or '').strip().lower()
        if not term:
            return quotes
        return [
            q for q in quotes
            if term in q.client.lower()
            or term in q.id.lower()
            or (q.event_name and term in q.event_name.lower())
        ]

    # -- create ------------------------------------------------------------

    def preview(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Totals of draft line items, nothing saved."""
        ledger = LineItemLedger.from_mapping((data or {}).get('items'))
        return totals(ledger.net_total())

    def create(self, data: Mapping[str, Any]) -> Quote:
        if not isinstance(data, Mapping):
            raise ValidationError('Quote data must be an object')
        client = data.get('client')
        if not isinstance(client, str) or not client.strip():
            raise ValidationError('Client is required')

        ledger = LineItemLedger.from_mapping(data.get('items'))
        quote = Quote(
            id=self.id_factory(),
            client=client.strip(),
            created_at=self.now(),
            client_type=ClientType.parse(data.get('client_type')),
            event_name=_text(data, 'event_name'),
            location=_text(data, 'location'),
            event_date=parse_date(data.get('event_date'), 'event date'),
            expiration_date=parse_date(data.get('expiration_date'), 'expiration date'),
            event_notes=_text(data, 'event_notes'),
            setup_time=_text(data, 'setup_time') or '',
            teardown_time=_text(data, 'teardown_time') or '',
            line_items=ledger.as_mapping(),
            status=QuoteStatus.DRAFT,
        )
        self.quotes.insert(quote_to_row(quote))
        logging.info("created quote #%s for %s net=%s", quote.id, quote.client, quote.net_total)
        return quote

    # -- updates -----------------------------------------------------------

    def set_status(self, quote_id: str, new_status) -> StatusChange:
        status = QuoteStatus.parse(new_status)
        row = self.quotes.update(quote_id, {'status': status.value})
        quote = row_to_quote(row)
        logging.info("quote #%s status -> %s", quote_id, status.value)
        if status is QuoteStatus.ACCEPTED:
            return self.dispatcher.on_accepted(quote)
        return StatusChange(quote=quote)

    def set_payment_due_date(self, quote_id: str, value) -> Quote:
        due = parse_date(value, 'payment date')
        row = self.quotes.update(
            quote_id, {'payment_date': due.isoformat() if due else None}
        )
        return row_to_quote(row)

    def attach(self, quote_id: str, kind, url: str) -> Quote:
        kind = AttachmentKind.parse(kind)
        if not url:
            raise ValidationError('Attachment URL is required')
        row = self.quotes.update(quote_id, {ATTACHMENT_COLUMNS[kind]: url})
        return row_to_quote(row)

    def upload_attachment(self, quote_id: str, kind, filename: str, data: bytes,
                          content_type: str | None = None) -> Quote:
        """Store the file, then point the quote's ``kind`` attachment at it."""
        kind = AttachmentKind.parse(kind)
        if not data:
            raise ValidationError('Attachment file is empty')
        if self.storage is None:
            raise ValidationError('No attachment storage configured')
        self.get(quote_id)
        path = attachment_path(quote_id, kind.value, filename or '')
        url = self.storage.upload(path, data, content_type)
        return self.attach(quote_id, kind, url)
