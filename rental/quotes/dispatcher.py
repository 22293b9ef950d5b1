# rental/quotes/dispatcher.py

"""Side effects of a quote status change.

Accepting a quote books its event in the calendar.  The status write and the
calendar write are two separate commits: when the second one fails the status
stays as written and the failure is reported back in ``StatusChange``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from rental.errors import QuoteError
from rental.quotes.domain import Quote

EVENT_TYPE = 'note'
EVENT_TIME = '09:00'


@dataclass
class StatusChange:
    quote: Quote
    event: Optional[Dict[str, Any]] = None
    side_effect_error: Optional[str] = None
    acknowledgement: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.side_effect_error is None


def build_calendar_event(quote: Quote) -> Optional[Dict[str, Any]]:
    """Calendar entry for an accepted quote, or ``None`` without an event date."""
    if quote.event_date is None:
        return None
    return {
        'date': quote.event_date.isoformat(),
        'title': quote.event_notes or f"{quote.event_name or 'Evento'} - {quote.client}",
        'type': EVENT_TYPE,
        'description': f"Evento: {quote.event_name or 'N/A'} - Cliente: {quote.client}",
        'time': EVENT_TIME,
    }


class SideEffectDispatcher:
    def __init__(self, calendar) -> None:
        self.calendar = calendar

    def on_accepted(self, quote: Quote) -> StatusChange:
        # No dedup: every call books a new event.
        result = StatusChange(quote=quote)
        event = build_calendar_event(quote)
        if event is None:
            logging.info("Quote #%s accepted without event date; no calendar entry", quote.id)
            return result
        try:
            result.event = self.calendar.insert(event)
        except QuoteError as e:
            logging.error("Quote #%s accepted but calendar entry failed: %s", quote.id, e)
            result.side_effect_error = f"Cotización aceptada, pero no se pudo agendar el evento: {e}"
            return result
        result.acknowledgement = f"Evento agendado para el {event['date']}"
        return result
