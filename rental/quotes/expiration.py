# rental/quotes/expiration.py

"""Find expired quotes that are still unpaid and word the collections report.

``scan_expired`` and ``format_collections_message`` are pure; the CLI command
and the HTTP action both go through ``check_expirations`` so the two never
disagree about which quotes are overdue.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional

from rental.quotes.domain import Quote, QuoteStatus
from rental.quotes.mapping import row_to_quote

SETTLED_STATUSES = frozenset({QuoteStatus.PAID, QuoteStatus.REJECTED, QuoteStatus.CLOSED})

NO_EXPIRED_SUMMARY = 'No hay cotizaciones vencidas pendientes de pago.'

_DATE_FORMATS = ('%Y-%m-%d', '%d-%m-%Y', '%d/%m/%Y')


def normalize_date(value) -> Optional[str]:
    """Return ``value`` as ``YYYY-MM-DD`` so plain string comparison orders dates."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date().isoformat()
        except ValueError:
            continue
    return None


def scan_expired(quotes: Iterable[Quote], reference_date) -> List[Quote]:
    reference = normalize_date(reference_date)
    if reference is None:
        raise ValueError(f"reference date is not a date: {reference_date!r}")
    matches = []
    for q in quotes:
        expires = normalize_date(q.expiration_date)
        if expires is None:
            continue
        if expires <= reference and q.status not in SETTLED_STATUSES:
            matches.append(q)
    return matches


def format_amount(value) -> str:
    """Thousands with dots, decimals with a comma (es-CL)."""
    value = value or 0
    if float(value).is_integer():
        text = f"{int(value):,}"
    else:
        text = f"{value:,.3f}".rstrip('0')
    return text.replace(',', '_').replace('.', ',').replace('_', '.')


def format_collections_message(matches: List[Quote], today: date) -> str:
    lines = [
        f"*REPORTE DE COBRANZA - {today.strftime('%d-%m-%Y')}*",
        f"Se han detectado {len(matches)} cotizaciones vencidas:",
        "",
    ]
    for index, q in enumerate(matches, start=1):
        lines.append(f"{index}. *#{q.id}* - {q.client}")
        lines.append(f"   Vence: {normalize_date(q.expiration_date)}")
        # The report quotes the stored net amount; list views show gross.
        lines.append(f"   Monto: ${format_amount(q.total)}")
        lines.append("")
    lines.append("Favor gestionar pago.")
    return "\n".join(lines)


@dataclass
class ExpirationReport:
    reference_date: date
    matches: List[Quote] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def summary(self) -> str:
        if not self.matches:
            return NO_EXPIRED_SUMMARY
        return f"{len(self.matches)} cotizaciones vencidas"


def check_expirations(repository, reference_date: date | None = None,
                      today: date | None = None) -> ExpirationReport:
    """Read every quote, keep the overdue ones and build the report.

    A failed read propagates; nothing is formatted from a partial list.
    """
    today = today or date.today()
    reference_date = reference_date or today
    quotes = [row_to_quote(r) for r in repository.list_all()]
    matches = scan_expired(quotes, reference_date)
    report = ExpirationReport(reference_date=reference_date, matches=matches)
    if matches:
        report.message = format_collections_message(matches, today)
    logging.info(
        "expiration scan ref=%s checked=%s expired=%s",
        reference_date.isoformat(), len(quotes), len(matches),
    )
    return report
