# rental/quotes/domain.py
"""In-memory shape of quotes and the values they are built from.

Enum values are the labels the hosted store already holds, so a row can be
read back without translation tables.  Attribute names are the English ones
used throughout the code.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional

from rental.errors import ValidationError

TAX_RATE = 0.19


class Category(Enum):
    FURNISHINGS = 'accesorios'
    LOGISTICS = 'logistica'
    OTHER = 'otros'

    @classmethod
    def parse(cls, value) -> 'Category':
        """Accept a member, its stored key or its English name."""
        if isinstance(value, cls):
            return value
        key = str(value or '').strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ValidationError(f'Unknown line item category: {value!r}')


# Display order; sums do not depend on it.
CATEGORY_ORDER = (Category.FURNISHINGS, Category.LOGISTICS, Category.OTHER)


class QuoteStatus(Enum):
    DRAFT = 'Borrador'
    SENT = 'Enviada'
    ACCEPTED = 'Aceptada'
    PARTIALLY_PAID = 'Pago Parcial'
    PAID = 'Pagada'
    VOID = 'Nula'
    REJECTED = 'Rechazada'
    CLOSED = 'Cerrada'

    @classmethod
    def parse(cls, value) -> 'QuoteStatus':
        if isinstance(value, cls):
            return value
        text = str(value or '').strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        raise ValidationError(f'Unknown quote status: {value!r}')


class ClientType(Enum):
    COMPANY = 'Empresa'
    PRODUCER = 'Productora'
    INDIVIDUAL = 'Particular'
    UNSPECIFIED = ''

    @classmethod
    def lookup(cls, value) -> Optional['ClientType']:
        if isinstance(value, cls):
            return value
        text = str(value or '').strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        return None

    @classmethod
    def parse(cls, value) -> 'ClientType':
        member = cls.lookup(value)
        if member is None:
            raise ValidationError(f'Unknown client type: {value!r}')
        return member


class AttachmentKind(Enum):
    VOUCHER = 'voucher'
    INVOICE = 'invoice'

    @classmethod
    def parse(cls, value) -> 'AttachmentKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().lower())
        except ValueError:
            raise ValidationError(f'Unknown attachment kind: {value!r}') from None


@dataclass(frozen=True)
class LineItem:
    name: str = ''
    quantity: int = 1
    days: int = 1
    unit_price: float = 0

    @property
    def line_total(self):
        return self.quantity * self.days * self.unit_price


@dataclass(frozen=True)
class QuoteAttachment:
    kind: AttachmentKind
    url: Optional[str] = None


def round_half_up(value: float) -> int:
    """Nearest integer, halves going up (matches the totals shown to clients)."""
    return int(math.floor(value + 0.5))


def tax_amount(net_total: float) -> int:
    return round_half_up(net_total * TAX_RATE)


def gross_total(net_total: float) -> int:
    # Rounded on its own, not net + tax.
    return round_half_up(net_total * (1 + TAX_RATE))


def parse_date(value, field_name: str = 'date') -> Optional[date]:
    """ISO ``YYYY-MM-DD`` (or a date) to ``date``; blanks become ``None``."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f'Malformed {field_name}: {value!r}') from None


@dataclass
class Quote:
    id: str
    client: str
    created_at: datetime
    client_type: ClientType = ClientType.UNSPECIFIED
    event_name: Optional[str] = None
    location: Optional[str] = None
    event_date: Optional[date] = None
    expiration_date: Optional[date] = None
    event_notes: Optional[str] = None
    setup_time: str = ''
    teardown_time: str = ''
    line_items: Dict[Category, List[LineItem]] = field(
        default_factory=lambda: {c: [] for c in CATEGORY_ORDER}
    )
    status: QuoteStatus = QuoteStatus.DRAFT
    payment_due_date: Optional[date] = None
    attachments: Dict[AttachmentKind, QuoteAttachment] = field(default_factory=dict)
    # Set only for rows written elsewhere: a client type outside the enum
    # (free-text imports) and a stored total that differs from the items.
    client_type_label: Optional[str] = None
    stored_total: Optional[float] = None

    @property
    def net_total(self):
        return sum(
            item.line_total
            for category in CATEGORY_ORDER
            for item in self.line_items.get(category, [])
        )

    @property
    def total(self):
        """Net total as stored; the item sum when nothing else was stored."""
        return self.stored_total if self.stored_total is not None else self.net_total

    @property
    def client_type_text(self) -> str:
        return self.client_type_label or self.client_type.value

    @property
    def tax_amount(self) -> int:
        return tax_amount(self.net_total)

    @property
    def gross_total(self) -> int:
        return gross_total(self.net_total)

    def attachment_url(self, kind: AttachmentKind) -> Optional[str]:
        att = self.attachments.get(kind)
        return att.url if att else None
