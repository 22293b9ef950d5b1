# rental/quotes/routes.py

import os

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from rental import db
from rental.errors import ValidationError
from rental.integrations.messaging import chat_link, quote_update_message
from rental.integrations.storage import get_storage
from rental.quotes.domain import CATEGORY_ORDER, AttachmentKind, parse_date
from rental.quotes.expiration import check_expirations
from rental.quotes.repository import CalendarRepository, QuoteRepository
from rental.quotes.service import QuoteService

bp = Blueprint('quotes', __name__)


def _service() -> QuoteService:
    return QuoteService(
        quotes=QuoteRepository(db.session),
        calendar=CalendarRepository(db.session),
        storage=get_storage(current_app),
    )


def _json() -> dict:
    return request.get_json(silent=True) or {}


def _iso(value):
    return value.isoformat() if value is not None else None


def serialize_quote(q) -> dict:
    return {
        'id'              : q.id,
        'client'          : q.client,
        'client_type'     : q.client_type_text,
        'event_name'      : q.event_name,
        'location'        : q.location,
        'event_date'      : _iso(q.event_date),
        'expiration_date' : _iso(q.expiration_date),
        'event_notes'     : q.event_notes,
        'setup_time'      : q.setup_time,
        'teardown_time'   : q.teardown_time,
        'items'           : {
            c.value: [{
                'name'       : it.name,
                'quantity'   : it.quantity,
                'days'       : it.days,
                'unit_price' : it.unit_price,
                'line_total' : it.line_total,
            } for it in q.line_items.get(c, [])]
            for c in CATEGORY_ORDER
        },
        'net_total'       : q.net_total,
        'tax_amount'      : q.tax_amount,
        'gross_total'     : q.gross_total,
        'status'          : q.status.value,
        'payment_date'    : _iso(q.payment_due_date),
        'voucher_url'     : q.attachment_url(AttachmentKind.VOUCHER),
        'invoice_url'     : q.attachment_url(AttachmentKind.INVOICE),
        'created_at'      : _iso(q.created_at),
    }


@bp.route('/')
def list_quotes():
    """List rows show the gross total next to the status."""
    quotes = _service().list(request.args.get('q'))
    return jsonify(quotes=[serialize_quote(q) for q in quotes])


@bp.route('/<quote_id>')
def view_quote(quote_id):
    return jsonify(quote=serialize_quote(_service().get(quote_id)))


@bp.route('/', methods=['POST'])
def create_quote():
    quote = _service().create(_json())
    return jsonify(quote=serialize_quote(quote)), 201


@bp.route('/preview', methods=['POST'])
def preview_quote():
    return jsonify(_service().preview(_json()))


@bp.route('/<quote_id>/status', methods=['POST'])
def change_status(quote_id):
    status = _json().get('status')
    if not status:
        raise ValidationError('Status is required')
    result = _service().set_status(quote_id, status)
    return jsonify(
        quote=serialize_quote(result.quote),
        event=result.event,
        acknowledgement=result.acknowledgement,
        side_effect_error=result.side_effect_error,
    )


@bp.route('/<quote_id>/payment-date', methods=['POST'])
def change_payment_date(quote_id):
    quote = _service().set_payment_due_date(quote_id, _json().get('payment_date'))
    return jsonify(quote=serialize_quote(quote))


@bp.route('/<quote_id>/attachments/<kind>', methods=['POST'])
def upload_attachment(quote_id, kind):
    """Multipart ``file`` upload, or JSON ``{"url": ...}`` for a stored file."""
    svc = _service()
    upload = request.files.get('file')
    if upload is not None:
        quote = svc.upload_attachment(
            quote_id, kind, upload.filename, upload.read(), upload.mimetype
        )
    else:
        quote = svc.attach(quote_id, kind, _json().get('url'))
    return jsonify(quote=serialize_quote(quote))


@bp.route('/files/<path:path>')
def attachment_file(path):
    return send_from_directory(os.path.join(current_app.instance_path, 'attachments'), path)


@bp.route('/expirations/check', methods=['POST'])
def check_expired_quotes():
    data = _json()
    reference = parse_date(data.get('date'), 'reference date')
    report = check_expirations(QuoteRepository(db.session), reference)
    destination = data.get('to') or current_app.config.get('COLLECTIONS_NUMBER')
    link = chat_link(destination, report.message) if report.message and destination else None
    return jsonify(
        count=len(report.matches),
        quotes=[q.id for q in report.matches],
        summary=report.summary,
        message=report.message,
        link=link,
    )


@bp.route('/<quote_id>/notify-link')
def notify_link(quote_id):
    quote = _service().get(quote_id)
    destination = request.args.get('to') or current_app.config.get('COLLECTIONS_NUMBER')
    if not destination:
        raise ValidationError('No destination number configured')
    text = quote_update_message(quote)
    return jsonify(message=text, link=chat_link(destination, text))
