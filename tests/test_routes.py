import io
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rental import create_app, db
from rental.quotes.repository import CalendarRepository


def setup_app():
    app = create_app('testing')
    with app.app_context():
        db.drop_all()
        db.create_all()
    return app


QUOTE_JSON = {
    'client': 'Productora XYZ',
    'client_type': 'Productora',
    'event_name': 'Lanzamiento',
    'event_date': '2026-02-14',
    'expiration_date': '2026-01-10',
    'items': {
        'accesorios': [{'name': 'Sillas', 'quantity': 3, 'days': 2, 'unit_price': 1000}],
        'otros': [{'name': 'Extra', 'quantity': 1, 'days': 1, 'unit_price': 1500}],
    },
}


def create(client):
    resp = client.post('/quotes/', json=QUOTE_JSON)
    assert resp.status_code == 201
    return resp.get_json()['quote']


def test_create_and_view():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    assert quote['status'] == 'Borrador'
    assert quote['net_total'] == 7500
    assert quote['gross_total'] == 8925
    assert quote['items']['accesorios'][0]['line_total'] == 6000

    resp = client.get(f"/quotes/{quote['id']}")
    assert resp.status_code == 200
    assert resp.get_json()['quote'] == quote


def test_list_shows_gross_and_filters():
    app = setup_app()
    client = app.test_client()
    create(client)
    client.post('/quotes/', json={'client': 'Banco Sur'})
    rows = client.get('/quotes/').get_json()['quotes']
    assert len(rows) == 2
    rows = client.get('/quotes/?q=xyz').get_json()['quotes']
    assert [r['gross_total'] for r in rows] == [8925]


def test_create_validation_error_is_json():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/quotes/', json={'client': ''})
    assert resp.status_code == 400
    assert resp.get_json()['error'] == 'Client is required'


def test_unknown_quote_is_404():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/quotes/missing/status', json={'status': 'Enviada'})
    assert resp.status_code == 404
    assert 'missing' in resp.get_json()['error']


def test_preview():
    app = setup_app()
    client = app.test_client()
    resp = client.post('/quotes/preview', json=QUOTE_JSON)
    assert resp.get_json() == {'net_total': 7500, 'tax_amount': 1425, 'gross_total': 8925}


def test_accept_books_calendar_event():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    resp = client.post(f"/quotes/{quote['id']}/status", json={'status': 'Aceptada'})
    body = resp.get_json()
    assert resp.status_code == 200
    assert body['quote']['status'] == 'Aceptada'
    assert body['event']['date'] == '2026-02-14'
    assert body['acknowledgement']
    assert body['side_effect_error'] is None
    with app.app_context():
        assert len(CalendarRepository(db.session).list_all()) == 1


def test_status_required():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    resp = client.post(f"/quotes/{quote['id']}/status", json={})
    assert resp.status_code == 400


def test_payment_date():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    resp = client.post(f"/quotes/{quote['id']}/payment-date", json={'payment_date': '2026-03-15'})
    assert resp.get_json()['quote']['payment_date'] == '2026-03-15'
    resp = client.post(f"/quotes/{quote['id']}/payment-date", json={'payment_date': '15 de marzo'})
    assert resp.status_code == 400


def test_attach_by_url_and_upload(monkeypatch):
    app = setup_app()
    client = app.test_client()
    quote = create(client)

    resp = client.post(f"/quotes/{quote['id']}/attachments/invoice", json={'url': 'https://f/1.pdf'})
    assert resp.get_json()['quote']['invoice_url'] == 'https://f/1.pdf'

    uploads = []

    class FakeStorage:
        def upload(self, path, data, content_type=None):
            uploads.append((path, data))
            return f'https://bucket/{path}'

    monkeypatch.setattr('rental.quotes.routes.get_storage', lambda app: FakeStorage())
    resp = client.post(
        f"/quotes/{quote['id']}/attachments/voucher",
        data={'file': (io.BytesIO(b'voucher-bytes'), 'comprobante.png')},
        content_type='multipart/form-data',
    )
    body = resp.get_json()['quote']
    assert uploads[0][1] == b'voucher-bytes'
    assert body['voucher_url'] == f'https://bucket/{uploads[0][0]}'
    assert body['invoice_url'] == 'https://f/1.pdf'


def test_local_storage_upload_is_served(tmp_path):
    app = setup_app()
    app.instance_path = str(tmp_path)
    client = app.test_client()
    quote = create(client)
    resp = client.post(
        f"/quotes/{quote['id']}/attachments/invoice",
        data={'file': (io.BytesIO(b'%PDF'), 'factura.pdf')},
        content_type='multipart/form-data',
    )
    url = resp.get_json()['quote']['invoice_url']
    assert '/quotes/files/' in url
    path = url.split('/quotes/files/', 1)[1]
    assert client.get(f'/quotes/files/{path}').data == b'%PDF'


def test_bad_attachment_kind():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    resp = client.post(f"/quotes/{quote['id']}/attachments/receipt", json={'url': 'https://f/x'})
    assert resp.status_code == 400


def test_expiration_check_endpoint():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    resp = client.post('/quotes/expirations/check', json={'date': '2026-01-15'})
    body = resp.get_json()
    assert body['count'] == 1
    assert body['quotes'] == [quote['id']]
    assert 'Monto: $7.500' in body['message']
    assert body['link'].startswith('https://wa.me/56900000000?text=')

    resp = client.post('/quotes/expirations/check', json={'date': '2026-01-05'})
    body = resp.get_json()
    assert body['count'] == 0
    assert body['message'] is None and body['link'] is None
    assert body['summary']


def test_notify_link():
    app = setup_app()
    client = app.test_client()
    quote = create(client)
    body = client.get(f"/quotes/{quote['id']}/notify-link?to=56911111111").get_json()
    assert quote['id'] in body['message']
    assert body['link'].startswith('https://wa.me/56911111111?text=')
