import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from rental import create_app, db
from rental.errors import MessagingError, PersistenceError
from rental.quotes import cli as quotes_cli_module
from rental.quotes.repository import CalendarRepository, QuoteRepository
from rental.quotes.service import QuoteService


def setup_app():
    app = create_app('testing')
    with app.app_context():
        db.drop_all()
        db.create_all()
        svc = QuoteService(QuoteRepository(db.session), CalendarRepository(db.session))
        svc.create({
            'client': 'Cliente Moroso',
            'expiration_date': '2026-01-10',
            'items': {'otros': [{'name': 'Arriendo', 'quantity': 1, 'days': 1, 'unit_price': 100000}]},
        })
    return app


class RecordingMessenger:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, destination, text):
        if self.fail:
            raise MessagingError('gateway down')
        self.sent.append((destination, text))


def test_sends_report(monkeypatch):
    app = setup_app()
    messenger = RecordingMessenger()
    monkeypatch.setattr(quotes_cli_module, 'get_messenger', lambda app: messenger)
    runner = app.test_cli_runner()
    result = runner.invoke(args=['quotes', 'check-expirations', '--date', '2026-01-15', '--to', '56922222222'])
    assert result.exit_code == 0
    assert 'Cliente Moroso' in result.output
    [(destination, text)] = messenger.sent
    assert destination == '56922222222'
    assert 'Monto: $100.000' in text


def test_defaults_to_configured_number(monkeypatch):
    app = setup_app()
    messenger = RecordingMessenger()
    monkeypatch.setattr(quotes_cli_module, 'get_messenger', lambda app: messenger)
    result = app.test_cli_runner().invoke(args=['quotes', 'check-expirations', '--date', '2026-01-15'])
    assert result.exit_code == 0
    assert messenger.sent[0][0] == '56900000000'


def test_nothing_expired(monkeypatch):
    app = setup_app()
    messenger = RecordingMessenger()
    monkeypatch.setattr(quotes_cli_module, 'get_messenger', lambda app: messenger)
    result = app.test_cli_runner().invoke(args=['quotes', 'check-expirations', '--date', '2026-01-01'])
    assert result.exit_code == 0
    assert 'No hay cotizaciones vencidas' in result.output
    assert messenger.sent == []


def test_without_webhook_only_prints(monkeypatch):
    app = setup_app()
    result = app.test_cli_runner().invoke(args=['quotes', 'check-expirations', '--date', '2026-01-15'])
    assert result.exit_code == 0
    assert 'REPORTE DE COBRANZA' in result.output


def test_failures_still_exit_zero(monkeypatch):
    app = setup_app()

    def broken(*args, **kwargs):
        raise PersistenceError('store offline')

    monkeypatch.setattr(quotes_cli_module, 'check_expirations', broken)
    result = app.test_cli_runner().invoke(args=['quotes', 'check-expirations'])
    assert result.exit_code == 0
    assert 'REPORTE' not in result.output


def test_delivery_failure_exits_zero(monkeypatch):
    app = setup_app()
    monkeypatch.setattr(quotes_cli_module, 'get_messenger', lambda app: RecordingMessenger(fail=True))
    result = app.test_cli_runner().invoke(args=['quotes', 'check-expirations', '--date', '2026-01-15'])
    assert result.exit_code == 0
