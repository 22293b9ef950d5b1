from rental import db

class QuoteRecord(db.Model):
    """Row shape of a quote as the hosted store keeps it (flattened, snake_case)."""
    __tablename__ = 'quotes'
    id              = db.Column(db.String(32), primary_key=True)
    client          = db.Column(db.String(200), nullable=False)
    client_type     = db.Column(db.String(32))
    location        = db.Column(db.String(200))
    event_name      = db.Column(db.String(200))
    event_date      = db.Column(db.String(10))     # YYYY-MM-DD
    expiration_date = db.Column(db.String(10))     # YYYY-MM-DD
    event_notes     = db.Column(db.Text)
    timing          = db.Column(db.JSON)           # {montaje, desmontaje}
    items           = db.Column(db.JSON)           # {accesorios|logistica|otros: [...]}
    total           = db.Column(db.Float, default=0.0)
    status          = db.Column(db.String(32), nullable=False, default='Borrador')
    payment_date    = db.Column(db.String(10))
    voucher_url     = db.Column(db.String(500))
    invoice_url     = db.Column(db.String(500))
    created_at      = db.Column(db.String(40))

class CalendarEvent(db.Model):
    __tablename__ = 'events'
    id          = db.Column(db.Integer, primary_key=True)
    date        = db.Column(db.String(10), nullable=False)
    title       = db.Column(db.String(300), nullable=False)
    type        = db.Column(db.String(32), nullable=False, default='note')
    description = db.Column(db.Text)
    time        = db.Column(db.String(16))


def as_dict(obj) -> dict:
    """Column values of a mapped row as a plain dict."""
    return {col: getattr(obj, col) for col in obj.__table__.columns.keys()}
