import os
import logging
from flask import Flask, redirect, url_for, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from dotenv import load_dotenv

from .config import DevConfig, ProdConfig, TestConfig

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()


def create_app(config_name: str | None = None) -> Flask:
    """Application factory with environment based configuration."""
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    os.makedirs(app.instance_path, exist_ok=True)

    # Pick configuration
    env = config_name or os.getenv('ENV') or os.getenv('FLASK_ENV') or 'production'
    cfg_cls = {'development': DevConfig, 'testing': TestConfig}.get(env, ProdConfig)
    app.config.from_object(cfg_cls)

    # Initialise logging
    logging.basicConfig(level=logging.DEBUG if app.debug else logging.INFO)

    db.init_app(app)
    migrate.init_app(app, db)

    # Ensure models loaded so tables can be created
    from rental import models  # noqa
    with app.app_context():
        db.create_all()

    from rental.errors import QuoteError

    @app.route('/')
    def index():
        return redirect(url_for('quotes.list_quotes'))

    @app.errorhandler(QuoteError)
    def quote_error(err):
        return jsonify(error=str(err)), err.status_code

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error='Not found'), 404

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(error='Internal server error'), 500

    from rental.quotes.routes import bp as quotes_bp
    from rental.quotes.cli import quotes_cli

    app.register_blueprint(quotes_bp, url_prefix='/quotes')
    app.cli.add_command(quotes_cli)

    return app
