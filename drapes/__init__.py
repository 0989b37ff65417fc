import os
import logging
from flask import Flask, redirect, url_for, jsonify, session
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
    from drapes import models  # noqa
    with app.app_context():
        db.create_all()

    @app.route('/')
    def index():
        return redirect(url_for('orders.list_orders'))

    @app.errorhandler(404)
    def not_found(_):
        return jsonify(error='not found'), 404

    @app.errorhandler(500)
    def server_error(_):
        return jsonify(error='internal server error'), 500

    from requests import RequestException
    from drapes.auth.utils import TOKEN_KEY
    from drapes.domain import OrderValidationError
    from drapes.integrations.order_service import AuthRequired, OrderServiceError

    @app.errorhandler(AuthRequired)
    def auth_required(_):
        session.pop(TOKEN_KEY, None)
        return jsonify(error='AUTH_REQUIRED'), 401

    @app.errorhandler(OrderServiceError)
    def service_error(e):
        return jsonify(error=str(e)), 502

    @app.errorhandler(RequestException)
    def connection_error(e):
        logging.exception("order service unreachable: %s", e)
        return jsonify(error='CORS_OR_CONNECTION_ERROR'), 502

    @app.errorhandler(OrderValidationError)
    def invalid_order(e):
        return jsonify(success=False, errors=e.problems), 400

    from drapes.auth.routes import bp as auth_bp
    from drapes.orders.routes import bp as orders_bp
    from drapes.ledger.routes import bp as billing_bp
    from drapes.integrations.order_service import ledger_cli

    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(orders_bp, url_prefix='/orders')
    app.register_blueprint(billing_bp, url_prefix='/billing')
    app.cli.add_command(ledger_cli)

    return app
