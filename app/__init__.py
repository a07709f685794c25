# app/__init__.py

import logging
import click
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from .config import Config

db = SQLAlchemy()
migrate = Migrate()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Configure logging to show INFO level messages
    app.logger.setLevel(logging.INFO)
    if not app.logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)
        formatter = logging.Formatter('[%(asctime)s] %(levelname)s: %(message)s')
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)

    db.init_app(app)
    migrate.init_app(app, db)

    # The SPA runs on a different origin and sends the Supabase token
    # in the Authorization header.
    CORS(app, supports_credentials=True, origins=app.config['CORS_ORIGINS'])

    # --- REGISTER BLUEPRINTS ---
    from .api.catalog import bp as catalog_bp
    from .api.cart import bp as cart_bp
    from .api.competitions import bp as competitions_bp
    from .api.community import bp as community_bp
    from .api.admin import bp as admin_bp
    from .api.inventory import bp as inventory_bp

    app.register_blueprint(catalog_bp, url_prefix='/api')
    app.register_blueprint(cart_bp, url_prefix='/api')
    app.register_blueprint(competitions_bp, url_prefix='/api')
    app.register_blueprint(community_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api')
    app.register_blueprint(inventory_bp, url_prefix='/api')

    from .auth import bp as auth_blueprint
    app.register_blueprint(auth_blueprint, url_prefix='/auth')

    with app.app_context():
        from . import models
        from .services import realtime  # registers the session change listeners

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"success": False, "error": "Resource not found.", "error_code": 404}), 404

    @app.cli.command('inventory-sync')
    @click.option('--limit', default=50, show_default=True, help='Maximum number of queued tasks to push.')
    def inventory_sync_command(limit):
        """Pushes queued product variants to the inventory system."""
        from .services.inventory_sync import dispatch_pending
        summary = dispatch_pending(limit=limit)
        click.echo(f"Inventory sync: {summary['sent']} sent, {summary['failed']} failed.")

    return app
