"""
Opt-in Popups
Flask application factory
"""
import os
import re
import logging
from flask import Flask
from flask_cors import CORS

from .extensions import db, migrate
from .config import get_config, validate_config
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(config_name: str = None) -> Flask:
    """
    Application factory for creating Flask app instances.

    Args:
        config_name: Configuration environment (development, production, testing)

    Returns:
        Configured Flask application
    """
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    # Setup logging before anything else
    setup_logging()

    validate_config(config_name)

    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Embedded admin runs inside admin.shopify.com
    cors_origins = [
        'http://localhost:5173',
        'http://127.0.0.1:5173',
        'https://admin.shopify.com',
        re.compile(r'https://.*\.myshopify\.com'),
    ]
    CORS(app, origins=cors_origins, supports_credentials=True, allow_headers=['Content-Type', 'Authorization', 'X-Shop-Domain'])

    register_blueprints(app)
    register_error_handlers(app)

    @app.route('/health')
    def health_check():
        return {'status': 'healthy', 'service': 'optin'}

    @app.route('/')
    def index():
        return {'service': 'Opt-in Popups', 'status': 'running', 'version': '1.0.0'}

    return app


def register_blueprints(app: Flask) -> None:
    """Register all API blueprints."""
    from .api.popups import popups_bp
    from .api.upload import upload_bp
    from .webhooks.app_lifecycle import app_lifecycle_bp

    # Popup list, editor and preview
    app.register_blueprint(popups_bp, url_prefix='/api/popups')

    # Image uploads
    app.register_blueprint(upload_bp, url_prefix='/api')

    # Webhook routes
    app.register_blueprint(app_lifecycle_bp, url_prefix='/webhook')


def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from .utils.errors import ErrorCode, error_response

    @app.errorhandler(400)
    def bad_request(error):
        return error_response('Bad request', ErrorCode.INVALID_REQUEST, 400, log_error=False)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', ErrorCode.NOT_FOUND, 404, log_error=False)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', ErrorCode.INVALID_REQUEST, 405, log_error=False)

    @app.errorhandler(413)
    def payload_too_large(error):
        return error_response('Request body is too large', ErrorCode.FILE_TOO_LARGE, 413, log_error=False)

    @app.errorhandler(500)
    def internal_error(error):
        return error_response('Internal server error', ErrorCode.INTERNAL_ERROR, 500)
