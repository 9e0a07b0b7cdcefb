"""
Application Factory
Creates and configures the Flask application
"""
import logging

from flask import Flask

from examhall.config import get_config
from examhall.extensions import db, socketio

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from examhall.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    from examhall.utils import configure_logging
    configure_logging(app)

    if not app.debug and not app.testing and app.config['SECRET_KEY'].startswith('examhall_secret_key'):
        raise RuntimeError('SECRET_KEY must be set in production')

    # Initialize extensions
    db.init_app(app)
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['SOCKETIO_CORS_ALLOWED_ORIGINS'],
        async_mode=app.config['SOCKETIO_ASYNC_MODE']
    )

    from examhall.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints (all under /api)
    from examhall.routes import auth_bp, exams_bp, school_bp
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(exams_bp, url_prefix='/api/exams')
    app.register_blueprint(school_bp, url_prefix='/api')

    # Register Socket.IO events
    from examhall.sockets import register_socket_events
    with app.app_context():
        register_socket_events()

    # Create database tables
    with app.app_context():
        db.create_all()
        logger.info('Database tables created/verified')

        if app.config.get('CREATE_DEFAULT_ADMIN'):
            from examhall.routes.auth import create_default_admin
            create_default_admin(app)

    return app
