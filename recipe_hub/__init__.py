import os

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS

from recipe_hub.extensions import db, jwt, migrate, cache
from .api import auth_bp, books_bp, recipes_bp, versions_bp
from .errors import register_error_handlers

load_dotenv()


def _env_flag(name, default='false'):
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


def _register_jwt_loaders():
    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Token has expired'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'error': f'Invalid token: {reason}'}), 401

    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'error': reason}), 401

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Token has been revoked'}), 401

    @jwt.needs_fresh_token_loader
    def stale_token(jwt_header, jwt_payload):
        return jsonify({'error': 'Fresh token required'}), 401

    @jwt.user_lookup_error_loader
    def unknown_user(jwt_header, jwt_payload):
        return jsonify({'error': 'Unknown user'}), 401


def create_app(config=None):
    """Build the application; ``config`` overrides values read from the environment."""
    app = Flask(__name__)

    app.config.update(
        SECRET_KEY=os.getenv('SECRET_KEY', 'dev'),
        SQLALCHEMY_DATABASE_URI=os.getenv('DATABASE_URL', 'sqlite:///recipe_hub.db'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        JWT_SECRET_KEY=os.getenv('JWT_SECRET_KEY'),
        JWT_PUBLIC_KEY=os.getenv('JWT_PUBLIC_KEY'),
        JWT_ALGORITHM=os.getenv('JWT_ALGORITHM', 'HS256'),
        JWT_DECODE_AUDIENCE=os.getenv('JWT_DECODE_AUDIENCE') or None,
        JWT_DECODE_ISSUER=os.getenv('JWT_DECODE_ISSUER') or None,
        JWT_TOKEN_LOCATION=["headers"],
        JWT_HEADER_NAME="Authorization",
        JWT_HEADER_TYPE="Bearer",
        CORS_ORIGINS=_env_list('CORS_ORIGINS', 'http://localhost:3000'),
        CACHE_TYPE=os.getenv('CACHE_TYPE', 'SimpleCache'),
        CACHE_DEFAULT_TIMEOUT=int(os.getenv('CACHE_DEFAULT_TIMEOUT', 300)),
        VERSION_WRITE_RETRIES=int(os.getenv('VERSION_WRITE_RETRIES', 3)),
        DEFAULT_VERSION_AUTHOR=os.getenv('DEFAULT_VERSION_AUTHOR', 'User'),
        AUTO_CREATE_TABLES=_env_flag('AUTO_CREATE_TABLES'),
    )
    if config:
        app.config.update(config)

    # Service module loggers propagate to app.logger, which is named after the package
    app.logger.setLevel(os.getenv('LOG_LEVEL', 'INFO'))

    CORS(app, supports_credentials=True, resources={
        r"/api/*": {"origins": app.config['CORS_ORIGINS'], "allow_headers": ["Authorization", "Content-Type"]},
    })

    db.init_app(app)
    jwt.init_app(app)
    migrate.init_app(app, db)
    cache.init_app(app)
    _register_jwt_loaders()
    register_error_handlers(app)

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(books_bp, url_prefix='/api/books')
    app.register_blueprint(recipes_bp, url_prefix='/api/recipes')
    app.register_blueprint(versions_bp, url_prefix='/api/versions')

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    if app.config['AUTO_CREATE_TABLES']:
        with app.app_context():
            db.create_all()
        app.logger.info('Database tables created')

    return app
