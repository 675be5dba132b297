"""Error taxonomy shared by services and views.

Every error leaves the API as ``{"error": message}`` with the status code of
the exception class.
"""
from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db


class APIError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(APIError):
    """Raised before any write when request fields are invalid."""
    status_code = 400
    default_message = 'Invalid request'

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__('; '.join(self.errors))


class Unauthorized(APIError):
    status_code = 401
    default_message = 'Unauthorized'


class NotFound(APIError):
    status_code = 404
    default_message = 'Not found'


class VersionConflict(APIError):
    status_code = 409
    default_message = 'Recipe was modified concurrently, please retry'


class InternalError(APIError):
    status_code = 500


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(error):
        if error.status_code >= 500:
            current_app.logger.error('API error: %s', error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(error):
        db.session.rollback()
        current_app.logger.exception('Database error')
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        current_app.logger.exception('Unhandled error')
        return jsonify({'error': 'Internal server error'}), 500
