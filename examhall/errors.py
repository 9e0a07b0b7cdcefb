"""
Error Types and JSON Error Handlers
"""
import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class ExamHallError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors

    def to_dict(self):
        payload = {'message': self.message}
        if self.errors:
            payload['errors'] = self.errors
        return payload


class ValidationError(ExamHallError):
    """Missing or malformed input"""
    status_code = 400


class NotFoundError(ExamHallError):
    """Unknown exam, submission or record identity"""
    status_code = 404


class PersistenceError(ExamHallError):
    """Storage unreachable or write failure"""
    status_code = 500


class AuthError(ExamHallError):
    """Missing credentials"""
    status_code = 401


class ForbiddenError(ExamHallError):
    """Invalid token or insufficient role"""
    status_code = 403


def register_error_handlers(app):
    """Render ExamHallError subclasses and HTTP errors as JSON"""

    @app.errorhandler(ExamHallError)
    def handle_examhall_error(error):
        if error.status_code >= 500:
            logger.error('%s: %s', type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({'message': 'Resource not found'}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({'message': 'Method not allowed'}), 405
