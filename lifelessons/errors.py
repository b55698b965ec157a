"""
API error types and their translation to JSON responses.

Views and guards raise one of the ApiError subclasses; the handlers registered
by ``register_error_handlers`` turn them into ``{"message": ...}`` bodies with
the matching status code. Anything else becomes an opaque 500.
"""

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidInput(ApiError):
    status_code = 400


class Unauthenticated(ApiError):
    status_code = 401

    def __init__(self, message='unauthorized'):
        super().__init__(message)


class Forbidden(ApiError):
    status_code = 403

    def __init__(self, message='forbidden'):
        super().__init__(message)


class NotFound(ApiError):
    status_code = 404


class Conflict(ApiError):
    status_code = 400


class UpstreamUnavailable(ApiError):
    status_code = 500


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(err):
        return jsonify({'message': err.message}), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return jsonify({'message': err.description}), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        current_app.logger.exception('API Error: %s', err)
        return jsonify({'message': 'Server error'}), 500
