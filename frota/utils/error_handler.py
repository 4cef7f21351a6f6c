"""Error handling and custom exception classes for Frota application."""

from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from frota.utils.logging_config import get_logger
from functools import wraps


# Custom exception classes
class FrotaException(Exception):
    """Base exception class for Frota application."""
    pass


class AuthenticationError(FrotaException):
    """Raised when authentication fails."""
    pass


class AuthorizationError(FrotaException):
    """Raised when authorization fails."""
    pass


class ValidationError(FrotaException):
    """Raised when validation fails."""
    pass


class NotFoundError(FrotaException):
    """Raised when a referenced record does not exist."""
    pass


class DatabaseError(FrotaException):
    """Raised when database operations fail."""
    pass


class SyncError(FrotaException):
    """Base class for failures on the device side of the sync protocol."""
    pass


class LocalStorageError(SyncError):
    """Raised when the on-device queue cannot be read or written."""
    pass


class RemoteSubmissionError(SyncError):
    """Raised when the remote API rejects a submission."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class RemoteUnavailableError(RemoteSubmissionError):
    """Raised when the remote API cannot be reached or times out."""
    pass


# Logger for error handling
logger = get_logger('frota.errors')


def init_error_handlers(app):
    """Initialize error handlers for the Flask application."""

    @app.errorhandler(400)
    def bad_request(error):
        logger.error(f"Bad request: {request.url} - {str(error)}")
        return jsonify({
            'error': 'Bad Request',
            'message': str(error.description) if hasattr(error, 'description') else 'Invalid request'
        }), 400

    @app.errorhandler(401)
    def unauthorized(error):
        logger.warning(f"Unauthorized access attempt: {request.url}")
        return jsonify({
            'error': 'Unauthorized',
            'message': 'Authentication required'
        }), 401

    @app.errorhandler(403)
    def forbidden(error):
        logger.warning(f"Forbidden access attempt: {request.url}")
        return jsonify({
            'error': 'Forbidden',
            'message': 'Access denied'
        }), 403

    @app.errorhandler(404)
    def not_found(error):
        logger.info(f"Resource not found: {request.url}")
        return jsonify({
            'error': 'Not Found',
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': 'The method is not allowed for this endpoint'
        }), 405

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        logger.warning(f"Rate limit exceeded: {request.url} from {request.remote_addr}")
        return jsonify({
            'error': 'Rate Limit Exceeded',
            'message': 'Too many requests. Please try again later.'
        }), 429

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {request.url} - {str(error)}", exc_info=True)
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred'
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(error):
        # Let werkzeug HTTP errors keep their status code
        if isinstance(error, HTTPException):
            return jsonify({
                'error': error.name,
                'message': error.description
            }), error.code

        logger.error(f"Unhandled exception: {str(error)}", exc_info=True)
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred'
        }), 500


def handle_error_response(error, status_code=500):
    """Helper function to create standardized error responses."""
    if status_code >= 500:
        logger.error(f"Error response: {str(error)}", exc_info=True)

    return jsonify({
        'error': True,
        'message': str(error),
        'status_code': status_code
    }), status_code


def error_handler(f):
    """Decorator to handle errors in route functions."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except AuthenticationError as e:
            logger.warning(f"Authentication error: {str(e)}")
            return handle_error_response(str(e), 401)
        except AuthorizationError as e:
            logger.warning(f"Authorization error: {str(e)}")
            return handle_error_response(str(e), 403)
        except ValidationError as e:
            logger.info(f"Validation error: {str(e)}")
            return handle_error_response(str(e), 400)
        except NotFoundError as e:
            return handle_error_response(str(e), 404)
        except DatabaseError as e:
            logger.error(f"Database error: {str(e)}", exc_info=True)
            return handle_error_response("Database error occurred", 500)
    return decorated_function
